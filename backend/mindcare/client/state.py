"""
Client-side mood state.

All mood history the client renders lives in one MoodState object and is
changed only through its methods, so the cache, the rendered list and the
chart series cannot drift apart.
"""
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

LOCAL_ID_PREFIX = "local-"

MoodRecord = Dict[str, Any]


def new_local_id() -> str:
    """Id for an entry the server has not confirmed."""
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


def is_local_id(entry_id: Any) -> bool:
    return isinstance(entry_id, str) and entry_id.startswith(LOCAL_ID_PREFIX)


@dataclass
class MoodState:
    entries: List[MoodRecord] = field(default_factory=list)
    offline: bool = False

    def replace_all(self, entries: List[MoodRecord]) -> None:
        self.entries = [dict(entry) for entry in entries]

    def prepend(self, entry: MoodRecord) -> None:
        self.entries.insert(0, dict(entry))

    def remove(self, entry_id: Any) -> Optional[MoodRecord]:
        for index, entry in enumerate(self.entries):
            if entry.get("id") == entry_id:
                return self.entries.pop(index)
        return None

    def mark_offline(self) -> None:
        self.offline = True

    def mark_online(self) -> None:
        self.offline = False

    def unsynced(self) -> List[MoodRecord]:
        return [entry for entry in self.entries if is_local_id(entry.get("id"))]

    def chart_series(self, limit: int = 7) -> List[MoodRecord]:
        """Most recent entries, oldest first, for plotting."""
        return list(reversed(self.entries[:limit]))
