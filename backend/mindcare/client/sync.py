"""
Mood history synchronisation between the API and the local cache.

Reads prefer the server and fall back to the cache only when the server is
unreachable. Writes made while offline get a ``local-`` id and stay in the
cache until the next successful read replaces the cache wholesale; they are
never resubmitted.
"""
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional
from mindcare.client.api import ApiClient, ApiError, OfflineError
from mindcare.client.cache import LocalCache, MOODS_KEY
from mindcare.client.state import MoodState, MoodRecord, is_local_id, new_local_id
from mindcare.services.mood_service import MOOD_VALUES

logger = logging.getLogger(__name__)


def mood_value(mood: str) -> int:
    """Canonical value for a label; unknown labels sit in the middle."""
    return MOOD_VALUES.get(mood, 3)


class MoodSyncClient:

    def __init__(self, api: ApiClient, cache: LocalCache, state: Optional[MoodState] = None):
        self.api = api
        self.cache = cache
        self.state = state or MoodState(entries=list(cache.get(MOODS_KEY, [])))

    def _persist(self) -> None:
        self.cache.set(MOODS_KEY, self.state.entries)

    def load_history(self) -> List[MoodRecord]:
        """
        Fetch the full history. On success the cache is overwritten and the
        offline flag cleared; when the server is unreachable the cached list
        is kept and the offline flag stays set until a later read succeeds.
        """
        try:
            body = self.api.request("GET", "/api/moods")
        except OfflineError as e:
            logger.warning(f"Mood history unavailable, showing cached entries: {e}")
            self.state.mark_offline()
            return self.state.entries

        data = body.get("data")
        entries = [dict(entry, synced=True) for entry in data] if isinstance(data, list) else []
        self.state.replace_all(entries)
        self.state.mark_online()
        self._persist()
        return self.state.entries

    def log_mood(self, mood: str) -> MoodRecord:
        """Log a mood remotely, or locally with a ``local-`` id when offline."""
        if not mood:
            raise ValueError("Please select a mood first.")

        entry = {
            "mood": mood,
            "mood_value": mood_value(mood),
            "logged_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            body = self.api.request("POST", "/api/moods", json={
                "mood": entry["mood"],
                "mood_value": entry["mood_value"],
            })
        except OfflineError as e:
            logger.warning(f"Logging mood offline: {e}")
            entry.update(id=new_local_id(), synced=False)
            self.state.mark_offline()
        else:
            entry.update(id=body.get("id"), synced=True)

        self.state.prepend(entry)
        self._persist()
        return entry

    def delete_mood(self, entry_id: Any) -> bool:
        """
        Remove an entry locally, then remotely if the server can know it.

        Remote failures are logged and never undo the local removal. Returns
        whether an entry was removed from local state.
        """
        removed = self.state.remove(entry_id)
        self._persist()

        if is_local_id(entry_id):
            return removed is not None

        try:
            self.api.request("DELETE", f"/api/moods/{entry_id}")
        except (OfflineError, ApiError) as e:
            logger.warning(f"Remote delete of mood {entry_id} failed: {e}")
        return removed is not None
