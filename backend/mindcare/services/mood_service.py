"""
Mood ledger business logic.
"""
import logging
import re
from typing import Any, List, Optional
from mindcare.core.errors import NotFound, ValidationError
from mindcare.schemas.mood import MoodResponse
from mindcare.stores.base import MoodStore

logger = logging.getLogger(__name__)

# Canonical label -> value mapping, lowest to highest
MOOD_VALUES = {
    "angry": 1,
    "anxious": 2,
    "sad": 3,
    "neutral": 4,
    "happy": 5,
}
MIN_MOOD_VALUE = 1
MAX_MOOD_VALUE = 5

_INTEGER_TEXT = re.compile(r"[+-]?\d+")


def normalize_mood(mood: Optional[str]) -> str:
    label = mood.strip().lower() if isinstance(mood, str) else ""
    if not label:
        raise ValidationError("Mood is required")
    if label not in MOOD_VALUES:
        raise ValidationError(
            f"Mood must be one of: {', '.join(MOOD_VALUES)}"
        )
    return label


def parse_mood_value(raw: Any) -> int:
    """
    Accept integers and integer strings in [1, 5].

    Booleans, fractional numbers and anything else are rejected.
    """
    value = None
    if isinstance(raw, bool):
        pass
    elif isinstance(raw, int):
        value = raw
    elif isinstance(raw, float) and raw.is_integer():
        value = int(raw)
    elif isinstance(raw, str) and _INTEGER_TEXT.fullmatch(raw.strip()):
        value = int(raw.strip())

    if value is None or not MIN_MOOD_VALUE <= value <= MAX_MOOD_VALUE:
        raise ValidationError(
            f"mood_value must be an integer between {MIN_MOOD_VALUE} and {MAX_MOOD_VALUE}"
        )
    return value


def list_moods(store: MoodStore) -> List[MoodResponse]:
    return store.list()


def log_mood(
    store: MoodStore,
    mood: Optional[str],
    mood_value: Any = None,
    user_id: Optional[int] = None
) -> MoodResponse:
    """
    Validate and append a mood entry.

    Both the label and mood_value must be supplied. The timestamp is always
    assigned by the server.
    """
    if mood is None or mood_value is None:
        raise ValidationError("Mood and mood_value are required")
    label = normalize_mood(mood)
    value = parse_mood_value(mood_value)
    entry = store.create(label, value, user_id)
    logger.info(f"Logged mood {entry.id}: {label} ({value})")
    return entry


def delete_mood(store: MoodStore, mood_id: int) -> None:
    if not store.delete(mood_id):
        raise NotFound("Mood entry not found")
    logger.info(f"Deleted mood {mood_id}")
