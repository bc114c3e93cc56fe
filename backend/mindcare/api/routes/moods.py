"""
Mood tracker routes.
"""
from fastapi import APIRouter, Depends
from mindcare.api.dependencies import get_storage, parse_id
from mindcare.core.utils import format_response
from mindcare.schemas.mood import MoodCreate
from mindcare.services import mood_service
from mindcare.stores.base import StorageBackend

router = APIRouter(prefix="/moods", tags=["moods"])


@router.get("")
async def list_moods(storage: StorageBackend = Depends(get_storage)):
    """Get all mood entries, newest first."""
    entries = mood_service.list_moods(storage.moods)
    return format_response([entry.model_dump(mode="json") for entry in entries])


@router.post("")
async def log_mood(mood_data: MoodCreate, storage: StorageBackend = Depends(get_storage)):
    """Log a mood. The timestamp is assigned by the server."""
    entry = mood_service.log_mood(storage.moods, mood_data.mood, mood_data.mood_value)
    return format_response(message="Mood logged successfully", id=entry.id)


@router.delete("/{mood_id}")
async def delete_mood(mood_id: str, storage: StorageBackend = Depends(get_storage)):
    """Delete a mood entry."""
    mood_service.delete_mood(storage.moods, parse_id(mood_id, "mood"))
    return format_response(message="Mood deleted successfully")
