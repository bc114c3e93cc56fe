"""
Journal routes. Every route is scoped to the authenticated user.
"""
from fastapi import APIRouter, Depends
from mindcare.api.dependencies import get_current_user, get_storage, parse_id
from mindcare.core.utils import format_response
from mindcare.schemas.auth import TokenPayload
from mindcare.schemas.journal import JournalEntryCreate
from mindcare.services import journal_service
from mindcare.stores.base import StorageBackend

router = APIRouter(prefix="/journal", tags=["journal"])


@router.get("")
async def list_journal_entries(
    current_user: TokenPayload = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage)
):
    """Get the current user's journal entries."""
    entries = journal_service.list_entries(storage.journal, current_user.user_id)
    return format_response([entry.model_dump(mode="json") for entry in entries])


@router.get("/{entry_id}")
async def get_journal_entry(
    entry_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage)
):
    """Get one of the current user's journal entries."""
    entry = journal_service.get_entry(
        storage.journal, current_user.user_id, parse_id(entry_id, "journal entry")
    )
    return format_response(entry.model_dump(mode="json"))


@router.post("")
async def create_journal_entry(
    entry_data: JournalEntryCreate,
    current_user: TokenPayload = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage)
):
    """Save a journal entry for the current user."""
    entry = journal_service.create_entry(
        storage.journal, current_user.user_id, entry_data.title, entry_data.content
    )
    return format_response(message="Journal entry saved successfully", id=entry.id)


@router.delete("/{entry_id}")
async def delete_journal_entry(
    entry_id: str,
    current_user: TokenPayload = Depends(get_current_user),
    storage: StorageBackend = Depends(get_storage)
):
    """Delete one of the current user's journal entries."""
    journal_service.delete_entry(
        storage.journal, current_user.user_id, parse_id(entry_id, "journal entry")
    )
    return format_response(message="Journal entry deleted successfully")
