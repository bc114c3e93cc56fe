"""
Journal service for journal-related business logic.
"""
import logging
from typing import List, Optional
from mindcare.core.errors import NotFound, ValidationError
from mindcare.schemas.journal import JournalEntryResponse
from mindcare.stores.base import JournalStore

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Untitled"
TITLE_MAX_LENGTH = 255


def list_entries(store: JournalStore, user_id: int) -> List[JournalEntryResponse]:
    """Get all journal entries owned by a user, newest first."""
    return store.list_for_user(user_id)


def get_entry(store: JournalStore, user_id: int, entry_id: int) -> JournalEntryResponse:
    """Get one entry. Entries owned by someone else are reported as missing."""
    entry = store.get_for_user(user_id, entry_id)
    if not entry:
        raise NotFound("Journal entry not found")
    return entry


def create_entry(
    store: JournalStore,
    user_id: int,
    title: Optional[str],
    content: Optional[str]
) -> JournalEntryResponse:
    """Create a new journal entry."""
    content = content.strip() if isinstance(content, str) else ""
    if not content:
        raise ValidationError("Journal content is required")

    title = title.strip() if isinstance(title, str) else ""
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Title must be at most {TITLE_MAX_LENGTH} characters")

    entry = store.create(user_id, title or DEFAULT_TITLE, content)
    logger.info(f"User {user_id} saved journal entry {entry.id}")
    return entry


def delete_entry(store: JournalStore, user_id: int, entry_id: int) -> None:
    """Delete an entry the user owns."""
    if not store.delete_for_user(user_id, entry_id):
        raise NotFound("Journal entry not found")
    logger.info(f"User {user_id} deleted journal entry {entry_id}")
