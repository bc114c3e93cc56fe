"""
Storage interfaces shared by every persistence backend.

Services only talk to these interfaces. A backend bundles one store of each
kind over a single acquired resource (a database session or an HTTP client),
which the API dependency releases when the request ends.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from mindcare.models.user import AuthProvider
from mindcare.schemas.user import UserRecord
from mindcare.schemas.mood import MoodResponse
from mindcare.schemas.journal import JournalEntryResponse


class UserStore(ABC):
    """Persists user records and enforces username/email uniqueness."""

    @abstractmethod
    def get_by_username(self, username: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    def create(
        self,
        username: str,
        email: str,
        password_hash: Optional[str],
        auth_provider: AuthProvider
    ) -> UserRecord:
        """Insert a user. Raises DuplicateIdentity on a uniqueness conflict."""

    @abstractmethod
    def set_auth_provider(self, user_id: int, auth_provider: AuthProvider) -> None:
        ...


class MoodStore(ABC):
    """Append-only ledger of mood entries, visible to everyone."""

    @abstractmethod
    def list(self) -> List[MoodResponse]:
        """All entries, newest first."""

    @abstractmethod
    def create(self, mood: str, mood_value: int, user_id: Optional[int] = None) -> MoodResponse:
        ...

    @abstractmethod
    def delete(self, mood_id: int) -> bool:
        """Delete by id. Returns False when no row matched."""


class JournalStore(ABC):
    """Journal entries. Every operation is scoped to the owning user."""

    @abstractmethod
    def list_for_user(self, user_id: int) -> List[JournalEntryResponse]:
        ...

    @abstractmethod
    def get_for_user(self, user_id: int, entry_id: int) -> Optional[JournalEntryResponse]:
        ...

    @abstractmethod
    def create(self, user_id: int, title: str, content: str) -> JournalEntryResponse:
        ...

    @abstractmethod
    def delete_for_user(self, user_id: int, entry_id: int) -> bool:
        """Delete an entry the user owns. Returns False for missing or foreign ids."""


class StorageBackend(ABC):
    """One store of each kind bound to the same request-scoped resource."""
    name: str = "base"
    users: UserStore
    moods: MoodStore
    journal: JournalStore

    @abstractmethod
    def ping(self) -> None:
        """Raise PersistenceError if the backing store is unreachable."""
