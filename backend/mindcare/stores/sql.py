"""
SQLAlchemy storage backend (MariaDB in production, SQLite in tests).
"""
import logging
from contextlib import contextmanager
from typing import List, Optional
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from mindcare.core.errors import DuplicateIdentity, PersistenceError
from mindcare.models.user import User, AuthProvider
from mindcare.models.mood import MoodEntry
from mindcare.models.journal import JournalEntry
from mindcare.schemas.user import UserRecord
from mindcare.schemas.mood import MoodResponse
from mindcare.schemas.journal import JournalEntryResponse
from mindcare.stores.base import UserStore, MoodStore, JournalStore, StorageBackend

logger = logging.getLogger(__name__)


class _SqlStore:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _guard(self, operation: str):
        """Roll back and translate driver errors into PersistenceError."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during {operation}: {e}")
            raise PersistenceError(details=str(e)) from e


class SqlUserStore(_SqlStore, UserStore):

    def get_by_username(self, username: str) -> Optional[UserRecord]:
        with self._guard("user lookup"):
            user = self.db.query(User).filter(User.username == username).first()
        return UserRecord.model_validate(user) if user else None

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        with self._guard("user lookup"):
            user = self.db.query(User).filter(User.email == email).first()
        return UserRecord.model_validate(user) if user else None

    def create(
        self,
        username: str,
        email: str,
        password_hash: Optional[str],
        auth_provider: AuthProvider
    ) -> UserRecord:
        user = User(
            username=username,
            email=email,
            password_hash=password_hash,
            auth_provider=auth_provider
        )
        try:
            with self._guard("user insert"):
                self.db.add(user)
                self.db.commit()
                self.db.refresh(user)
        except PersistenceError as e:
            # Lost a race with a concurrent signup for the same identity
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateIdentity() from e
            raise
        return UserRecord.model_validate(user)

    def set_auth_provider(self, user_id: int, auth_provider: AuthProvider) -> None:
        with self._guard("user update"):
            self.db.query(User).filter(User.id == user_id).update(
                {User.auth_provider: auth_provider}
            )
            self.db.commit()


class SqlMoodStore(_SqlStore, MoodStore):

    def list(self) -> List[MoodResponse]:
        with self._guard("mood list"):
            rows = self.db.query(MoodEntry).order_by(
                MoodEntry.logged_at.desc(), MoodEntry.id.desc()
            ).all()
        return [MoodResponse.model_validate(row) for row in rows]

    def create(self, mood: str, mood_value: int, user_id: Optional[int] = None) -> MoodResponse:
        entry = MoodEntry(mood=mood, mood_value=mood_value, user_id=user_id)
        with self._guard("mood insert"):
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        return MoodResponse.model_validate(entry)

    def delete(self, mood_id: int) -> bool:
        with self._guard("mood delete"):
            deleted = self.db.query(MoodEntry).filter(MoodEntry.id == mood_id).delete()
            self.db.commit()
        return deleted > 0


class SqlJournalStore(_SqlStore, JournalStore):

    def _owned(self, user_id: int, entry_id: int):
        return self.db.query(JournalEntry).filter(
            JournalEntry.id == entry_id,
            JournalEntry.user_id == user_id
        ).first()

    def list_for_user(self, user_id: int) -> List[JournalEntryResponse]:
        with self._guard("journal list"):
            rows = self.db.query(JournalEntry).filter(
                JournalEntry.user_id == user_id
            ).order_by(JournalEntry.created_at.desc(), JournalEntry.id.desc()).all()
        return [JournalEntryResponse.model_validate(row) for row in rows]

    def get_for_user(self, user_id: int, entry_id: int) -> Optional[JournalEntryResponse]:
        with self._guard("journal lookup"):
            entry = self._owned(user_id, entry_id)
        return JournalEntryResponse.model_validate(entry) if entry else None

    def create(self, user_id: int, title: str, content: str) -> JournalEntryResponse:
        entry = JournalEntry(user_id=user_id, title=title, content=content)
        with self._guard("journal insert"):
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        return JournalEntryResponse.model_validate(entry)

    def delete_for_user(self, user_id: int, entry_id: int) -> bool:
        with self._guard("journal delete"):
            entry = self._owned(user_id, entry_id)
            if not entry:
                return False
            self.db.delete(entry)
            self.db.commit()
        return True


class SqlBackend(StorageBackend):
    """All stores over one SQLAlchemy session."""
    name = "sql"

    def __init__(self, db: Session):
        self.db = db
        self.users = SqlUserStore(db)
        self.moods = SqlMoodStore(db)
        self.journal = SqlJournalStore(db)

    def ping(self) -> None:
        try:
            self.db.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise PersistenceError(details=str(e)) from e
