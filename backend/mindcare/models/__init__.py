"""Models package - Import all models for SQLAlchemy registration."""
from mindcare.models.user import User, AuthProvider
from mindcare.models.mood import MoodEntry
from mindcare.models.journal import JournalEntry

__all__ = [
    "User",
    "AuthProvider",
    "MoodEntry",
    "JournalEntry",
]
