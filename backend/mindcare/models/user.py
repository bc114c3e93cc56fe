"""
User model for authentication and user management.
"""
from sqlalchemy import Column, String, Enum as SQLEnum
from sqlalchemy.orm import relationship
from mindcare.db.base import BaseModel
import enum


class AuthProvider(str, enum.Enum):
    """How a user record was created."""
    LOCAL = "local"
    GOOGLE = "google"


class User(BaseModel):
    """User model. OAuth-only accounts have an empty password hash."""
    __tablename__ = "users"
    
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=True)
    auth_provider = Column(
        SQLEnum(AuthProvider, values_callable=lambda e: [m.value for m in e]),
        default=AuthProvider.LOCAL,
        nullable=False
    )
    
    # Relationships
    journal_entries = relationship("JournalEntry", back_populates="user", cascade="all, delete-orphan")
