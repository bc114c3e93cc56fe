"""
Journal model for private journal entries.
"""
from sqlalchemy import Column, String, Text, ForeignKey, Integer
from sqlalchemy.orm import relationship
from mindcare.db.base import BaseModel


class JournalEntry(BaseModel):
    """Journal entry owned by exactly one user."""
    __tablename__ = "journal_entries"
    
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False, default="Untitled")
    content = Column(Text, nullable=False)
    
    # Relationships
    user = relationship("User", back_populates="journal_entries")
