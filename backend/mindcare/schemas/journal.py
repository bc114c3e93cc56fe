"""
Pydantic schemas for Journal entity.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class JournalEntryCreate(BaseModel):
    """Schema for journal entry creation."""
    title: Optional[str] = None
    content: Optional[str] = None


class JournalEntryResponse(BaseModel):
    """Schema for journal entry response."""
    id: int
    user_id: int
    title: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
