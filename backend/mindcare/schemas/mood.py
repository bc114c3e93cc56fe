"""
Pydantic schemas for Mood entity.
"""
from pydantic import BaseModel, ConfigDict
from typing import Any, Optional
from datetime import datetime


class MoodCreate(BaseModel):
    """
    Schema for mood creation.

    Fields are loosely typed so the mood service can report range and label
    problems itself. Unknown fields such as a client `logged_at` are ignored.
    """
    mood: Optional[str] = None
    mood_value: Any = None


class MoodResponse(BaseModel):
    """Schema for mood response."""
    id: int
    mood: str
    mood_value: int
    logged_at: datetime
    user_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)
