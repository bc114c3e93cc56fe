"""
Mood model for mood tracking.
"""
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, CheckConstraint
from mindcare.db.base import BaseModel


class MoodEntry(BaseModel):
    """One logged mood. Entries are global; user_id is recorded but never filtered on."""
    __tablename__ = "moods"
    
    mood = Column(String(20), nullable=False)
    mood_value = Column(Integer, nullable=False)
    logged_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    
    __table_args__ = (
        CheckConstraint("mood_value BETWEEN 1 AND 5", name="ck_moods_mood_value_range"),
    )
