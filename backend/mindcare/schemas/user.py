"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, ConfigDict
from typing import Optional
from mindcare.models.user import AuthProvider


class UserRecord(BaseModel):
    """User as returned by every user store backend."""
    id: int
    username: str
    email: str
    password_hash: Optional[str] = None
    auth_provider: AuthProvider = AuthProvider.LOCAL

    model_config = ConfigDict(from_attributes=True)
    
    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)
