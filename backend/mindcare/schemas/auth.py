"""
Pydantic schemas for authentication.
"""
from pydantic import BaseModel, EmailStr, TypeAdapter, ValidationError as PydanticValidationError, field_validator
from typing import Optional

_email_adapter = TypeAdapter(EmailStr)


class SignupRequest(BaseModel):
    """
    Schema for local account signup.

    The email must be well formed but is kept exactly as typed, since lookups
    compare it verbatim.
    """
    username: str
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        try:
            _email_adapter.validate_python(v.strip())
        except PydanticValidationError:
            raise ValueError("value is not a valid email address")
        return v.strip()


class LoginRequest(BaseModel):
    """Schema for login. `username` may also be the account email."""
    username: str
    password: str


class AuthResponse(BaseModel):
    """Schema for a successful signup or login."""
    success: bool = True
    token: str
    userId: int
    username: str


class TokenPayload(BaseModel):
    """Identity carried by a verified session token."""
    user_id: int
    username: str
    issued_at: Optional[int] = None
    expires_at: int
