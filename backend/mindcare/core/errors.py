"""
Application error taxonomy.

Every error raised by services and stores carries the HTTP status it maps to,
so route handlers never build error responses by hand. The handlers in
``mindcare.main`` render them as ``{"success": false, "error": ...}``.
"""
from typing import Any, Optional


class AppError(Exception):
    """Base class for errors that surface to API callers."""
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 400
    message = "Invalid request"


class DuplicateIdentity(AppError):
    status_code = 400
    message = "Username or email already exists"


class AuthRequired(AppError):
    status_code = 401
    message = "Authentication required"


class AuthInvalid(AppError):
    status_code = 403
    message = "Invalid or expired token"


class InvalidCredentials(AppError):
    status_code = 401
    message = "Invalid username or password"


class TokenInvalid(AppError):
    """Raised for any token that fails verification, expired or tampered."""
    status_code = 403
    message = "Invalid or expired token"


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class NotConfigured(AppError):
    status_code = 500
    message = "Service is not configured"


class PersistenceError(AppError):
    status_code = 500
    message = "Database operation failed"


class QuotaExceeded(AppError):
    status_code = 429
    message = "API quota exceeded. Please check your Gemini API account billing."


class RateLimited(AppError):
    status_code = 429
    message = "Too many requests, please try again in a moment."


class UpstreamAuthError(AppError):
    status_code = 401
    message = "Invalid API key. Please check your Gemini API key configuration."


class UpstreamUnavailable(AppError):
    status_code = 503
    message = "Network error connecting to Gemini API. Please check your internet connection."


class UpstreamError(AppError):
    status_code = 500
    message = "Failed to get response from AI assistant"
