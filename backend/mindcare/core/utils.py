"""
Utility functions for the application.
"""
from typing import Any, Dict


def format_response(data: Any = None, message: str = None, **extra: Any) -> Dict[str, Any]:
    """Format a success envelope."""
    response = {"success": True}
    if data is not None:
        response["data"] = data
    if message:
        response["message"] = message
    response.update(extra)
    return response


def format_error(message: str, details: Any = None) -> Dict[str, Any]:
    """Format an error envelope."""
    response = {"success": False, "error": message}
    if details:
        response["details"] = details
    return response
