"""
HTTP client for the MindCare API.

Transport failures (no connection, DNS, timeouts) raise OfflineError; any
response the server did send that is not a success raises ApiError. Callers
treat the two differently: offline means fall back to cached data, ApiError
means show the server's message.
"""
import logging
from typing import Any, Dict, Optional
import httpx

logger = logging.getLogger(__name__)


class OfflineError(Exception):
    """The server could not be reached."""


class ApiError(Exception):
    """The server answered with an error envelope."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    @property
    def requires_login(self) -> bool:
        return self.status_code in (401, 403)


class ApiClient:

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None
    ):
        self.token = token
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        authenticated: bool = False
    ) -> Dict[str, Any]:
        headers = {"Accept": "application/json"}
        if authenticated and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            response = self._client.request(method, path, json=json, headers=headers)
        except httpx.TransportError as e:
            raise OfflineError(str(e) or e.__class__.__name__) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {"data": body}

        if response.is_error or body.get("success") is False:
            message = body.get("error") or f"HTTP error! status: {response.status_code}"
            raise ApiError(response.status_code, message)
        return body

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
