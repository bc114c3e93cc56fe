"""
Session handling for the client: signup, login, logout and the journal calls
that need the stored token.
"""
from typing import Any, Dict, List, Optional
from mindcare.client.api import ApiClient
from mindcare.client.cache import LocalCache, TOKEN_KEY, USER_ID_KEY, USERNAME_KEY


class AuthClient:

    def __init__(self, api: ApiClient, cache: LocalCache):
        self.api = api
        self.cache = cache
        self.api.token = cache.get(TOKEN_KEY)

    @property
    def is_logged_in(self) -> bool:
        return bool(self.cache.get(TOKEN_KEY))

    @property
    def username(self) -> Optional[str]:
        return self.cache.get(USERNAME_KEY)

    def _remember(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self.cache.set(TOKEN_KEY, body["token"])
        self.cache.set(USER_ID_KEY, body["userId"])
        self.cache.set(USERNAME_KEY, body["username"])
        self.api.token = body["token"]
        return body

    def signup(self, username: str, email: str, password: str) -> Dict[str, Any]:
        body = self.api.request("POST", "/api/auth/signup", json={
            "username": username,
            "email": email,
            "password": password,
        })
        return self._remember(body)

    def login(self, username: str, password: str) -> Dict[str, Any]:
        body = self.api.request("POST", "/api/auth/login", json={
            "username": username,
            "password": password,
        })
        return self._remember(body)

    def logout(self) -> None:
        self.cache.remove(TOKEN_KEY, USER_ID_KEY, USERNAME_KEY)
        self.api.token = None


class JournalClient:
    """Journal calls. ApiError.requires_login tells the caller to re-authenticate."""

    def __init__(self, api: ApiClient):
        self.api = api

    def list_entries(self) -> List[Dict[str, Any]]:
        body = self.api.request("GET", "/api/journal", authenticated=True)
        data = body.get("data")
        return data if isinstance(data, list) else []

    def save_entry(self, content: str, title: Optional[str] = None) -> int:
        content = (content or "").strip()
        if not content:
            raise ValueError("Please write something in your journal entry.")
        body = self.api.request("POST", "/api/journal", json={
            "title": (title or "").strip() or "Untitled",
            "content": content,
        }, authenticated=True)
        return body["id"]

    def delete_entry(self, entry_id: int) -> None:
        self.api.request("DELETE", f"/api/journal/{entry_id}", authenticated=True)
