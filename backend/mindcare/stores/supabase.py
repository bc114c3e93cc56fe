"""
Supabase storage backend.

Talks to the Supabase PostgREST API over httpx using the service key, so row
filtering by owner is done here exactly like the SQL backend does it.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional
import httpx
from mindcare.core.config import settings
from mindcare.core.errors import DuplicateIdentity, NotConfigured, PersistenceError
from mindcare.models.user import AuthProvider
from mindcare.schemas.user import UserRecord
from mindcare.schemas.mood import MoodResponse
from mindcare.schemas.journal import JournalEntryResponse
from mindcare.stores.base import UserStore, MoodStore, JournalStore, StorageBackend

logger = logging.getLogger(__name__)


def create_supabase_client(transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """Build an httpx client for the Supabase REST endpoint."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
        raise NotConfigured("Supabase is not configured")
    key = settings.SUPABASE_SERVICE_KEY
    return httpx.Client(
        base_url=f"{settings.SUPABASE_URL.rstrip('/')}/rest/v1",
        headers={
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        },
        timeout=10.0,
        transport=transport
    )


class _SupabaseTable:
    table: str = ""

    def __init__(self, client: httpx.Client):
        self.client = client

    def _request(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        return_rows: bool = True
    ) -> List[Dict[str, Any]]:
        headers = {"Prefer": "return=representation"} if return_rows else {}
        try:
            response = self.client.request(
                method, f"/{self.table}", params=params, json=json, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 409:
                raise DuplicateIdentity() from e
            logger.error(f"Supabase {method} {self.table} failed {e.response.status_code}: {e.response.text}")
            raise PersistenceError(details=e.response.text) from e
        except httpx.HTTPError as e:
            logger.error(f"Supabase {method} {self.table} failed: {e}")
            raise PersistenceError(details=str(e)) from e
        if not response.content:
            return []
        return response.json()


class SupabaseUserStore(_SupabaseTable, UserStore):
    table = "users"

    def _first(self, **filters: str) -> Optional[UserRecord]:
        params = {"select": "*", "limit": 1}
        params.update({field: f"eq.{value}" for field, value in filters.items()})
        rows = self._request("GET", params=params)
        return UserRecord.model_validate(rows[0]) if rows else None

    def get_by_username(self, username: str) -> Optional[UserRecord]:
        return self._first(username=username)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        return self._first(email=email)

    def create(
        self,
        username: str,
        email: str,
        password_hash: Optional[str],
        auth_provider: AuthProvider
    ) -> UserRecord:
        rows = self._request("POST", json={
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "auth_provider": auth_provider.value,
        })
        return UserRecord.model_validate(rows[0])

    def set_auth_provider(self, user_id: int, auth_provider: AuthProvider) -> None:
        self._request(
            "PATCH",
            params={"id": f"eq.{user_id}"},
            json={"auth_provider": auth_provider.value},
            return_rows=False
        )


class SupabaseMoodStore(_SupabaseTable, MoodStore):
    table = "moods"

    def list(self) -> List[MoodResponse]:
        rows = self._request("GET", params={"select": "*", "order": "logged_at.desc,id.desc"})
        return [MoodResponse.model_validate(row) for row in rows]

    def create(self, mood: str, mood_value: int, user_id: Optional[int] = None) -> MoodResponse:
        rows = self._request("POST", json={
            "mood": mood,
            "mood_value": mood_value,
            "user_id": user_id,
            "logged_at": datetime.utcnow().isoformat(),
        })
        return MoodResponse.model_validate(rows[0])

    def delete(self, mood_id: int) -> bool:
        rows = self._request("DELETE", params={"id": f"eq.{mood_id}"})
        return len(rows) > 0


class SupabaseJournalStore(_SupabaseTable, JournalStore):
    table = "journal_entries"

    def list_for_user(self, user_id: int) -> List[JournalEntryResponse]:
        rows = self._request("GET", params={
            "select": "*",
            "user_id": f"eq.{user_id}",
            "order": "created_at.desc,id.desc",
        })
        return [JournalEntryResponse.model_validate(row) for row in rows]

    def get_for_user(self, user_id: int, entry_id: int) -> Optional[JournalEntryResponse]:
        rows = self._request("GET", params={
            "select": "*",
            "id": f"eq.{entry_id}",
            "user_id": f"eq.{user_id}",
            "limit": 1,
        })
        return JournalEntryResponse.model_validate(rows[0]) if rows else None

    def create(self, user_id: int, title: str, content: str) -> JournalEntryResponse:
        rows = self._request("POST", json={
            "user_id": user_id,
            "title": title,
            "content": content,
            "created_at": datetime.utcnow().isoformat(),
        })
        return JournalEntryResponse.model_validate(rows[0])

    def delete_for_user(self, user_id: int, entry_id: int) -> bool:
        rows = self._request("DELETE", params={
            "id": f"eq.{entry_id}",
            "user_id": f"eq.{user_id}",
        })
        return len(rows) > 0


class SupabaseBackend(StorageBackend):
    """All stores over one Supabase REST client."""
    name = "supabase"

    def __init__(self, client: httpx.Client):
        self.client = client
        self.users = SupabaseUserStore(client)
        self.moods = SupabaseMoodStore(client)
        self.journal = SupabaseJournalStore(client)

    def ping(self) -> None:
        self.users._request("GET", params={"select": "id", "limit": 1})
