"""
Shared route dependencies: storage backend, current user, chat relay.
"""
from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from mindcare.core.config import settings
from mindcare.core.errors import AuthRequired, AuthInvalid, TokenInvalid, ValidationError
from mindcare.core.security import decode_access_token
from mindcare.db.session import session_scope
from mindcare.schemas.auth import TokenPayload
from mindcare.services.chat_service import ChatRelay
from mindcare.stores.base import StorageBackend
from mindcare.stores.sql import SqlBackend
from mindcare.stores.supabase import SupabaseBackend, create_supabase_client

bearer_scheme = HTTPBearer(auto_error=False)


@contextmanager
def open_storage() -> Iterator[StorageBackend]:
    """Open the configured backend and release its resource on exit."""
    if settings.STORAGE_BACKEND == "supabase":
        client = create_supabase_client()
        try:
            yield SupabaseBackend(client)
        finally:
            client.close()
    else:
        with session_scope() as db:
            yield SqlBackend(db)


def get_storage_factory() -> Callable[[], ContextManager[StorageBackend]]:
    """Dependency returning the storage opener (overridden in tests)."""
    return open_storage


def get_storage(
    factory: Callable[[], ContextManager[StorageBackend]] = Depends(get_storage_factory)
) -> Iterator[StorageBackend]:
    """Dependency for a request-scoped storage backend."""
    with factory() as storage:
        yield storage


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> TokenPayload:
    """Identity from the bearer token. Missing -> 401, unverifiable -> 403."""
    if credentials is None or not credentials.credentials:
        raise AuthRequired("Access token required")
    try:
        return decode_access_token(credentials.credentials)
    except TokenInvalid:
        raise AuthInvalid()


def get_chat_relay() -> ChatRelay:
    """Dependency for the Gemini relay (overridden in tests)."""
    return ChatRelay()


def parse_id(raw: str, label: str) -> int:
    """Path ids must be positive integers written in ASCII digits."""
    raw = (raw or "").strip()
    if not (raw.isascii() and raw.isdigit()) or int(raw) < 1:
        raise ValidationError(f"Valid {label} ID is required")
    return int(raw)
