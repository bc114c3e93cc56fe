"""
Tests for the Supabase REST storage backend.
"""
import json

import httpx
import pytest

from mindcare.core.config import settings
from mindcare.core.errors import DuplicateIdentity, NotConfigured, PersistenceError
from mindcare.core.security import get_password_hash
from mindcare.models.user import AuthProvider
from mindcare.services import auth_service, mood_service
from mindcare.stores.supabase import SupabaseBackend, create_supabase_client


@pytest.fixture(autouse=True)
def supabase_settings(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "https://demo.supabase.co/")
    monkeypatch.setattr(settings, "SUPABASE_SERVICE_KEY", "service-key")


@pytest.fixture
def backend():
    """Backend whose responses are queued per test; requests are recorded."""
    requests = []
    responses = []

    def handler(request):
        requests.append(request)
        return responses.pop(0)

    client = create_supabase_client(transport=httpx.MockTransport(handler))
    storage = SupabaseBackend(client)
    storage.requests = requests
    storage.responses = responses
    yield storage
    client.close()


def test_client_requires_configuration(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_SERVICE_KEY", "")
    with pytest.raises(NotConfigured):
        create_supabase_client()


def test_requests_carry_service_key(backend):
    backend.responses.append(httpx.Response(200, json=[]))
    backend.ping()
    request = backend.requests[0]
    assert str(request.url).startswith("https://demo.supabase.co/rest/v1/users")
    assert request.headers["apikey"] == "service-key"
    assert request.headers["authorization"] == "Bearer service-key"


def test_mood_list_is_ordered_newest_first(backend):
    backend.responses.append(httpx.Response(200, json=[
        {"id": 2, "mood": "happy", "mood_value": 5, "logged_at": "2024-05-02T10:00:00", "user_id": None},
        {"id": 1, "mood": "sad", "mood_value": 3, "logged_at": "2024-05-01T10:00:00", "user_id": None},
    ]))
    entries = mood_service.list_moods(backend.moods)
    assert [e.id for e in entries] == [2, 1]
    assert backend.requests[0].url.params["order"] == "logged_at.desc,id.desc"


def test_mood_create_posts_label_and_value(backend):
    backend.responses.append(httpx.Response(201, json=[
        {"id": 7, "mood": "neutral", "mood_value": 4, "logged_at": "2024-05-02T10:00:00"}
    ]))
    entry = mood_service.log_mood(backend.moods, "Neutral", 4)
    assert entry.id == 7
    request = backend.requests[0]
    assert request.method == "POST"
    assert request.headers["prefer"] == "return=representation"
    body = json.loads(request.content)
    assert body["mood"] == "neutral"
    assert body["mood_value"] == 4


def test_delete_reports_missing_rows(backend):
    backend.responses.append(httpx.Response(200, json=[]))
    assert backend.moods.delete(99) is False
    assert backend.requests[0].url.params["id"] == "eq.99"

    backend.responses.append(httpx.Response(200, json=[{"id": 5}]))
    assert backend.moods.delete(5) is True


def test_journal_delete_is_scoped_to_owner(backend):
    backend.responses.append(httpx.Response(200, json=[]))
    assert backend.journal.delete_for_user(3, 10) is False
    params = backend.requests[0].url.params
    assert params["id"] == "eq.10"
    assert params["user_id"] == "eq.3"


def test_conflict_maps_to_duplicate_identity(backend):
    backend.responses.append(httpx.Response(409, json={"message": "duplicate key"}))
    with pytest.raises(DuplicateIdentity):
        backend.users.create("alice", "a@x.com", "hash", AuthProvider.LOCAL)


def test_server_error_maps_to_persistence_error(backend):
    backend.responses.append(httpx.Response(500, text="boom"))
    with pytest.raises(PersistenceError) as excinfo:
        backend.moods.list()
    assert excinfo.value.details == "boom"


def test_transport_error_maps_to_persistence_error():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    client = create_supabase_client(transport=httpx.MockTransport(handler))
    with pytest.raises(PersistenceError):
        SupabaseBackend(client).ping()
    client.close()


def test_user_lookup_and_login(backend):
    hashed = get_password_hash("secret1")
    row = {"id": 1, "username": "alice", "email": "a@x.com",
           "password_hash": hashed, "auth_provider": "local"}
    backend.responses.append(httpx.Response(200, json=[row]))

    user = auth_service.authenticate(backend.users, "alice", "secret1")
    assert user.id == 1
    assert backend.requests[0].url.params["username"] == "eq.alice"
