"""
Tests for Google sign-in.
"""
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from conftest import signup
from mindcare.api.routes.auth import get_oauth_transport
from mindcare.core.config import settings
from mindcare.core.security import decode_access_token
from mindcare.main import app
from mindcare.models.user import AuthProvider
from mindcare.stores.sql import SqlUserStore


@pytest.fixture
def google_configured(monkeypatch):
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "client-id")
    monkeypatch.setattr(settings, "GOOGLE_CLIENT_SECRET", "client-secret")


def google_transport(email="jane@x.com", name="Jane Doe", verified=True, token_status=200):
    def handler(request):
        if request.url.host == "oauth2.googleapis.com":
            if token_status != 200:
                return httpx.Response(token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "google-token"})
        assert request.headers["authorization"] == "Bearer google-token"
        return httpx.Response(200, json={"email": email, "name": name, "email_verified": verified})
    return httpx.MockTransport(handler)


def callback(client, transport, code="abc", state="s1"):
    app.dependency_overrides[get_oauth_transport] = lambda: transport
    client.cookies.set("oauth_state", "s1")
    return client.get("/auth/callback", params={"code": code, "state": state}, follow_redirects=False)


def redirect_query(response):
    return {key: values[0] for key, values in parse_qs(urlparse(response.headers["location"]).query).items()}


def test_config_not_configured(client):
    response = client.get("/api/auth/config")
    assert response.status_code == 500
    assert response.json()["success"] is False


def test_config(client, google_configured, monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", "anon")
    body = client.get("/api/auth/config").json()
    assert body["success"] is True
    assert body["providerUrl"] == "/api/auth/google"
    assert body["clientId"] == "client-id"
    assert body["supabaseAnonKey"] == "anon"


def test_google_redirect_sets_state(client, google_configured):
    response = client.get("/api/auth/google", follow_redirects=False)
    assert response.status_code in (302, 307)
    location = urlparse(response.headers["location"])
    assert location.netloc == "accounts.google.com"
    params = parse_qs(location.query)
    assert params["client_id"] == ["client-id"]
    assert params["state"][0] == response.cookies["oauth_state"]


def test_callback_without_code(client, google_configured):
    response = client.get("/auth/callback", follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"] == "/login?error=missing_code"


def test_callback_provider_error(client, google_configured):
    response = client.get("/auth/callback", params={"error": "access_denied"}, follow_redirects=False)
    assert response.headers["location"] == "/login?error=access_denied"


def test_callback_rejects_state_mismatch(client, google_configured):
    response = callback(client, google_transport(), state="forged")
    assert response.headers["location"] == "/login?error=invalid_state"


def test_callback_creates_google_user(client, google_configured, db_session):
    response = callback(client, google_transport())
    assert response.status_code == 302
    query = redirect_query(response)
    assert query["username"] == "jane_doe"
    assert decode_access_token(query["token"]).user_id == int(query["userId"])

    user = SqlUserStore(db_session).get_by_email("jane@x.com")
    assert user.auth_provider == AuthProvider.GOOGLE
    assert user.password_hash is None


def test_callback_adds_suffix_on_username_collision(client, google_configured):
    signup(client, username="jane_doe", email="other@x.com")
    query = redirect_query(callback(client, google_transport()))
    assert query["username"] == "jane_doe1"


def test_callback_links_existing_local_account(client, google_configured, db_session):
    user_id = signup(client, username="jane", email="jane@x.com").json()["userId"]
    query = redirect_query(callback(client, google_transport()))
    assert query["username"] == "jane"
    assert int(query["userId"]) == user_id
    assert SqlUserStore(db_session).get_by_email("jane@x.com").auth_provider == AuthProvider.GOOGLE


def test_callback_unverified_email(client, google_configured):
    response = callback(client, google_transport(verified=False))
    assert response.headers["location"] == "/login?error=email_not_verified"


def test_callback_token_exchange_failure(client, google_configured):
    response = callback(client, google_transport(token_status=400))
    assert response.headers["location"] == "/login?error=token_exchange_failed"
