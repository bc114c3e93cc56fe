"""
Tests for the chatbot relay and its failure classification.
"""
import asyncio
import json

import httpx
import pytest

from mindcare.api.dependencies import get_chat_relay
from mindcare.core.config import settings
from mindcare.core.errors import (
    QuotaExceeded, RateLimited, UpstreamAuthError, UpstreamUnavailable, UpstreamError
)
from mindcare.main import app
from mindcare.services.chat_service import (
    ChatRelay, ProviderFailure, SYSTEM_PROMPT, build_prompt, classify_failure
)


def gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def gemini_error(status, message):
    return httpx.Response(status, json={"error": {"code": status, "message": message}})


@pytest.fixture
def use_relay(client):
    """Install a relay backed by the given handler."""
    def install(handler, api_key="test-key"):
        relay = ChatRelay(api_key=api_key, transport=httpx.MockTransport(handler))
        app.dependency_overrides[get_chat_relay] = lambda: relay
        return relay
    return install


@pytest.mark.parametrize("failure,expected", [
    (ProviderFailure(429, "Resource has been exhausted"), QuotaExceeded),
    (ProviderFailure(400, "Quota exceeded for metric"), QuotaExceeded),
    (ProviderFailure(500, "rate limit reached"), RateLimited),
    (ProviderFailure(403, "Permission denied"), UpstreamAuthError),
    (ProviderFailure(400, "API key not valid. Please pass a valid API key."), UpstreamAuthError),
    (ProviderFailure(None, "ConnectError", transport=True), UpstreamUnavailable),
    (ProviderFailure(500, "failed to fetch"), UpstreamUnavailable),
    (ProviderFailure(500, "Something odd"), UpstreamError),
])
def test_classify_failure(failure, expected):
    assert type(classify_failure(failure)) is expected


def test_classification_follows_rule_order():
    # Matches quota, rate limit and auth; quota is checked first
    failure = ProviderFailure(401, "Quota and rate limit hit, API key flagged")
    assert isinstance(classify_failure(failure), QuotaExceeded)

    # Rate limit wins over a network failure
    failure = ProviderFailure(None, "rate limit on network", transport=True)
    assert isinstance(classify_failure(failure), RateLimited)


def test_unclassified_message_depends_on_environment(monkeypatch):
    failure = ProviderFailure(500, "Backend exploded")
    assert classify_failure(failure).message == "Unable to connect to AI service. Please try again."

    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    assert classify_failure(failure).message == "API Error: Backend exploded"


def test_build_prompt_wraps_message():
    prompt = build_prompt("  hello  ")
    assert prompt.startswith(SYSTEM_PROMPT)
    assert prompt.endswith("User: hello\n\nMindCare:")


def test_chat_success(client, use_relay):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers["x-goog-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=gemini_reply("  Take a deep breath.  "))

    use_relay(handler)
    response = client.post("/api/chat", json={"message": "  I feel stressed  "})
    assert response.status_code == 200
    assert response.json() == {"success": True, "reply": "Take a deep breath."}

    assert seen["url"].endswith(f"/models/{settings.GEMINI_MODEL}:generateContent")
    assert seen["key"] == "test-key"
    prompt = seen["body"]["contents"][0]["parts"][0]["text"]
    assert SYSTEM_PROMPT in prompt
    assert "User: I feel stressed\n\nMindCare:" in prompt


@pytest.mark.parametrize("payload", [{}, {"message": ""}, {"message": "   "}])
def test_chat_requires_message(client, use_relay, payload):
    calls = []
    use_relay(lambda request: calls.append(request) or httpx.Response(200, json=gemini_reply("x")))
    response = client.post("/api/chat", json=payload)
    assert response.status_code == 400
    assert response.json()["success"] is False
    assert calls == []


def test_chat_without_api_key(client, use_relay):
    use_relay(lambda request: httpx.Response(200, json=gemini_reply("x")), api_key="")
    response = client.post("/api/chat", json={"message": "hi"})
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Gemini API key is not configured"}


def test_chat_quota_exceeded(client, use_relay):
    use_relay(lambda request: gemini_error(429, "Resource has been exhausted (e.g. check quota)."))
    response = client.post("/api/chat", json={"message": "hi"})
    assert response.status_code == 429
    assert response.json()["success"] is False
    assert "quota" in response.json()["error"].lower()


def test_chat_invalid_key(client, use_relay):
    use_relay(lambda request: gemini_error(400, "API key not valid. Please pass a valid API key."))
    response = client.post("/api/chat", json={"message": "hi"})
    assert response.status_code == 401


def test_chat_network_failure(client, use_relay):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    use_relay(handler)
    response = client.post("/api/chat", json={"message": "hi"})
    assert response.status_code == 503


def test_chat_empty_reply(client, use_relay):
    use_relay(lambda request: httpx.Response(200, json={"candidates": []}))
    response = client.post("/api/chat", json={"message": "hi"})
    assert response.status_code == 500
    assert response.json()["error"] == "Unable to connect to AI service. Please try again."


def test_chat_error_details_in_development(client, use_relay, monkeypatch):
    monkeypatch.setattr(settings, "ENVIRONMENT", "development")
    use_relay(lambda request: gemini_error(500, "Internal model failure"))
    body = client.post("/api/chat", json={"message": "hi"}).json()
    assert body["error"] == "API Error: Internal model failure"
    assert body["details"] == "Internal model failure"


def test_validate_key():
    good = ChatRelay(api_key="k", transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json=gemini_reply("ok"))
    ))
    bad = ChatRelay(api_key="k", transport=httpx.MockTransport(
        lambda request: gemini_error(403, "Forbidden")
    ))
    assert asyncio.run(good.validate_key()) is True
    assert asyncio.run(bad.validate_key()) is False
    assert asyncio.run(ChatRelay(api_key="").validate_key()) is False
