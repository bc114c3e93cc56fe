"""
Chat relay to the Gemini text-generation API.

The user message is wrapped in a fixed MindCare preamble and forwarded to
Gemini's generateContent REST endpoint. Provider failures are classified by
walking ERROR_RULES in order; the first matching rule decides the error the
caller sees, so the order is part of the API contract.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Type
import httpx
from mindcare.core.config import settings
from mindcare.core.errors import (
    AppError, NotConfigured, ValidationError, QuotaExceeded, RateLimited,
    UpstreamAuthError, UpstreamUnavailable, UpstreamError
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are MindCare, a friendly and empathetic mental health assistant.
Provide supportive, non-judgmental responses.
If someone is in crisis, encourage them to seek professional help.
Keep responses concise and helpful."""

EMPTY_REPLY_MESSAGE = "Invalid response from Gemini API: No text returned"
PRODUCTION_FALLBACK_MESSAGE = "Unable to connect to AI service. Please try again."


def build_prompt(message: str) -> str:
    """Combine the system preamble with the user's message."""
    return f"{SYSTEM_PROMPT}\n\nUser: {message.strip()}\n\nMindCare:"


@dataclass(eq=False)
class ProviderFailure(Exception):
    """Error signal from the provider: HTTP status, error text, transport flag."""
    status: Optional[int]
    message: str
    transport: bool = False

    def __str__(self) -> str:
        return self.message


def _contains(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


def is_quota_exhausted(failure: ProviderFailure) -> bool:
    return failure.status == 429 or _contains(failure.message, "quota", "Quota")


def is_rate_limited(failure: ProviderFailure) -> bool:
    return _contains(failure.message, "rate limit", "Rate limit")


def is_auth_failure(failure: ProviderFailure) -> bool:
    return failure.status in (401, 403) or _contains(failure.message, "API key", "API_KEY")


def is_network_failure(failure: ProviderFailure) -> bool:
    return failure.transport or _contains(failure.message, "network", "Network", "fetch")


ErrorRule = Tuple[Callable[[ProviderFailure], bool], Type[AppError]]

# Evaluated top to bottom; anything unmatched becomes UpstreamError
ERROR_RULES: List[ErrorRule] = [
    (is_quota_exhausted, QuotaExceeded),
    (is_rate_limited, RateLimited),
    (is_auth_failure, UpstreamAuthError),
    (is_network_failure, UpstreamUnavailable),
]


def classify_failure(failure: ProviderFailure) -> AppError:
    """Map a provider failure to the error surfaced to API callers."""
    for predicate, error_class in ERROR_RULES:
        if predicate(failure):
            return error_class(details=failure.message)

    if not failure.message:
        return UpstreamError()
    if settings.is_development:
        return UpstreamError(f"API Error: {failure.message}", details=failure.message)
    return UpstreamError(PRODUCTION_FALLBACK_MESSAGE, details=failure.message)


def _error_text(response: httpx.Response) -> str:
    """Pull the human-readable message out of a Gemini error body."""
    try:
        body = response.json()
        message = body["error"]["message"]
        if message:
            return message
    except (ValueError, KeyError, TypeError):
        pass
    return response.text or f"HTTP error! status: {response.status_code}"


def _reply_text(response: httpx.Response) -> str:
    try:
        data = response.json()
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts).strip()
    except (ValueError, KeyError, IndexError, TypeError, AttributeError):
        return ""


class ChatRelay:
    """Forwards user messages to Gemini and classifies its failures."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_URL).rstrip("/")
        self.timeout = timeout or settings.GEMINI_TIMEOUT
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def relay(self, message: Optional[str]) -> str:
        """Send one user message and return the provider's trimmed reply."""
        text = message.strip() if isinstance(message, str) else ""
        if not text:
            raise ValidationError("Message is required")
        if not self.configured:
            raise NotConfigured("Gemini API key is not configured")

        logger.info(f"Chat message received ({len(text)} chars): {text[:40]!r}")
        try:
            reply = await self._generate(build_prompt(text))
        except ProviderFailure as failure:
            logger.error(
                f"Chatbot error: status={failure.status} transport={failure.transport} "
                f"message={failure.message}"
            )
            raise classify_failure(failure) from failure

        logger.info(f"Chatbot replied ({len(reply)} chars)")
        return reply

    async def _generate(self, prompt: str) -> str:
        url = f"{self.base_url}/models/{self.model}:generateContent"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    url,
                    headers={
                        "x-goog-api-key": self.api_key,
                        "Content-Type": "application/json"
                    },
                    json={"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
                )
        except httpx.TransportError as e:
            raise ProviderFailure(None, str(e) or e.__class__.__name__, transport=True) from e

        if response.status_code >= 400:
            raise ProviderFailure(response.status_code, _error_text(response))

        reply = _reply_text(response)
        if not reply:
            raise ProviderFailure(response.status_code, EMPTY_REPLY_MESSAGE)
        return reply

    async def validate_key(self) -> bool:
        """Send a minimal request to confirm the key works. Never raises."""
        if not self.configured:
            logger.warning("Gemini API key not configured. The chatbot is disabled.")
            return False
        try:
            await self._generate("test")
        except ProviderFailure as failure:
            logger.error(f"Gemini API key validation failed: {failure.message}")
            logger.warning("The chatbot will not work until a valid API key is provided.")
            if failure.status in (401, 403):
                logger.warning("Hint: check that GEMINI_API_KEY in .env is correct.")
            return False
        logger.info("Gemini API key validated successfully")
        return True
