"""
Chat session for the client.

The pending ("typing") flag is raised before the request goes out and cleared
in a finally block, whatever the outcome.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Tuple
from mindcare.client.api import ApiClient, ApiError, OfflineError

logger = logging.getLogger(__name__)

ASSISTANT = "MindCare"
USER = "You"
ERROR = "error"

WELCOME_MESSAGE = "Hello! I'm MindCare, your mental health assistant. How are you feeling today?"

# Replies used when the server cannot be reached, first keyword match wins
OFFLINE_REPLIES: List[Tuple[Tuple[str, ...], str]] = [
    (("suicide", "kill myself", "self harm", "hurt myself"),
     "I'm offline right now, but please reach out to a crisis line or emergency services immediately. You deserve support."),
    (("anxious", "anxiety", "panic", "worried"),
     "I'm offline at the moment. Try a slow breath: in for 4, hold for 4, out for 6. Repeat a few times."),
    (("sad", "down", "lonely", "depressed"),
     "I'm offline at the moment, but your feelings matter. Consider writing them in your journal or reaching out to someone you trust."),
    (("stress", "stressed", "overwhelmed"),
     "I'm offline right now. Breaking things into one small next step can make stress feel more manageable."),
    (("sleep", "tired", "insomnia"),
     "I'm offline right now. A consistent wind-down routine 30 minutes before bed can help with sleep."),
]
DEFAULT_OFFLINE_REPLY = "I'm offline right now. Your message matters; please try again once you're connected."


def offline_reply(message: str) -> str:
    text = message.lower()
    for keywords, reply in OFFLINE_REPLIES:
        if any(keyword in text for keyword in keywords):
            return reply
    return DEFAULT_OFFLINE_REPLY


def error_text(error: ApiError) -> str:
    """User-facing text for a server-reported chat failure."""
    message = error.message or ""
    if "API key" in message:
        return "🔑 API configuration error: Please contact the administrator."
    if "quota" in message or "Quota" in message:
        return "💳 API quota exceeded. Please contact the administrator or try again later."
    if error.status_code == 429 or "rate limit" in message or "Too many requests" in message:
        return "⏱️ Too many requests. Please wait a moment and try again."
    if error.status_code == 503 or "unavailable" in message:
        return "🔧 Service temporarily unavailable. Please try again in a moment."
    if message and message != "Invalid response from server":
        return f"⚠️ {message}"
    return "😔 Sorry, I'm having trouble responding right now. Please try again."


@dataclass
class ChatSession:
    api: ApiClient
    transcript: List[Tuple[str, str]] = field(default_factory=lambda: [(ASSISTANT, WELCOME_MESSAGE)])
    pending: bool = False

    def send(self, message: str) -> Tuple[str, str]:
        """Send a message and append the reply (or error text) to the transcript."""
        message = (message or "").strip()
        if not message:
            raise ValueError("Message is required")

        self.transcript.append((USER, message))
        self.pending = True
        try:
            body = self.api.request("POST", "/api/chat", json={"message": message})
            reply = body.get("reply")
            if not reply:
                raise ApiError(200, "Invalid response from server")
            result = (ASSISTANT, reply)
        except OfflineError as e:
            logger.warning(f"Chat offline, using canned reply: {e}")
            result = (ASSISTANT, offline_reply(message))
        except ApiError as e:
            logger.error(f"Chatbot error {e.status_code}: {e.message}")
            result = (ERROR, error_text(e))
        finally:
            self.pending = False

        self.transcript.append(result)
        return result
