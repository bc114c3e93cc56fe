"""
Google OAuth 2.0 authorization code flow.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode
import httpx
from mindcare.core.config import settings
from mindcare.core.errors import AppError, NotConfigured

logger = logging.getLogger(__name__)

GOOGLE_PROVIDER_CFG = {
    "authorization_endpoint": "https://accounts.google.com/o/oauth2/v2/auth",
    "token_endpoint": "https://oauth2.googleapis.com/token",
    "userinfo_endpoint": "https://openidconnect.googleapis.com/v1/userinfo",
}


class OAuthFailed(AppError):
    status_code = 401
    message = "oauth_failed"


@dataclass
class GoogleIdentity:
    email: str
    name: Optional[str] = None


def ensure_configured() -> None:
    if not settings.GOOGLE_CLIENT_ID or not settings.GOOGLE_CLIENT_SECRET:
        raise NotConfigured("Google OAuth is not configured")


def new_state() -> str:
    """Random state token to protect the callback against CSRF."""
    return secrets.token_urlsafe(16)


def build_authorization_url(state: str) -> str:
    """URL of Google's consent screen for this application."""
    ensure_configured()
    params = {
        "client_id": settings.GOOGLE_CLIENT_ID,
        "redirect_uri": settings.GOOGLE_REDIRECT_URI,
        "scope": "openid email profile",
        "response_type": "code",
        "state": state,
        "prompt": "select_account",
    }
    return f"{GOOGLE_PROVIDER_CFG['authorization_endpoint']}?{urlencode(params)}"


async def fetch_google_identity(
    code: str,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> GoogleIdentity:
    """Exchange an authorization code for the user's verified email and name."""
    ensure_configured()
    try:
        async with httpx.AsyncClient(timeout=10.0, transport=transport) as client:
            token_response = await client.post(
                GOOGLE_PROVIDER_CFG["token_endpoint"],
                data={
                    "code": code,
                    "client_id": settings.GOOGLE_CLIENT_ID,
                    "client_secret": settings.GOOGLE_CLIENT_SECRET,
                    "redirect_uri": settings.GOOGLE_REDIRECT_URI,
                    "grant_type": "authorization_code",
                }
            )
            if token_response.status_code != 200:
                logger.error(f"Google token exchange failed {token_response.status_code}: {token_response.text}")
                raise OAuthFailed("token_exchange_failed")

            access_token = token_response.json().get("access_token")
            if not access_token:
                raise OAuthFailed("token_exchange_failed")

            userinfo_response = await client.get(
                GOOGLE_PROVIDER_CFG["userinfo_endpoint"],
                headers={"Authorization": f"Bearer {access_token}"}
            )
            if userinfo_response.status_code != 200:
                logger.error(f"Google userinfo failed {userinfo_response.status_code}: {userinfo_response.text}")
                raise OAuthFailed("userinfo_failed")
            userinfo = userinfo_response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Google OAuth request failed: {e}")
        raise OAuthFailed("provider_unreachable") from e

    if not userinfo.get("email") or not userinfo.get("email_verified", False):
        raise OAuthFailed("email_not_verified")

    return GoogleIdentity(email=userinfo["email"], name=userinfo.get("name"))
