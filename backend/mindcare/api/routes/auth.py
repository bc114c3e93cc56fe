"""
Authentication routes for signup, login and Google OAuth.
"""
import logging
from typing import Callable, ContextManager, Optional
from urllib.parse import urlencode
import httpx
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from mindcare.api.dependencies import get_current_user, get_storage, get_storage_factory
from mindcare.core.config import settings
from mindcare.core.errors import AppError
from mindcare.core.utils import format_response
from mindcare.schemas.auth import SignupRequest, LoginRequest, AuthResponse, TokenPayload
from mindcare.services import auth_service, oauth_service
from mindcare.stores.base import StorageBackend

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])
callback_router = APIRouter(tags=["auth"])

OAUTH_STATE_COOKIE = "oauth_state"


def get_oauth_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for Google requests (overridden in tests)."""
    return None


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: SignupRequest, storage: StorageBackend = Depends(get_storage)):
    """Register a new local user and return a session token."""
    user = auth_service.create_user(
        storage.users, user_data.username, user_data.email, user_data.password
    )
    return auth_service.issue_session(user)


@router.post("/login", response_model=AuthResponse)
async def login(credentials: LoginRequest, storage: StorageBackend = Depends(get_storage)):
    """Login with username (or email) and password."""
    user = auth_service.authenticate(storage.users, credentials.username, credentials.password)
    return auth_service.issue_session(user)


@router.get("/me")
async def me(current_user: TokenPayload = Depends(get_current_user)):
    """Identity carried by the bearer token."""
    return format_response({"userId": current_user.user_id, "username": current_user.username})


@router.get("/config")
async def auth_config():
    """Bootstrap values the frontend needs to start Google sign-in."""
    oauth_service.ensure_configured()
    config = format_response(providerUrl="/api/auth/google", clientId=settings.GOOGLE_CLIENT_ID)
    if settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY:
        config["supabaseUrl"] = settings.SUPABASE_URL
        config["supabaseAnonKey"] = settings.SUPABASE_ANON_KEY
    return config


@router.get("/google")
async def google_login():
    """Redirect to Google's consent screen."""
    state = oauth_service.new_state()
    response = RedirectResponse(oauth_service.build_authorization_url(state))
    response.set_cookie(
        OAUTH_STATE_COOKIE, state, max_age=600, httponly=True, samesite="lax"
    )
    return response


def _login_error(reason: str) -> RedirectResponse:
    response = RedirectResponse(f"/login?{urlencode({'error': reason})}", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response


@callback_router.get("/auth/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    storage_factory: Callable[[], ContextManager[StorageBackend]] = Depends(get_storage_factory),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_oauth_transport)
):
    """Finish Google sign-in and hand the session token to the frontend."""
    if error:
        return _login_error(error)
    if not code:
        return _login_error("missing_code")

    expected_state = request.cookies.get(OAUTH_STATE_COOKIE)
    if not expected_state or state != expected_state:
        return _login_error("invalid_state")

    try:
        identity = await oauth_service.fetch_google_identity(code, transport=transport)
        # Storage is opened only after the Google round trip has finished
        with storage_factory() as storage:
            user = auth_service.reconcile_oauth_identity(storage.users, identity.email, identity.name)
    except AppError as e:
        logger.warning(f"Google sign-in failed: {e.message}")
        return _login_error(e.message)

    session = auth_service.issue_session(user)
    query = urlencode({
        "token": session["token"],
        "userId": session["userId"],
        "username": session["username"],
    })
    response = RedirectResponse(f"{settings.OAUTH_SUCCESS_REDIRECT}?{query}", status_code=status.HTTP_302_FOUND)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    return response
