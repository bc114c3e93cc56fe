"""
Authentication service: account creation, credential checks and OAuth
identity reconciliation.
"""
import logging
import re
from typing import Any, Dict, Optional
from mindcare.core.errors import DuplicateIdentity, InvalidCredentials, ValidationError
from mindcare.core.security import verify_password, get_password_hash, create_access_token
from mindcare.models.user import AuthProvider
from mindcare.schemas.user import UserRecord
from mindcare.stores.base import UserStore

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
USERNAME_MAX_LENGTH = 50
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def create_user(
    store: UserStore,
    username: str,
    email: str,
    password: Optional[str],
    provider: AuthProvider = AuthProvider.LOCAL
) -> UserRecord:
    """
    Create a user after checking username and email separately.

    Local accounts must carry a password, which is stored as a bcrypt hash.
    Google accounts are stored without a hash and can never log in with a
    password.
    """
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email:
        raise ValidationError("Username and email are required")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LENGTH} characters")

    password_hash = None
    if provider == AuthProvider.LOCAL:
        if not password:
            raise ValidationError("Password is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    # Check if username already exists
    if store.get_by_username(username):
        raise DuplicateIdentity("Username already exists")

    # Check if email already exists
    if store.get_by_email(email):
        raise DuplicateIdentity("Email already exists")

    if provider == AuthProvider.LOCAL:
        password_hash = get_password_hash(password)

    user = store.create(username, email, password_hash, provider)
    logger.info(f"Created {provider.value} user {user.id} ({user.username})")
    return user


def find_by_username_or_email(store: UserStore, identifier: str) -> Optional[UserRecord]:
    """Look up by username first, then by email. Store errors propagate."""
    user = store.get_by_username(identifier)
    if user:
        return user
    return store.get_by_email(identifier)


def check_password(user: UserRecord, candidate: str) -> None:
    """Raise InvalidCredentials unless the candidate matches the stored hash."""
    if not user.has_password:
        raise InvalidCredentials()
    if not verify_password(candidate, user.password_hash):
        raise InvalidCredentials()


def authenticate(store: UserStore, identifier: str, password: str) -> UserRecord:
    """Resolve a login identifier and verify the password."""
    user = find_by_username_or_email(store, (identifier or "").strip())
    if not user:
        raise InvalidCredentials()
    check_password(user, password or "")
    return user


def derive_username(display_name_hint: Optional[str], email: str) -> str:
    """Lowercase the hint and collapse non-alphanumeric runs into underscores."""
    for source in (display_name_hint, email.split("@")[0]):
        base = _NON_ALNUM.sub("_", (source or "").lower()).strip("_")
        if base:
            return base[:USERNAME_MAX_LENGTH - 6]
    return "user"


def _unique_username(store: UserStore, base: str) -> str:
    candidate = base
    suffix = 1
    while store.get_by_username(candidate):
        candidate = f"{base}{suffix}"
        suffix += 1
    return candidate


def reconcile_oauth_identity(
    store: UserStore,
    email: str,
    display_name_hint: Optional[str] = None
) -> UserRecord:
    """
    Find or create the user for a Google-verified email.

    An existing local account with the same email is migrated to the google
    provider and keeps its password hash. New accounts get a username derived
    from the display name with a numeric suffix on collision.
    """
    existing = store.get_by_email(email)
    if existing:
        if existing.auth_provider != AuthProvider.GOOGLE:
            store.set_auth_provider(existing.id, AuthProvider.GOOGLE)
            logger.info(f"Linked user {existing.id} to Google sign-in")
            existing = existing.model_copy(update={"auth_provider": AuthProvider.GOOGLE})
        return existing

    username = _unique_username(store, derive_username(display_name_hint, email))
    try:
        return create_user(store, username, email, None, AuthProvider.GOOGLE)
    except DuplicateIdentity:
        # A concurrent callback created the account first
        existing = store.get_by_email(email)
        if existing:
            return existing
        raise


def issue_session(user: UserRecord) -> Dict[str, Any]:
    """Token payload returned by signup, login and the OAuth callback."""
    return {
        "success": True,
        "token": create_access_token(user.id, user.username),
        "userId": user.id,
        "username": user.username,
    }
