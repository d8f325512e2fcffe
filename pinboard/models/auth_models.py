"""
Authentication Models.

Pydantic models and enumerations for the auth request/response contracts
between ``AuthService``, ``SessionManager`` and the UI layer.  Every auth
operation returns a structured, inspectable result rather than raw
strings or exceptions.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel

from pinboard.models.enums import AuthEventType


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------

class AuthErrorCode(StrEnum):
    """Authentication error categories shown by the UI."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    NETWORK_ERROR = "network_error"
    RATE_LIMITED = "rate_limited"
    VALIDATION_ERROR = "validation_error"
    SESSION_MISMATCH = "session_mismatch"
    NOT_AUTHENTICATED = "not_authenticated"
    UNKNOWN_ERROR = "unknown_error"


SUPABASE_ERROR_MAP: dict[str, tuple[AuthErrorCode, str]] = {
    "invalid login credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "invalid_credentials": (
        AuthErrorCode.INVALID_CREDENTIALS,
        "Incorrect email or password.",
    ),
    "email not confirmed": (
        AuthErrorCode.EMAIL_NOT_CONFIRMED,
        "Please confirm your email address before signing in.",
    ),
    "user already registered": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "user_already_exists": (
        AuthErrorCode.EMAIL_ALREADY_EXISTS,
        "An account with this email already exists. Try signing in.",
    ),
    "rate limit": (
        AuthErrorCode.RATE_LIMITED,
        "Too many attempts. Please wait a moment and try again.",
    ),
}


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class AuthSession(BaseModel):
    """The authenticated identity as seen by the client.

    Token lifecycle is owned by the session provider; the client only
    keeps a copy for display and for identity checks.
    """

    user_id: str
    email: Optional[str] = None
    access_token: str = ""
    refresh_token: str = ""
    expires_at: Optional[int] = None

    model_config = {"from_attributes": True}

    @property
    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        now = datetime.now(timezone.utc).timestamp()
        return now >= self.expires_at


class AuthEvent(BaseModel):
    """One notification of the auth state stream."""

    type: AuthEventType
    session: Optional[AuthSession] = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

class ValidationResult(BaseModel):
    """Result of a single client-side field validation check."""

    is_valid: bool
    error_message: Optional[str] = None


class AuthResult(BaseModel):
    """Unified response for session checks, login, sign-up and identity checks.

    Attributes
    ----------
    success:
        ``True`` when the operation completed without error.
    error_code:
        Structured error category (``None`` on success).
    error_message:
        Human-readable error description (``None`` on success).
    session:
        The active session, when one exists.
    needs_confirmation:
        ``True`` after a sign-up that requires email confirmation.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    session: Optional[AuthSession] = None
    needs_confirmation: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.success and self.session is not None
