"""
Authentication Service.

Single orchestrator for every authentication concern of the client:
session lookup, the auth event stream, login, sign-up, logout, identity
verification before writes, and error classification.

Sits between the UI layer and the Supabase auth API so that
``LoginView`` remains a thin form handler.

All methods return typed ``AuthResult`` or ``ValidationResult``
models; the UI never inspects raw exceptions.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional

from pinboard.auth import SessionManager
from pinboard.config import AppConfig
from pinboard.database import DatabaseManager
from pinboard.errors import DatabaseError
from pinboard.logger import StructuredLogger
from pinboard.models.auth_models import (
    SUPABASE_ERROR_MAP,
    AuthErrorCode,
    AuthEvent,
    AuthResult,
    AuthSession,
    ValidationResult,
)
from pinboard.models.enums import AuthEventType
from pinboard.models.user import UserRecord
from pinboard.repositories.user_repository import UserRepository


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_EMAIL_RE: re.Pattern[str] = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

_NETWORK_MESSAGE: str = "Cannot reach the server. Check your internet connection."


def to_auth_session(raw: Any) -> Optional[AuthSession]:
    """Convert an SDK ``Session`` (or ``None``) into ``AuthSession``."""
    if raw is None:
        return None
    user = getattr(raw, "user", None)
    user_id = getattr(user, "id", None)
    if not user_id:
        return None
    return AuthSession(
        user_id=str(user_id),
        email=getattr(user, "email", None),
        access_token=getattr(raw, "access_token", "") or "",
        refresh_token=getattr(raw, "refresh_token", "") or "",
        expires_at=getattr(raw, "expires_at", None),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class AuthService:
    """Centralised authentication service.

    Receives all infrastructure dependencies via ``__init__`` and
    exposes request -> result methods for every auth flow.

    Parameters
    ----------
    db:
        Connection holder for the Supabase client.
    session:
        Process-wide session holder.  Only auth events mutate it.
    config:
        Supplies the sign-up redirect URL and the password policy.
    logger:
        Structured JSON logger for audit-grade logging.
    user_repo:
        Used to create the ``users`` row when sign-up returns a session
        straight away (email confirmation disabled).
    """

    def __init__(
        self,
        db: DatabaseManager,
        session: SessionManager,
        config: AppConfig,
        logger: StructuredLogger,
        user_repo: Optional[UserRepository] = None,
    ) -> None:
        self._db: DatabaseManager = db
        self._session: SessionManager = session
        self._config: AppConfig = config
        self._logger: StructuredLogger = logger
        self._user_repo: Optional[UserRepository] = user_repo
        self._subscription: Any = None

    # ==================================================================
    # Validation helpers
    # ==================================================================

    @staticmethod
    def validate_email(email: str) -> ValidationResult:
        """Validate an email address against a simplified RFC 5322 regex."""
        if not email or not email.strip():
            return ValidationResult(
                is_valid=False,
                error_message="Email address is required.",
            )
        if not _EMAIL_RE.match(email.strip()):
            return ValidationResult(
                is_valid=False,
                error_message="Please enter a valid email address.",
            )
        return ValidationResult(is_valid=True)

    def validate_password(self, password: str) -> ValidationResult:
        """Require a non-empty password of at least ``MIN_PASSWORD_LENGTH``."""
        if not password:
            return ValidationResult(
                is_valid=False,
                error_message="Password is required.",
            )
        minimum = self._config.MIN_PASSWORD_LENGTH
        if len(password) < minimum:
            return ValidationResult(
                is_valid=False,
                error_message=f"Password must be at least {minimum} characters.",
            )
        return ValidationResult(is_valid=True)

    @staticmethod
    def normalize_email(email: str) -> str:
        """Normalise an email address: strip whitespace and lowercase."""
        return email.strip().lower()

    def _validate_credentials(self, email: str, password: str) -> Optional[AuthResult]:
        for check in (self.validate_email(email), self.validate_password(password)):
            if not check.is_valid:
                return AuthResult(
                    success=False,
                    error_code=AuthErrorCode.VALIDATION_ERROR,
                    error_message=check.error_message,
                )
        return None

    # ==================================================================
    # Session
    # ==================================================================

    def get_current_session(self) -> AuthResult:
        """Ask the provider for the stored session.

        Returns ``success=True`` with ``session=None`` when signed out.
        A provider failure yields ``success=False`` with
        ``NETWORK_ERROR``: callers must treat that as unauthenticated
        and offer a retry.
        """
        try:
            raw = self._db.supabase.auth.get_session()
        except Exception as exc:
            self._logger.warning(
                "Session check failed: %s", exc,
                extra={"event": "SESSION_CHECK_FAILED"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=_NETWORK_MESSAGE,
            )

        session = to_auth_session(raw)
        self._session.dispatch(
            AuthEvent(type=AuthEventType.INITIAL_SESSION, session=session)
        )
        return AuthResult(success=True, session=session)

    def bind_auth_events(self) -> Callable[[], None]:
        """Forward the provider's auth state stream into ``SessionManager``.

        Returns a callable that stops forwarding.  Binding twice keeps
        the first subscription.
        """
        if self._subscription is None:
            try:
                self._subscription = self._db.supabase.auth.on_auth_state_change(
                    self._on_provider_event
                )
            except Exception as exc:
                self._logger.warning("Could not subscribe to auth events: %s", exc)
        return self.unbind_auth_events

    def unbind_auth_events(self) -> None:
        subscription, self._subscription = self._subscription, None
        if subscription is None:
            return
        try:
            subscription.unsubscribe()
        except Exception as exc:
            self._logger.debug("Auth unsubscribe failed: %s", exc)

    def _on_provider_event(self, event: Any, raw_session: Any) -> None:
        try:
            event_type = AuthEventType(str(getattr(event, "value", event)))
        except ValueError:
            self._logger.debug("Ignoring auth event %s", event)
            return
        self._session.dispatch(
            AuthEvent(type=event_type, session=to_auth_session(raw_session))
        )

    def verify_identity(self) -> AuthResult:
        """Confirm with the server that the session user is still valid.

        Used before every write: ``get_user`` must return the same id as
        the locally held session.
        """
        current = self._session.current_session
        if current is None:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NOT_AUTHENTICATED,
                error_message="You are not signed in. Please log in again.",
            )

        try:
            response = self._db.supabase.auth.get_user()
        except Exception as exc:
            self._logger.warning(
                "User validation failed: %s", exc,
                extra={"event": "IDENTITY_CHECK_FAILED"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NOT_AUTHENTICATED,
                error_message="Authentication error. Please log in again.",
            )

        user = getattr(response, "user", None)
        server_id = getattr(user, "id", None)
        if not server_id or str(server_id) != current.user_id:
            self._logger.warning(
                "User ID mismatch: session=%s server=%s", current.user_id, server_id,
                extra={"event": "IDENTITY_MISMATCH"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.SESSION_MISMATCH,
                error_message="Session validation failed. Please log in again.",
            )

        return AuthResult(success=True, session=current)

    # ==================================================================
    # Login
    # ==================================================================

    def login(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password.

        Parameters
        ----------
        email:
            The raw email entered by the user.
        password:
            The raw password entered by the user.

        Returns
        -------
        AuthResult
            ``success=True`` with the new session, or a structured error
            with ``error_code`` and ``error_message``.
        """
        invalid = self._validate_credentials(email, password)
        if invalid is not None:
            return invalid

        email = self.normalize_email(email)

        try:
            response = self._db.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as exc:
            return self._classify_error(exc, "LOGIN_FAILED")

        session = to_auth_session(getattr(response, "session", None))
        if session is None:
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.UNKNOWN_ERROR,
                error_message="Sign-in returned no session. Please try again.",
            )

        # The provider normally emits SIGNED_IN itself while signing in.
        if self._session.user_id != session.user_id:
            self._session.dispatch(
                AuthEvent(type=AuthEventType.SIGNED_IN, session=session)
            )

        self._logger.info(
            "User authenticated: %s", email,
            extra={"event": "LOGIN", "email": email, "user_id": session.user_id},
        )
        return AuthResult(success=True, session=session)

    def _classify_error(self, exc: Exception, event: str) -> AuthResult:
        """Map a Supabase or network exception to a structured ``AuthResult``."""
        if isinstance(exc, (ConnectionError, TimeoutError, RuntimeError)):
            self._logger.warning(
                "Network error during auth: %s", exc,
                extra={"event": event, "error_code": "network"},
            )
            return AuthResult(
                success=False,
                error_code=AuthErrorCode.NETWORK_ERROR,
                error_message=_NETWORK_MESSAGE,
            )

        error_str = str(exc).lower()
        for code_key, (error_code, human_message) in SUPABASE_ERROR_MAP.items():
            if code_key in error_str:
                self._logger.warning(
                    "Auth error (%s): %s", code_key, exc,
                    extra={"event": event, "error_code": code_key},
                )
                return AuthResult(
                    success=False,
                    error_code=error_code,
                    error_message=human_message,
                )

        self._logger.warning(
            "Unknown auth error: %s", exc,
            extra={"event": event, "error_code": "unknown"},
        )
        return AuthResult(
            success=False,
            error_code=AuthErrorCode.UNKNOWN_ERROR,
            error_message=str(exc) or "An unexpected error occurred. Please try again later.",
        )

    # ==================================================================
    # Registration
    # ==================================================================

    def register(
        self,
        email: str,
        password: str,
        username: str = "",
        first_name: str = "",
        last_name: str = "",
    ) -> AuthResult:
        """Create an account via Supabase ``sign_up()``.

        The confirmation mail links back to ``AUTH_REDIRECT_URL``.  Name
        fields travel as user metadata.  When the project has email
        confirmation disabled the provider returns a session directly;
        the ``users`` row is then created here.

        Returns
        -------
        AuthResult
            ``needs_confirmation=True`` when the user must click the
            email link before signing in.
        """
        invalid = self._validate_credentials(email, password)
        if invalid is not None:
            return invalid

        email = self.normalize_email(email)
        username = username.strip() or email.split("@")[0]
        metadata = {
            "username": username,
            "first_name": first_name.strip(),
            "last_name": last_name.strip(),
        }

        try:
            response = self._db.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "email_redirect_to": self._config.AUTH_REDIRECT_URL,
                    "data": metadata,
                },
            })
        except Exception as exc:
            return self._classify_error(exc, "REGISTER_FAILED")

        session = to_auth_session(getattr(response, "session", None))
        self._logger.info(
            "User registered: %s", email,
            extra={
                "event": "REGISTER",
                "email": email,
                "confirmed": session is not None,
            },
        )

        if session is None:
            return AuthResult(success=True, needs_confirmation=True)

        if self._session.user_id != session.user_id:
            self._session.dispatch(
                AuthEvent(type=AuthEventType.SIGNED_IN, session=session)
            )
        self._provision_user(session.user_id, metadata)
        return AuthResult(success=True, session=session)

    def _provision_user(self, user_id: str, metadata: dict[str, str]) -> None:
        """Create the public ``users`` row for a freshly signed-up account."""
        if self._user_repo is None:
            return
        try:
            self._user_repo.upsert(
                UserRecord(
                    id=user_id,
                    username=metadata["username"] or None,
                    first_name=metadata["first_name"] or None,
                    last_name=metadata["last_name"] or None,
                )
            )
        except DatabaseError as exc:
            # A database trigger may already own this row.
            self._logger.warning("Could not create users row for %s: %s", user_id, exc)

    # ==================================================================
    # Logout
    # ==================================================================

    def logout(self) -> None:
        """Server-side sign-out and local session cleanup.

        The server call is wrapped in ``try/except`` so the local session
        is cleared even when the backend is unreachable.
        """
        user_id = self._session.user_id or "unknown"

        try:
            self._db.supabase.auth.sign_out()
        except Exception as exc:
            self._logger.warning("Server-side sign_out failed for %s: %s", user_id, exc)

        if self._session.is_authenticated:
            self._session.dispatch(AuthEvent(type=AuthEventType.SIGNED_OUT))

        self._logger.info(
            "User logged out: %s", user_id,
            extra={"event": "LOGOUT", "user_id": user_id},
        )
