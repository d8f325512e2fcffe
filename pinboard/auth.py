"""
Authentication & Session State.

Provides an injectable ``SessionManager`` holding the current
``AuthSession`` and fanning auth events out to subscribers.

The session is process-wide, read-shared state.  Only auth events
coming from the session provider mutate it; views subscribe and react.

Usage::

    from pinboard.auth import SessionManager

    session = SessionManager(logger=get_logger("session"))
    unsubscribe = session.subscribe(lambda event: print(event.type))
    session.current_session        # AuthSession | None
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

from pinboard.logger import StructuredLogger
from pinboard.models.auth_models import AuthEvent, AuthSession
from pinboard.models.enums import AuthEventType

AuthEventHandler = Callable[[AuthEvent], None]


class SessionManager:
    """Injectable holder for the current session and its change stream.

    Pass a single instance through the dependency-injection layer so
    every component sees the same session.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._lock: threading.RLock = threading.RLock()
        self._logger: StructuredLogger = logger
        self._session: Optional[AuthSession] = None
        self._handlers: list[AuthEventHandler] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def current_session(self) -> Optional[AuthSession]:
        """The active session, or ``None`` when signed out."""
        with self._lock:
            return self._session

    @property
    def is_authenticated(self) -> bool:
        with self._lock:
            return self._session is not None

    @property
    def user_id(self) -> Optional[str]:
        with self._lock:
            return self._session.user_id if self._session else None

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def subscribe(self, handler: AuthEventHandler) -> Callable[[], None]:
        """Register *handler* for auth events.

        Returns a zero-argument callable that removes the handler.
        Calling it more than once is harmless.
        """
        with self._lock:
            self._handlers.append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers:
                    self._handlers.remove(handler)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Event intake (session provider only)
    # ------------------------------------------------------------------

    def dispatch(self, event: AuthEvent) -> None:
        """Apply *event* to the stored session and notify subscribers.

        Handler exceptions are logged and do not stop delivery to the
        remaining handlers.
        """
        with self._lock:
            if event.type == AuthEventType.SIGNED_OUT:
                self._session = None
            else:
                self._session = event.session
            handlers = list(self._handlers)

        self._logger.info(
            "Auth event: %s", event.type,
            extra={"event": "AUTH_EVENT", "has_session": event.session is not None},
        )

        for handler in handlers:
            try:
                handler(event)
            except Exception as exc:
                self._logger.error(
                    "Auth event handler failed for %s: %s",
                    event.type,
                    exc,
                    exc_info=True,
                )
