"""Application Host Shell.

The top-level ``CTk`` window that orchestrates the application
lifecycle: session check -> login -> sidebar + routed content -> logout.

All dependencies are injected via the constructor.  The shell contains
no business logic: it delegates authentication to the ``LoginView`` and
``AuthService``, route matching and the auth gate to the
``RouteRegistry``, and rendering to the registered view factories.
"""

from __future__ import annotations

import threading
from typing import Optional

import customtkinter as ctk

from pinboard import __version__ as _APP_VERSION
from pinboard.auth import SessionManager
from pinboard.config import AppConfig
from pinboard.logger import StructuredLogger
from pinboard.models.auth_models import AuthEvent, AuthResult
from pinboard.models.enums import AuthEventType
from pinboard.models.service_models import ServiceResult
from pinboard.services import ServiceContainer
from pinboard.ui.components.dialogs import ErrorPanel
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.feed_state import FeedState
from pinboard.ui.icons import IconSet
from pinboard.ui.login_view import LoginView
from pinboard.ui.routes import (
    ROUTE_FINISH_PROFILE,
    RouteContext,
    RouteRegistry,
    normalize_path,
)
from pinboard.ui.scroll_lock import ScrollLock
from pinboard.ui.sidebar import SidebarNav
from pinboard.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    LOGIN_WINDOW_HEIGHT,
    LOGIN_WINDOW_WIDTH,
    MAIN_WINDOW_HEIGHT,
    MAIN_WINDOW_WIDTH,
    TEXT_SECONDARY,
)


class AppShell(ctk.CTk):
    """Host Shell: the main application window.

    Lifecycle
    ---------
    1. On boot: asks ``AuthService`` for the stored session.  A backend
       failure blocks the window with a Retry.
    2. Navigates to the initial route (deep link) or ``/``; the route
       gate sends unauthenticated users to the login screen and
       remembers where they were going.
    3. On login: users without a profile go to ``/finish-profile``,
       everyone else to the remembered route or ``/``.
    4. Route switching: cached routes keep their frame, others are
       rebuilt on every visit.
    5. ``SIGNED_OUT`` from any source tears the shell down to login.

    Parameters
    ----------
    config:
        Application configuration.
    session:
        Injectable session holder.
    services:
        Fully-wired service container.
    registry:
        Route registry populated before shell launch.
    icons:
        Icon set.
    scroll_lock:
        Page scroll lock shared with views and modals.
    feed_state:
        Shared feed list, cleared on sign-out.
    images:
        Async image source, shut down on close.
    logger:
        Structured logger instance.
    initial_route:
        Path to open after authentication (e.g. ``/pin/42``).
    """

    def __init__(
        self,
        config: AppConfig,
        session: SessionManager,
        services: ServiceContainer,
        registry: RouteRegistry,
        icons: IconSet,
        scroll_lock: ScrollLock,
        feed_state: FeedState,
        images: AsyncImageSource,
        logger: StructuredLogger,
        initial_route: Optional[str] = None,
    ) -> None:
        super().__init__()

        self._config = config
        self._session = session
        self._services = services
        self._registry = registry
        self._icons = icons
        self._scroll_lock = scroll_lock
        self._feed_state = feed_state
        self._images = images
        self._logger = logger

        # Route frame cache (path -> CTkFrame) for routes registered with cache=True
        self._route_frames: dict[str, ctk.CTkFrame] = {}
        self._active_path: Optional[str] = None
        self._active_frame: Optional[ctk.CTkFrame] = None
        self._pending_route: Optional[str] = (
            normalize_path(initial_route) if initial_route else None
        )

        # Layout containers (created on demand)
        self._boot_frame: Optional[ctk.CTkFrame] = None
        self._login_view: Optional[LoginView] = None
        self._sidebar: Optional[SidebarNav] = None
        self._content_container: Optional[ctk.CTkFrame] = None

        self.title(f"Pinboard {_APP_VERSION}")
        ctk.set_appearance_mode("light")
        ctk.set_default_color_theme("blue")
        self.geometry(f"{MAIN_WINDOW_WIDTH}x{MAIN_WINDOW_HEIGHT}")
        self.minsize(LOGIN_WINDOW_WIDTH, LOGIN_WINDOW_HEIGHT)

        self._unsubscribe_session = session.subscribe(self._on_auth_event)
        self.protocol("WM_DELETE_WINDOW", self._on_close)

        self._check_session()

    # ==================================================================
    # Boot: stored session
    # ==================================================================

    def _check_session(self) -> None:
        """Resolve the stored session on a background thread."""
        self._clear_boot_frame()
        self._boot_frame = ctk.CTkFrame(self, fg_color=CONTENT_BG, corner_radius=0)
        self._boot_frame.pack(fill="both", expand=True)
        ctk.CTkLabel(
            self._boot_frame, text="Loading...", font=FONT_BODY, text_color=TEXT_SECONDARY,
        ).place(relx=0.5, rely=0.45, anchor="center")

        auth_service = self._services["auth_service"]

        def _worker() -> None:
            result = auth_service.get_current_session()
            self.after(0, self._on_session_checked, result)

        threading.Thread(target=_worker, name="session-check", daemon=True).start()

    def _on_session_checked(self, result: AuthResult) -> None:
        self._clear_boot_frame()
        if not result.success:
            self._logger.warning("Session check failed: %s", result.error_message)
            panel = ErrorPanel(
                self,
                "Cannot reach the server",
                result.error_message or "Please check your connection.",
                on_retry=self._check_session,
            )
            panel.pack(fill="both", expand=True)
            self._boot_frame = panel
            return

        target = self._pending_route or self._registry.default_path
        self._pending_route = None
        self.navigate(target)

    def _clear_boot_frame(self) -> None:
        if self._boot_frame is not None:
            self._boot_frame.destroy()
            self._boot_frame = None

    # ==================================================================
    # Navigation
    # ==================================================================

    def navigate(self, path: str) -> None:
        """Show *path* after applying the auth gate."""
        requested = normalize_path(path)
        authenticated = self._session.is_authenticated
        target = self._registry.resolve_target(requested, authenticated)

        if target == self._registry.login_path:
            if (
                not authenticated
                and requested != target
                and self._registry.match(requested) is not None
            ):
                self._pending_route = requested
            self._show_login()
            return

        if target != requested:
            self._logger.info("Redirected %s -> %s", requested, target)
        self._show_route(target)

    def _show_route(self, path: str) -> None:
        """Hide the current frame, show (or create) the one for *path*."""
        if path == self._active_path and self._active_frame is not None:
            return

        matched = self._registry.match(path)
        if matched is None:
            self._logger.error("Cannot show unregistered route: %s", path)
            return
        entry, params = matched
        if entry.factory is None:
            self._logger.error("Route %s has no view factory", path)
            return

        self._ensure_main_shell()
        self._hide_active()

        frame = self._route_frames.get(path) if entry.cache else None
        if frame is None:
            context = RouteContext(
                navigate=self.navigate, params=params, scroll_lock=self._scroll_lock,
            )
            frame = entry.factory(self._content_container, context)
            if entry.cache:
                self._route_frames[path] = frame
        else:
            on_show = getattr(frame, "on_show", None)
            if callable(on_show):
                on_show()

        frame.pack(fill="both", expand=True)
        self._active_path = path
        self._active_frame = frame

        if self._sidebar:
            self._sidebar.set_active(path)

        self._logger.info("Switched to route: %s", path)

    def _hide_active(self) -> None:
        frame, path = self._active_frame, self._active_path
        self._active_frame = None
        self._active_path = None
        if frame is None:
            return
        if path is not None and self._route_frames.get(path) is frame:
            frame.pack_forget()
        else:
            frame.destroy()

    # ==================================================================
    # View transitions
    # ==================================================================

    def _show_login(self) -> None:
        """Display the login view (idempotent)."""
        if self._login_view is not None:
            return
        self._clear_boot_frame()
        self._clear_main_shell()

        self._login_view = LoginView(
            parent=self,
            auth_service=self._services["auth_service"],
            icons=self._icons,
            on_login_success=self._handle_login_success,
            logger=self._logger,
        )
        self._login_view.pack(fill="both", expand=True)

    def _ensure_main_shell(self) -> None:
        """Build the sidebar + content area unless already present."""
        if self._login_view is not None:
            self._login_view.destroy()
            self._login_view = None
        if self._content_container is not None:
            return

        self._sidebar = SidebarNav(
            parent=self,
            entries=self._registry.sidebar_entries(),
            icons=self._icons,
            on_navigate=self.navigate,
            on_logout=self.handle_logout,
            session=self._session,
            logger=self._logger,
        )
        self._sidebar.pack(side="left", fill="y")

        self._content_container = ctk.CTkFrame(self, fg_color=CONTENT_BG, corner_radius=0)
        self._content_container.pack(side="top", fill="both", expand=True)

    def _clear_main_shell(self) -> None:
        """Destroy sidebar, content and every route frame."""
        self._hide_active()
        for frame in self._route_frames.values():
            frame.destroy()
        self._route_frames.clear()

        if self._sidebar:
            self._sidebar.destroy()
            self._sidebar = None
        if self._content_container:
            self._content_container.destroy()
            self._content_container = None

    # ==================================================================
    # Auth lifecycle
    # ==================================================================

    def _handle_login_success(self, result: AuthResult) -> None:
        """Called by ``LoginView`` after sign-in (or an instant sign-up)."""
        self._logger.info(
            "Login successful: %s", result.session.email if result.session else "unknown",
        )
        profile_service = self._services["profile_service"]

        def _worker() -> None:
            needs = profile_service.needs_profile()
            self.after(0, self._route_after_login, needs)

        threading.Thread(target=_worker, name="profile-check", daemon=True).start()

    def _route_after_login(self, needs: ServiceResult[bool]) -> None:
        if not self._session.is_authenticated:
            return
        if needs.success and needs.data:
            self._pending_route = None
            self.navigate(ROUTE_FINISH_PROFILE)
            return
        target = self._pending_route or self._registry.default_path
        self._pending_route = None
        self.navigate(target)

    def handle_logout(self) -> None:
        """Delegate logout to AuthService and return to the login screen."""
        self._services["auth_service"].logout()
        self._on_signed_out()

    def _on_auth_event(self, event: AuthEvent) -> None:
        # Delivered on whichever thread produced the event.
        if event.type == AuthEventType.SIGNED_OUT:
            try:
                self.after(0, self._on_signed_out)
            except RuntimeError:
                return

    def _on_signed_out(self) -> None:
        if self._login_view is not None:
            return
        self._services["storage_service"].invalidate()
        self._feed_state.clear()
        self._pending_route = None
        self._show_login()

    # ==================================================================
    # Window close
    # ==================================================================

    def _on_close(self) -> None:
        """Detach from the session provider and stop workers before destroying."""
        self._unsubscribe_session()
        self._services["auth_service"].unbind_auth_events()
        self._images.shutdown()
        self.destroy()
