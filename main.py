"""
Pinboard Desktop Application Entry Point.

Bootstraps the entire dependency graph via constructor injection and
launches the CustomTkinter GUI.  Every subsystem is wired here; there
are no module-level client singletons.

Usage::

    python main.py            # opens the feed
    python main.py /pin/42    # deep link, opened after sign-in
"""

from __future__ import annotations

import sys
import traceback
from typing import Optional

from pinboard.auth import SessionManager
from pinboard.config import get_config
from pinboard.database import DatabaseManager
from pinboard.logger import StructuredLogger, get_logger
from pinboard.services import create_services
from pinboard.ui.app_shell import AppShell
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.feed_state import FeedState
from pinboard.ui.icons import IconSet
from pinboard.ui.routes import (
    ROUTE_CREATE,
    ROUTE_FINISH_PROFILE,
    ROUTE_HOME,
    ROUTE_LOGIN,
    ROUTE_PIN,
    ROUTE_PROFILE,
    ROUTE_SETTINGS,
    RouteRegistry,
)
from pinboard.ui.scroll_lock import ScrollLock
from pinboard.ui.views.create_view import CreateView
from pinboard.ui.views.feed_view import FeedView
from pinboard.ui.views.finish_profile_view import FinishProfileView
from pinboard.ui.views.pin_actions import PinActions
from pinboard.ui.views.pin_view import PinView
from pinboard.ui.views.profile_view import ProfileView
from pinboard.ui.views.settings_view import SettingsView


def main(initial_route: Optional[str] = None) -> None:
    """Application entry point: wire dependencies and launch the GUI."""
    logger: StructuredLogger = get_logger("main")
    logger.info("Starting Pinboard...")

    # ------------------------------------------------------------------
    # 1. Configuration (from .env / environment variables)
    # ------------------------------------------------------------------
    config = get_config()

    # ------------------------------------------------------------------
    # 2. Backend connection (single Supabase client)
    # ------------------------------------------------------------------
    db = DatabaseManager(
        supabase_url=config.SUPABASE_URL,
        supabase_key=config.SUPABASE_ANON_KEY.get_secret_value(),
        logger=StructuredLogger(name="database"),
    )

    # ------------------------------------------------------------------
    # 3. Session Manager
    # ------------------------------------------------------------------
    session = SessionManager(logger=get_logger("session"))

    # ------------------------------------------------------------------
    # 4. Service Container (repositories + services, single composition root)
    # ------------------------------------------------------------------
    services = create_services(db=db, config=config, session=session)

    # Forward provider auth events (token refresh, remote sign-out).
    if db.is_online:
        services["auth_service"].bind_auth_events()

    # ------------------------------------------------------------------
    # 5. Shared presentation state
    # ------------------------------------------------------------------
    icons = IconSet.default()
    scroll_lock = ScrollLock()
    feed_state = FeedState()
    images = AsyncImageSource(services.get("image_loader"), get_logger("images"))
    pin_actions = PinActions(
        session=session,
        pin_service=services["pin_service"],
        feed_state=feed_state,
        images=images,
        icons=icons,
        logger=get_logger("pins"),
    )

    # ------------------------------------------------------------------
    # 6. Route Registry
    # ------------------------------------------------------------------
    registry = RouteRegistry(logger=get_logger("routes"))

    registry.register("login", ROUTE_LOGIN, "Log In", None, login=True)

    registry.register(
        "feed",
        ROUTE_HOME,
        "Home",
        lambda parent, ctx: FeedView(
            parent,
            context=ctx,
            feed_service=services["feed_service"],
            feed_state=feed_state,
            pin_actions=pin_actions,
            images=images,
            icons=icons,
            logger=get_logger("feed"),
        ),
        icon="home",
        in_sidebar=True,
        cache=True,
        default=True,
    )

    registry.register(
        "create",
        ROUTE_CREATE,
        "Create",
        lambda parent, ctx: CreateView(
            parent,
            context=ctx,
            pin_service=services["pin_service"],
            storage_service=services["storage_service"],
            feed_state=feed_state,
            logger=get_logger("create"),
        ),
        icon="create",
        in_sidebar=True,
    )

    registry.register(
        "profile",
        ROUTE_PROFILE,
        "Profile",
        lambda parent, ctx: ProfileView(
            parent,
            context=ctx,
            session=session,
            profile_service=services["profile_service"],
            feed_service=services["feed_service"],
            pin_actions=pin_actions,
            images=images,
            icons=icons,
            logger=get_logger("profile"),
        ),
        icon="profile",
        in_sidebar=True,
    )

    registry.register(
        "settings",
        ROUTE_SETTINGS,
        "Settings",
        lambda parent, ctx: SettingsView(
            parent,
            context=ctx,
            session=session,
            profile_service=services["profile_service"],
            icons=icons,
            logger=get_logger("settings"),
            on_logout=lambda: app.handle_logout(),
        ),
        icon="settings",
        in_sidebar=True,
    )

    registry.register(
        "finish_profile",
        ROUTE_FINISH_PROFILE,
        "Finish Profile",
        lambda parent, ctx: FinishProfileView(
            parent,
            context=ctx,
            profile_service=services["profile_service"],
            logger=get_logger("finish_profile"),
        ),
    )

    registry.register(
        "pin",
        ROUTE_PIN,
        "Pin",
        lambda parent, ctx: PinView(
            parent,
            context=ctx,
            feed_service=services["feed_service"],
            pin_actions=pin_actions,
            logger=get_logger("pin"),
        ),
    )

    # ------------------------------------------------------------------
    # 7. Launch the GUI (blocks until window closes)
    # ------------------------------------------------------------------
    logger.info("Launching GUI...")
    app = AppShell(
        config=config,
        session=session,
        services=services,
        registry=registry,
        icons=icons,
        scroll_lock=scroll_lock,
        feed_state=feed_state,
        images=images,
        logger=get_logger("ui"),
        initial_route=initial_route,
    )
    app.mainloop()
    logger.info("Pinboard shut down.")


def _show_fatal_error(exc: BaseException) -> None:
    """Display a fatal-error dialog so double-click users get feedback.

    Uses ``tkinter.messagebox`` (stdlib) rather than CustomTkinter so
    the dialog works even when CTk initialisation itself is the thing
    that failed.
    """
    detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    try:
        import tkinter
        from tkinter import messagebox

        root = tkinter.Tk()
        root.withdraw()
        messagebox.showerror(
            title="Pinboard: Fatal Error",
            message=(
                "The application encountered an unexpected error and "
                "cannot continue.\n\n"
                f"{type(exc).__name__}: {exc}"
            ),
            detail=detail,
        )
        root.destroy()
    except Exception:
        # Headless or missing Tcl/Tk: stderr is all that is left.
        sys.stderr.write(f"FATAL: {type(exc).__name__}: {exc}\n{detail}")


if __name__ == "__main__":
    try:
        main(sys.argv[1] if len(sys.argv) > 1 else None)
    except KeyboardInterrupt:
        pass
    except Exception as exc:
        _show_fatal_error(exc)
        sys.exit(1)
