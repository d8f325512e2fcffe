"""Route Registry.

Central registry for every screen of the application.  The shell queries
this registry to populate the sidebar, to match a path such as
``/pin/42`` to a view factory, and to apply the authentication gate
before anything is rendered.

Adding a screen = one ``register()`` call + one view class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Optional

from pinboard.logger import StructuredLogger

if TYPE_CHECKING:
    import customtkinter as ctk

    from pinboard.ui.scroll_lock import ScrollLock

ROUTE_HOME: str = "/"
ROUTE_LOGIN: str = "/login"
ROUTE_CREATE: str = "/create"
ROUTE_PROFILE: str = "/profile"
ROUTE_FINISH_PROFILE: str = "/finish-profile"
ROUTE_SETTINGS: str = "/settings"
ROUTE_PIN: str = "/pin/{id}"


def normalize_path(path: Optional[str]) -> str:
    """``'pin/3/'`` -> ``'/pin/3'``; blank -> ``'/'``.  Query strings are dropped."""
    raw = (path or "").strip().split("?", 1)[0].split("#", 1)[0]
    parts = [p for p in raw.split("/") if p]
    return "/" + "/".join(parts)


def pin_path(pin_id: object) -> str:
    return ROUTE_PIN.replace("{id}", str(pin_id))


class RouteContext:
    """What a view factory receives besides its parent frame.

    Attributes
    ----------
    navigate:
        ``navigate(path)``; always goes through the auth gate.
    params:
        Placeholder values captured from the path (``{"id": "42"}``).
    scroll_lock:
        Shared lock acquired by modals while open.
    """

    __slots__ = ("navigate", "params", "scroll_lock")

    def __init__(
        self,
        navigate: Callable[[str], None],
        params: dict[str, str],
        scroll_lock: "ScrollLock",
    ) -> None:
        self.navigate = navigate
        self.params = params
        self.scroll_lock = scroll_lock


ViewFactory = Callable[["ctk.CTkFrame", RouteContext], "ctk.CTkFrame"]


class RouteEntry:
    """Metadata for a single registered route.

    Attributes
    ----------
    route_id:
        Unique identifier (e.g. ``'feed'``).
    pattern:
        Path pattern; ``{name}`` segments capture one path segment.
    display_name:
        Label shown in the sidebar.
    icon:
        Icon name looked up in the injected ``IconSet``.
    factory:
        ``(parent, context) -> CTkFrame``; called lazily on activation.
    public:
        Reachable without a session.
    in_sidebar:
        Listed in the sidebar navigation.
    cache:
        Keep the frame alive when navigating away.
    """

    __slots__ = (
        "route_id",
        "pattern",
        "display_name",
        "icon",
        "factory",
        "public",
        "in_sidebar",
        "cache",
        "_segments",
    )

    def __init__(
        self,
        route_id: str,
        pattern: str,
        display_name: str,
        icon: str,
        factory: Optional[ViewFactory],
        public: bool,
        in_sidebar: bool,
        cache: bool,
    ) -> None:
        self.route_id = route_id
        self.pattern = normalize_path(pattern)
        self.display_name = display_name
        self.icon = icon
        self.factory = factory
        self.public = public
        self.in_sidebar = in_sidebar
        self.cache = cache
        self._segments: tuple[str, ...] = tuple(p for p in self.pattern.split("/") if p)

    def match(self, path: str) -> Optional[dict[str, str]]:
        """Captured params when *path* fits this pattern, else ``None``."""
        segments = [p for p in normalize_path(path).split("/") if p]
        if len(segments) != len(self._segments):
            return None
        params: dict[str, str] = {}
        for expected, actual in zip(self._segments, segments):
            if expected.startswith("{") and expected.endswith("}"):
                params[expected[1:-1]] = actual
            elif expected != actual:
                return None
        return params


class RouteRegistry:
    """Manages the collection of registered routes.

    The application entry-point creates a ``RouteRegistry``, registers
    every screen, and passes it to the ``AppShell``.

    Parameters
    ----------
    logger:
        Structured logger for registration and redirect events.
    """

    def __init__(self, logger: StructuredLogger) -> None:
        self._entries: dict[str, RouteEntry] = {}
        self._logger = logger
        self._default_path: str = ROUTE_HOME
        self._login_path: str = ROUTE_LOGIN

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        route_id: str,
        pattern: str,
        display_name: str,
        factory: Optional[ViewFactory],
        *,
        icon: str = "",
        public: bool = False,
        in_sidebar: bool = False,
        cache: bool = False,
        default: bool = False,
        login: bool = False,
    ) -> None:
        """Register a screen.

        Parameters
        ----------
        route_id:
            Unique identifier for the route.
        pattern:
            Path pattern such as ``'/pin/{id}'``.
        display_name:
            Label shown in the sidebar.
        factory:
            ``(parent, context) -> CTkFrame``.  ``None`` for screens the
            shell builds itself (the login screen).
        icon:
            Icon name for the sidebar entry.
        public:
            Reachable without a session.
        in_sidebar:
            Show in the sidebar.
        cache:
            Keep the frame when navigating away.
        default:
            Landing route for authenticated users.
        login:
            Landing route for unauthenticated users.
        """
        if route_id in self._entries:
            self._logger.warning("Route '%s' already registered; overwriting.", route_id)
        entry = RouteEntry(
            route_id=route_id,
            pattern=pattern,
            display_name=display_name,
            icon=icon,
            factory=factory,
            public=public or login,
            in_sidebar=in_sidebar,
            cache=cache,
        )
        self._entries[route_id] = entry
        if default:
            self._default_path = entry.pattern
        if login:
            self._login_path = entry.pattern
        self._logger.info("Route registered: %s (%s)", route_id, entry.pattern)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, route_id: str) -> RouteEntry:
        """Return a route entry by ID.

        Raises
        ------
        KeyError
            If *route_id* is not registered.
        """
        if route_id not in self._entries:
            raise KeyError(f"Route '{route_id}' is not registered.")
        return self._entries[route_id]

    def sidebar_entries(self) -> list[RouteEntry]:
        """Sidebar routes in registration order."""
        return [e for e in self._entries.values() if e.in_sidebar]

    def match(self, path: str) -> Optional[tuple[RouteEntry, dict[str, str]]]:
        """First registered route matching *path*, with its captured params."""
        for entry in self._entries.values():
            params = entry.match(path)
            if params is not None:
                return entry, params
        return None

    @property
    def default_path(self) -> str:
        return self._default_path

    @property
    def login_path(self) -> str:
        return self._login_path

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------

    def resolve_target(self, path: str, authenticated: bool) -> str:
        """Where a request for *path* actually lands.

        - unknown path: the landing route for the current auth state
        - protected route without a session: the login route
        - the login route with a session: the default route
        """
        normalized = normalize_path(path)
        matched = self.match(normalized)
        if matched is None:
            target = self._default_path if authenticated else self._login_path
            self._logger.warning("Unknown route %s, redirecting to %s", normalized, target)
            return target

        entry, _ = matched
        if not authenticated and not entry.public:
            return self._login_path
        if authenticated and normalized == self._login_path:
            return self._default_path
        return normalized
