# tests/test_routes.py
"""Route matching and the authentication gate."""

import pytest

from pinboard.ui.routes import (
    ROUTE_CREATE,
    ROUTE_FINISH_PROFILE,
    ROUTE_HOME,
    ROUTE_LOGIN,
    ROUTE_PIN,
    ROUTE_PROFILE,
    ROUTE_SETTINGS,
    RouteRegistry,
    normalize_path,
    pin_path,
)


def _view(parent, context):
    return None


@pytest.fixture
def registry(logger):
    reg = RouteRegistry(logger=logger)
    reg.register("login", ROUTE_LOGIN, "Log In", None, login=True)
    reg.register("feed", ROUTE_HOME, "Home", _view, icon="home", in_sidebar=True, cache=True, default=True)
    reg.register("create", ROUTE_CREATE, "Create", _view, icon="create", in_sidebar=True)
    reg.register("profile", ROUTE_PROFILE, "Profile", _view, in_sidebar=True)
    reg.register("settings", ROUTE_SETTINGS, "Settings", _view, in_sidebar=True)
    reg.register("finish_profile", ROUTE_FINISH_PROFILE, "Finish Profile", _view)
    reg.register("pin", ROUTE_PIN, "Pin", _view)
    return reg


@pytest.mark.parametrize(
    "raw, expected",
    [("", "/"), (None, "/"), ("/", "/"), ("pin/3/", "/pin/3"), ("/create?x=1", "/create"), ("//a//b#top", "/a/b")],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_pin_path():
    assert pin_path(42) == "/pin/42"


def test_match_captures_params(registry):
    entry, params = registry.match("/pin/abc-123")
    assert entry.route_id == "pin"
    assert params == {"id": "abc-123"}


def test_match_is_exact_on_segment_count(registry):
    assert registry.match("/pin") is None
    assert registry.match("/pin/1/extra") is None


def test_sidebar_entries_in_registration_order(registry):
    assert [e.route_id for e in registry.sidebar_entries()] == ["feed", "create", "profile", "settings"]


def test_get_unknown_route_raises(registry):
    with pytest.raises(KeyError):
        registry.get("nope")


def test_login_route_is_public(registry):
    assert registry.get("login").public
    assert not registry.get("feed").public


@pytest.mark.parametrize("path", ["/", "/create", "/profile", "/settings", "/finish-profile", "/pin/9"])
def test_protected_routes_send_guests_to_login(registry, path):
    assert registry.resolve_target(path, authenticated=False) == ROUTE_LOGIN


def test_guests_may_open_login(registry):
    assert registry.resolve_target("/login", authenticated=False) == ROUTE_LOGIN


def test_signed_in_user_is_sent_away_from_login(registry):
    assert registry.resolve_target("/login", authenticated=True) == ROUTE_HOME


def test_signed_in_user_reaches_protected_route(registry):
    assert registry.resolve_target("/pin/9/", authenticated=True) == "/pin/9"


def test_unknown_route_redirects_by_auth_state(registry):
    assert registry.resolve_target("/nowhere", authenticated=True) == ROUTE_HOME
    assert registry.resolve_target("/nowhere", authenticated=False) == ROUTE_LOGIN


def test_re_registering_overwrites(registry):
    registry.register("create", "/new", "New", _view)
    assert registry.get("create").pattern == "/new"
