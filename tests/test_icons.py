# tests/test_icons.py
"""Icon lookup with the blank fallback."""

from pinboard.ui.icons import IconSet


def test_default_set_has_navigation_icons():
    icons = IconSet.default()
    for name in ("home", "create", "profile", "settings", "logout", "close"):
        assert name in icons
        assert icons.get(name)


def test_unknown_icon_is_blank():
    assert IconSet.default().get("rocket") == ""


def test_label_with_and_without_glyph():
    icons = IconSet({"home": "H"})
    assert icons.label("home", "Home") == "H  Home"
    assert IconSet.blank().label("home", "Home") == "Home"


def test_glyphs_are_copied():
    glyphs = {"home": "H"}
    icons = IconSet(glyphs)
    glyphs["home"] = "X"
    assert icons.get("home") == "H"
