# tests/test_feed_assembler.py
"""Joining image rows with owners, search, and local list surgery."""

from pinboard.models.feed import DEFAULT_USERNAME
from pinboard.models.image import ImageRecord
from pinboard.models.profile import ProfileRecord
from pinboard.models.user import UserRecord
from pinboard.services.feed_assembler import (
    DEFAULT_ALT,
    DEFAULT_TITLE,
    assemble_feed,
    build_feed_item,
    prepend_to_feed,
    remove_from_feed,
    search_feed,
)
from pinboard.utils.layout import height_for


def _image(image_id, user_id="u1", title="Sunset", description="", path=None):
    return ImageRecord(
        id=image_id,
        user_id=user_id,
        storage_path=path if path is not None else f"{image_id}.jpg",
        title=title,
        description=description,
    )


def _resolve(path):
    return f"https://cdn.example/{path}" if path else None


def _item(image_id, title="Sunset", description=""):
    return build_feed_item(
        _image(image_id, title=title, description=description),
        f"https://cdn.example/{image_id}.jpg",
        None,
        None,
    )


def test_assemble_joins_owner_and_profile():
    images = [_image("1", "u1"), _image("2", "u2")]
    users = {"u1": UserRecord(id="u1", username="ana")}
    profiles = {"u1": ProfileRecord(user_id="u1", avatar_url="https://a/ana.png")}

    items = assemble_feed(images, users, profiles, resolver=_resolve)

    assert [i.id for i in items] == ["1", "2"]
    assert items[0].username == "ana"
    assert items[0].profile_image == "https://a/ana.png"
    assert items[0].src == "https://cdn.example/1.jpg"
    assert items[1].username == DEFAULT_USERNAME
    assert items[1].profile_image is None


def test_assemble_uses_names_when_username_missing():
    users = {"u1": UserRecord(id="u1", first_name="Ana", last_name="Lima")}
    items = assemble_feed([_image("1")], users, {}, resolver=_resolve)
    assert items[0].username == "Ana Lima"


def test_assemble_drops_unresolvable_items():
    images = [_image("1"), _image("2", path=""), _image("3")]
    items = assemble_feed(
        images, {}, {}, resolver=lambda p: None if p == "3.jpg" else _resolve(p),
    )
    assert [i.id for i in items] == ["1"]


def test_assemble_heights_are_deterministic():
    items = assemble_feed([_image("abc")], {}, {}, resolver=_resolve)
    assert items[0].height == height_for("abc")


def test_avatar_fn_applied_to_profile_avatar():
    profiles = {"u1": ProfileRecord(user_id="u1", avatar_url="avatars/u1.png")}
    items = assemble_feed(
        [_image("1")], {}, profiles, resolver=_resolve,
        avatar_fn=lambda ref: f"https://cdn.example/{ref}",
    )
    assert items[0].profile_image == "https://cdn.example/avatars/u1.png"


def test_defaults_for_untitled_pin():
    item = build_feed_item(_image("9", title=None), "https://x/9.jpg", None, None)
    assert item.title == DEFAULT_TITLE
    assert item.alt == DEFAULT_ALT
    assert item.description == ""


def test_custom_default_username():
    item = build_feed_item(
        _image("9"), "https://x/9.jpg", None, None, default_username="User not found",
    )
    assert item.username == "User not found"


def test_search_matches_title_or_description_case_insensitively():
    items = [
        _item("1", title="Mountain Lake"),
        _item("2", title="City", description="Night LAKE view"),
        _item("3", title="Desert"),
    ]
    assert [i.id for i in search_feed(items, "lake")] == ["1", "2"]
    assert [i.id for i in search_feed(items, "  DESERT ")] == ["3"]
    assert search_feed(items, "ocean") == []


def test_blank_search_returns_everything():
    items = [_item("1"), _item("2")]
    assert search_feed(items, "") == items
    assert search_feed(items, "   ") == items
    assert search_feed(items, None) == items


def test_remove_from_feed():
    items = [_item("1"), _item("2"), _item("3")]
    assert [i.id for i in remove_from_feed(items, "2")] == ["1", "3"]
    assert [i.id for i in remove_from_feed(items, "missing")] == ["1", "2", "3"]


def test_prepend_puts_item_first_without_duplicates():
    items = [_item("1"), _item("2")]
    assert [i.id for i in prepend_to_feed(items, _item("3"))] == ["3", "1", "2"]
    assert [i.id for i in prepend_to_feed(items, _item("2"))] == ["2", "1"]
