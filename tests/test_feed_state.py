# tests/test_feed_state.py
"""Shared feed list and its listeners."""

from pinboard.models.image import ImageRecord
from pinboard.services.feed_assembler import build_feed_item
from pinboard.ui.feed_state import FeedState


def _item(pin_id):
    record = ImageRecord(id=pin_id, storage_path=f"{pin_id}.jpg", title=f"Pin {pin_id}")
    return build_feed_item(record, f"https://x/{pin_id}.jpg", None, None)


def test_publish_marks_loaded_and_notifies():
    state = FeedState()
    seen = []
    state.subscribe(lambda items: seen.append([i.id for i in items]))

    state.publish([_item("1"), _item("2")])

    assert state.loaded
    assert [i.id for i in state.items] == ["1", "2"]
    assert seen == [["1", "2"]]


def test_prepend_and_remove():
    state = FeedState()
    state.publish([_item("1"), _item("2")])

    state.prepend(_item("3"))
    state.remove("1")

    assert [i.id for i in state.items] == ["3", "2"]


def test_items_is_a_copy():
    state = FeedState()
    state.publish([_item("1")])
    state.items.clear()
    assert len(state.items) == 1


def test_unsubscribe_stops_notifications():
    state = FeedState()
    seen = []
    unsubscribe = state.subscribe(seen.append)
    unsubscribe()
    state.publish([_item("1")])
    assert seen == []


def test_clear_resets_loaded_without_notifying():
    state = FeedState()
    seen = []
    state.publish([_item("1")])
    state.subscribe(seen.append)

    state.clear()

    assert not state.loaded
    assert state.items == []
    assert seen == []
