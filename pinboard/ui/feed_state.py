"""Shared feed list.

The home feed is loaded once per visit and afterwards changed only by
local surgery: a created pin is prepended, a deleted pin is removed.
``FeedState`` holds that list so the create view, the profile view and
pin modals can update what the feed view renders without a refetch.

Listeners are called on whatever thread mutated the state; widgets must
marshal back to Tk with ``after(0, ...)``.
"""

from __future__ import annotations

import threading
from typing import Callable, Sequence

from pinboard.models.feed import FeedItem
from pinboard.services.feed_assembler import prepend_to_feed, remove_from_feed

FeedListener = Callable[[list[FeedItem]], None]


class FeedState:
    """Thread-safe holder of the currently published feed."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: list[FeedItem] = []
        self._loaded: bool = False
        self._listeners: list[FeedListener] = []

    @property
    def items(self) -> list[FeedItem]:
        with self._lock:
            return list(self._items)

    @property
    def loaded(self) -> bool:
        with self._lock:
            return self._loaded

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def publish(self, items: Sequence[FeedItem]) -> None:
        """Replace the whole list (result of a fetch)."""
        self._apply(lambda _: list(items), mark_loaded=True)

    def prepend(self, item: FeedItem) -> None:
        self._apply(lambda current: prepend_to_feed(current, item))

    def remove(self, pin_id: str) -> None:
        self._apply(lambda current: remove_from_feed(current, pin_id))

    def clear(self) -> None:
        with self._lock:
            self._items = []
            self._loaded = False

    def _apply(
        self,
        change: Callable[[list[FeedItem]], list[FeedItem]],
        mark_loaded: bool = False,
    ) -> None:
        with self._lock:
            self._items = change(self._items)
            if mark_loaded:
                self._loaded = True
            snapshot = list(self._items)
            listeners = list(self._listeners)
        for listener in listeners:
            listener(snapshot)
