"""Scroll Lock.

While a modal is open the page underneath must not scroll.  A modal
acquires a ``ScrollLease`` when it opens and releases it on every close
path, including widget destruction.  Leases are counted so stacked
modals keep the page locked until the last one closes.
"""

from __future__ import annotations

import threading
from typing import Optional, Protocol


class ScrollTarget(Protocol):
    """Anything whose scrolling can be switched off (e.g. the masonry grid)."""

    def set_scroll_enabled(self, enabled: bool) -> None:
        ...


class ScrollLease:
    """Handle for one acquisition.  ``release`` is idempotent."""

    __slots__ = ("_lock", "_released")

    def __init__(self, lock: "ScrollLock") -> None:
        self._lock = lock
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._lock._release()

    def __enter__(self) -> "ScrollLease":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


class ScrollLock:
    """Reference-counted scroll lock over an optional target.

    The target can be swapped with ``attach``; the current lock state is
    applied to the new target immediately.
    """

    def __init__(self, target: Optional[ScrollTarget] = None) -> None:
        self._mutex = threading.Lock()
        self._target: Optional[ScrollTarget] = target
        self._count: int = 0

    @property
    def locked(self) -> bool:
        with self._mutex:
            return self._count > 0

    @property
    def holders(self) -> int:
        with self._mutex:
            return self._count

    def attach(self, target: Optional[ScrollTarget]) -> None:
        with self._mutex:
            previous, self._target = self._target, target
            locked = self._count > 0
        if previous is not None and previous is not target and locked:
            previous.set_scroll_enabled(True)
        if target is not None:
            target.set_scroll_enabled(not locked)

    def acquire(self) -> ScrollLease:
        with self._mutex:
            self._count += 1
            first = self._count == 1
            target = self._target
        if first and target is not None:
            target.set_scroll_enabled(False)
        return ScrollLease(self)

    def _release(self) -> None:
        with self._mutex:
            if self._count == 0:
                return
            self._count -= 1
            last = self._count == 0
            target = self._target
        if last and target is not None:
            target.set_scroll_enabled(True)
