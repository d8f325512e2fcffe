"""
Cancellation Tokens.

Every asynchronous load started by a view gets a ``CancellationToken``
tied to that view's lifetime.  The view cancels it on destroy (or when a
newer load supersedes it) and results carrying a cancelled token are
discarded instead of being applied to a dead widget.
"""

from __future__ import annotations

import threading


class OperationCancelled(Exception):
    """Raised inside a worker when its token was cancelled mid-flight."""


class CancellationToken:
    """Thread-safe one-way cancellation flag."""

    __slots__ = ("_event", "_label")

    def __init__(self, label: str = "") -> None:
        self._event = threading.Event()
        self._label = label

    @property
    def label(self) -> str:
        return self._label

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled(self._label or "operation cancelled")


class TokenSource:
    """Hands out tokens for successive loads of one view.

    Starting a new load cancels the previous token, so only the most
    recent load may publish its result.
    """

    def __init__(self, label: str = "") -> None:
        self._lock = threading.Lock()
        self._label = label
        self._current: CancellationToken = CancellationToken(label)
        self._current.cancel()

    def next(self) -> CancellationToken:
        with self._lock:
            self._current.cancel()
            self._current = CancellationToken(self._label)
            return self._current

    def cancel(self) -> None:
        with self._lock:
            self._current.cancel()
