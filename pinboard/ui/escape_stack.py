"""Escape Key Routing.

Stacked overlays share one ``<Escape>`` binding per window.  Each open
overlay pushes its close handler; the key closes only the most recently
opened one, and removing a handler never touches the others.  The window
binding is installed once and never unbound.
"""

from __future__ import annotations

import weakref
from typing import Any, Callable, Protocol


class Bindable(Protocol):
    def bind(self, sequence: str, func: Callable[[Any], object], add: str) -> str:
        ...


class EscapeStack:
    """Close handlers of the open overlays, topmost last."""

    _by_window: "weakref.WeakKeyDictionary[Any, EscapeStack]" = weakref.WeakKeyDictionary()

    def __init__(self) -> None:
        self._handlers: list[Callable[[], None]] = []

    @classmethod
    def for_window(cls, window: Bindable) -> "EscapeStack":
        """The stack of *window*, binding ``<Escape>`` on first use."""
        stack = cls._by_window.get(window)
        if stack is None:
            stack = cls()
            window.bind("<Escape>", stack.dispatch, add="+")
            cls._by_window[window] = stack
        return stack

    def __len__(self) -> int:
        return len(self._handlers)

    def push(self, handler: Callable[[], None]) -> Callable[[], None]:
        """Register *handler* as topmost; returns an idempotent remover."""
        self._handlers.append(handler)
        removed = False

        def remove() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            for index in range(len(self._handlers) - 1, -1, -1):
                if self._handlers[index] is handler:
                    del self._handlers[index]
                    return

        return remove

    def dispatch(self, _event: object = None) -> bool:
        """Run the topmost handler.  ``False`` when nothing is open."""
        if not self._handlers:
            return False
        self._handlers[-1]()
        return True
