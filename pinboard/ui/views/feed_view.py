"""Feed View: home route ``/``.

Masonry grid of every pin, newest first, with a search box filtering
the loaded list by title or description.  The list is fetched when the
view is first built, through ``FeedService.load_feed``; afterwards it
changes only by local insertion (a created pin) or removal (a deleted
pin) via the shared ``FeedState``.

**Thin UI Rule**: fetching, joining and filtering live in the service
layer (``FeedService`` and ``search_feed``).
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import customtkinter as ctk

from pinboard.logger import StructuredLogger
from pinboard.models.enums import ErrorKind
from pinboard.models.feed import FeedItem
from pinboard.models.service_models import ServiceResult
from pinboard.services.feed_assembler import search_feed
from pinboard.services.feed_service import FeedService
from pinboard.ui.components.dialogs import ErrorPanel
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.components.masonry_grid import MasonryGrid
from pinboard.ui.feed_state import FeedState
from pinboard.ui.icons import IconSet
from pinboard.ui.routes import RouteContext
from pinboard.ui.theme import (
    CONTENT_BG,
    FONT_BODY,
    INPUT_BORDER,
    NEUTRAL_BUTTON,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from pinboard.ui.views.pin_actions import PinActions
from pinboard.utils.cancellation import CancellationToken, TokenSource

_SEARCH_DEBOUNCE_MS: int = 200


class FeedView(ctk.CTkFrame):
    """Home feed.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    context:
        Route context (navigation, scroll lock).
    feed_service:
        Feed loading.
    feed_state:
        Shared, locally mutated feed list.
    pin_actions:
        Pin modal and delete flow.
    images:
        Shared async image source.
    icons:
        Icon set.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        context: RouteContext,
        feed_service: FeedService,
        feed_state: FeedState,
        pin_actions: PinActions,
        images: AsyncImageSource,
        icons: IconSet,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, corner_radius=0)
        self._context = context
        self._feed_service = feed_service
        self._feed_state = feed_state
        self._pin_actions = pin_actions
        self._logger = logger
        self._tokens = TokenSource("feed")
        self._pending_jobs: list[str] = []
        self._search_job: Optional[str] = None
        self._error_panel: Optional[ErrorPanel] = None

        self._build_ui(images, icons)
        self._unsubscribe = feed_state.subscribe(self._on_state_changed)
        self._context.scroll_lock.attach(self._grid)

        if feed_state.loaded:
            self._apply_filter()
        else:
            self.reload()

    # ------------------------------------------------------------------
    # Widget construction
    # ------------------------------------------------------------------

    def _build_ui(self, images: AsyncImageSource, icons: IconSet) -> None:
        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_LG, pady=(PADDING_MD, PADDING_SM))

        self._search_var = ctk.StringVar()
        self._search_entry = ctk.CTkEntry(
            header,
            textvariable=self._search_var,
            placeholder_text=icons.label("search", "Search"),
            height=44,
            corner_radius=22,
            font=FONT_BODY,
            fg_color=NEUTRAL_BUTTON,
            border_color=INPUT_BORDER,
            border_width=0,
            text_color=TEXT_PRIMARY,
        )
        self._search_entry.pack(fill="x")
        self._search_var.trace_add("write", self._on_search_changed)

        self._status_label = ctk.CTkLabel(
            self, text="", font=FONT_BODY, text_color=TEXT_SECONDARY,
        )
        self._status_label.pack(fill="x")

        self._grid = MasonryGrid(
            self,
            images=images,
            icons=icons,
            on_open=self._open_pin,
            empty_text="No pins found.",
        )
        self._grid.pack(fill="both", expand=True, padx=PADDING_SM)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reload(self) -> None:
        """Fetch the feed in the background; supersedes any running load."""
        self._clear_error()
        self._status_label.configure(text="Loading pins...")
        token = self._tokens.next()
        service = self._feed_service

        def _worker() -> None:
            result = service.load_feed(token)
            self._post(self._on_loaded, token, result)

        threading.Thread(target=_worker, name="feed-load", daemon=True).start()

    def _on_loaded(
        self, token: CancellationToken, result: ServiceResult[list[FeedItem]],
    ) -> None:
        if token.cancelled or not self.winfo_exists():
            return
        self._status_label.configure(text="")
        if not result.success:
            if result.error_kind == ErrorKind.CANCELLED:
                return
            self._show_error(result.error or "Could not load pins.")
            return
        self._feed_state.publish(result.data or [])

    def _on_state_changed(self, _items: list[FeedItem]) -> None:
        # May run on a worker thread.
        self._post(self._apply_filter)

    def _apply_filter(self) -> None:
        if not self.winfo_exists():
            return
        self._grid.set_items(search_feed(self._feed_state.items, self._search_var.get()))

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def _on_search_changed(self, *_args: object) -> None:
        if self._search_job is not None:
            self.after_cancel(self._search_job)
        self._search_job = self.after(_SEARCH_DEBOUNCE_MS, self._run_search)

    def _run_search(self) -> None:
        self._search_job = None
        self._apply_filter()

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _show_error(self, message: str) -> None:
        self._clear_error()
        self._grid.pack_forget()
        self._error_panel = ErrorPanel(
            self, "Something went wrong", message, on_retry=self._retry,
        )
        self._error_panel.pack(fill="both", expand=True)

    def _clear_error(self) -> None:
        if self._error_panel is not None:
            self._error_panel.destroy()
            self._error_panel = None
            self._grid.pack(fill="both", expand=True, padx=PADDING_SM)

    def _retry(self) -> None:
        self.reload()

    # ------------------------------------------------------------------
    # Pins
    # ------------------------------------------------------------------

    def _open_pin(self, item: FeedItem) -> None:
        self._pin_actions.open(self, item, self._context.scroll_lock)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_show(self) -> None:
        """Called by the shell when a cached instance becomes visible again."""
        self._context.scroll_lock.attach(self._grid)

    def _post(self, callback: Callable[..., None], *args: object) -> None:
        try:
            job = self.after(0, callback, *args)
        except RuntimeError:
            return
        self._pending_jobs.append(job)

    def destroy(self) -> None:
        """Cancel the running load, pending jobs and the state subscription."""
        self._tokens.cancel()
        self._unsubscribe()
        for job in [*self._pending_jobs, self._search_job]:
            if job is None:
                continue
            try:
                self.after_cancel(job)
            except ValueError:
                pass
        self._pending_jobs.clear()
        super().destroy()
