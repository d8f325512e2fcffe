"""Pin View: route ``/pin/{id}``.

Standalone entry point for a single pin (deep link).  Loads the pin,
shows it in the pin modal and returns to ``/`` when the modal closes.
An unknown id shows a message and redirects after a short delay.
"""

from __future__ import annotations

import threading
from typing import Optional

import customtkinter as ctk

from pinboard.logger import StructuredLogger
from pinboard.models.feed import FeedItem
from pinboard.models.service_models import ServiceResult
from pinboard.services.feed_service import FeedService
from pinboard.ui.components.dialogs import ErrorPanel
from pinboard.ui.components.pin_modal import PinModal
from pinboard.ui.routes import ROUTE_HOME, RouteContext
from pinboard.ui.theme import CONTENT_BG, FONT_BODY, TEXT_SECONDARY
from pinboard.ui.views.pin_actions import PinActions
from pinboard.utils.cancellation import CancellationToken, TokenSource

_NOT_FOUND_REDIRECT_MS: int = 3000


class PinView(ctk.CTkFrame):
    """Single-pin page.

    Parameters
    ----------
    parent:
        Content container provided by the shell.
    context:
        Route context; ``params["id"]`` is the pin id.
    feed_service:
        Single-pin loading.
    pin_actions:
        Pin modal and delete flow.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        context: RouteContext,
        feed_service: FeedService,
        pin_actions: PinActions,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG, corner_radius=0)
        self._context = context
        self._feed_service = feed_service
        self._pin_actions = pin_actions
        self._logger = logger
        self._pin_id: str = context.params.get("id", "")
        self._tokens = TokenSource("pin")
        self._modal: Optional[PinModal] = None
        self._redirect_job: Optional[str] = None
        self._error_panel: Optional[ErrorPanel] = None

        self._status_label = ctk.CTkLabel(
            self, text="Loading pin...", font=FONT_BODY, text_color=TEXT_SECONDARY,
        )
        self._status_label.place(relx=0.5, rely=0.4, anchor="center")

        self._load()

    def _load(self) -> None:
        token = self._tokens.next()
        service = self._feed_service
        pin_id = self._pin_id

        def _worker() -> None:
            result = service.load_pin(pin_id, token)
            self.after(0, self._on_loaded, token, result)

        threading.Thread(target=_worker, name="pin-load", daemon=True).start()

    def _on_loaded(
        self, token: CancellationToken, result: ServiceResult[Optional[FeedItem]],
    ) -> None:
        if token.cancelled or not self.winfo_exists():
            return

        if not result.success:
            self._status_label.place_forget()
            self._error_panel = ErrorPanel(
                self, "Pin Unavailable", result.error or "Failed to load pin.",
                on_retry=self._retry,
            )
            self._error_panel.pack(fill="both", expand=True)
            return

        if result.data is None:
            self._status_label.configure(text="Pin not found. Returning to the feed...")
            self._redirect_job = self.after(_NOT_FOUND_REDIRECT_MS, self._go_home)
            return

        self._status_label.place_forget()
        self._modal = self._pin_actions.open(
            self, result.data, self._context.scroll_lock, on_close=self._on_modal_closed,
        )

    def _retry(self) -> None:
        if self._error_panel is not None:
            self._error_panel.destroy()
            self._error_panel = None
        self._status_label.configure(text="Loading pin...")
        self._status_label.place(relx=0.5, rely=0.4, anchor="center")
        self._load()

    def _on_modal_closed(self) -> None:
        self._modal = None
        self._go_home()

    def _go_home(self) -> None:
        self._redirect_job = None
        if self.winfo_exists():
            self._context.navigate(ROUTE_HOME)

    def destroy(self) -> None:
        """Cancel the load, the redirect timer and close a still-open modal."""
        self._tokens.cancel()
        if self._redirect_job is not None:
            try:
                self.after_cancel(self._redirect_job)
            except ValueError:
                pass
            self._redirect_job = None
        if self._modal is not None:
            modal, self._modal = self._modal, None
            modal.destroy()
        super().destroy()
