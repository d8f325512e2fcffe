"""
Pin Actions.

Opens the pin modal for any view that shows pins and runs the delete
flow behind it: ``PinService.delete_pin`` on a worker thread, result
marshalled back with ``after(0, ...)``, the shared feed updated locally
and failures escalated in an error dialog.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional

import customtkinter as ctk

from pinboard.auth import SessionManager
from pinboard.logger import StructuredLogger
from pinboard.models.feed import FeedItem
from pinboard.models.service_models import ServiceResult
from pinboard.services.pin_service import PinService
from pinboard.ui.components.dialogs import show_error_dialog
from pinboard.ui.components.image_source import AsyncImageSource
from pinboard.ui.components.pin_modal import PinModal
from pinboard.ui.feed_state import FeedState
from pinboard.ui.icons import IconSet
from pinboard.ui.scroll_lock import ScrollLock


class PinActions:
    """Modal + delete wiring shared by the feed, profile and pin views.

    Parameters
    ----------
    session:
        Current user (owner check).
    pin_service:
        Delete operation.
    feed_state:
        Shared feed updated after a successful delete.
    images:
        Shared async image source.
    icons:
        Icon set.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        session: SessionManager,
        pin_service: PinService,
        feed_state: FeedState,
        images: AsyncImageSource,
        icons: IconSet,
        logger: StructuredLogger,
    ) -> None:
        self._session = session
        self._pin_service = pin_service
        self._feed_state = feed_state
        self._images = images
        self._icons = icons
        self._logger = logger

    def open(
        self,
        master: ctk.CTkBaseClass,
        item: FeedItem,
        scroll_lock: ScrollLock,
        on_deleted: Optional[Callable[[str], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> PinModal:
        """Show *item* in a modal above *master*'s window."""

        def _delete(target: FeedItem, done: Callable[[Optional[str]], None]) -> None:
            self._delete(master, target, done, on_deleted)

        modal = PinModal(
            master,
            item=item,
            images=self._images,
            icons=self._icons,
            scroll_lock=scroll_lock,
            current_user_id=self._session.user_id,
            on_delete=_delete,
            on_close=on_close,
        )
        modal.open()
        return modal

    def _delete(
        self,
        master: ctk.CTkBaseClass,
        item: FeedItem,
        done: Callable[[Optional[str]], None],
        on_deleted: Optional[Callable[[str], None]],
    ) -> None:
        pin_service = self._pin_service

        def _worker() -> None:
            result = pin_service.delete_pin(item)
            try:
                master.after(0, _apply, result)
            except RuntimeError:
                # Window closed while the delete was running.
                return

        def _apply(result: ServiceResult[str]) -> None:
            if result.success:
                self._feed_state.remove(item.id)
                if on_deleted is not None:
                    on_deleted(item.id)
                done(None)
                return
            message = result.error or "Failed to delete pin."
            done(message)
            show_error_dialog(master, "Delete Failed", message, self._logger)

        threading.Thread(target=_worker, name="delete-pin", daemon=True).start()
