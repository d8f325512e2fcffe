"""
Async Image Source.

Runs ``ImageLoader.load`` on a small worker pool and hands the finished
``CTkImage`` back on the Tk thread.  One instance is shared by every
view; the shell shuts it down on close.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

import customtkinter as ctk
from PIL import Image

from pinboard.logger import StructuredLogger
from pinboard.services.image_loader import ImageLoader

ImageCallback = Callable[[ctk.CTkImage], None]

_MAX_WORKERS: int = 4


class AsyncImageSource:
    """Background fetch, foreground ``CTkImage`` construction.

    Parameters
    ----------
    loader:
        Fetch-and-decode service; ``None`` disables all image loading.
    logger:
        Structured logger.
    """

    def __init__(self, loader: Optional[ImageLoader], logger: StructuredLogger) -> None:
        self._loader = loader
        self._logger = logger
        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=_MAX_WORKERS, thread_name_prefix="image")
            if loader is not None
            else None
        )

    def request(
        self,
        widget: ctk.CTkBaseClass,
        url: Optional[str],
        width: int,
        height: Optional[int],
        on_loaded: ImageCallback,
    ) -> None:
        """Load *url* at the given size; *on_loaded* runs on the Tk thread.

        Nothing is delivered when the load fails or *widget* was
        destroyed in the meantime.
        """
        if self._executor is None or self._loader is None or not url:
            return
        try:
            future = self._executor.submit(self._loader.load, url, width, height)
        except RuntimeError:
            # Pool already shut down (window closing).
            return

        def _done(fut: Future[Optional[Image.Image]]) -> None:
            if fut.cancelled() or fut.exception() is not None:
                return
            image = fut.result()
            if image is None:
                return
            try:
                widget.after(0, self._deliver, widget, image, on_loaded)
            except RuntimeError:
                # Tk interpreter is gone.
                return

        future.add_done_callback(_done)

    @staticmethod
    def _deliver(
        widget: ctk.CTkBaseClass, image: Image.Image, on_loaded: ImageCallback,
    ) -> None:
        if not widget.winfo_exists():
            return
        on_loaded(ctk.CTkImage(light_image=image, dark_image=image, size=image.size))

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        if self._loader is not None:
            self._loader.close()
