"""
Image Loader.

Downloads public image URLs with ``httpx`` and decodes them with Pillow.
Runs on worker threads only; the UI wraps the returned ``PIL.Image`` in
a ``CTkImage`` on the Tk thread.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from io import BytesIO
from typing import Optional

import httpx
from PIL import Image, ImageOps, UnidentifiedImageError

from pinboard.config import AppConfig
from pinboard.logger import StructuredLogger
from pinboard.services.base_service import BaseService

_CACHE_SIZE: int = 128


class ImageLoader(BaseService):
    """Fetch-and-decode with a small in-memory LRU of decoded images."""

    def __init__(
        self,
        config: AppConfig,
        logger: StructuredLogger,
        client: Optional[httpx.Client] = None,
    ) -> None:
        super().__init__(logger)
        self._client = client or httpx.Client(
            timeout=config.IMAGE_FETCH_TIMEOUT_S,
            follow_redirects=True,
        )
        self._cache: OrderedDict[tuple[str, int, int], Image.Image] = OrderedDict()
        self._lock = threading.Lock()

    def load(
        self, url: str, width: int, height: Optional[int] = None,
    ) -> Optional[Image.Image]:
        """Return the image at *url* scaled to *width* pixels, or ``None``.

        With *height* the image is scaled and centre-cropped to exactly
        ``width x height``.

        Network and decode failures are logged, never raised; a card
        without a picture is still a usable card.
        """
        if not url or width <= 0:
            return None

        key = (url, width, height or 0)
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
                return cached

        try:
            response = self._client.get(url)
            response.raise_for_status()
            with Image.open(BytesIO(response.content)) as raw:
                image = raw.convert("RGBA") if raw.mode in ("P", "LA") else raw.convert("RGB")
        except httpx.HTTPStatusError as hse:
            self._logger.warning(
                "Image fetch returned %s for %s", hse.response.status_code, url,
                extra={"event": "IMAGE_FETCH_FAILED"},
            )
            return None
        except httpx.RequestError as exc:
            self._logger.warning(
                "Image fetch failed for %s: %s", url, exc,
                extra={"event": "IMAGE_FETCH_FAILED"},
            )
            return None
        except (UnidentifiedImageError, OSError) as exc:
            self._logger.warning("Could not decode image %s: %s", url, exc)
            return None

        if height:
            image = ImageOps.fit(image, (width, height), Image.Resampling.LANCZOS)
        elif image.width > width:
            ratio = width / image.width
            image = image.resize(
                (width, max(1, int(image.height * ratio))), Image.Resampling.LANCZOS,
            )

        with self._lock:
            self._cache[key] = image
            if len(self._cache) > _CACHE_SIZE:
                self._cache.popitem(last=False)
        return image

    def close(self) -> None:
        self._client.close()
