"""
Public URL Resolution.

Turns a stored object key into a URL the image loader can fetch without
credentials.  Two tiers: the storage SDK's ``get_public_url`` first, and
when that yields nothing, a URL built from the configured public base.
"""

from __future__ import annotations

from typing import Optional

from pinboard.config import AppConfig
from pinboard.database import DatabaseManager
from pinboard.errors import ResolutionError
from pinboard.logger import StructuredLogger
from pinboard.services.base_service import BaseService

_PUBLIC_OBJECT_PATH: str = "storage/v1/object/public"


class UrlResolver(BaseService):
    """Resolve storage paths and avatar references to public URLs.

    Parameters
    ----------
    db:
        Connection holder; only ``supabase.storage`` is used.
    config:
        Supplies the bucket name and the manual fallback base.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        db: DatabaseManager,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._bucket: str = config.STORAGE_BUCKET
        self._base: str = config.public_storage_base
        self._avatar_folder: str = config.AVATAR_FOLDER.strip("/")

    def build_fallback(self, storage_path: str) -> Optional[str]:
        """``{base}/storage/v1/object/public/{bucket}/{path}`` or ``None``."""
        if not self._base or not storage_path:
            return None
        return f"{self._base}/{_PUBLIC_OBJECT_PATH}/{self._bucket}/{storage_path.lstrip('/')}"

    def resolve(self, storage_path: Optional[str]) -> Optional[str]:
        """Return a public URL for *storage_path*, or ``None``.

        Never raises: SDK failures are logged and the fallback is tried.
        """
        if not storage_path:
            return None

        url = ""
        try:
            result = self._db.supabase.storage.from_(self._bucket).get_public_url(
                storage_path
            )
            url = str(result or "").strip()
        except Exception as exc:
            self._logger.warning(
                "get_public_url failed for %s: %s", storage_path, exc,
                extra={"event": "URL_RESOLVE_SDK_FAILED"},
            )

        if url:
            return url

        fallback = self.build_fallback(storage_path)
        if fallback:
            self._logger.debug("Using manual public URL for %s", storage_path)
            return fallback

        self._logger.warning(
            "No public URL for %s", storage_path,
            extra={"event": "URL_UNRESOLVED"},
        )
        return None

    def require(self, storage_path: Optional[str]) -> str:
        """Like ``resolve`` but raises ``ResolutionError`` on ``None``."""
        url = self.resolve(storage_path)
        if url is None:
            raise ResolutionError(f"Could not produce a public URL for {storage_path!r}")
        return url

    def resolve_avatar(self, avatar_url: Optional[str]) -> Optional[str]:
        """Profile avatars are stored either as full URLs or as bare keys.

        Full ``http(s)`` URLs pass through.  Bare keys are resolved inside
        the avatar folder of the image bucket.
        """
        if not avatar_url or not avatar_url.strip():
            return None
        avatar_url = avatar_url.strip()
        if avatar_url.startswith("http"):
            return avatar_url

        key = avatar_url.lstrip("/")
        if not key.startswith(f"{self._avatar_folder}/"):
            key = f"{self._avatar_folder}/{key}"
        return self.resolve(key)
