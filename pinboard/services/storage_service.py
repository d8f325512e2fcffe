"""
Storage Readiness & Object Operations.

Owns every call against the image bucket:

1. ``ensure_ready`` runs the setup sequence required before the first
   upload (two idempotent RPCs, bucket existence and publicity, and a
   reachability check on the ``images`` table).  A successful run is
   cached for the rest of the session.
2. ``upload_object`` / ``remove_objects`` wrap the object writes and
   translate SDK exceptions into ``UploadError`` / ``StorageSetupError``.
"""

from __future__ import annotations

import threading
from typing import Any, Iterable

from pydantic import ValidationError

from pinboard.config import AppConfig
from pinboard.database import DatabaseManager
from pinboard.errors import DatabaseError, StorageSetupError, UploadError
from pinboard.logger import StructuredLogger
from pinboard.models.enums import ErrorKind
from pinboard.models.service_models import ServiceResult, SetupRpcResult
from pinboard.repositories.image_repository import ImageRepository
from pinboard.services.base_service import BaseService

RLS_RPC: str = "ensure_rls_on_storage_buckets"
PUBLICITY_RPC: str = "manage_images_bucket_publicity"

_BUCKET_NOT_FOUND: str = "bucket not found"


def _is_bucket_missing(exc: Exception) -> bool:
    return _BUCKET_NOT_FOUND in str(exc).lower()


class StorageService(BaseService):
    """Bucket setup and object writes for the image bucket."""

    def __init__(
        self,
        db: DatabaseManager,
        image_repo: ImageRepository,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._db = db
        self._image_repo = image_repo
        self._bucket: str = config.STORAGE_BUCKET
        self._cache_control: str = config.UPLOAD_CACHE_CONTROL
        self._ready: bool = False
        self._lock: threading.Lock = threading.Lock()

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------

    @property
    def is_ready(self) -> bool:
        with self._lock:
            return self._ready

    def invalidate(self) -> None:
        """Forget a previous successful setup (e.g. after sign-out)."""
        with self._lock:
            self._ready = False

    def ensure_ready(self, force: bool = False) -> ServiceResult[bool]:
        """Run the setup sequence unless it already succeeded.

        Every step is idempotent, so a forced re-run is safe.  The first
        failing step aborts the sequence and its message is returned with
        ``ErrorKind.STORAGE_SETUP`` (or ``DATABASE`` for the table check).
        """
        if self.is_ready and not force:
            return ServiceResult.ok(True)

        try:
            self._run_setup_rpc(RLS_RPC)
            self._run_setup_rpc(PUBLICITY_RPC)
            self._ensure_public_bucket()
        except StorageSetupError as exc:
            self._logger.error(
                "Storage setup failed: %s", exc.message,
                extra={"event": "STORAGE_SETUP_FAILED"},
            )
            return ServiceResult.fail(exc.message, exc.kind)

        try:
            self._image_repo.check_reachable()
        except DatabaseError as exc:
            self._logger.error(
                "Images table check failed: %s", exc.message,
                extra={"event": "STORAGE_SETUP_FAILED"},
            )
            return ServiceResult.fail(
                f'Database table "{ImageRepository.TABLE}" may not be correctly configured.',
                ErrorKind.STORAGE_SETUP,
            )

        with self._lock:
            self._ready = True
        self._logger.info(
            "Storage ready (bucket=%s)", self._bucket,
            extra={"event": "STORAGE_READY"},
        )
        return ServiceResult.ok(True)

    def _run_setup_rpc(self, name: str) -> None:
        try:
            data: Any = self._db.supabase.rpc(name).execute().data
        except Exception as exc:
            raise StorageSetupError(f"Storage setup error (RPC {name}): {exc}") from exc

        # Some deployments wrap a single json result in a list.
        if isinstance(data, list):
            data = data[0] if data else None

        try:
            result = SetupRpcResult.model_validate(data or {})
        except ValidationError as exc:
            raise StorageSetupError(
                f"Storage setup error (RPC {name}): unexpected response"
            ) from exc

        if not result.success:
            raise StorageSetupError(
                f"Storage setup error (RPC {name}): "
                f"{result.message or 'Unknown RPC error'}"
            )
        self._logger.info("RPC %s succeeded: %s", name, result.message or "")

    def _ensure_public_bucket(self) -> None:
        storage = self._db.supabase.storage
        try:
            bucket = storage.get_bucket(self._bucket)
        except Exception as exc:
            if not _is_bucket_missing(exc):
                raise StorageSetupError(
                    f"Storage setup error: Could not verify bucket. {exc}"
                ) from exc
            self._logger.info("Bucket %s not found; creating it.", self._bucket)
            try:
                storage.create_bucket(self._bucket, options={"public": True})
            except Exception as create_exc:
                raise StorageSetupError(
                    f"Storage setup error: Could not create bucket. {create_exc}"
                ) from create_exc
            return

        if not getattr(bucket, "public", False):
            self._logger.info("Bucket %s is private; making it public.", self._bucket)
            try:
                storage.update_bucket(self._bucket, {"public": True})
            except Exception as exc:
                raise StorageSetupError(
                    f"Storage setup error: Could not update bucket to public. {exc}"
                ) from exc

    # ------------------------------------------------------------------
    # Objects
    # ------------------------------------------------------------------

    def upload_object(
        self,
        path: str,
        content: bytes,
        content_type: str,
        upsert: bool = False,
    ) -> str:
        """Write *content* under *path* and return the path.

        Raises
        ------
        StorageSetupError
            When the bucket does not exist.
        UploadError
            For any other write failure.
        """
        options = {
            "cache-control": self._cache_control,
            "content-type": content_type,
            "upsert": "true" if upsert else "false",
        }
        try:
            self._db.supabase.storage.from_(self._bucket).upload(path, content, options)
        except Exception as exc:
            if _is_bucket_missing(exc):
                raise StorageSetupError(
                    "Storage bucket not configured. Please contact administrator."
                ) from exc
            raise UploadError(f"Storage error: {exc}") from exc

        self._logger.info(
            "Object uploaded: %s", path,
            extra={"event": "OBJECT_UPLOAD", "bytes": len(content)},
        )
        return path

    def remove_objects(self, paths: Iterable[str]) -> None:
        """Delete objects; raises ``UploadError`` when the SDK call fails."""
        keys = [p for p in paths if p]
        if not keys:
            return
        try:
            self._db.supabase.storage.from_(self._bucket).remove(keys)
        except Exception as exc:
            raise UploadError(f"Could not remove {keys}: {exc}") from exc
        self._logger.info(
            "Objects removed: %s", ", ".join(keys),
            extra={"event": "OBJECT_REMOVE"},
        )
