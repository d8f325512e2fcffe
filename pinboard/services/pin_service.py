"""
Pin Mutation Service.

Upload and delete of pins.

Upload writes the object first and the ``images`` row second.  When the
row insert fails the freshly written object is removed again: a
best-effort compensating delete whose own failure is only logged.

Delete issues the row delete and the object removal side by side.  The
row is authoritative: its failure fails the operation, while a failed
object removal is logged and the pin still leaves the feed.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Optional

from pinboard.auth import SessionManager
from pinboard.config import AppConfig
from pinboard.errors import (
    RLS_DENIED_CODE,
    DatabaseError,
    PinboardError,
    StorageSetupError,
    UploadError,
)
from pinboard.logger import StructuredLogger
from pinboard.models.auth_models import ValidationResult
from pinboard.models.enums import ErrorKind
from pinboard.models.feed import FeedItem
from pinboard.models.image import NewImage
from pinboard.models.service_models import ServiceResult, UploadRequest
from pinboard.models.user import UserRecord
from pinboard.repositories.image_repository import ImageRepository
from pinboard.repositories.user_repository import UserRepository
from pinboard.services.auth_service import AuthService
from pinboard.services.base_service import BaseService
from pinboard.services.feed_assembler import build_feed_item
from pinboard.services.storage_service import StorageService
from pinboard.services.url_resolver import UrlResolver


def object_key(request: UploadRequest, now_ms: Optional[int] = None) -> str:
    """Time-based object key ``{epoch_ms}.{ext}`` in the bucket root."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    ext = request.extension or request.content_type.partition("/")[2] or "bin"
    return f"{stamp}.{ext.lower()}"


def insert_error_message(exc: DatabaseError) -> str:
    """User-facing text for a failed ``images`` insert."""
    if exc.code == RLS_DENIED_CODE:
        return "Permission denied. RLS policy prevents this operation."
    if exc.is_rls_violation:
        return "RLS policy violation. User ID may not match the authenticated user."
    return f"Database error: {exc.message}"


class PinService(BaseService):
    """Create and delete pins.

    Parameters
    ----------
    session:
        Current identity; the owner of new pins.
    auth_service:
        Server-side identity confirmation before a write.
    storage:
        Readiness state and object writes.
    image_repo:
        ``images`` rows.
    user_repo:
        Owner name for the card of a fresh upload.
    resolver:
        Public URL of the fresh upload.
    config:
        Supplies ``FETCH_TIMEOUT_S`` for the concurrent delete.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        session: SessionManager,
        auth_service: AuthService,
        storage: StorageService,
        image_repo: ImageRepository,
        user_repo: UserRepository,
        resolver: UrlResolver,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._session = session
        self._auth = auth_service
        self._storage = storage
        self._image_repo = image_repo
        self._user_repo = user_repo
        self._resolver = resolver
        self._timeout: float = config.FETCH_TIMEOUT_S

    # ==================================================================
    # Upload
    # ==================================================================

    @staticmethod
    def validate_upload(request: UploadRequest) -> ValidationResult:
        """Client-side checks run before any network call."""
        if not request.filename or not request.content:
            return ValidationResult(
                is_valid=False, error_message="Please select an image to upload",
            )
        if not request.content_type.startswith("image/"):
            return ValidationResult(
                is_valid=False, error_message="Please select an image file",
            )
        if not request.title.strip():
            return ValidationResult(
                is_valid=False, error_message="Please enter a title for your pin",
            )
        return ValidationResult(is_valid=True)

    def upload_pin(self, request: UploadRequest) -> ServiceResult[Optional[FeedItem]]:
        """Upload a new pin.

        Returns the ``FeedItem`` to prepend to the visible list, or
        ``ok(None)`` when the row was stored but its URL could not be
        resolved yet.
        """
        check = self.validate_upload(request)
        if not check.is_valid:
            return ServiceResult.fail(check.error_message or "Invalid pin.", ErrorKind.VALIDATION)

        if not self._storage.is_ready:
            return ServiceResult.fail(
                "Storage is not ready. Please wait or try refreshing the page.",
                ErrorKind.STORAGE_SETUP,
            )

        identity = self._auth.verify_identity()
        if not identity.is_authenticated or identity.session is None:
            return ServiceResult.fail(
                identity.error_message or "Authentication error. Please log in again.",
                ErrorKind.AUTH,
            )
        user_id = identity.session.user_id

        path = object_key(request)
        try:
            self._storage.upload_object(path, request.content, request.content_type)
        except (StorageSetupError, UploadError) as exc:
            return ServiceResult.fail(exc.message, exc.kind)

        try:
            record = self._image_repo.insert(
                NewImage(
                    user_id=user_id,
                    storage_path=path,
                    original_filename=request.filename,
                    title=request.title.strip(),
                    description=request.description.strip(),
                    is_public=request.is_public,
                )
            )
        except DatabaseError as exc:
            self._remove_orphan(path)
            return ServiceResult.fail(insert_error_message(exc), ErrorKind.UPLOAD)

        self._logger.info(
            "Pin uploaded: %s", record.id,
            extra={"event": "PIN_UPLOAD", "user_id": user_id, "storage_path": path},
        )

        src = self._resolver.resolve(path)
        if not src:
            return ServiceResult.ok(None)

        owner: Optional[UserRecord] = None
        try:
            owner = self._user_repo.get_by_id(user_id)
        except DatabaseError as exc:
            self._logger.debug("Owner lookup after upload failed: %s", exc)

        return ServiceResult.ok(build_feed_item(record, src, owner, None))

    def _remove_orphan(self, path: str) -> None:
        try:
            self._storage.remove_objects([path])
            self._logger.info(
                "Removed orphaned object %s after failed insert", path,
                extra={"event": "ORPHAN_CLEANUP"},
            )
        except PinboardError as exc:
            self._logger.error(
                "Failed to clean up %s after insert error: %s", path, exc,
                extra={"event": "ORPHAN_CLEANUP_FAILED"},
            )

    # ==================================================================
    # Delete
    # ==================================================================

    def delete_pin(self, item: FeedItem) -> ServiceResult[str]:
        """Delete the row and the object of *item*.

        Returns the deleted pin id on success so the caller can apply
        ``remove_from_feed``.
        """
        user_id = self._session.user_id
        if user_id is None:
            return ServiceResult.fail(
                "You are not signed in. Please log in again.", ErrorKind.AUTH,
            )
        if item.user_id and item.user_id != user_id:
            return ServiceResult.fail(
                "You can only delete your own pins.", ErrorKind.AUTH,
            )

        storage_path = item.record.storage_path
        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="delete")
        try:
            row_future = executor.submit(self._image_repo.delete, item.id)
            object_future = (
                executor.submit(self._storage.remove_objects, [storage_path])
                if storage_path
                else None
            )

            try:
                row_future.result(timeout=self._timeout)
            except DatabaseError as exc:
                self._logger.error(
                    "Pin delete failed: %s", exc.message,
                    extra={"event": "PIN_DELETE_FAILED", "pin_id": item.id},
                )
                return ServiceResult.fail(
                    f"Could not delete pin: {exc.message}", ErrorKind.DATABASE,
                )
            except FutureTimeout:
                return ServiceResult.fail(
                    "Deleting the pin timed out. Please try again.", ErrorKind.DATABASE,
                )

            if object_future is not None:
                try:
                    object_future.result(timeout=self._timeout)
                except (PinboardError, FutureTimeout) as exc:
                    self._logger.warning(
                        "Object %s left behind after deleting pin %s: %s",
                        storage_path, item.id, exc,
                        extra={"event": "ORPHAN_OBJECT"},
                    )
        finally:
            executor.shutdown(wait=False)

        self._logger.info(
            "Pin deleted: %s", item.id,
            extra={"event": "PIN_DELETE", "user_id": user_id},
        )
        return ServiceResult.ok(item.id)
