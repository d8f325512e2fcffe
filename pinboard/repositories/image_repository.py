"""
Image Repository.

Reads and writes rows of the ``images`` table.
"""

from __future__ import annotations

from typing import Optional

from pinboard.errors import DatabaseError
from pinboard.models.image import ImageRecord, NewImage
from pinboard.repositories.base_repository import BaseRepository

_COLUMNS: str = (
    "id, user_id, storage_path, original_filename, title, description, "
    "is_public, created_at"
)


class ImageRepository(BaseRepository):
    """Data access layer for pins.

    Rows are immutable from this client: ``insert`` after an upload,
    ``delete`` when the owner removes a pin.
    """

    TABLE = "images"

    def list_recent(self) -> list[ImageRecord]:
        """All visible pins, newest first."""
        def _query() -> list[ImageRecord]:
            response = (
                self.supabase.table(self.TABLE)
                .select(_COLUMNS)
                .order("created_at", desc=True)
                .execute()
            )
            return [ImageRecord(**row) for row in response.data or []]

        return self._execute(_query, operation_name="list_recent (images)")

    def list_by_owner(self, user_id: str) -> list[ImageRecord]:
        """Pins owned by *user_id*, newest first."""
        def _query() -> list[ImageRecord]:
            response = (
                self.supabase.table(self.TABLE)
                .select(_COLUMNS)
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
            return [ImageRecord(**row) for row in response.data or []]

        return self._execute(_query, operation_name="list_by_owner (images)")

    def get_by_id(self, image_id: str) -> Optional[ImageRecord]:
        """Fetch one pin; ``None`` when no row matches."""
        def _query() -> ImageRecord:
            response = (
                self.supabase.table(self.TABLE)
                .select(_COLUMNS)
                .eq("id", image_id)
                .single()
                .execute()
            )
            return ImageRecord(**response.data)

        try:
            return self._execute(_query, operation_name="get_by_id (images)")
        except DatabaseError as exc:
            if exc.is_no_rows:
                self._logger.info("Pin not found: %s", image_id)
                return None
            raise

    def insert(self, image: NewImage) -> ImageRecord:
        """Insert a pin row and return it as stored."""
        def _query() -> ImageRecord:
            response = (
                self.supabase.table(self.TABLE)
                .insert(image.model_dump())
                .execute()
            )
            if not response.data:
                raise DatabaseError("insert (images): no row returned")
            return ImageRecord(**response.data[0])

        record = self._execute(_query, operation_name="insert (images)")
        self._logger.info(
            "Image row created: %s", record.id,
            extra={"event": "IMAGE_INSERT", "storage_path": record.storage_path},
        )
        return record

    def delete(self, image_id: str) -> None:
        """Delete a pin row.

        Row-level security filters a forbidden delete down to zero rows
        without an error, so an empty result is reported as a failure:
        the row is still there.
        """
        def _query() -> None:
            response = (
                self.supabase.table(self.TABLE)
                .delete()
                .eq("id", image_id)
                .execute()
            )
            if not response.data:
                raise DatabaseError(
                    f"delete (images): pin {image_id} was not found "
                    "or you are not allowed to delete it"
                )

        self._execute(_query, operation_name="delete (images)")
        self._logger.info(
            "Image row deleted: %s", image_id,
            extra={"event": "IMAGE_DELETE"},
        )

    def check_reachable(self) -> None:
        """Cheap head query proving the table exists and is readable."""
        def _query() -> None:
            (
                self.supabase.table(self.TABLE)
                .select("id", count="exact")
                .limit(1)
                .execute()
            )

        self._execute(_query, operation_name="check_reachable (images)")
