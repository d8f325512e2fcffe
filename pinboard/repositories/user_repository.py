"""
User Repository.

Handles access to the public ``users`` table (username and names).
"""

from __future__ import annotations

from typing import Iterable, Optional

from pinboard.errors import DatabaseError
from pinboard.models.user import UserRecord
from pinboard.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    """Data access layer for ``UserRecord``.

    Rows are only written by the sign-up path; every other flow reads.
    """

    TABLE = "users"

    def get_by_ids(self, user_ids: Iterable[str]) -> dict[str, UserRecord]:
        """Map each id to its user row.

        Ids without a row are simply absent from the result.
        """
        ids = sorted({uid for uid in user_ids if uid})
        if not ids:
            return {}

        def _query() -> dict[str, UserRecord]:
            response = (
                self.supabase.table(self.TABLE)
                .select("id, username, first_name, last_name")
                .in_("id", ids)
                .execute()
            )
            users = [UserRecord(**row) for row in response.data or []]
            return {user.id: user for user in users}

        return self._execute(_query, operation_name="get_by_ids (users)")

    def get_by_id(self, user_id: str) -> Optional[UserRecord]:
        """Fetch one user row; ``None`` when it does not exist."""
        def _query() -> UserRecord:
            response = (
                self.supabase.table(self.TABLE)
                .select("id, username, first_name, last_name")
                .eq("id", user_id)
                .single()
                .execute()
            )
            return UserRecord(**response.data)

        try:
            return self._execute(_query, operation_name="get_by_id (users)")
        except DatabaseError as exc:
            if exc.is_no_rows:
                return None
            raise

    def upsert(self, user: UserRecord) -> UserRecord:
        """Insert or update a user row keyed on ``id``."""
        def _query() -> UserRecord:
            response = (
                self.supabase.table(self.TABLE)
                .upsert(user.model_dump(exclude_none=True))
                .execute()
            )
            return UserRecord(**response.data[0]) if response.data else user

        result = self._execute(_query, operation_name="upsert (users)")
        self._logger.info("User upserted: %s", result.id)
        return result
