"""
User Model.

Row of the public ``users`` table.  ``id`` equals the auth identity id.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class UserRecord(BaseModel):
    """Represents a row of ``users``.

    Only ``id`` is guaranteed; the name columns are filled at sign-up
    and may be empty for accounts created through the dashboard.
    """

    id: str
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    model_config = {"from_attributes": True, "extra": "ignore"}

    @property
    def display_name(self) -> str:
        """Username, else first + last name, else empty string."""
        if self.username:
            return self.username
        parts = [p for p in (self.first_name, self.last_name) if p]
        return " ".join(parts)
