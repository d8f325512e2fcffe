"""
Feed Models.

``FeedItem`` is the display-ready form of an ``ImageRecord``: resolved
public URL, joined owner data and a deterministic layout height.  It is
rebuilt on every fetch and never persisted.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from pinboard.models.image import ImageRecord

DEFAULT_USERNAME: str = "Unknown User"


class FeedItem(BaseModel):
    """One card of the masonry feed."""

    model_config = ConfigDict(frozen=True)

    id: str
    src: str
    alt: str
    title: str
    description: str = ""
    username: str = DEFAULT_USERNAME
    profile_image: Optional[str] = None
    height: int
    user_id: Optional[str] = None
    record: ImageRecord
