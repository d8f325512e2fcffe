"""
Feed Assembly.

Pure functions that join image rows with owner data into display-ready
``FeedItem`` objects, filter them for search, and apply local list
surgery after mutations.  No I/O: resolution is passed in as callables
so the same code serves the feed, the profile grid and the pin page.
"""

from __future__ import annotations

from typing import Callable, Iterable, Mapping, Optional, Sequence

from pinboard.models.feed import DEFAULT_USERNAME, FeedItem
from pinboard.models.image import ImageRecord
from pinboard.models.profile import ProfileRecord
from pinboard.models.user import UserRecord
from pinboard.utils.layout import height_for

DEFAULT_ALT: str = "Pin image"
DEFAULT_TITLE: str = "Untitled Pin"

UrlFn = Callable[[Optional[str]], Optional[str]]
HeightFn = Callable[[str], int]


def build_feed_item(
    image: ImageRecord,
    src: str,
    user: Optional[UserRecord],
    profile: Optional[ProfileRecord],
    height_fn: HeightFn = height_for,
    avatar_fn: Optional[UrlFn] = None,
    default_username: str = DEFAULT_USERNAME,
) -> FeedItem:
    """Build one ``FeedItem`` from an already resolved *src*."""
    username = (user.display_name if user else "") or default_username

    avatar: Optional[str] = None
    if profile is not None and profile.avatar_url:
        avatar = avatar_fn(profile.avatar_url) if avatar_fn else profile.avatar_url

    return FeedItem(
        id=image.id,
        src=src,
        alt=image.title or DEFAULT_ALT,
        title=image.title or DEFAULT_TITLE,
        description=image.description or "",
        username=username,
        profile_image=avatar,
        height=height_fn(image.id),
        user_id=image.user_id,
        record=image,
    )


def assemble_feed(
    images: Sequence[ImageRecord],
    users_by_id: Mapping[str, UserRecord],
    profiles_by_user: Mapping[str, ProfileRecord],
    resolver: UrlFn,
    height_fn: HeightFn = height_for,
    avatar_fn: Optional[UrlFn] = None,
) -> list[FeedItem]:
    """Join *images* with owner data, keeping input order.

    Records whose storage path resolves to no URL are omitted.  Owners
    without a user row get ``DEFAULT_USERNAME``; owners without a
    profile row get no avatar.
    """
    items: list[FeedItem] = []
    for image in images:
        src = resolver(image.storage_path)
        if not src:
            continue
        owner = image.user_id or ""
        items.append(
            build_feed_item(
                image,
                src,
                users_by_id.get(owner),
                profiles_by_user.get(owner),
                height_fn=height_fn,
                avatar_fn=avatar_fn,
            )
        )
    return items


def search_feed(items: Sequence[FeedItem], term: Optional[str]) -> list[FeedItem]:
    """Case-insensitive substring match on title or description.

    A blank or whitespace-only term returns every item.
    """
    needle = (term or "").strip().lower()
    if not needle:
        return list(items)
    return [
        item
        for item in items
        if needle in item.title.lower() or needle in item.description.lower()
    ]


def remove_from_feed(items: Iterable[FeedItem], pin_id: str) -> list[FeedItem]:
    """Copy of *items* without the item whose id is *pin_id*."""
    return [item for item in items if item.id != pin_id]


def prepend_to_feed(items: Iterable[FeedItem], item: FeedItem) -> list[FeedItem]:
    """Put *item* first, replacing an existing item with the same id."""
    return [item, *remove_from_feed(items, item.id)]
