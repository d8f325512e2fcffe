"""
Feed Loading Service.

Orchestrates one feed load:

1. fetch image rows (newest first);
2. fetch ``users`` and ``profiles`` for the distinct owner ids of that
   batch, concurrently, bounded by ``FETCH_TIMEOUT_S``;
3. resolve every storage path to a public URL, concurrently, each
   bounded by ``RESOLVE_TIMEOUT_S``;
4. assemble and return the complete list in one piece.

Each load takes a ``CancellationToken``; a cancelled token turns the
result into ``ErrorKind.CANCELLED`` so the view drops it.
"""

from __future__ import annotations

import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Mapping, Optional, Sequence, TypeVar

from pinboard.config import AppConfig
from pinboard.errors import DatabaseError
from pinboard.logger import StructuredLogger
from pinboard.models.enums import ErrorKind
from pinboard.models.feed import FeedItem
from pinboard.models.image import ImageRecord
from pinboard.models.profile import ProfileRecord
from pinboard.models.service_models import ServiceResult
from pinboard.models.user import UserRecord
from pinboard.repositories.image_repository import ImageRepository
from pinboard.repositories.profile_repository import ProfileRepository
from pinboard.repositories.user_repository import UserRepository
from pinboard.services.base_service import BaseService
from pinboard.services.feed_assembler import assemble_feed, build_feed_item
from pinboard.services.url_resolver import UrlResolver
from pinboard.utils.cancellation import CancellationToken, OperationCancelled
from pinboard.utils.layout import height_for

T = TypeVar("T")

PIN_PAGE_USERNAME: str = "User not found"

_MAX_RESOLVE_WORKERS: int = 8


class FeedService(BaseService):
    """Loads the home feed, a user's pins, and single pins.

    Parameters
    ----------
    image_repo, user_repo, profile_repo:
        Record fetchers.
    resolver:
        Storage path and avatar URL resolution.
    config:
        Supplies ``FETCH_TIMEOUT_S`` and ``RESOLVE_TIMEOUT_S``.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        image_repo: ImageRepository,
        user_repo: UserRepository,
        profile_repo: ProfileRepository,
        resolver: UrlResolver,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._image_repo = image_repo
        self._user_repo = user_repo
        self._profile_repo = profile_repo
        self._resolver = resolver
        self._fetch_timeout: float = config.FETCH_TIMEOUT_S
        self._resolve_timeout: float = config.RESOLVE_TIMEOUT_S

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load_feed(
        self, token: Optional[CancellationToken] = None,
    ) -> ServiceResult[list[FeedItem]]:
        """All pins, newest first, joined with owner data."""
        return self._load(self._image_repo.list_recent, token, "feed")

    def load_user_pins(
        self, user_id: str, token: Optional[CancellationToken] = None,
    ) -> ServiceResult[list[FeedItem]]:
        """Pins owned by *user_id*, newest first."""
        return self._load(
            lambda: self._image_repo.list_by_owner(user_id), token, "user_pins",
        )

    def load_pin(
        self, pin_id: str, token: Optional[CancellationToken] = None,
    ) -> ServiceResult[Optional[FeedItem]]:
        """One pin for the standalone pin page.

        ``ok(None)`` means the pin does not exist.  Owner lookups that
        fail fall back to ``PIN_PAGE_USERNAME`` and no avatar.
        """
        try:
            image = self._image_repo.get_by_id(pin_id)
        except DatabaseError as exc:
            return ServiceResult.fail(f"Failed to load pin: {exc.message}", exc.kind)

        if image is None:
            return ServiceResult.ok(None)

        src = self._resolver.resolve(image.storage_path)
        if not src:
            return ServiceResult.fail(
                "This pin's image is not available.", ErrorKind.RESOLUTION,
            )

        user: Optional[UserRecord] = None
        profile: Optional[ProfileRecord] = None
        if image.user_id:
            try:
                user = self._user_repo.get_by_id(image.user_id)
            except DatabaseError as exc:
                self._logger.warning("Owner lookup failed for pin %s: %s", pin_id, exc)
            try:
                profile = self._profile_repo.get_by_user_id(image.user_id)
            except DatabaseError as exc:
                self._logger.warning("Profile lookup failed for pin %s: %s", pin_id, exc)

        if token is not None and token.cancelled:
            return ServiceResult.fail("Load cancelled.", ErrorKind.CANCELLED)

        return ServiceResult.ok(
            build_feed_item(
                image,
                src,
                user,
                profile,
                avatar_fn=self._resolver.resolve_avatar,
                default_username=PIN_PAGE_USERNAME,
            )
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(
        self,
        fetch_images: Callable[[], list[ImageRecord]],
        token: Optional[CancellationToken],
        label: str,
    ) -> ServiceResult[list[FeedItem]]:
        token = token or CancellationToken(label)
        try:
            images = fetch_images()
            token.raise_if_cancelled()
            items = self._assemble(images, token)
            token.raise_if_cancelled()
        except OperationCancelled:
            self._logger.debug("Load %s cancelled", label)
            return ServiceResult.fail("Load cancelled.", ErrorKind.CANCELLED)
        except DatabaseError as exc:
            self._logger.error(
                "Feed load (%s) failed: %s", label, exc.message,
                extra={"event": "FEED_LOAD_FAILED", "code": exc.code or ""},
            )
            return ServiceResult.fail(
                "Could not load pins. Please try again.", ErrorKind.DATABASE,
            )

        self._logger.info(
            "Loaded %d of %d pins (%s)", len(items), len(images), label,
            extra={"event": "FEED_LOADED", "dropped": len(images) - len(items)},
        )
        return ServiceResult.ok(items)

    def _assemble(
        self, images: Sequence[ImageRecord], token: CancellationToken,
    ) -> list[FeedItem]:
        if not images:
            return []

        owner_ids = {image.user_id for image in images if image.user_id}
        users, profiles = self._fetch_owners(owner_ids)
        token.raise_if_cancelled()

        urls = self._resolve_all(
            [image.storage_path for image in images if image.storage_path]
        )
        token.raise_if_cancelled()

        return assemble_feed(
            images,
            users,
            profiles,
            resolver=lambda path: urls.get(path or ""),
            height_fn=height_for,
            avatar_fn=self._resolver.resolve_avatar,
        )

    def _fetch_owners(
        self, owner_ids: set[str],
    ) -> tuple[Mapping[str, UserRecord], Mapping[str, ProfileRecord]]:
        """Users and profiles for *owner_ids*, fetched side by side.

        A failure or timeout on either lookup degrades to an empty map,
        which the assembler turns into default names and no avatars.
        """
        if not owner_ids:
            return {}, {}

        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="owners")
        try:
            users_future = executor.submit(self._user_repo.get_by_ids, owner_ids)
            profiles_future = executor.submit(self._profile_repo.get_by_user_ids, owner_ids)
            wait([users_future, profiles_future], timeout=self._fetch_timeout)
            users = self._result_or_default(users_future, {}, "users")
            profiles = self._result_or_default(profiles_future, {}, "profiles")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return users, profiles

    def _result_or_default(self, future: Future[T], default: T, what: str) -> T:
        if not future.done():
            self._logger.warning(
                "%s lookup timed out after %.1fs", what, self._fetch_timeout,
                extra={"event": "OWNER_LOOKUP_TIMEOUT"},
            )
            return default
        exc = future.exception()
        if exc is not None:
            self._logger.warning(
                "%s lookup failed: %s", what, exc,
                extra={"event": "OWNER_LOOKUP_FAILED"},
            )
            return default
        return future.result()

    def _resolve_all(self, paths: Sequence[str]) -> dict[str, str]:
        """Resolve distinct *paths*; unresolved or timed-out ones are absent.

        ``RESOLVE_TIMEOUT_S`` bounds each call from the moment a worker
        picks it up, so time spent queued behind other paths does not
        count against it.  Calls still running past their own deadline
        are abandoned.  If nothing completes and nothing starts for a
        whole timeout window, the pool is taken to be stuck on abandoned
        calls and the paths still queued are dropped too.
        """
        distinct = list(dict.fromkeys(paths))
        if not distinct:
            return {}

        started: dict[str, float] = {}

        def timed_resolve(path: str) -> Optional[str]:
            started[path] = time.monotonic()
            return self._resolver.resolve(path)

        workers = min(_MAX_RESOLVE_WORKERS, len(distinct))
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="resolve")
        urls: dict[str, str] = {}
        try:
            futures = {executor.submit(timed_resolve, p): p for p in distinct}
            pending = set(futures)
            while pending:
                now = time.monotonic()
                overran = {
                    f for f in pending
                    if futures[f] in started
                    and now - started[futures[f]] >= self._resolve_timeout
                }
                for future in overran:
                    self._logger.warning(
                        "URL resolution timed out for %s", futures[future],
                        extra={"event": "URL_RESOLVE_TIMEOUT"},
                    )
                pending -= overran
                if not pending:
                    break

                deadlines = [
                    started[futures[f]] + self._resolve_timeout
                    for f in pending if futures[f] in started
                ]
                window = min(deadlines) - now if deadlines else self._resolve_timeout
                done, pending = wait(pending, timeout=window, return_when=FIRST_COMPLETED)
                for future in done:
                    self._collect_url(futures[future], future, urls)

                if not done and not any(futures[f] in started for f in pending):
                    for future in pending:
                        self._logger.warning(
                            "URL resolution never started for %s", futures[future],
                            extra={"event": "URL_RESOLVE_TIMEOUT"},
                        )
                    break
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return urls

    def _collect_url(
        self, path: str, future: Future[Optional[str]], urls: dict[str, str],
    ) -> None:
        exc = future.exception()
        if exc is not None:
            self._logger.warning("URL resolution failed for %s: %s", path, exc)
            return
        url = future.result()
        if url:
            urls[path] = url
