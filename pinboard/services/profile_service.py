"""
Profile Service.

Reads and edits the signed-in user's profile: the header data of the
profile view, the finish-profile form and the edit-profile modal.
"""

from __future__ import annotations

import time
from typing import Optional

from pinboard.auth import SessionManager
from pinboard.config import AppConfig
from pinboard.errors import DatabaseError, ResolutionError, StorageSetupError, UploadError
from pinboard.logger import StructuredLogger
from pinboard.models.enums import ErrorKind
from pinboard.models.profile import ProfileRecord
from pinboard.models.service_models import AvatarUpload, ProfileView, ServiceResult
from pinboard.models.user import UserRecord
from pinboard.repositories.profile_repository import ProfileRepository
from pinboard.repositories.user_repository import UserRepository
from pinboard.services.base_service import BaseService
from pinboard.services.storage_service import StorageService
from pinboard.services.url_resolver import UrlResolver

_AVATAR_EXTENSIONS: dict[str, str] = {"image/jpeg": "jpg", "image/png": "png"}


class ProfileService(BaseService):
    """Profile reads and writes for the current user.

    Parameters
    ----------
    session:
        Source of the current user id.
    profile_repo, user_repo:
        ``profiles`` and ``users`` access.
    storage:
        Avatar object writes.
    resolver:
        Avatar public URLs.
    config:
        Avatar folder and accepted content types.
    logger:
        Structured logger.
    """

    def __init__(
        self,
        session: SessionManager,
        profile_repo: ProfileRepository,
        user_repo: UserRepository,
        storage: StorageService,
        resolver: UrlResolver,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._session = session
        self._profile_repo = profile_repo
        self._user_repo = user_repo
        self._storage = storage
        self._resolver = resolver
        self._avatar_folder: str = config.AVATAR_FOLDER.strip("/")
        self._avatar_types: frozenset[str] = config.AVATAR_CONTENT_TYPES

    def _require_user(self) -> Optional[str]:
        return self._session.user_id

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def load_profile(self) -> ServiceResult[ProfileView]:
        """Header data for the signed-in user.

        A missing profile row is a normal state (``has_profile=False``).
        A missing ``users`` row only leaves the display name empty.
        """
        current = self._session.current_session
        if current is None:
            return ServiceResult.fail("You are not signed in.", ErrorKind.AUTH)

        try:
            profile = self._profile_repo.get_by_user_id(current.user_id)
        except DatabaseError as exc:
            return ServiceResult.fail(
                f"Could not load your profile: {exc.message}", ErrorKind.DATABASE,
            )

        user: Optional[UserRecord] = None
        try:
            user = self._user_repo.get_by_id(current.user_id)
        except DatabaseError as exc:
            self._logger.warning("users lookup failed for %s: %s", current.user_id, exc)

        display_name = user.display_name if user else ""
        if not display_name and current.email:
            display_name = current.email.split("@")[0]

        return ServiceResult.ok(
            ProfileView(
                user_id=current.user_id,
                email=current.email,
                display_name=display_name,
                description=(profile.description or "") if profile else "",
                avatar_url=(
                    self._resolver.resolve_avatar(profile.avatar_url) if profile else None
                ),
                has_profile=profile is not None,
            )
        )

    def needs_profile(self) -> ServiceResult[bool]:
        """``True`` when the signed-in user has not saved a profile yet."""
        result = self.load_profile()
        if not result.success or result.data is None:
            return ServiceResult.fail(
                result.error or "Could not load your profile.",
                result.error_kind or ErrorKind.UNKNOWN,
            )
        return ServiceResult.ok(not result.data.has_profile)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_profile(
        self, description: str, avatar_url: Optional[str] = None,
    ) -> ServiceResult[ProfileRecord]:
        """Upsert the profile row keyed on ``user_id``.

        An avatar URL, when given, must be an ``http(s)`` URL.
        """
        user_id = self._require_user()
        if user_id is None:
            return ServiceResult.fail("You are not signed in.", ErrorKind.AUTH)

        avatar = (avatar_url or "").strip() or None
        if avatar is not None and not avatar.startswith("http"):
            return ServiceResult.fail(
                "Avatar URL must start with http:// or https://", ErrorKind.VALIDATION,
            )

        try:
            record = self._profile_repo.upsert(user_id, description.strip(), avatar)
        except DatabaseError as exc:
            return ServiceResult.fail(
                f"Could not save your profile: {exc.message}", ErrorKind.DATABASE,
            )
        return ServiceResult.ok(record)

    def upload_avatar(self, upload: AvatarUpload) -> ServiceResult[str]:
        """Store a JPG/PNG avatar and return its public URL.

        The object goes to ``{AVATAR_FOLDER}/{user_id}-{epoch_ms}.{ext}``
        and overwrites any object already at that key.
        """
        user_id = self._require_user()
        if user_id is None:
            return ServiceResult.fail("You are not signed in.", ErrorKind.AUTH)

        if upload.content_type not in self._avatar_types:
            return ServiceResult.fail(
                "Please select a JPG or PNG image.", ErrorKind.VALIDATION,
            )
        if not upload.content:
            return ServiceResult.fail("The selected file is empty.", ErrorKind.VALIDATION)

        ext = upload.filename.rsplit(".", 1)[-1].lower() if "." in upload.filename else ""
        ext = ext or _AVATAR_EXTENSIONS[upload.content_type]
        path = f"{self._avatar_folder}/{user_id}-{int(time.time() * 1000)}.{ext}"

        try:
            self._storage.upload_object(path, upload.content, upload.content_type, upsert=True)
            url = self._resolver.require(path)
        except (StorageSetupError, UploadError, ResolutionError) as exc:
            self._logger.error(
                "Avatar upload failed: %s", exc.message,
                extra={"event": "AVATAR_UPLOAD_FAILED", "user_id": user_id},
            )
            return ServiceResult.fail(exc.message, exc.kind)

        self._logger.info(
            "Avatar uploaded for %s", user_id,
            extra={"event": "AVATAR_UPLOAD", "storage_path": path},
        )
        return ServiceResult.ok(url)

    def update_profile(
        self,
        description: str,
        avatar_url: Optional[str] = None,
        avatar: Optional[AvatarUpload] = None,
    ) -> ServiceResult[ProfileRecord]:
        """Edit-profile modal: optional avatar upload, then the upsert.

        A newly uploaded avatar replaces *avatar_url*.
        """
        if avatar is not None:
            uploaded = self.upload_avatar(avatar)
            if not uploaded.success:
                return ServiceResult.fail(
                    uploaded.error or "Avatar upload failed.",
                    uploaded.error_kind or ErrorKind.UPLOAD,
                )
            avatar_url = uploaded.data
        return self.save_profile(description, avatar_url)
