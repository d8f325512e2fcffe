"""
Business Logic Services Package.

Services depend on the Repository layer for data access and on the
``SessionManager`` for user context.

The ``create_services()`` factory wires every repository and service
together, returning a typed dict that the views can consume without
knowing the internal dependency graph.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from pinboard.auth import SessionManager
from pinboard.config import AppConfig
from pinboard.database import DatabaseManager
from pinboard.logger import get_logger
from pinboard.repositories.image_repository import ImageRepository
from pinboard.repositories.profile_repository import ProfileRepository
from pinboard.repositories.user_repository import UserRepository
from pinboard.services.auth_service import AuthService
from pinboard.services.feed_service import FeedService
from pinboard.services.image_loader import ImageLoader
from pinboard.services.pin_service import PinService
from pinboard.services.profile_service import ProfileService
from pinboard.services.storage_service import StorageService
from pinboard.services.url_resolver import UrlResolver


class ServiceContainer(TypedDict, total=False):
    """Typed container for all application services.

    ``image_loader`` is ``None`` in headless contexts (tests) where no
    image is ever drawn.
    """

    # --- Core ---
    auth_service: AuthService
    url_resolver: UrlResolver
    storage_service: StorageService
    feed_service: FeedService
    pin_service: PinService
    profile_service: ProfileService

    # --- Presentation support ---
    image_loader: Optional[ImageLoader]


def create_services(
    db: DatabaseManager,
    config: AppConfig,
    session: SessionManager,
    with_image_loader: bool = True,
) -> ServiceContainer:
    """
    Wire all repositories and services together.

    This is the single composition root for the service layer.  The
    application entry-point calls this once at startup and passes the
    returned dict to the shell.

    Args:
        db: Initialised DatabaseManager holding the Supabase client.
        config: Application configuration.
        session: Process-wide session holder.
        with_image_loader: Build the HTTP image loader (off in tests).

    Returns:
        ServiceContainer mapping service names to fully-wired instances.
    """
    logger = get_logger("services")

    # ------------------------------------------------------------------
    # 1. Repositories (data-access layer)
    # ------------------------------------------------------------------
    image_repo = ImageRepository(db=db, logger=logger)
    user_repo = UserRepository(db=db, logger=logger)
    profile_repo = ProfileRepository(db=db, logger=logger)

    # ------------------------------------------------------------------
    # 2. Leaf services
    # ------------------------------------------------------------------
    url_resolver = UrlResolver(db=db, config=config, logger=logger)
    storage_service = StorageService(
        db=db,
        image_repo=image_repo,
        config=config,
        logger=logger,
    )
    auth_service = AuthService(
        db=db,
        session=session,
        config=config,
        logger=logger,
        user_repo=user_repo,
    )

    # ------------------------------------------------------------------
    # 3. Orchestration services
    # ------------------------------------------------------------------
    feed_service = FeedService(
        image_repo=image_repo,
        user_repo=user_repo,
        profile_repo=profile_repo,
        resolver=url_resolver,
        config=config,
        logger=logger,
    )
    pin_service = PinService(
        session=session,
        auth_service=auth_service,
        storage=storage_service,
        image_repo=image_repo,
        user_repo=user_repo,
        resolver=url_resolver,
        config=config,
        logger=logger,
    )
    profile_service = ProfileService(
        session=session,
        profile_repo=profile_repo,
        user_repo=user_repo,
        storage=storage_service,
        resolver=url_resolver,
        config=config,
        logger=logger,
    )

    image_loader: Optional[ImageLoader] = None
    if with_image_loader:
        image_loader = ImageLoader(config=config, logger=logger)

    return ServiceContainer(
        auth_service=auth_service,
        url_resolver=url_resolver,
        storage_service=storage_service,
        feed_service=feed_service,
        pin_service=pin_service,
        profile_service=profile_service,
        image_loader=image_loader,
    )
