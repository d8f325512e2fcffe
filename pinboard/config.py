"""
Application Configuration.

Pydantic Settings model for the Pinboard client.
All configuration is loaded from environment variables and .env files.
Inject an AppConfig instance via dependency injection where needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import ClassVar, Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings


class AppConfig(BaseSettings):
    """Central configuration loaded from environment variables and defaults."""

    # --- Supabase ---
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: SecretStr = SecretStr("")

    # --- Object storage ---
    STORAGE_BUCKET: str = "images"
    # Base used when the storage SDK hands back an empty public URL.
    # Falls back to SUPABASE_URL when left empty.
    STORAGE_PUBLIC_BASE_URL: str = ""
    UPLOAD_CACHE_CONTROL: str = "3600"
    AVATAR_FOLDER: str = "avatars"

    # Content types accepted for avatars (pins accept any image/*).
    AVATAR_CONTENT_TYPES: ClassVar[frozenset[str]] = frozenset(
        {"image/jpeg", "image/png"}
    )

    # --- Auth ---
    AUTH_REDIRECT_URL: str = "http://localhost:3000/auth/callback"
    MIN_PASSWORD_LENGTH: int = 6

    # --- Timeouts (seconds) ---
    FETCH_TIMEOUT_S: float = 15.0
    RESOLVE_TIMEOUT_S: float = 5.0
    IMAGE_FETCH_TIMEOUT_S: float = 20.0

    # --- Logging ---
    LOG_MAX_BYTES: int = 5_242_880  # 5 MB
    LOG_BACKUP_COUNT: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @model_validator(mode="after")
    def _warn_missing_env(self) -> "AppConfig":
        """Emit a startup warning when critical configuration is empty."""
        _log = logging.getLogger("pinboard.config")

        if not Path(".env").exists():
            _log.warning(
                "No .env file found; configuration loaded from "
                "environment variables or defaults."
            )

        if not self.SUPABASE_URL or not self.SUPABASE_ANON_KEY.get_secret_value():
            _log.warning(
                "SUPABASE_URL or SUPABASE_ANON_KEY is empty. "
                "Every backend call will fail until both are set."
            )

        return self

    @property
    def public_storage_base(self) -> str:
        """Base URL for manually constructed public object URLs."""
        base = self.STORAGE_PUBLIC_BASE_URL or self.SUPABASE_URL
        return base.rstrip("/")


# ---------------------------------------------------------------------------
# Module-level singleton factory
# ---------------------------------------------------------------------------

_config_instance: Optional[AppConfig] = None
_config_lock: threading.Lock = threading.Lock()


def get_config() -> AppConfig:
    """Return a cached ``AppConfig`` singleton.

    Uses a check-lock-check pattern so the fast path stays lock-free.
    Prefer direct constructor injection of ``AppConfig`` in new code;
    the logger factory is the main caller of this function.
    """
    global _config_instance
    if _config_instance is None:
        with _config_lock:
            if _config_instance is None:
                _config_instance = AppConfig()
    return _config_instance
