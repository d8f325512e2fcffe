# tests/test_logger_config.py
"""Structured logging and configuration loading."""

import io
import json
import logging

from pinboard.config import AppConfig
from pinboard.logger import JSONFormatter, StructuredLogger, get_logger


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("feed", logging.INFO, __file__, 1, "Loaded %d pins", (3,), None)
    record.event = "FEED_LOADED"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger_name"] == "feed"
    assert entry["message"] == "Loaded 3 pins"
    assert entry["extra"] == {"event": "FEED_LOADED"}


def test_structured_logger_writes_json_lines(tmp_path):
    stream = io.StringIO()
    log = StructuredLogger(
        name="pinboard.tests.stream", stream=stream, log_file=str(tmp_path / "s.log"),
    )

    log.warning("Upload failed", extra={"event": "UPLOAD"})

    entry = json.loads(stream.getvalue().splitlines()[-1])
    assert entry["message"] == "Upload failed"
    assert entry["extra"]["event"] == "UPLOAD"
    assert (tmp_path / "s.log").read_text(encoding="utf-8").strip()


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co/")
    monkeypatch.setenv("STORAGE_BUCKET", "pins")
    monkeypatch.setenv("RESOLVE_TIMEOUT_S", "1.5")

    config = AppConfig(_env_file=None)

    assert config.STORAGE_BUCKET == "pins"
    assert config.RESOLVE_TIMEOUT_S == 1.5
    assert config.public_storage_base == "https://env.supabase.co"


def test_config_reads_dotenv_file(tmp_path):
    env = tmp_path / "custom.env"
    env.write_text("SUPABASE_ANON_KEY=from-file\nMIN_PASSWORD_LENGTH=8\n", encoding="utf-8")

    config = AppConfig(_env_file=str(env))

    assert config.SUPABASE_ANON_KEY.get_secret_value() == "from-file"
    assert config.MIN_PASSWORD_LENGTH == 8


def test_explicit_public_base_wins():
    config = AppConfig(
        _env_file=None, SUPABASE_URL="https://a.co", STORAGE_PUBLIC_BASE_URL="https://cdn.co/",
    )
    assert config.public_storage_base == "https://cdn.co"


def test_formatter_masks_secrets_and_keeps_scalars():
    record = logging.LogRecord("auth", logging.INFO, __file__, 1, "login", (), None)
    record.access_token = "eyJhbGciOi"
    record.count = 3
    record.confirmed = True

    extra = json.loads(JSONFormatter().format(record))["extra"]

    assert extra == {"access_token": "***", "count": 3, "confirmed": True}


def test_loggers_live_under_pinboard_namespace():
    assert get_logger("feed").name == "pinboard.feed"
    assert get_logger("pinboard.ui").name == "pinboard.ui"
