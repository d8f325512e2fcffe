"""
Structured JSON Logging Module.

Every logger handed out by ``get_logger`` lives under the ``pinboard``
namespace and propagates to one shared root, configured once with a
stdout handler and a rotating ``pinboard.log``.  A ``StructuredLogger``
built with an explicit ``stream`` or ``log_file`` gets its own sinks
instead (tests, ad-hoc tooling).

Records are rendered as one JSON object per line.  Session tokens and
passwords that end up in ``extra`` are masked before they reach a sink.
"""

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional, TextIO

ROOT_LOGGER_NAME: str = "pinboard"

_REDACTED: str = "***"
_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"password", "access_token", "refresh_token", "token", "apikey", "api_key"}
)
_JSON_SCALARS = (str, int, float, bool, type(None))


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (UTC ISO-8601), ``level``, ``logger_name``,
    ``thread``, ``message``, then ``extra`` and ``exception`` when present.
    """

    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        extra_fields = {
            key: self._render(key, value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False)

    @staticmethod
    def _render(key: str, value: Any) -> Any:
        if key.lower() in _SENSITIVE_KEYS:
            return _REDACTED
        return value if isinstance(value, _JSON_SCALARS) else str(value)


def _qualified(name: str) -> str:
    """``"feed"`` -> ``"pinboard.feed"``; names already in the namespace pass."""
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return name
    return f"{ROOT_LOGGER_NAME}.{name}"


def _attach_handlers(
    target: logging.Logger,
    level: int,
    stream: TextIO,
    log_file: str,
    max_bytes: int,
    backup_count: int,
) -> None:
    formatter = JSONFormatter()

    stream_handler = logging.StreamHandler(stream)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    target.addHandler(stream_handler)

    try:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            filename=str(log_path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as exc:
        target.warning(
            "Could not create log file '%s': %s. Continuing with console logging only.",
            log_file,
            exc,
        )
        return
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    target.addHandler(file_handler)


_root_lock: threading.Lock = threading.Lock()


class StructuredLogger:
    """Injectable logger.

    Instantiate this class and pass the resulting object wherever a logger
    is needed.  The underlying ``logging.Logger`` is exposed via the
    ``.logger`` attribute and the usual level methods are delegated.

    Usage::

        log = StructuredLogger(name="feed")
        log.info("Feed loaded", extra={"event": "FEED_LOADED", "count": 42})

    Parameters
    ----------
    name:
        Logger name, placed under the ``pinboard`` namespace.
    level:
        Minimum level for this logger and, on first use, the shared root.
    stream, log_file:
        Explicit sinks.  Either one gives this logger private handlers
        and stops propagation to the shared root.
    max_bytes, backup_count:
        Rotation limits; default to ``LOG_MAX_BYTES`` / ``LOG_BACKUP_COUNT``.
    """

    _DEFAULT_LOG_FILE: str = "pinboard.log"

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        level: int = logging.INFO,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy import to avoid circular dependency at module level
        from pinboard.config import get_config
        _cfg = get_config()

        resolved_max_bytes = max_bytes if max_bytes is not None else _cfg.LOG_MAX_BYTES
        resolved_backup_count = (
            backup_count if backup_count is not None else _cfg.LOG_BACKUP_COUNT
        )

        self._logger: logging.Logger = logging.getLogger(_qualified(name))
        self._logger.setLevel(level)

        if stream is not None or log_file is not None:
            if not self._logger.handlers:
                _attach_handlers(
                    self._logger,
                    level,
                    stream or sys.stdout,
                    log_file or self._DEFAULT_LOG_FILE,
                    resolved_max_bytes,
                    resolved_backup_count,
                )
            self._logger.propagate = False
            return

        root = logging.getLogger(ROOT_LOGGER_NAME)
        with _root_lock:
            if not root.handlers:
                root.setLevel(level)
                root.propagate = False
                _attach_handlers(
                    root,
                    level,
                    sys.stdout,
                    self._DEFAULT_LOG_FILE,
                    resolved_max_bytes,
                    resolved_backup_count,
                )

    @property
    def logger(self) -> logging.Logger:
        """Access the underlying ``logging.Logger`` directly."""
        return self._logger

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.error(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: Any) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = ROOT_LOGGER_NAME) -> StructuredLogger:
    """``StructuredLogger`` for *name*, sharing the root sinks."""
    return StructuredLogger(name=name)
