"""Logging and errors for cache-warmer.

Everything logs to stderr so stdout stays free for ``scan`` reports. The
level comes from ``LOG_LEVEL``; a logger may opt into one JSON object per
line, carrying the extra fields a :class:`ContextLogger` attaches (project
directory, failure counts, changed file counts).
"""
import logging
import json
import os
import sys
from typing import Any, Dict, Optional
from datetime import datetime, timezone

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
logging.basicConfig(
    level=_log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stderr)]
)

_logger_cache: Dict[str, logging.Logger] = {}


class JSONFormatter(logging.Formatter):
    """One JSON object per record; context fields are merged at top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc) if exc is not None else None,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=str)


def get_logger(name: str, json_format: bool = False) -> logging.Logger:
    """Return the (cached) logger ``name``.

    With ``json_format`` the logger gets its own stderr handler using
    :class:`JSONFormatter` and stops propagating to the root handler, so
    records are not printed twice.
    """
    key = f"{name}:{json_format}"
    cached = _logger_cache.get(key)
    if cached is not None:
        return cached

    logger = logging.getLogger(name)
    logger.setLevel(_log_level)
    if json_format and not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.propagate = False

    _logger_cache[key] = logger
    return logger


class ContextLogger:
    """Attach fixed fields (e.g. the watched project) to every record."""

    __slots__ = ('logger', 'context')

    def __init__(self, logger: logging.Logger, **context):
        self.logger = logger
        self.context = context

    def _log(self, level: int, msg: str, **extra):
        if not self.logger.isEnabledFor(level):
            return
        record = self.logger.makeRecord(self.logger.name, level, "(unknown file)", 0, msg, (), None)
        record.extra_fields = {**self.context, **extra}
        self.logger.handle(record)

    def debug(self, msg: str, **extra):
        self._log(logging.DEBUG, msg, **extra)

    def info(self, msg: str, **extra):
        self._log(logging.INFO, msg, **extra)

    def warning(self, msg: str, **extra):
        self._log(logging.WARNING, msg, **extra)

    def error(self, msg: str, **extra):
        self._log(logging.ERROR, msg, **extra)


class CacheWarmerError(Exception):
    """Base exception for all cache-warmer errors."""
    pass


class ConfigurationError(CacheWarmerError):
    """Missing project directory, console or malformed settings."""
    pass


class ConsoleNotFoundError(ConfigurationError):
    """The Symfony console entry point is absent."""
    pass


class EnumerationError(CacheWarmerError):
    """Directory walk or glob failure while building the watched file set."""
    pass


class ProjectFileNotFoundError(EnumerationError):
    """A mandatory project file (front controller) does not exist."""

    def __init__(self, path: str):
        super().__init__(f"file not found: {path}")
        self.path = path


class FingerprintError(CacheWarmerError):
    """A watched file could not be stat'ed."""

    def __init__(self, path: str, cause: Optional[BaseException] = None):
        super().__init__(
            f'can\'t get stats for the "{path}" file, check the project permissions '
            f"or if a new file was created: {cause}"
        )
        self.path = path


class RebuildError(CacheWarmerError):
    """The console cache command exited with an error."""

    def __init__(self, message: str, output: str = ""):
        super().__init__(message)
        self.output = output


def _convert(value: Any, kind: type, default: Any, logger: Optional[logging.Logger], name: str) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        return kind(value)
    except (ValueError, TypeError):
        if logger:
            logger.warning(f"Ignoring invalid {name or 'value'} {value!r}, using {default}")
        return default


def safe_int(value: Any, default: int, logger: Optional[logging.Logger] = None, context: str = "") -> int:
    """``int(value)``, or ``default`` (with a warning on ``logger``) when it is blank or invalid."""
    return _convert(value, int, default, logger, context)


def safe_float(value: Any, default: float, logger: Optional[logging.Logger] = None, context: str = "") -> float:
    return _convert(value, float, default, logger, context)
