"""Logger construction and the process-wide default logger."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from enum import IntEnum
from typing import IO

__all__ = ["Level", "Mode", "to_level", "to_mode", "new_logger", "set_logger", "get_logger"]


class Level(IntEnum):
    """Logging verbosity, ordered from most to least verbose."""

    DEBUG = -1
    INFO = 0
    WARN = 1
    ERROR = 2
    DPANIC = 3
    PANIC = 4
    FATAL = 5


class Mode(IntEnum):
    """Output mode: machine-readable production or human-readable development."""

    PROD = 0
    DEV = 1


_LEVEL_BY_NAME = {
    "debug": Level.DEBUG,
    "info": Level.INFO,
    "warn": Level.WARN,
    "error": Level.ERROR,
    "dpanic": Level.DPANIC,
    "panic": Level.PANIC,
    "fatal": Level.FATAL,
}

_STDLIB_LEVELS = {
    Level.DEBUG: logging.DEBUG,
    Level.INFO: logging.INFO,
    Level.WARN: logging.WARNING,
    Level.ERROR: logging.ERROR,
    Level.DPANIC: logging.CRITICAL,
    Level.PANIC: logging.CRITICAL,
    Level.FATAL: logging.CRITICAL,
}

_LOGGER_NAME = "gatewaykit"


def to_level(level: str) -> Level:
    """Parse a level name; all lower or all upper case, empty means info."""
    if level == "":
        return Level.INFO
    if level in (level.lower(), level.upper()):
        found = _LEVEL_BY_NAME.get(level.lower())
        if found is not None:
            return found
    raise ValueError(f"unrecognized level: {level!r}")


def to_mode(mode: str) -> Mode:
    """Parse 'production' or 'development', ignoring case."""
    lowered = mode.lower()
    if lowered == "production":
        return Mode.PROD
    if lowered == "development":
        return Mode.DEV
    raise ValueError(f"unknown log mode: {mode}")


class _Formatter(logging.Formatter):
    def __init__(self, mode: Mode) -> None:
        super().__init__()
        self._mode = mode

    def format(self, record: logging.LogRecord) -> str:
        fields = getattr(record, "fields", None) or {}
        level = record.levelname.lower()
        if level == "warning":
            level = "warn"
        message = record.getMessage()
        if self._mode is Mode.DEV:
            stamp = datetime.fromtimestamp(record.created, timezone.utc)
            parts = [stamp.isoformat(timespec="milliseconds"), level.upper(), record.name, message]
            if fields:
                parts.append(json.dumps(fields, default=str))
            text = "\t".join(parts)
        else:
            entry = {"level": level, "ts": record.created, "logger": record.name, "msg": message}
            entry.update(fields)
            text = json.dumps(entry, default=str)
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


def new_logger(
    write_to: IO[str] | None = None,
    level: Level = Level.INFO,
    mode: Mode = Mode.PROD,
) -> logging.Logger:
    """Create an independent logger writing to ``write_to`` (stderr by default).

    Structured values are passed as ``extra={"fields": {...}}``.
    """
    logger = logging.Logger(_LOGGER_NAME)
    logger.setLevel(_STDLIB_LEVELS[Level(level)])
    handler = logging.StreamHandler(write_to if write_to is not None else sys.stderr)
    handler.setFormatter(_Formatter(Mode(mode)))
    logger.addHandler(handler)
    return logger


def _null_logger() -> logging.Logger:
    logger = logging.Logger(_LOGGER_NAME)
    logger.addHandler(logging.NullHandler())
    return logger


class _DelegatingHandler(logging.Handler):
    """Forwards records to another logger."""

    def __init__(self, target: logging.Logger) -> None:
        super().__init__()
        self.target = target

    def emit(self, record: logging.LogRecord) -> None:
        if self.target.isEnabledFor(record.levelno):
            self.target.handle(record)


_state: dict[str, logging.Logger] = {"current": _null_logger()}


def set_logger(logger: logging.Logger) -> None:
    """Install ``logger`` as the process-wide default.

    Records sent to the standard ``gatewaykit`` logger hierarchy are delegated
    to it as well.
    """
    if not isinstance(logger, logging.Logger):
        raise TypeError(f"expected a logging.Logger, got {type(logger).__name__}")
    _state["current"] = logger

    shared = logging.getLogger(_LOGGER_NAME)
    if shared is logger:
        return
    for handler in list(shared.handlers):
        if isinstance(handler, _DelegatingHandler):
            shared.removeHandler(handler)
    shared.addHandler(_DelegatingHandler(logger))
    shared.setLevel(logging.NOTSET)
    shared.propagate = False


def get_logger() -> logging.Logger:
    """Return the process-wide default logger (discards output until set)."""
    return _state["current"]