"""Shared logging helpers for the launcher and the ASGI server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

LOG_HANDLER_NAME: Final = "content-calendar-file"
LOG_LEVEL_ENV_VAR: Final = "CALENDAR_LOG_LEVEL"
LOG_FILE_ENV_VAR: Final = "CALENDAR_LOG_FILE"
FILE_FORMAT: Final = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class FileLogSettings:
    path: Path
    level: int

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)


_ACTIVE: FileLogSettings | None = None


def _parse_level(value: str | None, default: int) -> int:
    text = (value or "").strip()
    if not text:
        return default
    if text.isdigit():
        return int(text)
    resolved = getattr(logging, text.upper(), None)
    return resolved if isinstance(resolved, int) else default


def get_configured_log_level(default: int = logging.INFO) -> int:
    return _parse_level(os.getenv(LOG_LEVEL_ENV_VAR), default)


def resolve_file_log_settings(default_level: int = logging.INFO) -> FileLogSettings:
    """Where and at which level the calendar log file should be written."""

    override = (os.getenv(LOG_FILE_ENV_VAR) or "").strip()
    path = Path(override).expanduser() if override else Path.cwd() / "content-calendar.log"
    return FileLogSettings(path=path, level=get_configured_log_level(default_level))


def _existing_handler() -> logging.FileHandler | None:
    for handler in logging.getLogger().handlers:
        if handler.name == LOG_HANDLER_NAME and isinstance(handler, logging.FileHandler):
            return handler
    return None


def configure_file_logging(default_level: int = logging.INFO) -> FileLogSettings | None:
    """Attach the named file handler to the root logger once."""

    global _ACTIVE

    existing = _existing_handler()
    if existing is not None:
        _ACTIVE = FileLogSettings(path=Path(existing.baseFilename), level=existing.level)
        return _ACTIVE

    settings = resolve_file_log_settings(default_level)
    try:
        settings.path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(settings.path, encoding="utf-8")
    except OSError as exc:  # pragma: no cover - depends on IO
        logging.getLogger(__name__).warning("Could not open log file: %s", exc)
        _ACTIVE = None
        return None

    handler.set_name(LOG_HANDLER_NAME)
    handler.setLevel(settings.level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    if root_logger.level > settings.level:
        root_logger.setLevel(settings.level)

    _ACTIVE = settings
    logging.getLogger(__name__).info("Log file: %s", settings.path)
    return settings


def announce_log_destination() -> None:
    if _ACTIVE is None:
        print("[logging] Console logging only (no log file configured).")
        return
    print(
        f"[logging] Calendar logs are written to {_ACTIVE.path} (level {_ACTIVE.level_name})."
        f" Set {LOG_LEVEL_ENV_VAR}=DEBUG for more detail."
    )


def get_file_handler_settings() -> FileLogSettings | None:
    return _ACTIVE
