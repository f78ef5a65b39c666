from __future__ import annotations

import logging
import os
import sys
import threading
import webbrowser
from copy import deepcopy
from typing import Any

import uvicorn
from uvicorn.config import LOGGING_CONFIG
from uvicorn.main import STARTUP_FAILURE

from content_calendar.logging_setup import (
    FILE_FORMAT,
    LOG_HANDLER_NAME,
    announce_log_destination,
    configure_file_logging,
    get_file_handler_settings,
)

configure_file_logging(default_level=logging.WARNING)
announce_log_destination()

from content_calendar import app as calendar_app

LOGGER = logging.getLogger(__name__)

FALSE_VALUES = {"0", "false", "no", "off"}


def get_uvicorn_log_config() -> dict[str, Any]:
    """Return a logging configuration that avoids isatty() calls in Uvicorn."""

    log_config: dict[str, Any] = deepcopy(LOGGING_CONFIG)
    formatters = log_config.get("formatters", {})

    for formatter_name in ("default", "access"):
        formatter = formatters.get(formatter_name)
        if isinstance(formatter, dict):
            formatter = {**formatter, "use_colors": False}
            formatters[formatter_name] = formatter

    settings = get_file_handler_settings()
    if settings is not None:
        formatters.setdefault(
            LOG_HANDLER_NAME,
            {"()": "logging.Formatter", "fmt": FILE_FORMAT},
        )

        handlers = log_config.setdefault("handlers", {})
        handlers[LOG_HANDLER_NAME] = {
            "class": "logging.FileHandler",
            "formatter": LOG_HANDLER_NAME,
            "filename": str(settings.path),
            "encoding": "utf-8",
            "level": settings.level_name,
        }

        loggers_config = log_config.setdefault("loggers", {})
        for logger_name in ("uvicorn", "uvicorn.access"):
            logger_cfg = loggers_config.get(logger_name)
            if isinstance(logger_cfg, dict):
                logger_handlers = logger_cfg.setdefault("handlers", [])
                if LOG_HANDLER_NAME not in logger_handlers:
                    logger_handlers.append(LOG_HANDLER_NAME)

        uvicorn_error_logger = loggers_config.setdefault("uvicorn.error", {"level": "INFO"})
        error_handlers = uvicorn_error_logger.setdefault("handlers", ["default"])
        if LOG_HANDLER_NAME not in error_handlers:
            error_handlers.append(LOG_HANDLER_NAME)

    return log_config


def should_enable(value: str | None, default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in FALSE_VALUES


def open_browser(host: str, port: int, delay: float = 1.0) -> None:
    url = f"http://{host}:{port}/api/calendar/weeks"
    if delay <= 0:
        webbrowser.open(url, 2)
        return

    threading.Timer(delay, webbrowser.open, args=(url, 2)).start()


def main() -> None:
    host = os.getenv("CALENDAR_HOST", "127.0.0.1")
    try:
        port = int(os.getenv("CALENDAR_PORT", "8000"))
    except ValueError:
        LOGGER.error("CALENDAR_PORT must be an integer")
        raise SystemExit(2)

    if should_enable(os.getenv("CALENDAR_OPEN_BROWSER"), default=False):
        open_browser(host, port)

    config = uvicorn.Config(
        calendar_app.app,
        host=host,
        port=port,
        log_level=os.getenv("UVICORN_LOG_LEVEL", "info"),
        log_config=get_uvicorn_log_config(),
    )

    server = uvicorn.Server(config)
    server.run()

    if not server.started:
        sys.exit(STARTUP_FAILURE)


if __name__ == "__main__":
    main()
