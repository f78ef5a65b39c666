from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

import pytest

from content_calendar import logging_setup

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def _remove_log_handler() -> None:
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, "name", "") == logging_setup.LOG_HANDLER_NAME:
            root_logger.removeHandler(handler)
            handler.close()


def _import_run_app():
    existing = sys.modules.get("run_app")
    if existing is not None:
        return importlib.reload(existing)
    return importlib.import_module("run_app")


@pytest.fixture(autouse=True)
def clean_logging_handlers():
    if str(PROJECT_ROOT) not in sys.path:
        sys.path.insert(0, str(PROJECT_ROOT))
    sys.modules.pop("run_app", None)
    _remove_log_handler()
    yield
    _remove_log_handler()
    sys.modules.pop("run_app", None)


def test_uvicorn_log_config_disables_colors(monkeypatch, tmp_path):
    monkeypatch.setenv("CALENDAR_LOG_FILE", str(tmp_path / "calendar.log"))
    run_app = _import_run_app()
    config = run_app.get_uvicorn_log_config()

    assert config["formatters"]["default"]["use_colors"] is False
    assert config["formatters"]["access"]["use_colors"] is False


def test_uvicorn_loggers_write_to_the_log_file(monkeypatch, tmp_path):
    log_file = tmp_path / "calendar.log"
    monkeypatch.setenv("CALENDAR_LOG_FILE", str(log_file))
    run_app = _import_run_app()
    config = run_app.get_uvicorn_log_config()

    handler = config["handlers"][logging_setup.LOG_HANDLER_NAME]
    assert handler["filename"] == str(log_file)
    assert logging_setup.LOG_HANDLER_NAME in config["loggers"]["uvicorn.error"]["handlers"]


def test_file_log_level_can_be_configured(monkeypatch, tmp_path):
    monkeypatch.setenv("CALENDAR_LOG_FILE", str(tmp_path / "calendar.log"))
    monkeypatch.setenv("CALENDAR_LOG_LEVEL", "DEBUG")

    _import_run_app()

    root_logger = logging.getLogger()
    handler_levels = {
        handler.level
        for handler in root_logger.handlers
        if getattr(handler, "name", "") == logging_setup.LOG_HANDLER_NAME
    }
    assert handler_levels == {logging.DEBUG}


def test_configure_file_logging_reuses_existing_handler(monkeypatch, tmp_path):
    monkeypatch.setenv("CALENDAR_LOG_FILE", str(tmp_path / "calendar.log"))

    first = logging_setup.configure_file_logging()
    second = logging_setup.configure_file_logging()

    handlers = [
        handler
        for handler in logging.getLogger().handlers
        if getattr(handler, "name", "") == logging_setup.LOG_HANDLER_NAME
    ]
    assert len(handlers) == 1
    assert first is not None and second is not None
    assert second == first
    assert second.path == tmp_path / "calendar.log"


@pytest.mark.parametrize(
    ("value", "expected"),
    [("10", 10), ("warning", logging.WARNING), ("nonsense", logging.INFO), ("  ", logging.INFO)],
)
def test_log_level_parsing(monkeypatch, value, expected):
    monkeypatch.setenv("CALENDAR_LOG_LEVEL", value)
    assert logging_setup.get_configured_log_level() == expected


def test_should_enable_values(monkeypatch, tmp_path):
    monkeypatch.setenv("CALENDAR_LOG_FILE", str(tmp_path / "calendar.log"))
    run_app = _import_run_app()

    assert run_app.should_enable(None) is True
    assert run_app.should_enable(None, default=False) is False
    assert run_app.should_enable("off") is False
    assert run_app.should_enable("yes") is True


def test_resolve_file_log_settings_reads_path_and_level(monkeypatch, tmp_path):
    monkeypatch.setenv("CALENDAR_LOG_FILE", str(tmp_path / "calendar.log"))
    monkeypatch.setenv("CALENDAR_LOG_LEVEL", "error")

    settings = logging_setup.resolve_file_log_settings(default_level=logging.WARNING)

    assert settings == logging_setup.FileLogSettings(path=tmp_path / "calendar.log", level=logging.ERROR)
    assert settings.level_name == "ERROR"


def test_resolve_file_log_settings_defaults(monkeypatch, tmp_path):
    monkeypatch.delenv("CALENDAR_LOG_FILE", raising=False)
    monkeypatch.delenv("CALENDAR_LOG_LEVEL", raising=False)
    monkeypatch.chdir(tmp_path)

    settings = logging_setup.resolve_file_log_settings(default_level=logging.WARNING)

    assert settings.path == tmp_path / "content-calendar.log"
    assert settings.level == logging.WARNING


def test_uvicorn_file_handler_uses_resolved_level(monkeypatch, tmp_path):
    monkeypatch.setenv("CALENDAR_LOG_FILE", str(tmp_path / "calendar.log"))
    monkeypatch.setenv("CALENDAR_LOG_LEVEL", "DEBUG")
    run_app = _import_run_app()

    handler = run_app.get_uvicorn_log_config()["handlers"][logging_setup.LOG_HANDLER_NAME]

    assert handler["level"] == "DEBUG"
    assert handler["filename"] == str(logging_setup.get_file_handler_settings().path)
