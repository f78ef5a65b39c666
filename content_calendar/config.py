"""Connection settings for the learning platform API.

Defaults point at the production backend. Every value can be overridden via
environment variables or a JSON file referenced by ``CALENDAR_SETTINGS_FILE``.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PRODUCTION_URL = "https://api.aslilearn.ai"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = PRODUCTION_URL
    token: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    contents_path: str = "/api/student/asli-prep-content"
    homework_submission_path: str = "/api/student/homework-submission"

    @property
    def environment_label(self) -> str:
        if "localhost" in self.base_url or "127.0.0.1" in self.base_url:
            return "Development"
        return "Production"


def _clean(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    value = value.strip()
    return value or None


def _parse_timeout(value: object) -> float:
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        logger.warning("Invalid API timeout %r, using %.0fs", value, DEFAULT_TIMEOUT)
        return DEFAULT_TIMEOUT
    if timeout <= 0:
        return DEFAULT_TIMEOUT
    return timeout


def _load_overrides(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON in settings file: {path}") from exc
    if not isinstance(data, dict):
        raise RuntimeError("Settings file must contain a JSON object")
    return data


def get_api_settings() -> ApiSettings:
    """Return API settings, optionally overridden via file and env."""

    settings = ApiSettings()

    file_value = _clean(os.environ.get("CALENDAR_SETTINGS_FILE"))
    if file_value:
        override_path = Path(file_value).expanduser()
        if override_path.is_file():
            overrides = _load_overrides(override_path)
            known = {f.name for f in fields(ApiSettings)}
            payload = {key: value for key, value in overrides.items() if key in known}
            if "timeout" in payload:
                payload["timeout"] = _parse_timeout(payload["timeout"])
            settings = replace(settings, **payload)

    base_url = _clean(os.environ.get("CALENDAR_API_URL"))
    if base_url:
        settings = replace(settings, base_url=base_url)
    token = _clean(os.environ.get("CALENDAR_API_TOKEN"))
    if token:
        settings = replace(settings, token=token)
    timeout = _clean(os.environ.get("CALENDAR_API_TIMEOUT"))
    if timeout:
        settings = replace(settings, timeout=_parse_timeout(timeout))

    return replace(settings, base_url=settings.base_url.rstrip("/"))


__all__ = ["ApiSettings", "DEFAULT_TIMEOUT", "PRODUCTION_URL", "get_api_settings"]
