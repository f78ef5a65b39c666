"""Resolve the running application version."""
from __future__ import annotations

import os
from importlib import metadata

_FALLBACK_VERSION = "0.0.0"
_DISTRIBUTION_NAME = "weekly-content-calendar"


def _clean(value: str | None) -> str | None:
    if not value:
        return None
    value = value.strip()
    return value or None


def _load_from_env() -> str | None:
    return _clean(os.getenv("CALENDAR_APP_VERSION"))


def _load_from_metadata() -> str | None:
    try:
        return _clean(metadata.version(_DISTRIBUTION_NAME))
    except metadata.PackageNotFoundError:
        return None


def _resolve_version() -> str:
    for loader in (_load_from_env, _load_from_metadata):
        value = loader()
        if value:
            return value
    return _FALLBACK_VERSION


__version__ = _resolve_version()
APP_VERSION = __version__

__all__ = ["APP_VERSION", "__version__"]
