import asyncio
import inspect
import sys
from datetime import timezone
from pathlib import Path
from typing import Any

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from content_calendar.models import ContentItem


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Allow async test functions without requiring pytest-asyncio."""
    if inspect.iscoroutinefunction(pyfuncitem.obj):
        testargs = {arg: pyfuncitem.funcargs[arg] for arg in pyfuncitem._fixtureinfo.argnames}
        asyncio.run(pyfuncitem.obj(**testargs))
        return True
    return None


@pytest.fixture()
def utc():
    return timezone.utc


@pytest.fixture()
def make_item():
    def _make(item_id: str, **fields: Any) -> ContentItem:
        payload: dict[str, Any] = {"_id": item_id, "title": f"Item {item_id}", "type": "Material"}
        payload.update(fields)
        return ContentItem.model_validate(payload)

    return _make
