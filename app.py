"""Compatibility module for plain ``uvicorn`` commands.

``uvicorn app:app --reload`` keeps working thanks to this module; the
FastAPI app itself lives in :mod:`content_calendar.app`.
"""

from content_calendar.app import app

__all__ = ["app"]
