"""Presentation helpers that turn week buckets into API payloads."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Any, Dict, Optional

from .client import resolve_file_url
from .models import ContentItem
from .state import CalendarViewState
from .weeks import WeekBucket, parse_timestamp, primary_date

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

KIND_ICONS: Dict[str, str] = {
    "Video": "videocam",
    "TextBook": "book",
    "Workbook": "document-text",
    "Material": "document",
    "Audio": "musical-notes",
    "Homework": "clipboard",
}
DEFAULT_ICON = "document"

KIND_COLORS: Dict[str, str] = {
    "Video": "#ef4444",
    "TextBook": "#3b82f6",
    "Workbook": "#9333ea",
    "Material": "#10b981",
    "Audio": "#f59e0b",
    "Homework": "#f97316",
}
DEFAULT_COLOR = "#6b7280"

KIND_ACTION_LABELS: Dict[str, str] = {
    "Video": "Watch",
    "TextBook": "Read",
    "Workbook": "Read",
    "Material": "Review",
}
DEFAULT_ACTION_LABEL = "Complete"


def kind_icon(kind: Optional[str]) -> str:
    return KIND_ICONS.get(kind, DEFAULT_ICON)


def kind_color(kind: Optional[str]) -> str:
    return KIND_COLORS.get(kind, DEFAULT_COLOR)


def kind_action_label(kind: Optional[str]) -> str:
    return KIND_ACTION_LABELS.get(kind, DEFAULT_ACTION_LABEL)


def format_date_range(start: datetime, end: datetime) -> str:
    """Short label such as ``1 - 7 Jan`` or ``29 Jan - 4 Feb``."""

    start_month = MONTH_ABBREVIATIONS[start.month - 1]
    end_month = MONTH_ABBREVIATIONS[end.month - 1]
    if start_month == end_month:
        return f"{start.day} - {end.day} {start_month}"
    return f"{start.day} {start_month} - {end.day} {end_month}"


def is_overdue(
    item: ContentItem,
    now: datetime,
    done: bool,
    tz: Optional[tzinfo] = None,
) -> bool:
    if done:
        return False
    deadline = parse_timestamp(item.deadline, tz)
    if deadline is None:
        return False
    reference = parse_timestamp(now, tz)
    return reference is not None and deadline < reference


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def serialize_item(
    item: ContentItem,
    state: CalendarViewState,
    now: datetime,
    *,
    tz: Optional[tzinfo] = None,
    base_url: Optional[str] = None,
) -> Dict[str, Any]:
    done = state.is_done(item.id)
    file_url = item.fileUrl
    if file_url and base_url:
        file_url = resolve_file_url(base_url, file_url)
    return {
        "id": item.id,
        "title": item.title,
        "kind": item.kind,
        "icon": kind_icon(item.kind),
        "color": kind_color(item.kind),
        "actionLabel": kind_action_label(item.kind),
        "subject": item.subject_name(),
        "primaryDate": _isoformat(primary_date(item, tz)),
        "deadline": _isoformat(parse_timestamp(item.deadline, tz)),
        "overdue": is_overdue(item, now, done, tz),
        "done": done,
        "fileUrl": file_url,
    }


def serialize_bucket(
    bucket: WeekBucket,
    state: CalendarViewState,
    now: datetime,
    *,
    tz: Optional[tzinfo] = None,
    base_url: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "key": bucket.key,
        "weekStart": bucket.week_start.isoformat(),
        "weekEnd": bucket.week_end.isoformat(),
        "label": format_date_range(bucket.week_start, bucket.week_end),
        "count": len(bucket.items),
        "expanded": state.is_expanded(bucket.key),
        "items": [
            serialize_item(item, state, now, tz=tz, base_url=base_url)
            for item in bucket.items
        ],
    }


__all__ = [
    "format_date_range",
    "is_overdue",
    "kind_action_label",
    "kind_color",
    "kind_icon",
    "serialize_bucket",
    "serialize_item",
]
