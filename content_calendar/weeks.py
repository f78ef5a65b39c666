"""Group content items into Monday–Sunday calendar weeks.

Weeks always start on Monday, regardless of the locale's first day of the
week. Boundaries are computed with calendar-day arithmetic and only then
attached to a wall-clock time in the target zone, so a daylight-saving switch
inside a week never moves an item into the neighbouring week.

All functions take an optional ``tz``. ``None`` means the system local zone;
naive timestamps are interpreted in that zone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .models import ContentItem

logger = logging.getLogger(__name__)

START_OF_DAY = time(0, 0, 0, 0)
END_OF_DAY = time(23, 59, 59, 999000)


def _localize(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    if moment.tzinfo is None:
        if tz is None:
            return moment.astimezone()
        return moment.replace(tzinfo=tz)
    return moment.astimezone(tz)


def _at(day: date, clock: time, tz: Optional[tzinfo]) -> datetime:
    naive = datetime.combine(day, clock)
    if tz is None:
        return naive.astimezone()
    return naive.replace(tzinfo=tz)


def parse_timestamp(value: Any, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Parse an ISO-8601 value into an aware datetime, or ``None``."""

    if value is None:
        return None
    if isinstance(value, datetime):
        return _localize(value, tz)
    if isinstance(value, date):
        return _at(value, START_OF_DAY, tz)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    candidates = [text]
    if text[-1] in "Zz":
        candidates.append(text[:-1] + "+00:00")
    for candidate in candidates:
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            continue
        return _localize(parsed, tz)
    return None


def primary_date(item: ContentItem, tz: Optional[tzinfo] = None) -> Optional[datetime]:
    """Scheduled date when it parses, otherwise the creation timestamp."""

    for candidate in item.date_candidates():
        parsed = parse_timestamp(candidate, tz)
        if parsed is not None:
            return parsed
    return None


def _local_day(moment: date, tz: Optional[tzinfo]) -> date:
    if isinstance(moment, datetime):
        return _localize(moment, tz).date()
    return moment


def week_start(moment: date, tz: Optional[tzinfo] = None) -> datetime:
    """Monday 00:00 of the week containing ``moment``.

    Sunday belongs to the week that started on the preceding Monday.
    """

    day = _local_day(moment, tz)
    monday = day - timedelta(days=day.weekday())
    return _at(monday, START_OF_DAY, tz)


def week_end(moment: date, tz: Optional[tzinfo] = None) -> datetime:
    """Sunday 23:59:59.999 of the week containing ``moment``."""

    day = _local_day(moment, tz)
    sunday = day - timedelta(days=day.weekday()) + timedelta(days=6)
    return _at(sunday, END_OF_DAY, tz)


def week_key(start: datetime, end: datetime) -> str:
    return f"{start.date().isoformat()}_{end.date().isoformat()}"


@dataclass(frozen=True)
class WeekBucket:
    week_start: datetime
    week_end: datetime
    items: Tuple[ContentItem, ...]

    @property
    def key(self) -> str:
        return week_key(self.week_start, self.week_end)

    def __len__(self) -> int:
        return len(self.items)


def organize_by_week_with_stats(
    items: Iterable[ContentItem],
    tz: Optional[tzinfo] = None,
) -> Tuple[List[WeekBucket], int]:
    """Bucket ``items`` per week and report how many could not be dated."""

    groups: Dict[Tuple[datetime, datetime], List[Tuple[datetime, ContentItem]]] = {}
    unscheduled = 0

    for item in items:
        moment = primary_date(item, tz)
        if moment is None:
            unscheduled += 1
            logger.debug("Skipping item %s: no parseable date", item.id)
            continue
        bounds = (week_start(moment, tz), week_end(moment, tz))
        groups.setdefault(bounds, []).append((moment, item))

    buckets = [
        WeekBucket(
            week_start=start,
            week_end=end,
            items=tuple(item for _, item in sorted(entries, key=lambda entry: entry[0])),
        )
        for (start, end), entries in groups.items()
    ]
    buckets.sort(key=lambda bucket: bucket.week_start)

    if unscheduled:
        logger.debug("%d item(s) without a usable date left out of the calendar", unscheduled)
    return buckets, unscheduled


def organize_by_week(
    items: Iterable[ContentItem],
    tz: Optional[tzinfo] = None,
) -> List[WeekBucket]:
    """Partition ``items`` into chronologically ordered, non-empty weeks."""

    buckets, _ = organize_by_week_with_stats(items, tz)
    return buckets


__all__ = [
    "END_OF_DAY",
    "WeekBucket",
    "organize_by_week",
    "organize_by_week_with_stats",
    "parse_timestamp",
    "primary_date",
    "week_end",
    "week_key",
    "week_start",
]
