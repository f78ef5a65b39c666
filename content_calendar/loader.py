"""Fetch-and-bucket with protection against out-of-order responses."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from .models import ContentItem
from .weeks import WeekBucket, organize_by_week_with_stats

logger = logging.getLogger(__name__)

FetchContents = Callable[[], Awaitable[Sequence[ContentItem]]]


@dataclass(frozen=True)
class LoadResult:
    sequence: int
    items: Tuple[ContentItem, ...]
    buckets: Tuple[WeekBucket, ...]
    unscheduled: int
    stale: bool = False


class WeekLoader:
    """Run ``fetch`` and bucket its snapshot, tagging each run with a sequence.

    A result is stale when another load was dispatched after it started;
    callers should ignore such results.
    """

    def __init__(self, fetch: FetchContents, tz: Optional[tzinfo] = None) -> None:
        self._fetch = fetch
        self._tz = tz
        self._counter = itertools.count(1)
        self._latest = 0

    @property
    def latest_sequence(self) -> int:
        return self._latest

    async def load(self) -> LoadResult:
        sequence = next(self._counter)
        self._latest = sequence

        items: List[ContentItem] = list(await self._fetch())
        buckets, unscheduled = organize_by_week_with_stats(items, self._tz)
        stale = sequence < self._latest
        if stale:
            logger.info(
                "Discarding content load #%d; #%d was dispatched later",
                sequence,
                self._latest,
            )
        return LoadResult(
            sequence=sequence,
            items=tuple(items),
            buckets=tuple(buckets),
            unscheduled=unscheduled,
            stale=stale,
        )


__all__ = ["FetchContents", "LoadResult", "WeekLoader"]
