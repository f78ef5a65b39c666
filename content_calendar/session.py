"""Per-session calendar state: snapshot, derived weeks and user toggles."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Awaitable, Callable, Iterable, Optional, Tuple

from .loader import FetchContents, LoadResult, WeekLoader
from .models import ContentItem
from .state import CalendarViewState, initial_state, toggle_done, toggle_week
from .weeks import WeekBucket, organize_by_week_with_stats

logger = logging.getLogger(__name__)

MarkedDoneCallback = Callable[[str], None]
PersistCompletion = Callable[[str], Awaitable[object]]


class CompletionSyncError(RuntimeError):
    """Raised when persisting a completion fails and the toggle was reverted."""

    def __init__(self, item_id: str, message: str) -> None:
        super().__init__(message)
        self.item_id = item_id


@dataclass(frozen=True)
class ToggleAction:
    item_id: str
    previous: CalendarViewState
    current: CalendarViewState

    @property
    def done(self) -> bool:
        return self.current.is_done(self.item_id)

    def undo(self) -> CalendarViewState:
        return self.previous


class CalendarSession:
    def __init__(
        self,
        fetch: Optional[FetchContents] = None,
        *,
        tz: Optional[tzinfo] = None,
        completed: Iterable[str] = (),
        on_item_marked_done: Optional[MarkedDoneCallback] = None,
    ) -> None:
        self._tz = tz
        self._loader = WeekLoader(fetch, tz=tz) if fetch is not None else None
        self._state = initial_state(completed)
        self._items: Tuple[ContentItem, ...] = ()
        self._buckets: Tuple[WeekBucket, ...] = ()
        self._unscheduled = 0
        self._loaded = False
        self._callback = on_item_marked_done

    @property
    def state(self) -> CalendarViewState:
        return self._state

    @property
    def items(self) -> Tuple[ContentItem, ...]:
        return self._items

    @property
    def buckets(self) -> Tuple[WeekBucket, ...]:
        return self._buckets

    @property
    def unscheduled(self) -> int:
        return self._unscheduled

    @property
    def loaded(self) -> bool:
        return self._loaded

    def set_callback(self, callback: Optional[MarkedDoneCallback]) -> None:
        self._callback = callback

    def set_items(self, items: Iterable[ContentItem]) -> None:
        snapshot = tuple(items)
        buckets, unscheduled = organize_by_week_with_stats(snapshot, self._tz)
        self._apply(snapshot, tuple(buckets), unscheduled)

    def _apply(
        self,
        items: Tuple[ContentItem, ...],
        buckets: Tuple[WeekBucket, ...],
        unscheduled: int,
    ) -> None:
        self._items = items
        self._buckets = buckets
        self._unscheduled = unscheduled
        self._loaded = True

    async def refresh(self) -> LoadResult:
        if self._loader is None:
            raise RuntimeError("Session has no content source configured")
        result = await self._loader.load()
        if not result.stale:
            self._apply(result.items, result.buckets, result.unscheduled)
        return result

    def find_item(self, item_id: str) -> Optional[ContentItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def toggle_week(self, key: str) -> CalendarViewState:
        self._state = toggle_week(self._state, key)
        return self._state

    def toggle_done(self, item_id: str) -> ToggleAction:
        previous = self._state
        self._state = toggle_done(previous, item_id)
        action = ToggleAction(item_id=item_id, previous=previous, current=self._state)
        if self._callback is not None:
            self._callback(item_id)
        return action

    def undo(self, action: ToggleAction) -> CalendarViewState:
        # Only revert the one id; other toggles made meanwhile stay intact
        if self._state.is_done(action.item_id) == action.done:
            self._state = toggle_done(self._state, action.item_id)
            if self._callback is not None:
                self._callback(action.item_id)
        return self._state

    async def mark_done(self, item_id: str, persist: PersistCompletion) -> ToggleAction:
        """Toggle ``item_id`` locally, then persist it; revert when that fails."""

        action = self.toggle_done(item_id)
        try:
            await persist(item_id)
        except Exception as exc:
            self.undo(action)
            logger.warning("Completion of %s not saved, reverted: %s", item_id, exc)
            raise CompletionSyncError(item_id, f"Could not save completion of {item_id}") from exc
        return action


__all__ = [
    "CalendarSession",
    "CompletionSyncError",
    "MarkedDoneCallback",
    "PersistCompletion",
    "ToggleAction",
]
