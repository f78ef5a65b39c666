"""Session-local view state for the weekly calendar.

The state is an immutable value owned by the caller. Reducers never mutate
their input; they return a new :class:`CalendarViewState`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import FrozenSet, Iterable


@dataclass(frozen=True, slots=True)
class CalendarViewState:
    done_ids: FrozenSet[str] = field(default_factory=frozenset)
    expanded_weeks: FrozenSet[str] = field(default_factory=frozenset)

    def is_done(self, item_id: str) -> bool:
        return item_id in self.done_ids

    def is_expanded(self, key: str) -> bool:
        return key in self.expanded_weeks


def initial_state(completed: Iterable[str] = ()) -> CalendarViewState:
    return CalendarViewState(done_ids=frozenset(completed))


def _flip(members: FrozenSet[str], value: str) -> FrozenSet[str]:
    if value in members:
        return members - {value}
    return members | {value}


def toggle_done(state: CalendarViewState, item_id: str) -> CalendarViewState:
    return replace(state, done_ids=_flip(state.done_ids, item_id))


def set_done(state: CalendarViewState, item_id: str, done: bool) -> CalendarViewState:
    if state.is_done(item_id) == done:
        return state
    return toggle_done(state, item_id)


def toggle_week(state: CalendarViewState, key: str) -> CalendarViewState:
    return replace(state, expanded_weeks=_flip(state.expanded_weeks, key))


__all__ = [
    "CalendarViewState",
    "initial_state",
    "set_done",
    "toggle_done",
    "toggle_week",
]
