import asyncio
from datetime import timezone

import pytest

from content_calendar.client import ContentApiError
from content_calendar.loader import WeekLoader
from content_calendar.session import CalendarSession, CompletionSyncError

UTC = timezone.utc


def test_toggle_notifies_callback_on_every_toggle(make_item) -> None:
    notified: list[str] = []
    session = CalendarSession(tz=UTC, on_item_marked_done=notified.append)
    session.set_items([make_item("a", createdAt="2024-01-03T10:00:00Z")])

    first = session.toggle_done("a")
    second = session.toggle_done("a")

    assert notified == ["a", "a"]
    assert first.done is True
    assert second.done is False
    assert not session.state.is_done("a")


def test_undo_only_reverts_the_given_item() -> None:
    session = CalendarSession(tz=UTC)
    action = session.toggle_done("a")
    session.toggle_done("b")

    session.undo(action)

    assert not session.state.is_done("a")
    assert session.state.is_done("b")
    assert action.undo() == action.previous


def test_set_items_buckets_snapshot_and_counts_undated(make_item) -> None:
    session = CalendarSession(tz=UTC, completed=["b"])
    session.set_items(
        [
            make_item("a", createdAt="2024-01-03T10:00:00Z"),
            make_item("b", createdAt="2024-01-08T09:00:00Z"),
            make_item("c"),
        ]
    )

    assert session.loaded
    assert [bucket.key for bucket in session.buckets] == [
        "2024-01-01_2024-01-07",
        "2024-01-08_2024-01-14",
    ]
    assert session.unscheduled == 1
    assert session.state.is_done("b")
    assert session.find_item("c") is not None
    assert session.find_item("missing") is None


async def test_mark_done_keeps_toggle_when_persist_succeeds() -> None:
    saved: list[str] = []

    async def persist(item_id: str) -> None:
        saved.append(item_id)

    session = CalendarSession(tz=UTC)
    action = await session.mark_done("hw", persist)

    assert saved == ["hw"]
    assert action.done
    assert session.state.is_done("hw")


async def test_mark_done_reverts_when_persist_fails() -> None:
    notified: list[str] = []

    async def persist(item_id: str) -> None:
        raise ContentApiError("boom", 500)

    session = CalendarSession(tz=UTC, on_item_marked_done=notified.append)

    with pytest.raises(CompletionSyncError) as excinfo:
        await session.mark_done("hw", persist)

    assert excinfo.value.item_id == "hw"
    assert isinstance(excinfo.value.__cause__, ContentApiError)
    assert not session.state.is_done("hw")
    # forward toggle, then the revert
    assert notified == ["hw", "hw"]


async def test_refresh_without_source_raises() -> None:
    session = CalendarSession(tz=UTC)
    with pytest.raises(RuntimeError):
        await session.refresh()


async def test_refresh_applies_fetched_snapshot(make_item) -> None:
    async def fetch():
        return [make_item("a", createdAt="2024-01-03T10:00:00Z")]

    session = CalendarSession(fetch, tz=UTC)
    result = await session.refresh()

    assert result.sequence == 1
    assert not result.stale
    assert [item.id for item in session.items] == ["a"]


async def test_stale_response_is_discarded(make_item) -> None:
    slow_release = asyncio.Event()
    calls = 0

    async def fetch():
        nonlocal calls
        calls += 1
        if calls == 1:
            await slow_release.wait()
            return [make_item("old", createdAt="2024-01-03T10:00:00Z")]
        return [make_item("new", createdAt="2024-02-03T10:00:00Z")]

    session = CalendarSession(fetch, tz=UTC)

    first = asyncio.ensure_future(session.refresh())
    await asyncio.sleep(0)
    second = await session.refresh()
    slow_release.set()
    first_result = await first

    assert second.sequence == 2 and not second.stale
    assert first_result.sequence == 1 and first_result.stale
    assert [item.id for item in session.items] == ["new"]


async def test_fetch_errors_propagate_from_loader() -> None:
    async def fetch():
        raise ContentApiError("down")

    loader = WeekLoader(fetch, tz=UTC)
    with pytest.raises(ContentApiError):
        await loader.load()
    assert loader.latest_sequence == 1


def test_undo_notifies_callback_only_when_it_reverts() -> None:
    notified: list[str] = []
    session = CalendarSession(tz=UTC, on_item_marked_done=notified.append)

    action = session.toggle_done("a")
    session.undo(action)
    session.undo(action)

    assert notified == ["a", "a"]
    assert not session.state.is_done("a")
