"""Tests for PollingSubscription: change detection, error backoff, cancel."""

import asyncio

import pytest

from unichat.application import ChatMessage, RemoteFetchFailure
from unichat.infrastructure.subscription import PollingSubscription, backoff_delay


class _ScriptedReader:
    """Returns (or raises) the scripted results in order, then repeats the last one."""

    def __init__(self, *results) -> None:
        self._results = list(results)
        self.calls = 0

    def __call__(self) -> list[ChatMessage]:
        self.calls += 1
        result = self._results[0] if len(self._results) == 1 else self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return list(result)


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    async def poll():
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(poll(), timeout)


def test_backoff_delay_doubles_and_caps():
    assert backoff_delay(1, 0.5, 30.0) == 0.5
    assert backoff_delay(2, 0.5, 30.0) == 1.0
    assert backoff_delay(3, 0.5, 30.0) == 2.0
    assert backoff_delay(10, 0.5, 30.0) == 30.0


@pytest.mark.asyncio
async def test_delivers_only_changed_snapshots() -> None:
    m1 = ChatMessage(sender="Alice", content="msg1")
    m2 = ChatMessage(sender="Bob", content="msg2")
    reader = _ScriptedReader([m1], [m1], [m1, m2])
    updates: list[list[ChatMessage]] = []

    sub = PollingSubscription(reader, updates.append, lambda e: None, poll_interval=0.01)
    await _wait_for(lambda: len(updates) == 2)
    await _wait_for(lambda: reader.calls >= 5)
    sub.cancel()

    assert updates == [[m1], [m1, m2]]


@pytest.mark.asyncio
async def test_errors_reported_and_polling_continues() -> None:
    m1 = ChatMessage(sender="Alice", content="msg1")
    reader = _ScriptedReader(
        RemoteFetchFailure("down"), RemoteFetchFailure("still down"), [m1]
    )
    updates: list[list[ChatMessage]] = []
    errors: list[Exception] = []

    sub = PollingSubscription(
        reader,
        updates.append,
        errors.append,
        poll_interval=0.01,
        base_delay=0.01,
        max_delay=0.02,
    )
    await _wait_for(lambda: updates)
    sub.cancel()

    assert len(errors) == 2
    assert all(isinstance(e, RemoteFetchFailure) for e in errors)
    assert updates == [[m1]]


@pytest.mark.asyncio
async def test_unexpected_read_error_is_reported_and_polling_continues() -> None:
    m1 = ChatMessage(sender="Alice", content="msg1")
    reset = ConnectionResetError("connection reset by peer")
    reader = _ScriptedReader(reset, [m1])
    updates: list[list[ChatMessage]] = []
    errors: list[Exception] = []

    sub = PollingSubscription(
        reader, updates.append, errors.append, poll_interval=0.01, base_delay=0.01
    )
    await _wait_for(lambda: updates)

    assert sub.active
    assert errors == [reset]
    assert updates == [[m1]]
    sub.cancel()


@pytest.mark.asyncio
async def test_failing_update_callback_does_not_end_subscription() -> None:
    m1 = ChatMessage(sender="Alice", content="msg1")
    m2 = ChatMessage(sender="Bob", content="msg2")
    reader = _ScriptedReader([m1], [m1, m2])
    seen: list[list[ChatMessage]] = []
    errors: list[Exception] = []

    def on_update(snapshot: list[ChatMessage]) -> None:
        seen.append(snapshot)
        if len(seen) == 1:
            raise RuntimeError("render failed")

    sub = PollingSubscription(reader, on_update, errors.append, poll_interval=0.01)
    await _wait_for(lambda: len(seen) == 2)

    assert sub.active
    assert seen == [[m1], [m1, m2]]
    assert [str(e) for e in errors] == ["render failed"]
    sub.cancel()


@pytest.mark.asyncio
async def test_cancel_stops_polling_and_is_idempotent() -> None:
    reader = _ScriptedReader([])
    sub = PollingSubscription(reader, lambda s: None, lambda e: None, poll_interval=0.01)
    await _wait_for(lambda: reader.calls >= 1)

    sub.cancel()
    sub.cancel()
    await asyncio.sleep(0.05)
    calls = reader.calls
    await asyncio.sleep(0.05)

    assert not sub.active
    assert reader.calls == calls
