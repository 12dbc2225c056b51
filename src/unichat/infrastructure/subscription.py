"""Live subscription built on repeated reads, for stores without change feeds."""

import asyncio
import logging
from collections.abc import Callable

from unichat.application.dto import ChatMessage
from unichat.application.errors import RemoteFetchFailure
from unichat.application.ports import ErrorCallback, SnapshotCallback

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0
BACKOFF_BASE_DELAY = 0.5
BACKOFF_MAX_DELAY = 30.0


def backoff_delay(failures: int, base_delay: float, max_delay: float) -> float:
    """Delay before the next read after `failures` consecutive failures (>= 1)."""
    return min(base_delay * (2 ** (failures - 1)), max_delay)


class PollingSubscription:
    """Re-reads the ordered snapshot every poll_interval and delivers it when it changed.

    Read failures of any kind go to on_error and the next read is delayed with
    exponential backoff; an exception from on_update is also reported to
    on_error. The subscription keeps running until cancel(). Must be created on a
    running event loop; the blocking read runs in a worker thread.
    """

    def __init__(
        self,
        read_snapshot: Callable[[], list[ChatMessage]],
        on_update: SnapshotCallback,
        on_error: ErrorCallback,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        base_delay: float = BACKOFF_BASE_DELAY,
        max_delay: float = BACKOFF_MAX_DELAY,
    ) -> None:
        self._read_snapshot = read_snapshot
        self._on_update = on_update
        self._on_error = on_error
        self._poll_interval = poll_interval
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._cancelled = False
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def active(self) -> bool:
        return not self._cancelled and not self._task.done()

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._task.cancel()

    async def _run(self) -> None:
        last: list[ChatMessage] | None = None
        failures = 0
        while not self._cancelled:
            try:
                snapshot = await asyncio.to_thread(self._read_snapshot)
            except Exception as e:
                failures += 1
                delay = backoff_delay(failures, self._base_delay, self._max_delay)
                logger.warning(
                    "Message snapshot read failed (attempt %d), retrying in %.1fs: %s",
                    failures,
                    delay,
                    e,
                    exc_info=not isinstance(e, RemoteFetchFailure),
                )
                self._report(e)
                await asyncio.sleep(delay)
                continue
            failures = 0
            if snapshot != last:
                last = snapshot
                try:
                    self._on_update(list(snapshot))
                except Exception as e:
                    logger.exception("Snapshot subscriber raised")
                    self._report(e)
            await asyncio.sleep(self._poll_interval)

    def _report(self, error: Exception) -> None:
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Subscription error callback raised")
