"""Chat view controller: live message list and sending."""

import asyncio
import logging
from collections.abc import Callable

from unichat.application.dto import ChatMessage, Invalid, MessageQueued, Notice
from unichat.application.errors import RemoteWriteFailure
from unichat.application.ports import RemoteMessageCollection, Subscription

logger = logging.getLogger(__name__)

DEFAULT_SENDER = "You"


class ChatSession:
    """Owns the message working set while a chat view is open.

    Snapshots replace the working set; they are never appended. Callbacks from
    the collection may arrive on any thread and are moved onto the event loop
    that called open().
    """

    def __init__(
        self,
        collection: RemoteMessageCollection,
        *,
        sender: str = DEFAULT_SENDER,
        on_change: Callable[[list[ChatMessage]], None] | None = None,
        on_notice: Callable[[Notice], None] | None = None,
    ) -> None:
        self._collection = collection
        self._sender = sender
        self._on_change = on_change
        self._on_notice = on_notice
        self._messages: list[ChatMessage] = []
        self._subscription: Subscription | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._send_tasks: set[asyncio.Task] = set()

    @property
    def messages(self) -> list[ChatMessage]:
        return list(self._messages)

    @property
    def is_open(self) -> bool:
        return self._subscription is not None

    async def open(self) -> None:
        """Subscribe to the message collection. No-op if already open."""
        if self._subscription is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._subscription = self._collection.subscribe(
            self._receive_snapshot, self._receive_error
        )

    async def send(self, content: str) -> MessageQueued | Invalid:
        """Start writing a message. Blank content is rejected without a write.

        Returns as soon as the write is started; the caller clears its input
        regardless of the outcome.
        """
        if not content or not content.strip():
            return Invalid(reason="Message is empty.")
        task = asyncio.create_task(self._write(content))
        self._send_tasks.add(task)
        task.add_done_callback(self._send_tasks.discard)
        return MessageQueued(sender=self._sender, content=content)

    async def wait_idle(self) -> None:
        """Wait for pending sends to finish."""
        if self._send_tasks:
            await asyncio.gather(*list(self._send_tasks))

    async def close(self) -> None:
        """Cancel the subscription and pending sends. Safe to call more than once."""
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
        tasks = list(self._send_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._send_tasks.clear()

    async def _write(self, content: str) -> None:
        try:
            await asyncio.to_thread(self._collection.send, self._sender, content)
        except RemoteWriteFailure:
            logger.error("Error sending message", exc_info=True)
            self._notify("Message could not be sent.")

    def _receive_snapshot(self, snapshot: list[ChatMessage]) -> None:
        self._call_on_loop(self._apply_snapshot, list(snapshot))

    def _receive_error(self, error: Exception) -> None:
        self._call_on_loop(self._apply_error, error)

    def _call_on_loop(self, callback, *args) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(callback, *args)

    def _apply_snapshot(self, snapshot: list[ChatMessage]) -> None:
        if self._subscription is None:
            return
        self._messages = snapshot
        if self._on_change is not None:
            self._on_change(self.messages)

    def _apply_error(self, error: Exception) -> None:
        if self._subscription is None:
            return
        logger.error("Error fetching messages: %s", error)
        self._notify("Could not refresh messages.")

    def _notify(self, message: str) -> None:
        if self._on_notice is not None:
            self._on_notice(Notice(message=message))
