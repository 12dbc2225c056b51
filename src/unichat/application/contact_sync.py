"""Contact list reconciliation: local cache plus remote collection, deduplicated by phone number."""

import asyncio
import itertools
import logging
from collections.abc import Callable, Iterable

from unichat.application.dto import ContactAdded, Invalid, Notice
from unichat.application.errors import (
    LocalStorageFailure,
    RemoteFetchFailure,
    RemoteWriteFailure,
)
from unichat.application.ports import LocalContactStore, RemoteContactCollection
from unichat.domain import Contact

logger = logging.getLogger(__name__)

STATE_IDLE = "idle"
STATE_FETCHING = "fetching"
STATE_MERGED = "merged"


def merged_view(local: Iterable[Contact], remote: Iterable[Contact]) -> list[Contact]:
    """Return local ++ remote with one entry per phone number, first seen kept.

    Local entries come first, so a local name wins over a remote one for the
    same number. Pure; safe to call on its own output.
    """
    seen: set[str] = set()
    out = []
    for contact in itertools.chain(local, remote):
        if contact.phone_number in seen:
            continue
        seen.add(contact.phone_number)
        out.append(contact)
    return out


class ContactSync:
    """Screen-level controller for the contact list: load, merge, add.

    One instance per screen visit. All state is mutated on the event loop;
    blocking adapter calls run in worker threads.
    """

    def __init__(
        self,
        local_store: LocalContactStore,
        remote: RemoteContactCollection,
        *,
        on_change: Callable[[list[Contact]], None] | None = None,
        on_notice: Callable[[Notice], None] | None = None,
    ) -> None:
        self._store = local_store
        self._remote = remote
        self._on_change = on_change
        self._on_notice = on_notice
        self._local: list[Contact] = []
        self._reads_in_flight: list[list[Contact]] = []
        self._remote_contacts: list[Contact] = []
        self._state = STATE_IDLE
        self._fetch_task: asyncio.Task | None = None
        self._push_tasks: set[asyncio.Task] = set()

    @property
    def state(self) -> str:
        return self._state

    @property
    def contacts(self) -> list[Contact]:
        """Current merged view of local and remote contacts."""
        return merged_view(self._local, self._remote_contacts)

    async def load_contacts(self) -> list[Contact]:
        """Read the local store and start the remote fetch in the background.

        Returns the merged view as known right now; on_change fires again once
        the remote fetch resolves. A fetch already in flight is reused.
        """
        # Contacts added while the read is in flight may be missing from it.
        added_during_read: list[Contact] = []
        self._reads_in_flight.append(added_during_read)
        try:
            stored = await asyncio.to_thread(self._store.list_all)
        except LocalStorageFailure:
            logger.exception("Local contact store could not be read")
            raise
        else:
            late = [c for c in added_during_read if c not in stored]
            self._local = stored + late
        finally:
            self._reads_in_flight.remove(added_during_read)
        logger.debug("Loaded %d local contacts", len(self._local))

        if self._fetch_task is None or self._fetch_task.done():
            previous = self._state
            self._state = STATE_FETCHING
            self._fetch_task = asyncio.create_task(self._fetch_remote(previous))
        self._changed()
        return self.contacts

    async def add_contact(self, name: str, phone_number: str) -> ContactAdded | Invalid:
        """Store a new contact locally, show it at once, push it remotely in the background.

        Empty name or phone number: no writes, returns Invalid. A LocalStorageFailure
        is re-raised. A failed remote push only produces a notice; the contact stays
        visible locally.
        """
        name_clean = (name or "").strip()
        phone_clean = (phone_number or "").strip()
        if not name_clean or not phone_clean:
            reason = "Please fill in both fields."
            self._notify(reason)
            return Invalid(reason=reason)

        contact = Contact(name=name_clean, phone_number=phone_clean)
        try:
            await asyncio.to_thread(self._store.insert, contact)
        except LocalStorageFailure:
            logger.exception("Local contact insert failed")
            raise

        self._local.append(contact)
        for added_during_read in self._reads_in_flight:
            added_during_read.append(contact)
        self._changed()

        task = asyncio.create_task(self._push_remote(contact))
        self._push_tasks.add(task)
        task.add_done_callback(self._push_tasks.discard)

        self._notify("Contact added successfully!")
        return ContactAdded(contact=contact)

    async def wait_idle(self) -> None:
        """Wait for the in-flight remote fetch and pushes to finish."""
        tasks = list(self._push_tasks)
        if self._fetch_task is not None:
            tasks.append(self._fetch_task)
        if tasks:
            await asyncio.gather(*tasks)

    async def close(self) -> None:
        """Cancel background work. Call when the screen goes away."""
        tasks = list(self._push_tasks)
        if self._fetch_task is not None:
            tasks.append(self._fetch_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._push_tasks.clear()
        self._fetch_task = None
        if self._state == STATE_FETCHING:
            self._state = STATE_IDLE

    async def _fetch_remote(self, previous_state: str) -> None:
        try:
            remote = await asyncio.to_thread(self._remote.fetch_all_once)
        except RemoteFetchFailure as e:
            logger.error("Error fetching contacts: %s", e)
            self._state = previous_state
            self._notify("Failed to fetch contacts from the server.")
            return
        self._remote_contacts = remote
        self._state = STATE_MERGED
        logger.debug("Fetched %d remote contacts", len(remote))
        self._changed()

    async def _push_remote(self, contact: Contact) -> None:
        try:
            await asyncio.to_thread(self._remote.push, contact)
        except RemoteWriteFailure:
            logger.error("Error adding contact %s", contact.phone_number, exc_info=True)
            self._notify("Contact saved on this device but could not be uploaded.")
            return
        logger.debug("Contact added to remote collection: %s", contact.phone_number)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change(self.contacts)

    def _notify(self, message: str) -> None:
        if self._on_notice is not None:
            self._on_notice(Notice(message=message))
