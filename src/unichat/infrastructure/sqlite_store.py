"""SQLite implementation of LocalContactStore (the on-device cache table)."""

import logging
import sqlite3
from pathlib import Path

from unichat.application.errors import LocalStorageFailure
from unichat.domain import Contact

log = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS contacts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    phone_number TEXT NOT NULL
)
"""


class SqliteContactStore:
    """Stores contacts in a SQLite file. Rows are returned in insertion (row id) order.

    Rows with a blank name or phone number are skipped when listing.

    The table is created on first use. Each call opens its own connection so the
    store can be used from worker threads.
    """

    def __init__(self, database: str | Path) -> None:
        self._database = str(Path(database).expanduser())
        self._initialized = False

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._database)
        try:
            conn.execute("PRAGMA busy_timeout=5000")
            if not self._initialized:
                with conn:
                    conn.execute(_CREATE_TABLE)
                self._initialized = True
                log.info("Initialized local contact store: %s", self._database)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def insert(self, contact: Contact) -> None:
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        "INSERT INTO contacts (name, phone_number) VALUES (?, ?)",
                        (contact.name, contact.phone_number),
                    )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise LocalStorageFailure(f"Could not insert contact: {e}") from e

    def list_all(self) -> list[Contact]:
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT name, phone_number FROM contacts ORDER BY id"
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise LocalStorageFailure(f"Could not read contacts: {e}") from e
        contacts = []
        for name, phone in rows:
            try:
                contacts.append(Contact(name=name, phone_number=phone))
            except ValueError as e:
                log.warning("Skipping unreadable contact row: %s", e)
        return contacts
