"""
FastAPI backend: REST surface over the contact list and the chat view.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase
from pydantic import BaseModel

from unichat.application import (
    ChatSession,
    ContactSync,
    Invalid,
    LocalContactStore,
    LocalStorageFailure,
    Notice,
    RemoteContactCollection,
    RemoteMessageCollection,
)
from unichat.infrastructure import (
    Neo4jContactCollection,
    Neo4jMessageCollection,
    SqliteContactStore,
    calling_codes,
    compose_phone_number,
    ensure_indexes,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

DEFAULT_LOCAL_DB = "contacts.db"
DEFAULT_SENDER_NAME = "You"
DEFAULT_POLL_INTERVAL = 1.0


def _get_driver():
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    return GraphDatabase.driver(uri, auth=(user, password))


def _poll_interval() -> float:
    raw = os.environ.get("UNICHAT_POLL_INTERVAL", "").strip()
    if not raw:
        return DEFAULT_POLL_INTERVAL
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid UNICHAT_POLL_INTERVAL %r, using %s", raw, DEFAULT_POLL_INTERVAL)
        return DEFAULT_POLL_INTERVAL


def _sender_name() -> str:
    return os.environ.get("UNICHAT_SENDER_NAME", "").strip() or DEFAULT_SENDER_NAME


def _local_db_path() -> str:
    return os.environ.get("UNICHAT_LOCAL_DB", "").strip() or DEFAULT_LOCAL_DB


def _drain_notices(app: FastAPI) -> list[str]:
    notices: list[Notice] = app.state.notices
    out = [n.message for n in notices]
    notices.clear()
    return out


def create_app(
    *,
    local_store: LocalContactStore | None = None,
    contacts: RemoteContactCollection | None = None,
    messages: RemoteMessageCollection | None = None,
) -> FastAPI:
    """Build the app. Adapters not given are created from the environment at startup
    (SQLite local store, Neo4j remote collections).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.driver = None
        app.state.notices = []
        store, remote_contacts, remote_messages = local_store, contacts, messages
        try:
            if remote_contacts is None or remote_messages is None:
                app.state.driver = _get_driver()
                ensure_indexes(app.state.driver)
                if remote_contacts is None:
                    remote_contacts = Neo4jContactCollection(app.state.driver)
                if remote_messages is None:
                    remote_messages = Neo4jMessageCollection(
                        app.state.driver, poll_interval=_poll_interval()
                    )
            if store is None:
                store = SqliteContactStore(_local_db_path())

            app.state.contact_sync = ContactSync(
                store, remote_contacts, on_notice=app.state.notices.append
            )
            app.state.chat_session = ChatSession(
                remote_messages,
                sender=_sender_name(),
                on_notice=app.state.notices.append,
            )
            await app.state.chat_session.open()
            logger.info("UniChat API started")
            yield
        finally:
            if getattr(app.state, "chat_session", None) is not None:
                await app.state.chat_session.close()
            if getattr(app.state, "contact_sync", None) is not None:
                await app.state.contact_sync.close()
            if getattr(app.state, "driver", None) is not None:
                app.state.driver.close()

    app = FastAPI(title="UniChat API", lifespan=lifespan)
    _register_routes(app)
    return app


# --- REST models ---


class CreateContactBody(BaseModel):
    """Either phone_number, or country_code plus local_number."""

    name: str
    phone_number: str | None = None
    country_code: str | None = None
    local_number: str | None = None


class ContactItem(BaseModel):
    name: str
    phone_number: str


class ContactListResponse(BaseModel):
    contacts: list[ContactItem]
    notices: list[str] = []


class SendMessageBody(BaseModel):
    content: str


class MessageItem(BaseModel):
    sender: str
    content: str


class MessageListResponse(BaseModel):
    messages: list[MessageItem]
    notices: list[str] = []


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/calling-codes")
    def list_calling_codes():
        return calling_codes()

    # --- contacts ---

    @app.get("/contacts")
    async def list_contacts(request: Request) -> ContactListResponse:
        sync: ContactSync = request.app.state.contact_sync
        try:
            await sync.load_contacts()
        except LocalStorageFailure as e:
            raise HTTPException(status_code=503, detail="Local contact store unavailable") from e
        await sync.wait_idle()
        return ContactListResponse(
            contacts=[
                ContactItem(name=c.name, phone_number=c.phone_number)
                for c in sync.contacts
            ],
            notices=_drain_notices(request.app),
        )

    @app.post("/contacts")
    async def create_contact(body: CreateContactBody, request: Request):
        sync: ContactSync = request.app.state.contact_sync
        phone_number = body.phone_number or ""
        if body.country_code is not None:
            if phone_number.strip():
                raise HTTPException(
                    status_code=400,
                    detail="Send either phone_number or country_code with local_number, not both.",
                )
            try:
                phone_number = compose_phone_number(
                    body.country_code, body.local_number or ""
                )
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e)) from e
        try:
            result = await sync.add_contact(body.name, phone_number)
        except LocalStorageFailure as e:
            raise HTTPException(status_code=503, detail="Local contact store unavailable") from e
        if isinstance(result, Invalid):
            _drain_notices(request.app)
            raise HTTPException(status_code=400, detail=result.reason)
        return JSONResponse(
            content={
                "name": result.contact.name,
                "phone_number": result.contact.phone_number,
                "notices": _drain_notices(request.app),
            },
            status_code=201,
        )

    # --- chat ---

    @app.get("/messages")
    async def list_messages(request: Request) -> MessageListResponse:
        session: ChatSession = request.app.state.chat_session
        return MessageListResponse(
            messages=[
                MessageItem(sender=m.sender, content=m.content)
                for m in session.messages
            ],
            notices=_drain_notices(request.app),
        )

    @app.post("/messages")
    async def send_message(body: SendMessageBody, request: Request):
        session: ChatSession = request.app.state.chat_session
        result = await session.send(body.content)
        if isinstance(result, Invalid):
            raise HTTPException(status_code=400, detail=result.reason)
        return JSONResponse(
            content={"status": "queued", "sender": result.sender},
            status_code=202,
        )


app = create_app()
