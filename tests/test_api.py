"""API tests with in-memory adapters. /health does not require Neo4j."""

import pytest
from fastapi.testclient import TestClient

from api.main import app, create_app
from unichat.domain import Contact
from unichat.infrastructure import (
    InMemoryContactCollection,
    InMemoryContactStore,
    InMemoryMessageCollection,
)


@pytest.fixture
def adapters():
    return {
        "local_store": InMemoryContactStore(),
        "contacts": InMemoryContactCollection(),
        "messages": InMemoryMessageCollection(),
    }


@pytest.fixture
def client(adapters):
    with TestClient(create_app(**adapters)) as c:
        yield c


def test_health():
    r = TestClient(app).get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_calling_codes():
    r = TestClient(app).get("/calling-codes")
    assert r.status_code == 200
    assert "+1" in r.json()


def test_list_contacts_merges_local_first(client, adapters):
    adapters["local_store"].insert(Contact(name="Alice", phone_number="+1 555-0100"))
    adapters["contacts"].push(Contact(name="Alice Remote", phone_number="+1 555-0100"))
    adapters["contacts"].push(Contact(name="Bob", phone_number="+1 555-0199"))

    r = client.get("/contacts")
    assert r.status_code == 200
    assert r.json()["contacts"] == [
        {"name": "Alice", "phone_number": "+1 555-0100"},
        {"name": "Bob", "phone_number": "+1 555-0199"},
    ]


def test_create_contact_writes_local_and_remote(client, adapters):
    r = client.post("/contacts", json={"name": "Carol", "phone_number": "+39 312 345 6789"})
    assert r.status_code == 201
    body = r.json()
    assert body["name"] == "Carol"
    assert body["phone_number"] == "+39 312 345 6789"
    assert "Contact added successfully!" in body["notices"]

    listed = client.get("/contacts").json()["contacts"]
    assert listed == [{"name": "Carol", "phone_number": "+39 312 345 6789"}]
    assert adapters["local_store"].list_all() == [
        Contact(name="Carol", phone_number="+39 312 345 6789")
    ]
    assert adapters["contacts"].documents == [
        {"name": "Carol", "phoneNumber": "+39 312 345 6789"}
    ]


def test_create_contact_with_country_code(client, adapters):
    r = client.post(
        "/contacts",
        json={"name": "Dan", "country_code": "+44", "local_number": "20 7946 0000"},
    )
    assert r.status_code == 201
    assert r.json()["phone_number"] == "+44 20 7946 0000"


def test_create_contact_unknown_country_code(client, adapters):
    r = client.post(
        "/contacts",
        json={"name": "Dan", "country_code": "+999", "local_number": "1"},
    )
    assert r.status_code == 400
    assert adapters["local_store"].list_all() == []


def test_create_contact_with_both_number_forms_is_rejected(client, adapters):
    r = client.post(
        "/contacts",
        json={
            "name": "Dan",
            "phone_number": "+1 555-0100",
            "country_code": "+44",
            "local_number": "20 7946 0000",
        },
    )
    assert r.status_code == 400
    assert "not both" in r.json()["detail"]
    assert adapters["local_store"].list_all() == []
    assert adapters["contacts"].documents == []


def test_create_contact_missing_field_is_rejected(client, adapters):
    r = client.post("/contacts", json={"name": "Eve", "phone_number": "  "})
    assert r.status_code == 400
    assert r.json()["detail"] == "Please fill in both fields."
    assert adapters["local_store"].list_all() == []
    assert adapters["contacts"].documents == []


def test_remote_fetch_failure_reported_as_notice(client, adapters):
    adapters["local_store"].insert(Contact(name="Alice", phone_number="1"))
    adapters["contacts"].online = False

    r = client.get("/contacts")
    assert r.status_code == 200
    body = r.json()
    assert body["contacts"] == [{"name": "Alice", "phone_number": "1"}]
    assert body["notices"] == ["Failed to fetch contacts from the server."]


def test_messages_reflect_collection(client, adapters):
    adapters["messages"].add_document({"sender": "Bob", "content": "hi", "timestamp": 1})

    r = client.get("/messages")
    assert r.status_code == 200
    assert r.json()["messages"] == [{"sender": "Bob", "content": "hi"}]


def test_send_message_is_queued(client):
    r = client.post("/messages", json={"content": "hello"})
    assert r.status_code == 202
    assert r.json() == {"status": "queued", "sender": "You"}


def test_send_blank_message_rejected(client, adapters):
    r = client.post("/messages", json={"content": "   "})
    assert r.status_code == 400
    assert adapters["messages"].snapshot() == []
