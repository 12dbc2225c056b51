"""Unit tests for merged_view (local + remote contacts, dedup by phone number)."""

from unichat.application import merged_view
from unichat.domain import Contact


def test_local_name_wins_for_shared_phone() -> None:
    local = [Contact(name="Alice", phone_number="+1 555-0100")]
    remote = [Contact(name="Alice Remote", phone_number="+1 555-0100")]

    merged = merged_view(local, remote)
    assert merged == [Contact(name="Alice", phone_number="+1 555-0100")]


def test_one_entry_per_distinct_phone() -> None:
    local = [
        Contact(name="Alice", phone_number="+1 555-0100"),
        Contact(name="Bob", phone_number="+1 555-0101"),
    ]
    remote = [
        Contact(name="Bobby", phone_number="+1 555-0101"),
        Contact(name="Carol", phone_number="+39 312 345 6789"),
        Contact(name="Carol again", phone_number="+39 312 345 6789"),
    ]

    merged = merged_view(local, remote)
    phones = [c.phone_number for c in merged]
    assert sorted(phones) == sorted({c.phone_number for c in local + remote})
    assert len(phones) == len(set(phones))
    by_phone = {c.phone_number: c.name for c in merged}
    assert by_phone["+1 555-0101"] == "Bob"
    assert by_phone["+39 312 345 6789"] == "Carol"


def test_order_is_local_then_remote() -> None:
    local = [Contact(name="Zed", phone_number="9")]
    remote = [Contact(name="Amy", phone_number="1"), Contact(name="Zed", phone_number="9")]

    assert [c.name for c in merged_view(local, remote)] == ["Zed", "Amy"]


def test_first_local_insert_kept_for_duplicate_local_phones() -> None:
    local = [
        Contact(name="First", phone_number="+44 20 7946 0000"),
        Contact(name="Second", phone_number="+44 20 7946 0000"),
    ]

    merged = merged_view(local, [])
    assert len(merged) == 1
    assert merged[0].name == "First"


def test_idempotent() -> None:
    local = [
        Contact(name="Alice", phone_number="1"),
        Contact(name="Alias", phone_number="1"),
    ]
    remote = [Contact(name="Bob", phone_number="2"), Contact(name="Al", phone_number="1")]

    once = merged_view(local, remote)
    assert merged_view(once, []) == once
    assert merged_view([], once) == once


def test_same_name_different_phone_kept() -> None:
    local = [Contact(name="Alice", phone_number="1")]
    remote = [Contact(name="Alice", phone_number="2")]

    assert len(merged_view(local, remote)) == 2


def test_empty_inputs() -> None:
    assert merged_view([], []) == []
