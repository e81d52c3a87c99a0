"""
Unit tests for the contact index and name resolution.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.contact_index import ContactIndex
from core.contact_store import AuthorizationError, ContactRecord, StaticContactStore
from core.name_resolver import resolve_names

pytestmark = pytest.mark.unit


ALICE = ContactRecord(
    given_name="Alice",
    family_name="Smith",
    phone_numbers=("(415) 555-1234",),
    email_addresses=("Alice@Example.com",),
)
BOB = ContactRecord(given_name="Bob", phone_numbers=("+1 415 555 9876",))
NAMELESS = ContactRecord(phone_numbers=("4155550000",))


class TestContactIndex:

    def test_every_phone_variant_is_a_key(self):
        index = ContactIndex.from_records([ALICE])
        for key in ["+14155551234", "14155551234", "4155551234", "(415) 555-1234"]:
            assert index[key] == "Alice Smith"

    def test_email_keys_are_lowercased(self):
        index = ContactIndex.from_records([ALICE])
        assert index["alice@example.com"] == "Alice Smith"
        assert "Alice@Example.com" not in index

    def test_contacts_without_name_are_skipped(self):
        index = ContactIndex.from_records([NAMELESS, BOB])
        assert "4155550000" not in index
        assert index.stats.contacts_seen == 2
        assert index.stats.contacts_skipped == 1

    def test_last_registered_contact_wins(self):
        shared = ContactRecord(given_name="Carol", phone_numbers=("4155551234",))
        index = ContactIndex.from_records([ALICE, shared])
        assert index["+14155551234"] == "Carol"
        assert index["alice@example.com"] == "Alice Smith"

    def test_stats(self):
        index = ContactIndex.from_records([ALICE, BOB])
        assert index.stats.phone_keys == 4 + 4
        assert index.stats.email_keys == 1

    def test_index_is_read_only(self):
        index = ContactIndex.from_records([BOB])
        with pytest.raises(TypeError):
            index["x"] = "y"

    def test_sample(self):
        index = ContactIndex.from_records([ALICE])
        assert len(index.sample(2)) == 2
        assert index.sample(100) == list(index.items())

    def test_empty(self):
        assert len(ContactIndex.empty()) == 0

    def test_from_store(self):
        index = ContactIndex.from_store(StaticContactStore([BOB]))
        assert index["4155559876"] == "Bob"

    def test_from_store_denied(self):
        with pytest.raises(AuthorizationError):
            ContactIndex.from_store(StaticContactStore([BOB], granted=False))


class TestResolveNames:

    def setup_method(self):
        self.index = ContactIndex.from_records([ALICE, BOB])

    def test_first_matched_order(self):
        names = resolve_names(["4155559876", "alice@example.com"], self.index)
        assert names == ["Bob", "Alice Smith"]

    def test_duplicates_removed(self):
        names = resolve_names(["+14155551234", "4155551234", "alice@example.com"], self.index)
        assert names == ["Alice Smith"]

    def test_unmatched_identifiers_ignored(self):
        assert resolve_names(["nobody@example.com", "+15555555555"], self.index) == []

    def test_plain_dict_index(self):
        assert resolve_names(["a"], {"a": "Ann"}) == ["Ann"]
