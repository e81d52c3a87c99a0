"""
Contact index: identifier string to display name.

The index is built once per run from a contact store and is read-only
afterwards. It is passed explicitly to the name resolver and the renamer.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from core.contact_store import AuthorizationError, ContactRecord, ContactStore
from utils.phone_utils import generate_phone_variants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactIndexStats:
    """Counters collected while building the index."""
    contacts_seen: int = 0
    contacts_skipped: int = 0
    phone_keys: int = 0
    email_keys: int = 0


class ContactIndex(Mapping[str, str]):
    """
    Immutable mapping from identifier string to contact display name.

    Keys are every phone variant and every lowercased email address of every
    named contact. When two contacts share a key the one registered last wins.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None,
                 stats: Optional[ContactIndexStats] = None):
        self._entries = MappingProxyType(dict(entries or {}))
        self.stats = stats or ContactIndexStats()

    def __getitem__(self, identifier: str) -> str:
        return self._entries[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ContactIndex({len(self)} identifiers)"

    def sample(self, count: int) -> List[Tuple[str, str]]:
        """Return the first `count` entries, for diagnostics."""
        return list(self._entries.items())[:count]

    @classmethod
    def empty(cls) -> "ContactIndex":
        return cls()

    @classmethod
    def from_records(cls, records) -> "ContactIndex":
        """
        Build an index from contact records.

        Args:
            records: Iterable of ContactRecord

        Returns:
            ContactIndex: The populated index
        """
        entries: Dict[str, str] = {}
        contacts_seen = contacts_skipped = phone_keys = email_keys = 0

        for record in records:
            contacts_seen += 1
            phones, emails = _register(entries, record)
            if phones is None:
                contacts_skipped += 1
                continue
            phone_keys += phones
            email_keys += emails

        stats = ContactIndexStats(contacts_seen, contacts_skipped, phone_keys, email_keys)
        return cls(entries, stats)

    @classmethod
    def from_store(cls, store: ContactStore) -> "ContactIndex":
        """
        Build an index from a contact store.

        Args:
            store: Contact store to enumerate

        Returns:
            ContactIndex: The populated index

        Raises:
            AuthorizationError: If the store denies access
        """
        if not store.request_access():
            raise AuthorizationError("access denied", source=store.name)

        index = cls.from_records(store.enumerate_contacts())
        logger.info(f"Loaded {index.stats.contacts_seen} contacts from {store.name}")
        logger.info(f"Mapped {index.stats.phone_keys} phone numbers")
        logger.info(f"Mapped {index.stats.email_keys} email addresses")
        logger.info(f"Total contact identifiers: {len(index)}")
        return index


def _register(entries: Dict[str, str], record: ContactRecord) -> Tuple[Optional[int], int]:
    """Add one record's identifiers; returns (phone keys, email keys), (None, 0) if skipped."""
    display_name = record.display_name
    if display_name is None:
        return None, 0

    phone_keys = 0
    for phone_number in record.phone_numbers:
        for variant in generate_phone_variants(phone_number):
            entries[variant] = display_name
            phone_keys += 1

    email_keys = 0
    for email_address in record.email_addresses:
        entries[email_address.lower()] = display_name
        email_keys += 1

    return phone_keys, email_keys
