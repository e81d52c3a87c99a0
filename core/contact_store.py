"""
Contact store collaborators.

A contact store answers two questions: may we read the user's contacts, and
what are they. Two stores are provided: the macOS AddressBook databases that
back Contacts.app, and a vCard export for every other platform.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import config
from utils.vcf_parser import parse_vcf_file

logger = logging.getLogger(__name__)


class AuthorizationError(Exception):
    """Raised when access to the contact store is denied or the request fails."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.message = message
        self.source = source
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"Contacts access not authorized: {self.message}"
        if self.source:
            msg += f" (Source: {self.source})"
        return msg


@dataclass(frozen=True)
class ContactRecord:
    """A single contact as exposed by a contact store."""
    given_name: str = ""
    family_name: str = ""
    organization_name: str = ""
    phone_numbers: Tuple[str, ...] = ()
    email_addresses: Tuple[str, ...] = ()

    @property
    def display_name(self) -> Optional[str]:
        """Given and family name joined by a space, else the organization, else None."""
        name_parts = [part for part in (self.given_name, self.family_name) if part]
        if name_parts:
            return " ".join(name_parts)
        if self.organization_name:
            return self.organization_name
        return None


class ContactStore(ABC):
    """Abstract base class for contact sources."""

    name = "contacts"

    @abstractmethod
    def request_access(self) -> bool:
        """
        Ask for permission to read contacts. Blocks until a decision is made.

        Returns:
            bool: True if access was granted
        """

    @abstractmethod
    def enumerate_contacts(self) -> Iterator[ContactRecord]:
        """
        Yield every contact record of the store.

        Only valid after request_access() returned True.
        """


class AddressBookContactStore(ContactStore):
    """Read-only access to the SQLite databases behind macOS Contacts.app."""

    name = "macOS AddressBook"

    def __init__(self, addressbook_root: Optional[Path] = None):
        self.addressbook_root = Path(addressbook_root or config.ADDRESSBOOK_ROOT)
        self._databases: List[Path] = []

    def find_databases(self) -> List[Path]:
        """Find the main database and every per-source database."""
        dbs = []
        main_db = self.addressbook_root / config.ADDRESSBOOK_DB_NAME
        if main_db.exists():
            dbs.append(main_db)
        sources_dir = self.addressbook_root / "Sources"
        if sources_dir.is_dir():
            dbs.extend(sorted(sources_dir.glob(f"*/{config.ADDRESSBOOK_DB_NAME}")))
        return dbs

    def _connect(self, db_path: Path) -> sqlite3.Connection:
        uri = f"file:{db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
        conn.row_factory = sqlite3.Row
        return conn

    def request_access(self) -> bool:
        self._databases = []
        for db_path in self.find_databases():
            try:
                conn = self._connect(db_path)
                try:
                    conn.execute("SELECT 1 FROM ZABCDRECORD LIMIT 1").fetchall()
                finally:
                    conn.close()
            except sqlite3.Error as e:
                # Without Contacts/Full Disk Access permission the open itself fails
                logger.warning(f"⚠️  Cannot read contacts database {db_path}: {e}")
                continue
            self._databases.append(db_path)

        logger.debug(f"Readable AddressBook databases: {[str(p) for p in self._databases]}")
        return bool(self._databases)

    def enumerate_contacts(self) -> Iterator[ContactRecord]:
        for db_path in self._databases:
            conn = self._connect(db_path)
            try:
                yield from self._read_database(conn)
            except sqlite3.Error as e:
                logger.warning(f"⚠️  Failed to read contacts from {db_path}: {e}")
            finally:
                conn.close()

    def _read_database(self, conn: sqlite3.Connection) -> Iterator[ContactRecord]:
        phones: Dict[int, List[str]] = {}
        for row in conn.execute(
            "SELECT ZOWNER, ZFULLNUMBER FROM ZABCDPHONENUMBER WHERE ZFULLNUMBER IS NOT NULL"
        ):
            phones.setdefault(row["ZOWNER"], []).append(row["ZFULLNUMBER"])

        emails: Dict[int, List[str]] = {}
        for row in conn.execute(
            "SELECT ZOWNER, ZADDRESS FROM ZABCDEMAILADDRESS WHERE ZADDRESS IS NOT NULL"
        ):
            emails.setdefault(row["ZOWNER"], []).append(row["ZADDRESS"])

        for row in conn.execute(
            "SELECT Z_PK, ZFIRSTNAME, ZLASTNAME, ZORGANIZATION FROM ZABCDRECORD"
        ):
            pk = row["Z_PK"]
            yield ContactRecord(
                given_name=(row["ZFIRSTNAME"] or "").strip(),
                family_name=(row["ZLASTNAME"] or "").strip(),
                organization_name=(row["ZORGANIZATION"] or "").strip(),
                phone_numbers=tuple(phones.get(pk, [])),
                email_addresses=tuple(emails.get(pk, [])),
            )


class VcfContactStore(ContactStore):
    """Contacts read from a vCard export file."""

    name = "vCard file"

    def __init__(self, vcf_file_path: Path, encoding: str = config.DEFAULT_ENCODING):
        self.vcf_file_path = Path(vcf_file_path).expanduser()
        self.encoding = encoding

    def request_access(self) -> bool:
        if not self.vcf_file_path.is_file():
            logger.warning(f"⚠️  Contacts file not found: {self.vcf_file_path}")
            return False
        try:
            with open(self.vcf_file_path, "rb") as f:
                f.read(1)
        except OSError as e:
            logger.warning(f"⚠️  Cannot read contacts file {self.vcf_file_path}: {e}")
            return False
        return True

    def enumerate_contacts(self) -> Iterator[ContactRecord]:
        for card in parse_vcf_file(self.vcf_file_path, self.encoding):
            yield ContactRecord(
                given_name=card.given_name,
                family_name=card.family_name,
                organization_name=card.organization_name,
                phone_numbers=tuple(card.phone_numbers),
                email_addresses=tuple(card.email_addresses),
            )


class StaticContactStore(ContactStore):
    """In-memory store, used when contacts are already loaded."""

    name = "in-memory contacts"

    def __init__(self, records: List[ContactRecord], granted: bool = True):
        self.records = list(records)
        self.granted = granted

    def request_access(self) -> bool:
        return self.granted

    def enumerate_contacts(self) -> Iterator[ContactRecord]:
        return iter(self.records)


def create_contact_store(contacts_file: Optional[Path] = None) -> ContactStore:
    """
    Pick the contact store for this run.

    Args:
        contacts_file: Optional vCard file; the macOS AddressBook is used when omitted

    Returns:
        ContactStore: Store to build the contact index from
    """
    if contacts_file is not None:
        return VcfContactStore(contacts_file)
    return AddressBookContactStore()
