"""
VCF (vCard) Parser for exported address books.

This module turns a vCard export (Contacts.app "Export vCard...", Google
Contacts, Outlook) into plain contact records carrying the fields needed for
identifier matching: names, organization, phone numbers and email addresses.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class VCard:
    """Fields of a single vCard relevant to contact matching."""
    given_name: str = ""
    family_name: str = ""
    formatted_name: str = ""
    organization_name: str = ""
    phone_numbers: List[str] = field(default_factory=list)
    email_addresses: List[str] = field(default_factory=list)


def parse_vcf_file(vcf_file_path: Path, encoding: str = "utf-8") -> List[VCard]:
    """
    Parse every card of a vCard file.

    Args:
        vcf_file_path: Path to the .vcf file
        encoding: Text encoding of the file

    Returns:
        List[VCard]: Parsed cards in file order

    Raises:
        OSError: If the file cannot be read
    """
    vcf_content = vcf_file_path.read_text(encoding=encoding, errors="replace")
    cards = parse_vcf_text(vcf_content)
    logger.debug(f"Parsed {len(cards)} cards from {vcf_file_path}")
    return cards


def parse_vcf_text(vcf_content: str) -> List[VCard]:
    """
    Parse vCard text into cards.

    Handles folded lines, ``item1.`` group prefixes and parameterised
    properties such as ``TEL;TYPE=CELL:``. Lines outside a
    BEGIN:VCARD/END:VCARD block are ignored.

    Args:
        vcf_content: Raw vCard text

    Returns:
        List[VCard]: Parsed cards
    """
    cards = []
    current: Optional[VCard] = None

    for line in _unfold_lines(vcf_content):
        parsed = _parse_content_line(line)
        if parsed is None:
            continue
        name, value = parsed

        if name == "BEGIN" and value.upper() == "VCARD":
            current = VCard()
        elif name == "END" and value.upper() == "VCARD":
            if current is not None:
                _finish_card(current)
                cards.append(current)
            current = None
        elif current is not None:
            _apply_property(current, name, value)

    return cards


def _unfold_lines(vcf_content: str) -> List[str]:
    """Join continuation lines (RFC 6350 section 3.2) onto their parent line."""
    lines: List[str] = []
    for raw_line in vcf_content.splitlines():
        if raw_line[:1] in (" ", "\t") and lines:
            lines[-1] += raw_line[1:]
        elif raw_line.strip():
            lines.append(raw_line.rstrip())
    return lines


def _parse_content_line(line: str) -> Optional[Tuple[str, str]]:
    """
    Split a content line into its upper-cased property name and value.

    ``item1.TEL;type=CELL;type=pref:+1 (415) 555-1234`` becomes
    ``("TEL", "+1 (415) 555-1234")``.
    """
    if ":" not in line:
        return None
    head, value = line.split(":", 1)
    name = head.split(";", 1)[0]
    if "." in name:
        name = name.rsplit(".", 1)[1]
    return name.strip().upper(), value.strip()


def _unescape(value: str) -> str:
    return (
        value.replace("\\n", " ")
        .replace("\\N", " ")
        .replace("\\,", ",")
        .replace("\\;", ";")
        .replace("\\\\", "\\")
    )


def _split_structured(value: str) -> List[str]:
    """Split a structured value on unescaped semicolons."""
    parts: List[str] = []
    current = ""
    escaped = False
    for ch in value:
        if escaped:
            current += "\\" + ch
            escaped = False
        elif ch == "\\":
            escaped = True
        elif ch == ";":
            parts.append(current)
            current = ""
        else:
            current += ch
    parts.append(current)
    return [_unescape(part).strip() for part in parts]


_PROPERTY_HANDLERS: Dict[str, str] = {
    "N": "name",
    "FN": "formatted_name",
    "ORG": "organization",
    "TEL": "phone",
    "EMAIL": "email",
}


def _apply_property(card: VCard, name: str, value: str) -> None:
    handler = _PROPERTY_HANDLERS.get(name)
    if handler is None or not value:
        return

    if handler == "name":
        # N:Family;Given;Additional;Prefix;Suffix
        parts = _split_structured(value) + ["", ""]
        card.family_name, card.given_name = parts[0], parts[1]
    elif handler == "formatted_name":
        card.formatted_name = _unescape(value).strip()
    elif handler == "organization":
        card.organization_name = _split_structured(value)[0]
    elif handler == "phone":
        # vCard 4.0 writes TEL;VALUE=uri:tel:+1-415-555-1234
        if value.lower().startswith("tel:"):
            value = value[4:]
        card.phone_numbers.append(value)
    elif handler == "email":
        card.email_addresses.append(_unescape(value).strip())


def _finish_card(card: VCard) -> None:
    """Fall back to FN for cards that carry no structured name."""
    if not card.given_name and not card.family_name and card.formatted_name:
        if card.formatted_name != card.organization_name:
            card.given_name = card.formatted_name
