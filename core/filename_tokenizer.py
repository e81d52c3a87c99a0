"""
Filename tokenizer for exported conversation files.

The exporter names each conversation after its participants, joined by
commas: ``+14155551234.txt``, ``jane@example.com, +442071234567.html``.
This module splits such names into the identifiers that can be looked up in
the contact index.
"""

import logging
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import List, Optional, Tuple

from utils.phone_utils import generate_phone_variants

logger = logging.getLogger(__name__)

_DIGIT_RE = re.compile(r"\d")
_IDENTIFIER_CHARS_RE = re.compile(r"[\d@]")


class IdentifierKind(Enum):
    """Kind of identifier found in a filename part."""
    PHONE = "phone"
    EMAIL = "email"


@dataclass(frozen=True)
class Identifier:
    """A raw filename part and the lookup keys derived from it."""
    raw: str
    kind: IdentifierKind
    keys: Tuple[str, ...]


def classify_part(part: str) -> Optional[Identifier]:
    """
    Classify a single comma-separated filename part.

    Args:
        part: Trimmed filename part

    Returns:
        Identifier or None when the part is not a recognizable identifier
        (for example a name the exporter already resolved)
    """
    if _DIGIT_RE.search(part):
        return Identifier(part, IdentifierKind.PHONE, tuple(generate_phone_variants(part)))
    if "@" in part:
        return Identifier(part, IdentifierKind.EMAIL, (part.lower().strip(),))
    return None


def split_identifiers(filename: str) -> List[Identifier]:
    """
    Split a filename into classified identifiers, in source order.

    Args:
        filename: Export filename, with or without directory components

    Returns:
        List[Identifier]: One entry per recognizable part
    """
    stem = PurePath(filename).stem
    identifiers = []
    for part in (p.strip() for p in stem.split(",")):
        identifier = classify_part(part)
        if identifier is None:
            logger.debug(f"Ignoring filename part '{part}'")
            continue
        identifiers.append(identifier)
    return identifiers


def extract_identifiers(filename: str) -> List[str]:
    """
    Extract the raw identifier keys of a filename.

    Phone parts contribute every variant, email parts a single lowercased
    address. Duplicates are kept.

    Args:
        filename: Export filename

    Returns:
        List[str]: Lookup keys in source order
    """
    keys: List[str] = []
    for identifier in split_identifiers(filename):
        keys.extend(identifier.keys)
    return keys


def looks_like_identifier(filename: str) -> bool:
    """Return True if a filename contains a digit or an '@'."""
    return bool(_IDENTIFIER_CHARS_RE.search(filename))
