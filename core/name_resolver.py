"""
Name resolution: match a file's identifiers against the contact index.
"""

import logging
from typing import Iterable, List, Mapping

logger = logging.getLogger(__name__)


def resolve_names(identifiers: Iterable[str], contact_index: Mapping[str, str]) -> List[str]:
    """
    Look up identifiers and collect the matching display names.

    Args:
        identifiers: Lookup keys in source order (duplicates allowed)
        contact_index: Identifier to display name mapping

    Returns:
        List[str]: Display names in first-matched order, without duplicates.
        Empty when nothing matched.
    """
    matched_names: List[str] = []
    for identifier in identifiers:
        contact_name = contact_index.get(identifier)
        if contact_name is None:
            logger.debug(f"  ✗ No match for: {identifier}")
            continue
        logger.debug(f"  ✓ Matched: {identifier} -> {contact_name}")
        if contact_name not in matched_names:
            matched_names.append(contact_name)
    return matched_names
