"""
Phone number variant generation for contact matching.

The exporter names conversation files after the raw handle it saw in the
Messages database, while the Contacts store keeps numbers in whatever form
the user typed them. Both sides are expanded into the same small set of
textual renderings so that a plain dictionary lookup can match them.
"""

import logging
from typing import List

import phonenumbers

logger = logging.getLogger(__name__)


class PhoneVariantGenerator:
    """Produces the ordered, duplicate-free set of forms a phone number may appear in."""

    def clean(self, phone_number: str) -> str:
        """
        Strip everything except digits and a leading '+'.

        Unicode digits (full-width, Arabic-Indic, ...) are folded to ASCII so
        the same number typed on different keyboards yields the same key.

        Args:
            phone_number: Raw phone string

        Returns:
            str: Cleaned phone string, possibly empty
        """
        digits = phonenumbers.normalize_digits_only(phone_number)
        if not digits:
            return ""

        # A '+' only counts when it comes before the first digit
        first_digit = next(
            (i for i, ch in enumerate(phone_number) if ch.isdigit()), len(phone_number)
        )
        if "+" in phone_number[:first_digit]:
            return f"+{digits}"
        return digits

    def generate(self, phone_number: str) -> List[str]:
        """
        Generate every textual rendering of a phone number.

        Args:
            phone_number: Raw phone string as found in a filename or contact card

        Returns:
            List[str]: Variants in construction order, no duplicates, no empty strings
        """
        cleaned = self.clean(phone_number)
        variants: List[str] = []

        if len(cleaned) == 12 and cleaned.startswith("+1"):
            # +1XXXXXXXXXX
            national = cleaned[2:]
            variants.extend([cleaned, national, f"1{national}"])
        elif len(cleaned) == 11 and cleaned.startswith("1"):
            # 1XXXXXXXXXX
            variants.extend([f"+{cleaned}", cleaned, cleaned[1:]])
        elif len(cleaned) == 10 and cleaned.isdigit():
            # XXXXXXXXXX
            variants.extend([f"+1{cleaned}", f"1{cleaned}", cleaned])
        elif cleaned.startswith("+"):
            # International numbers are kept as-is
            variants.append(cleaned)

        if phone_number not in variants:
            variants.append(phone_number)

        result = [variant for variant in variants if variant]
        logger.debug(f"Phone variants for '{phone_number}': {result}")
        return result


# Module-level generator for the convenience function below
_global_generator = PhoneVariantGenerator()


def generate_phone_variants(phone_number: str) -> List[str]:
    """
    Generate every textual rendering of a phone number.

    Args:
        phone_number: Raw phone string

    Returns:
        List[str]: Ordered, duplicate-free variants
    """
    return _global_generator.generate(phone_number)
