#!/usr/bin/env python3
"""
Phone variant generation tests.

Filenames and contact cards must expand to overlapping variant sets for the
same number, whatever formatting either side used.
"""

import unittest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from utils.phone_utils import PhoneVariantGenerator, generate_phone_variants


class TestPhoneVariants(unittest.TestCase):
    """Variant construction for the supported number shapes."""

    def test_ten_digit_number(self):
        self.assertEqual(
            generate_phone_variants("4155551234"),
            ["+14155551234", "14155551234", "4155551234"],
        )

    def test_e164_us_number(self):
        self.assertEqual(
            generate_phone_variants("+14155551234"),
            ["+14155551234", "4155551234", "14155551234"],
        )

    def test_eleven_digit_number(self):
        self.assertEqual(
            generate_phone_variants("14155551234"),
            ["+14155551234", "14155551234", "4155551234"],
        )

    def test_formatted_number_keeps_original_last(self):
        variants = generate_phone_variants("(415) 555-1234")
        self.assertEqual(variants[:3], ["+14155551234", "14155551234", "4155551234"])
        self.assertEqual(variants[-1], "(415) 555-1234")
        self.assertEqual(len(variants), 4)

    def test_international_number_kept_as_is(self):
        self.assertEqual(generate_phone_variants("+44 20 7123 4567"), ["+442071234567", "+44 20 7123 4567"])

    def test_short_code(self):
        """Short codes only produce the original string."""
        self.assertEqual(generate_phone_variants("12345"), ["12345"])

    def test_no_duplicates(self):
        for number in ["4155551234", "+14155551234", "1-415-555-1234", "+1 (415) 555-1234"]:
            with self.subTest(number=number):
                variants = generate_phone_variants(number)
                self.assertEqual(len(variants), len(set(variants)))
                self.assertNotIn("", variants)

    def test_same_number_different_formats_overlap(self):
        a = set(generate_phone_variants("+1 (415) 555-1234"))
        b = set(generate_phone_variants("415.555.1234"))
        self.assertIn("+14155551234", a & b)
        self.assertIn("4155551234", a & b)

    def test_empty_string(self):
        self.assertEqual(generate_phone_variants(""), [])


class TestPhoneClean(unittest.TestCase):
    """Cleaning rules of PhoneVariantGenerator."""

    def setUp(self):
        self.generator = PhoneVariantGenerator()

    def test_plus_only_kept_before_first_digit(self):
        self.assertEqual(self.generator.clean("+1 415 555 1234"), "+14155551234")
        self.assertEqual(self.generator.clean("1 415+555 1234"), "14155551234")

    def test_letters_removed(self):
        self.assertEqual(self.generator.clean("tel: 415-555-1234 ext"), "4155551234")

    def test_no_digits(self):
        self.assertEqual(self.generator.clean("+"), "")

    def test_fullwidth_digits_folded(self):
        self.assertEqual(self.generator.clean("４１５５５５１２３４"), "4155551234")


if __name__ == '__main__':
    unittest.main()
