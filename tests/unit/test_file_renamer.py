#!/usr/bin/env python3
"""
Tests for renaming export files after contacts.
"""

import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from core.contact_index import ContactIndex
from core.contact_store import ContactRecord
from core.export_files import ExportDirectoryError, ExportFile
from core.file_renamer import FileRenamer, sanitize_filename


def build_index():
    return ContactIndex.from_records([
        ContactRecord(given_name="Alice", phone_numbers=("4155551111", "4155552222", "4155553333")),
        ContactRecord(given_name="Bob", family_name="Jones", email_addresses=("bob@example.com",)),
        ContactRecord(given_name="A<>B??C", phone_numbers=("4155554444",)),
        ContactRecord(organization_name="???", phone_numbers=("4155555555",)),
    ])


class TestSanitizeFilename(unittest.TestCase):

    def test_forbidden_characters(self):
        self.assertEqual(sanitize_filename("A<>B??C"), "A_B_C")

    def test_every_forbidden_character(self):
        self.assertEqual(sanitize_filename('a<b>c:d"e/f\\g|h?i*j'), "a_b_c_d_e_f_g_h_i_j")

    def test_leading_and_trailing_underscores_removed(self):
        self.assertEqual(sanitize_filename("/Alice/"), "Alice")

    def test_plain_name_unchanged(self):
        self.assertEqual(sanitize_filename("Alice Smith, Bob Jones"), "Alice Smith, Bob Jones")

    def test_only_forbidden_characters(self):
        self.assertEqual(sanitize_filename("???"), "")


class FileRenamerTestCase(unittest.TestCase):
    """Creates a scratch export directory per test."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())
        self.index = build_index()

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def touch(self, *names):
        for name in names:
            (self.test_dir / name).write_text(f"content of {name}")

    def listing(self):
        return sorted(p.name for p in self.test_dir.iterdir())


class TestRenameDirectory(FileRenamerTestCase):

    def test_single_match(self):
        self.touch("+14155551111.txt")

        summary = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["Alice.txt"])
        self.assertEqual(summary.renamed, 1)
        self.assertEqual(summary.renames, [("+14155551111.txt", "Alice.txt")])
        self.assertEqual((self.test_dir / "Alice.txt").read_text(), "content of +14155551111.txt")

    def test_group_conversation(self):
        self.touch("+14155551111, bob@example.com.html")

        FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["Alice, Bob Jones.html"])

    def test_unsafe_name_is_sanitized(self):
        self.touch("4155554444.txt")

        FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["A_B_C.txt"])

    def test_collisions_get_numeric_suffixes(self):
        self.touch("+14155551111.txt", "+14155552222.txt", "+14155553333.txt")

        summary = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["Alice (1).txt", "Alice (2).txt", "Alice.txt"])
        self.assertEqual(summary.renamed, 3)

    def test_existing_target_is_never_overwritten(self):
        self.touch("Alice.txt", "4155551111.txt")

        FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["Alice (1).txt", "Alice.txt"])
        self.assertEqual((self.test_dir / "Alice.txt").read_text(), "content of Alice.txt")

    def test_unmatched_file_keeps_name(self):
        self.touch("+19998887777.txt")

        summary = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["+19998887777.txt"])
        self.assertEqual(summary.unmatched, 1)
        self.assertEqual(summary.renamed, 0)

    def test_name_sanitizing_to_empty_is_unmatched(self):
        self.touch("4155555555.txt")

        summary = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["4155555555.txt"])
        self.assertEqual(summary.unmatched, 1)

    def test_non_candidates_are_ignored(self):
        self.touch("Alice Smith.txt", "notes.md", "4155551111.json")

        summary = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["4155551111.json", "Alice Smith.txt", "notes.md"])
        self.assertEqual(summary.files_processed, 0)

    def test_second_run_is_idempotent(self):
        self.touch("+14155551111.txt", "+14155552222.txt", "bob@example.com.txt")
        FileRenamer(self.index).rename_directory(self.test_dir)
        first = self.listing()

        summary = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), first)
        self.assertEqual(summary.renamed, 0)

    def test_missing_directory(self):
        with self.assertRaises(ExportDirectoryError):
            FileRenamer(self.index).rename_directory(self.test_dir / "missing")

    def test_rename_failure_is_counted_and_skipped(self):
        self.touch("+14155551111.txt", "bob@example.com.txt")
        original_rename = Path.rename

        def failing_rename(path, target):
            if path.name.startswith("+1415"):
                raise PermissionError(13, "Permission denied")
            return original_rename(path, target)

        with patch.object(Path, "rename", failing_rename):
            summary = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.renamed, 1)
        self.assertEqual(len(summary.errors), 1)
        self.assertEqual(self.listing(), ["+14155551111.txt", "Bob Jones.txt"])


class TestDryRun(FileRenamerTestCase):

    def test_dry_run_touches_nothing(self):
        self.touch("+14155551111.txt", "bob@example.com.txt")

        summary = FileRenamer(self.index, dry_run=True).rename_directory(self.test_dir)

        self.assertEqual(self.listing(), ["+14155551111.txt", "bob@example.com.txt"])
        self.assertEqual(summary.renamed, 2)

    def test_dry_run_reports_same_pairs_as_real_run(self):
        self.touch("Alice.txt", "+14155551111.txt", "+14155552222.txt", "4155553333.txt",
                   "bob@example.com.txt", "+19998887777.txt")

        dry = FileRenamer(self.index, dry_run=True).rename_directory(self.test_dir)
        real = FileRenamer(self.index).rename_directory(self.test_dir)

        self.assertEqual(dry.renames, real.renames)
        self.assertEqual(dry.unmatched, real.unmatched)


class TestPlan(FileRenamerTestCase):

    def test_plan_without_match(self):
        self.touch("+19998887777.txt")

        plan = FileRenamer(self.index).plan(ExportFile(self.test_dir / "+19998887777.txt"))

        self.assertFalse(plan.is_match)
        self.assertIsNone(plan.target)

    def test_plan_target_keeps_extension(self):
        self.touch("4155551111.HTML")

        plan = FileRenamer(self.index).plan(ExportFile(self.test_dir / "4155551111.HTML"))

        self.assertEqual(plan.target.name, "Alice.HTML")
        self.assertEqual(plan.matched_names, ["Alice"])


if __name__ == '__main__':
    unittest.main()
