"""
Contact-name renaming of exported conversation files.

Files named after raw handles (``+14155551234.txt``) are renamed after the
matching contacts (``Alice Smith.txt``). Existing files are never
overwritten: a numeric suffix is appended instead (``Alice Smith (1).txt``).
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Set, Tuple

import config
from core.export_files import ExportFile, list_export_files
from core.filename_tokenizer import extract_identifiers, looks_like_identifier
from core.name_resolver import resolve_names

logger = logging.getLogger(__name__)

_FORBIDDEN_CHARS_RE = re.compile("[" + re.escape(config.FORBIDDEN_FILENAME_CHARS) + "]")
_REPEATED_UNDERSCORES_RE = re.compile(r"_{2,}")


def sanitize_filename(filename: str) -> str:
    """
    Make a display name safe to use as a filename.

    Each of ``<>:"/\\|?*`` becomes an underscore, runs of underscores are
    collapsed and leading/trailing underscores removed.

    Args:
        filename: Name without extension

    Returns:
        str: Sanitized name
    """
    sanitized = _FORBIDDEN_CHARS_RE.sub(config.FILENAME_REPLACEMENT_CHAR, filename)
    sanitized = _REPEATED_UNDERSCORES_RE.sub("_", sanitized)
    return sanitized.strip("_")


@dataclass
class RenamePlan:
    """Decision taken for one export file."""
    source: Path
    matched_names: List[str]
    target: Optional[Path] = None

    @property
    def is_match(self) -> bool:
        return bool(self.matched_names)

    @property
    def is_noop(self) -> bool:
        return self.target is None or self.target == self.source


@dataclass
class RenameSummary:
    """Aggregate counts of a renaming pass."""
    renamed: int = 0
    unmatched: int = 0
    unchanged: int = 0
    failed: int = 0
    renames: List[Tuple[str, str]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def files_processed(self) -> int:
        return self.renamed + self.unmatched + self.unchanged + self.failed


class FileRenamer:
    """
    Renames export files after the contacts found in their names.

    Args:
        contact_index: Identifier to display name mapping, read-only
        dry_run: Decide and report, but do not touch the filesystem
    """

    def __init__(self, contact_index: Mapping[str, str], dry_run: bool = False):
        self.contact_index = contact_index
        self.dry_run = dry_run
        # Simulated directory state for dry runs
        self._claimed: Set[Path] = set()
        self._vacated: Set[Path] = set()

    def _exists(self, path: Path) -> bool:
        if self.dry_run:
            if path in self._claimed:
                return True
            if path in self._vacated:
                return False
        return path.exists()

    def build_target_name(self, matched_names: List[str]) -> str:
        """Join matched names and sanitize the result (no extension)."""
        return sanitize_filename(config.NAME_SEPARATOR.join(matched_names))

    def resolve_collision(self, source: Path, base_name: str) -> Path:
        """
        Find a free target path for `base_name` next to `source`.

        Tries ``<base><ext>`` then ``<base> (1)<ext>``, ``<base> (2)<ext>``, ...
        and stops at the first path that is free or is `source` itself.

        Args:
            source: Current path of the file
            base_name: Sanitized name without extension

        Returns:
            Path: Target path
        """
        directory = source.parent
        extension = source.suffix
        candidate = directory / f"{base_name}{extension}"
        counter = 1
        while self._exists(candidate) and candidate != source:
            candidate = directory / f"{base_name} ({counter}){extension}"
            counter += 1
        return candidate

    def plan(self, export_file: ExportFile) -> RenamePlan:
        """
        Decide the new name of an export file.

        Args:
            export_file: File to plan for

        Returns:
            RenamePlan: target is None when no contact matched
        """
        identifiers = extract_identifiers(export_file.filename)
        logger.debug(f"  Extracted identifiers: {identifiers}")

        matched_names = resolve_names(identifiers, self.contact_index)
        logger.debug(f"  Final matched names: {matched_names}")

        plan = RenamePlan(source=export_file.path, matched_names=matched_names)
        if not matched_names:
            return plan

        base_name = self.build_target_name(matched_names)
        if not base_name:
            logger.warning(f"⚠️  Contact names {matched_names} sanitize to an empty filename")
            plan.matched_names = []
            return plan

        plan.target = self.resolve_collision(export_file.path, base_name)
        return plan

    def apply(self, plan: RenamePlan, summary: RenameSummary) -> None:
        """
        Carry out (or simulate) a rename plan and record the outcome.

        Args:
            plan: Plan returned by plan()
            summary: Summary updated in place
        """
        filename = plan.source.name

        if not plan.is_match:
            summary.unmatched += 1
            logger.info(f"No matching contacts found for: {filename}")
            return

        if plan.is_noop:
            summary.unchanged += 1
            logger.debug(f"Already named after its contacts: {filename}")
            return

        target_name = plan.target.name
        prefix = "[DRY RUN] " if self.dry_run else ""
        logger.info(f"{prefix}Renaming: {filename} -> {target_name}")

        if self.dry_run:
            self._claimed.add(plan.target)
            self._claimed.discard(plan.source)
            self._vacated.add(plan.source)
            self._vacated.discard(plan.target)
        else:
            try:
                plan.source.rename(plan.target)
            except OSError as e:
                summary.failed += 1
                error_msg = f"Error renaming {filename}: {e}"
                summary.errors.append(error_msg)
                logger.error(f"❌ {error_msg}")
                return

        summary.renamed += 1
        summary.renames.append((filename, target_name))

    def rename_file(self, export_file: ExportFile, summary: RenameSummary) -> RenamePlan:
        """Plan and apply the rename of a single export file."""
        logger.debug(f"Processing file: {export_file.filename}")
        plan = self.plan(export_file)
        self.apply(plan, summary)
        return plan

    def rename_directory(self, export_dir: Path) -> RenameSummary:
        """
        Rename every candidate export file of a directory.

        Candidates are .txt/.html files whose name contains a digit or '@'.

        Args:
            export_dir: Directory written by the exporter

        Returns:
            RenameSummary: Counts and performed (or simulated) renames

        Raises:
            ExportDirectoryError: If the directory is missing or unreadable
        """
        self._claimed.clear()
        self._vacated.clear()

        candidates = [
            export_file for export_file in list_export_files(export_dir)
            if looks_like_identifier(export_file.filename)
        ]
        logger.info(f"Found {len(candidates)} files to potentially rename")

        summary = RenameSummary()
        for export_file in candidates:
            self.rename_file(export_file, summary)
        return summary
