"""
Applies message date ranges to export files' timestamps.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from core.date_extractor import DateExtractor, DateRange
from core.export_files import list_export_files
from utils.file_times import set_file_times

logger = logging.getLogger(__name__)

DISPLAY_FORMAT = "%b %d, %Y %I:%M %p"


@dataclass
class TimestampSummary:
    """Aggregate counts of a timestamp pass."""
    updated: int = 0
    no_dates: int = 0
    failed: int = 0
    creation_time_skipped: int = 0
    ranges: List[Tuple[str, DateRange]] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


class MetadataUpdater:
    """
    Sets creation time to the first message and modification time to the last.

    Args:
        date_extractor: Extractor used to read message dates
        dry_run: Extract and report ranges without writing any attribute
    """

    def __init__(self, date_extractor: Optional[DateExtractor] = None, dry_run: bool = False):
        self.date_extractor = date_extractor or DateExtractor()
        self.dry_run = dry_run

    def apply(self, path: Path, date_range: DateRange) -> bool:
        """
        Write a date range to a file's timestamps.

        Args:
            path: File to update
            date_range: First and last message time

        Returns:
            bool: True if the creation time was written as well

        Raises:
            OSError: If the attributes cannot be written
        """
        return set_file_times(path, date_range.first, date_range.last)

    def update_file(self, path: Path, summary: TimestampSummary) -> Optional[DateRange]:
        """
        Extract the date range of one file and stamp it.

        Errors are recorded in `summary`; nothing is raised.
        """
        logger.info(f"Processing {path.name}...")
        date_range = self.date_extractor.extract_from_file(path)
        if date_range is None:
            summary.no_dates += 1
            return None

        if not self.dry_run:
            try:
                creation_written = self.apply(path, date_range)
            except OSError as e:
                summary.failed += 1
                error_msg = f"Error updating timestamps for {path.name}: {e}"
                summary.errors.append(error_msg)
                logger.error(f"  ❌ {error_msg}")
                return None
            if not creation_written:
                summary.creation_time_skipped += 1

        summary.updated += 1
        summary.ranges.append((path.name, date_range))
        prefix = "[DRY RUN] Would update" if self.dry_run else "✅ Updated"
        logger.info(f"  {prefix} {path.name}:")
        logger.info(f"    Created: {date_range.first.strftime(DISPLAY_FORMAT)}")
        logger.info(f"    Modified: {date_range.last.strftime(DISPLAY_FORMAT)}")
        return date_range

    def update_directory(self, export_dir: Path) -> TimestampSummary:
        """
        Stamp every export file of a directory.

        Raises:
            ExportDirectoryError: If the directory is missing or unreadable
        """
        export_files = list_export_files(export_dir)
        logger.info(f"Found {len(export_files)} export files to process")

        summary = TimestampSummary()
        for export_file in export_files:
            self.update_file(export_file.path, summary)
        return summary
