"""
Timestamp Stage

Sets each export file's creation and modification time to its first and last message.
"""

import logging
import time
from typing import Optional

from core.date_extractor import DateExtractor, PatternConfigurationError
from core.export_files import ExportDirectoryError
from core.metadata_updater import MetadataUpdater, TimestampSummary

from ..base import PipelineContext, PipelineStage, StageResult

logger = logging.getLogger(__name__)


class TimestampStage(PipelineStage):
    """Stamps export files with their message date range."""

    def __init__(self, date_extractor: Optional[DateExtractor] = None):
        super().__init__("timestamps")
        self.date_extractor = date_extractor

    def get_dependencies(self):
        return ["export", "contact_rename"]

    def execute(self, context: PipelineContext) -> StageResult:
        start_time = time.time()

        try:
            date_extractor = self.date_extractor or DateExtractor()
        except PatternConfigurationError as e:
            logger.error(f"❌ {e}")
            return StageResult(
                success=False,
                execution_time=time.time() - start_time,
                records_processed=0,
                errors=[str(e)],
            )

        updater = MetadataUpdater(date_extractor, dry_run=context.dry_run)
        try:
            summary = updater.update_directory(context.export_dir)
        except ExportDirectoryError as e:
            logger.error(f"❌ {e}")
            return StageResult(
                success=True,
                execution_time=time.time() - start_time,
                records_processed=0,
                errors=[str(e)],
                metadata={"summary": TimestampSummary(), "directory_missing": True},
            )

        if summary.creation_time_skipped:
            logger.debug(f"Creation time not supported on this platform; "
                         f"only modification time set for {summary.creation_time_skipped} files")

        return StageResult(
            success=True,
            execution_time=time.time() - start_time,
            records_processed=summary.updated + summary.no_dates + summary.failed,
            errors=list(summary.errors),
            metadata={"summary": summary},
        )
