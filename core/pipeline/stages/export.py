"""
Export Stage

Runs imessage-exporter to write one file per conversation into the export directory.
"""

import logging
import time

from core.exporter import ExportError, build_command, run_exporter

from ..base import PipelineContext, PipelineStage, StageResult

logger = logging.getLogger(__name__)


class ExportStage(PipelineStage):
    """Invokes the external exporter."""

    def __init__(self):
        super().__init__("export")

    def execute(self, context: PipelineContext) -> StageResult:
        start_time = time.time()
        export_config = context.config

        if export_config.skip_export:
            logger.info("Skipping export, post-processing existing files")
            return StageResult(
                success=True,
                execution_time=time.time() - start_time,
                records_processed=0,
                metadata={"skipped": True},
            )

        command = build_command(export_config)
        if context.dry_run:
            logger.info(f"[DRY RUN] Would run: {' '.join(command)}")
            return StageResult(
                success=True,
                execution_time=time.time() - start_time,
                records_processed=0,
                metadata={"skipped": True, "command": command},
            )

        try:
            export_result = run_exporter(export_config)
        except ExportError as e:
            logger.error(f"❌ Export failed: {e.message}")
            return StageResult(
                success=False,
                execution_time=time.time() - start_time,
                records_processed=0,
                errors=[e.message],
                metadata={"command": command, "output": e.output},
            )

        logger.info("✅ Export completed successfully")
        return StageResult(
            success=True,
            execution_time=time.time() - start_time,
            records_processed=1,
            metadata={"command": export_result.command, "output": export_result.output},
        )
