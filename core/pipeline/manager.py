"""
Pipeline Manager

Orchestrates execution of pipeline stages with dependency ordering and error handling.
"""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .base import PipelineContext, PipelineStage, StageResult

logger = logging.getLogger(__name__)


class PipelineManager:
    """Manages execution of pipeline stages."""

    def __init__(self, export_dir: Path):
        """
        Initialize pipeline manager.

        Args:
            export_dir: Directory holding the exported conversation files
        """
        self.export_dir = Path(export_dir)
        self.stages: Dict[str, PipelineStage] = {}
        self.stage_order: List[str] = []

    def register_stage(self, stage: PipelineStage) -> None:
        """
        Register a pipeline stage.

        Args:
            stage: Pipeline stage to register
        """
        self.stages[stage.name] = stage
        if stage.name not in self.stage_order:
            self.stage_order.append(stage.name)
        logger.debug(f"Registered pipeline stage: {stage.name}")

    def register_stages(self, stages: List[PipelineStage]) -> None:
        """Register multiple pipeline stages."""
        for stage in stages:
            self.register_stage(stage)

    def get_execution_order(self) -> List[str]:
        """
        Get the execution order of registered stages.

        Dependencies on stages that are not registered (for example the
        rename stage under --no-rename) are ignored.

        Returns:
            List of stage names in execution order
        """
        remaining = list(self.stage_order)
        ordered: List[str] = []

        while remaining:
            ready = [
                stage_name for stage_name in remaining
                if not [dep for dep in self.stages[stage_name].get_dependencies() if dep in remaining]
            ]
            if not ready:
                raise RuntimeError(f"Cannot resolve dependencies for remaining stages: {remaining}")
            for stage_name in ready:
                ordered.append(stage_name)
                remaining.remove(stage_name)

        return ordered

    def execute_stage(self, stage_name: str, context: PipelineContext) -> StageResult:
        """
        Execute a single pipeline stage.

        Args:
            stage_name: Name of stage to execute
            context: Pipeline context

        Returns:
            StageResult: Result of stage execution
        """
        if stage_name not in self.stages:
            raise ValueError(f"Unknown stage: {stage_name}")

        stage = self.stages[stage_name]
        logger.info(f"Executing stage: {stage_name}")
        start_time = time.time()

        result = stage.execute(context)
        execution_time = time.time() - start_time
        result.execution_time = execution_time

        if result.success:
            context.set_stage_data(stage_name, {
                'completed': True,
                'execution_time': execution_time,
                'records_processed': result.records_processed,
            })

        logger.info(f"Stage '{stage_name}' completed: success={result.success}, "
                    f"time={execution_time:.2f}s, records={result.records_processed}")
        return result

    def execute_pipeline(self, config: Optional[object] = None,
                         stop_on_error: bool = True,
                         on_stage_complete: Optional[Callable[[str, StageResult], None]] = None
                         ) -> Dict[str, StageResult]:
        """
        Execute every registered stage.

        Args:
            config: Run configuration
            stop_on_error: Stop pipeline on first failed stage
            on_stage_complete: Called with each stage's name and result as soon as it finishes

        Returns:
            Dict mapping stage names to their results, in execution order
        """
        execution_order = self.get_execution_order()
        logger.info(f"Pipeline execution order: {' → '.join(execution_order)}")

        context = PipelineContext(export_dir=self.export_dir, config=config)

        results: Dict[str, StageResult] = {}
        for stage_name in execution_order:
            result = self.execute_stage(stage_name, context)
            results[stage_name] = result
            if on_stage_complete:
                on_stage_complete(stage_name, result)

            if not result.success and stop_on_error:
                logger.error(f"Pipeline stopped due to stage failure: {stage_name}")
                break

        return results
