"""
Base classes for pipeline architecture.

Defines the core interfaces and data structures for the export post-processing pipeline.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class StageResult:
    """Result of executing a pipeline stage."""
    success: bool
    execution_time: float
    records_processed: int
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PipelineContext:
    """Context passed between pipeline stages."""
    export_dir: Path
    config: Optional[Any] = None  # ExportConfig - avoiding circular import
    stage_state: Dict[str, Any] = field(default_factory=dict)

    @property
    def dry_run(self) -> bool:
        return bool(getattr(self.config, "dry_run", False))

    def get_stage_data(self, stage_name: str) -> Optional[Dict[str, Any]]:
        """Get data stored by a previous stage."""
        return self.stage_state.get(stage_name)

    def set_stage_data(self, stage_name: str, data: Dict[str, Any]) -> None:
        """Store data for use by subsequent stages."""
        self.stage_state[stage_name] = data

    def has_stage_completed(self, stage_name: str) -> bool:
        """Check if a stage has completed successfully."""
        stage_data = self.get_stage_data(stage_name)
        return stage_data is not None and stage_data.get('completed', False)


class PipelineStage(ABC):
    """Abstract base class for all pipeline stages."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @abstractmethod
    def execute(self, context: PipelineContext) -> StageResult:
        """
        Execute the pipeline stage.

        Args:
            context: Pipeline context with configuration and state

        Returns:
            StageResult: Result of stage execution
        """

    def get_dependencies(self) -> List[str]:
        """
        Get list of stage names that must complete before this stage.

        Returns:
            List[str]: Stage names this stage depends on
        """
        return []
