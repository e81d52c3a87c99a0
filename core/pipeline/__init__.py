"""
Pipeline Architecture Module

Export, rename and timestamp stages executed in dependency order.
"""

from .base import PipelineStage, PipelineContext, StageResult
from .manager import PipelineManager

__all__ = [
    'PipelineStage',
    'PipelineContext',
    'StageResult',
    'PipelineManager',
]
