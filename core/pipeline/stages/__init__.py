"""
Pipeline Stages

Individual pipeline stages of an export run.
"""

from .export import ExportStage
from .contact_rename import ContactRenameStage
from .timestamps import TimestampStage

__all__ = [
    'ExportStage',
    'ContactRenameStage',
    'TimestampStage',
]
