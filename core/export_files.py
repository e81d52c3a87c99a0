"""
Discovery of conversation files in an export directory.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportFile:
    """A single text or HTML conversation file written by the exporter."""
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        """Lowercased extension without the dot ('txt' or 'html')."""
        return self.path.suffix.lower().lstrip(".")


class ExportDirectoryError(OSError):
    """Raised when the export directory is missing or cannot be listed."""


def list_export_files(export_dir: Path) -> List[ExportFile]:
    """
    List the conversation files of an export directory.

    Only regular files with a .txt or .html extension (any case) are returned.
    Subdirectories such as attachments/ are not descended into. Files are
    returned sorted by name.

    Args:
        export_dir: Directory written by the exporter

    Returns:
        List[ExportFile]: Conversation files

    Raises:
        ExportDirectoryError: If the directory does not exist or cannot be read
    """
    export_dir = Path(export_dir).expanduser()
    if not export_dir.is_dir():
        raise ExportDirectoryError(f"Export directory not found: {export_dir}")

    try:
        entries = sorted(export_dir.iterdir())
    except OSError as e:
        raise ExportDirectoryError(f"Cannot read export directory {export_dir}: {e}") from e

    export_files = [
        ExportFile(path)
        for path in entries
        if path.suffix.lower() in config.EXPORT_FILE_EXTENSIONS and path.is_file()
    ]
    logger.debug(f"Found {len(export_files)} export files in {export_dir}")
    return export_files
