"""
Runs the external imessage-exporter tool.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

import config
from core.app_config import ExportConfig

logger = logging.getLogger(__name__)


class ExportError(Exception):
    """Raised when the exporter is missing or exits with a non-zero status."""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        self.message = message
        self.returncode = returncode
        self.output = output
        super().__init__(message)


@dataclass
class ExportResult:
    """Outcome of one exporter invocation."""
    command: List[str]
    returncode: int
    output: str


def build_command(export_config: ExportConfig, binary: str = config.EXPORTER_BINARY) -> List[str]:
    """Full exporter command line for a configuration."""
    return [binary] + export_config.exporter_arguments()


def run_exporter(export_config: ExportConfig, binary: str = config.EXPORTER_BINARY) -> ExportResult:
    """
    Run the exporter and wait for it to finish.

    stdout and stderr are merged and buffered until the process exits; there
    is no timeout.

    Args:
        export_config: Run configuration
        binary: Exporter executable, looked up on PATH

    Returns:
        ExportResult: Command, exit status and combined output

    Raises:
        ExportError: If the exporter cannot be started or exits non-zero
    """
    command = build_command(export_config, binary)
    logger.info(f"Running command: {' '.join(command)}")

    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError as e:
        raise ExportError(
            f"Error running {binary}: {e}\n"
            f"Make sure {binary} is installed and in your PATH\n"
            f"You can install it from: {config.EXPORTER_HOMEPAGE}"
        ) from e
    except OSError as e:
        raise ExportError(f"Error running {binary}: {e}") from e

    if result.returncode != 0:
        raise ExportError(
            f"{binary} failed with exit code: {result.returncode}",
            returncode=result.returncode,
            output=result.stdout or "",
        )

    return ExportResult(command=command, returncode=result.returncode, output=result.stdout or "")
