"""
Unified Configuration Management for the iMessage export contact renamer.

This module provides a single source of truth for all configuration options,
integrating command line arguments, a .env file and environment variables.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

import config


class ExportConfig(BaseSettings):
    """
    Configuration of one export-and-rename run.

    Values come from, in increasing priority:
    - defaults below
    - a .env file in the working directory
    - environment variables with the IMESSAGE_EXPORT_ prefix
    - command line options (via the Click integration in cli.py)
    """

    model_config = SettingsConfigDict(
        env_prefix=config.ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
        str_strip_whitespace=True,
        case_sensitive=False,
    )

    # ====================================================================
    # EXPORT SETTINGS
    # ====================================================================

    output_dir: Path = Field(
        default=Path(config.DEFAULT_OUTPUT_DIR),
        description="Directory the exporter writes conversation files to"
    )

    export_format: Literal["txt", "html"] = Field(
        default=config.DEFAULT_EXPORT_FORMAT,
        description="Export format: txt (default) or html"
    )

    copy_method: Literal["disabled", "clone", "basic", "full"] = Field(
        default=config.DEFAULT_COPY_METHOD,
        description="Attachment copy method passed to the exporter"
    )

    db_path: Optional[Path] = Field(
        default=None,
        description="Custom iMessage database path"
    )

    attachment_root: Optional[Path] = Field(
        default=None,
        description="Custom attachment root path"
    )

    start_date: Optional[str] = Field(
        default=None,
        description="Only export messages on or after this date (YYYY-MM-DD)"
    )

    end_date: Optional[str] = Field(
        default=None,
        description="Only export messages before this date (YYYY-MM-DD)"
    )

    skip_export: bool = Field(
        default=False,
        description="Post-process an existing export without running the exporter"
    )

    # ====================================================================
    # RENAMING SETTINGS
    # ====================================================================

    rename_files: bool = Field(
        default=True,
        description="Rename export files after matching contacts"
    )

    contacts_file: Optional[Path] = Field(
        default=None,
        description="vCard file to read contacts from instead of the macOS AddressBook"
    )

    dry_run: bool = Field(
        default=False,
        description="Show what would be done without making changes"
    )

    # ====================================================================
    # LOGGING SETTINGS
    # ====================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level when neither --verbose nor --debug is given"
    )

    log_file: Optional[Path] = Field(
        default=None,
        description="Also write the log to this file"
    )

    verbose: bool = Field(
        default=False,
        description="Enable verbose logging (INFO level)"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug logging (DEBUG level)"
    )

    # ====================================================================
    # VALIDATORS
    # ====================================================================

    @field_validator('output_dir', 'db_path', 'attachment_root', 'contacts_file', 'log_file', mode='before')
    @classmethod
    def expand_user_paths(cls, v):
        """Convert strings to Path and expand '~'."""
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @field_validator('start_date', 'end_date')
    @classmethod
    def validate_date_format(cls, v):
        """Validate YYYY-MM-DD dates if provided."""
        if v is None:
            return v
        try:
            datetime.strptime(v, config.DEFAULT_DATE_FORMAT)
        except ValueError:
            raise ValueError(f"Invalid date: {v}. Use YYYY-MM-DD")
        return v

    @model_validator(mode='after')
    def validate_date_range(self):
        """Validate that the start date is not after the end date."""
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(
                f"Invalid date range: start date ({self.start_date}) is after end date ({self.end_date})"
            )
        return self

    @model_validator(mode='after')
    def validate_logging_conflicts(self):
        """--verbose and --debug are mutually exclusive."""
        if self.verbose and self.debug:
            raise ValueError(
                "Conflicting options: --verbose and --debug cannot be used together.\n"
                "  • --verbose sets logging to INFO level\n"
                "  • --debug sets logging to DEBUG level (includes verbose)"
            )
        return self

    # ====================================================================
    # COMPUTED PROPERTIES
    # ====================================================================

    @property
    def effective_log_level(self) -> str:
        """Get the effective log level considering debug/verbose flags."""
        if self.debug:
            return 'DEBUG'
        elif self.verbose:
            return 'INFO'
        return self.log_level

    @property
    def is_verbose(self) -> bool:
        return self.verbose or self.debug

    # ====================================================================
    # UTILITY METHODS
    # ====================================================================

    def exporter_arguments(self) -> List[str]:
        """Build the exporter command line (without the binary name)."""
        arguments = [
            "-f", self.export_format,
            "-c", self.copy_method,
            "-o", str(self.output_dir),
        ]
        if self.db_path is not None:
            arguments.extend(["-p", str(self.db_path)])
        if self.attachment_root is not None:
            arguments.extend(["-r", str(self.attachment_root)])
        if self.start_date:
            arguments.extend(["-s", self.start_date])
        if self.end_date:
            arguments.extend(["-e", self.end_date])
        return arguments

    def describe(self) -> List[str]:
        """Human-readable configuration lines for verbose output."""
        return [
            f"  Output directory: {self.output_dir}",
            f"  Format: {self.export_format}",
            f"  Copy method: {self.copy_method}",
            f"  Database path: {self.db_path or 'default'}",
            f"  Attachment path: {self.attachment_root or 'default'}",
            f"  Start date: {self.start_date or 'none'}",
            f"  End date: {self.end_date or 'none'}",
            f"  Rename files: {self.rename_files}",
            f"  Contacts source: {self.contacts_file or 'macOS AddressBook'}",
        ]

    def to_dict(self) -> dict:
        """Convert configuration to dictionary for serialization."""
        return self.model_dump(exclude_none=True)
