"""
Configuration module for the iMessage export contact renamer.

This module contains configuration constants and settings used throughout the application.
"""

import logging
from pathlib import Path

# Logging configuration
LOG_LEVEL = logging.WARNING
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_LOG_FORMAT = '%(levelname)s - %(name)s - %(message)s'

# Export settings
DEFAULT_OUTPUT_DIR = "./imessage_export"
DEFAULT_EXPORT_FORMAT = "txt"
DEFAULT_COPY_METHOD = "disabled"
EXPORT_FORMATS = ("txt", "html")
COPY_METHODS = ("disabled", "clone", "basic", "full")
DEFAULT_ENCODING = "utf-8"

# External exporter
EXPORTER_BINARY = "imessage-exporter"
EXPORTER_HOMEPAGE = "https://github.com/ReagentX/imessage-exporter"

# Export files that are post-processed
EXPORT_FILE_EXTENSIONS = (".txt", ".html")

# Filename handling
FORBIDDEN_FILENAME_CHARS = '<>:"/\\|?*'
FILENAME_REPLACEMENT_CHAR = "_"
NAME_SEPARATOR = ", "

# Date filtering
DEFAULT_DATE_FORMAT = "%Y-%m-%d"

# HTML parsing settings
BEAUTIFUL_SOUP_PARSER = "html.parser"
TIMESTAMP_CSS_CLASS = "timestamp"

# macOS Contacts databases
ADDRESSBOOK_ROOT = Path("~/Library/Application Support/AddressBook").expanduser()
ADDRESSBOOK_DB_NAME = "AddressBook-v22.abcddb"

# Environment variables
ENV_PREFIX = "IMESSAGE_EXPORT_"

# Verbose diagnostics
CONTACT_SAMPLE_SIZE = 5
CONTENT_PREVIEW_CHARS = 500
