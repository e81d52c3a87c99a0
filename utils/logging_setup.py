"""
Logging configuration.

Configures the root logger once per run: a console handler and an optional
file handler sharing one formatter.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import config


def resolve_log_level(log_level: Union[int, str]) -> int:
    """Accept either a logging constant or a level name such as 'INFO'."""
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")
    return level


def setup_logging(
    log_level: Union[int, str] = config.LOG_LEVEL,
    log_file: Optional[Path] = None,
    console_logging: bool = True,
) -> None:
    """
    Set up logging configuration.

    Args:
        log_level: Logging level (e.g., logging.INFO or "INFO")
        log_file: Optional path to log file
        console_logging: Whether to enable console logging
    """
    level = resolve_log_level(log_level)

    # Clear existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    handlers = []

    if console_logging:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(config.CONSOLE_LOG_FORMAT))
        console_handler.setLevel(level)
        handlers.append(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding=config.DEFAULT_ENCODING)
        file_handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
        file_handler.setLevel(level)
        handlers.append(file_handler)

    # Don't use basicConfig, it is a no-op once handlers exist
    root_logger.setLevel(level)
    for handler in handlers:
        root_logger.addHandler(handler)

    # Set specific logger levels for noisy modules
    logging.getLogger("bs4").setLevel(logging.WARNING)
    logging.getLogger("charset_normalizer").setLevel(logging.WARNING)
