# -*- coding: utf-8 -*-
"""
Centralized logging configuration for the graph store migrator.

Provides consistent logging setup across all modules with optional file output and
real-time log streaming. The CLI entry point calls setup_logging() once, then every
module uses logger = get_logger(__name__).

Examples:
    # In the entry point
    from src.utils.logger import setup_logging
    setup_logging(log_file="logs/migration.log")

    # In any module
    from src.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Importing nodes")
"""
# Standard library
import logging
import sys
from pathlib import Path
from typing import Optional

# Global flag to prevent duplicate configuration
_logging_configured = False


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    format_string: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
) -> None:
    """
    Configure logging for the migration run.

    Sets up console output and optional file output with consistent formatting.
    Safe to call multiple times (only the first call configures handlers).

    Args:
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file. Parent directories are created and
                  records are appended to the file in addition to the console
        format_string: Log message format

    Example:
        >>> setup_logging(level=logging.DEBUG, log_file="logs/migration.log")
    """
    global _logging_configured

    if _logging_configured:
        return

    formatter = logging.Formatter(format_string)
    handlers = []

    # Console handler (always included)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=level,
        handlers=handlers,
        force=True
    )

    # The neo4j driver is chatty at DEBUG
    logging.getLogger("neo4j").setLevel(max(level, logging.INFO))

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
