"""Logging configuration for toolhub.

The MCP stdio transport uses stdout for protocol messages, so console logging
always goes to stderr.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union


def setup_logging(level: Optional[Union[int, str]] = None, log_dir: Optional[str] = None) -> None:
    """Configure logging for toolhub.

    Args:
        level: Optional logging level (e.g., logging.DEBUG or "DEBUG"). If None, uses INFO.
        log_dir: Optional directory for log files. If None, only console logging is used.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    level = level or logging.INFO

    # Define a structured log format
    formatter = logging.Formatter(
        fmt='%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Add console handler if none exists
    if not root_logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Add file handlers if log directory is provided
    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        main_handler = logging.handlers.RotatingFileHandler(
            log_path / "toolhub.log",
            maxBytes=10_000_000,  # 10MB
            backupCount=5
        )
        main_handler.setFormatter(formatter)
        root_logger.addHandler(main_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            log_path / "error.log",
            maxBytes=10_000_000,  # 10MB
            backupCount=5
        )
        error_handler.setFormatter(formatter)
        error_handler.setLevel(logging.ERROR)
        root_logger.addHandler(error_handler)

    # Configure package loggers
    logging.getLogger('toolhub').setLevel(level)
    logging.getLogger('mcp').setLevel(level)

    # Set appropriate levels for third-party loggers
    if level != logging.DEBUG:
        for logger_name in ['asyncio', 'aiohttp', 'backoff']:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info("Logging initialized", extra={
        "level": logging.getLevelName(level),
        "log_dir": str(log_dir) if log_dir else None
    })
