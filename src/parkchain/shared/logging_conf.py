# src/parkchain/shared/logging_conf.py
"""
Logging Configuration - Handlers and Formatting

Sets up the root logger for the bot process: stdout and an optional
size-rotated log file.

Files that USE this module:
- parkchain.app (setup_logging at startup)

Files that this module USES:
- None (pure configuration module)
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s :: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "parkchain.log"


def setup_logging(
    level=logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    log_dir: Optional[Union[str, Path]] = None,
    log_to_stdout: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> Optional[Path]:
    """
    Configure application-wide logging.

    Args:
        level: Root logging level
        log_file: Explicit log file path (enables file logging)
        log_dir: Directory for ``parkchain.log``; takes precedence over log_file
        log_to_stdout: Whether to also log to stdout (disable under a supervisor)
        max_bytes: Size per log file before rotation
        backup_count: Rotated files to keep

    Returns:
        Path of the log file, or None when logging to stdout only
    """
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)
    handlers: List[logging.Handler] = []
    log_file_path: Optional[Path] = None

    if log_to_stdout:
        handlers.append(logging.StreamHandler(sys.stdout))

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file_path = log_dir / LOG_FILE_NAME
    elif log_file:
        log_file_path = Path(log_file)
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

    if log_file_path is not None:
        handlers.append(RotatingFileHandler(
            log_file_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ))

    # Never leave the process silent
    if not handlers:
        handlers.append(logging.StreamHandler(sys.stdout))

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)

    logger = logging.getLogger(__name__)
    if log_file_path is not None:
        logger.info("Logging configured: file=%s, level=%s", log_file_path, logging.getLevelName(level))
    else:
        logger.info("Logging configured: stdout, level=%s", logging.getLevelName(level))
    return log_file_path
