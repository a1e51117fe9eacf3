"""
Logging setup.
Writes to a log file (for log shipping) and to the console.
"""
import logging
import os
from pathlib import Path

from habit_tracker.constants import (
    DEFAULT_LOG_DIRECTORY_PROD, DEFAULT_LOG_DIRECTORY_DEV,
    DEFAULT_LOG_FILE, DEFAULT_LOG_LEVEL
)


def setup_logging() -> Path:
    """
    Configure the root logger from environment variables.

    Falls back to a local directory when the configured log directory
    is not writable.

    Returns:
        Path of the log file in use
    """
    log_dir = os.getenv("HABIT_TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
    log_file = os.getenv("HABIT_TRACKER_LOG_FILE", DEFAULT_LOG_FILE)
    level = os.getenv("HABIT_TRACKER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    try:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_path = Path(log_dir) / log_file
        file_handler = logging.FileHandler(log_path)
    except PermissionError:
        log_dir = DEFAULT_LOG_DIRECTORY_DEV
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        log_path = Path(log_dir) / log_file
        file_handler = logging.FileHandler(log_path)

    logging.basicConfig(
        force=True,
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            file_handler,
            logging.StreamHandler()
        ]
    )

    logging.getLogger("habit_tracker").info(f"Logging to: {log_path}")
    return log_path
