# src/config/logging_config.py

"""Per-run timestamped logging configuration for lease_digest.

Each application launch creates a dedicated log file inside ``logs/``,
named with the launch timestamp (e.g. ``logs/run_20260214_153045.log``).
All ``lease_digest.*`` loggers route through this file handler so that
every module's output lands in the same per-run log.

Old run logs are removed by :func:`prune_old_logs`, called from the
``--cleanup`` CLI command.
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path

from src.config.settings import Settings

# Reusable format strings --------------------------------------------------

_DETAILED_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(module)s:%(funcName)s:%(lineno)d | "
    "%(message)s"
)

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging() -> Path:
    """Initialise the root ``lease_digest`` logger for the current run.

    Returns:
        The :class:`~pathlib.Path` to the log file created for this run.
    """
    logs_dir: Path = Settings.LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = logs_dir / f"run_{timestamp}.log"

    # --- Root project logger -----------------------------------------------
    root_logger = logging.getLogger("lease_digest")
    root_logger.setLevel(logging.DEBUG)

    # Prevent duplicate handlers on repeated calls (e.g. tests)
    if root_logger.handlers:
        return log_file

    # --- File handler (DEBUG+) – captures everything -----------------------
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(_DETAILED_FORMAT, datefmt=_DATE_FORMAT)
    )

    # --- Console handler (LOG_LEVEL, WARNING by default) -------------------
    console_handler = logging.StreamHandler(sys.stderr)
    console_level = logging.getLevelName(Settings.CONSOLE_LOG_LEVEL)
    if not isinstance(console_level, int):
        console_level = logging.WARNING
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        logging.Formatter(_CONSOLE_FORMAT, datefmt=_DATE_FORMAT)
    )

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    root_logger.info(
        "Logging initialised — log file: %s", log_file
    )

    return log_file


def prune_old_logs(
    logs_dir: Path | None = None,
    days: int | None = None,
) -> int:
    """Delete ``*.log`` files older than *days*. Returns the count removed."""
    directory = logs_dir or Settings.LOGS_DIR
    max_age_days = (
        days if days is not None else Settings.LOG_RETENTION_DAYS
    )
    if not directory.exists():
        return 0

    cutoff = time.time() - max_age_days * 86400
    removed = 0
    for log_path in directory.glob("*.log"):
        if log_path.stat().st_mtime < cutoff:
            log_path.unlink()
            removed += 1

    if removed:
        logging.getLogger("lease_digest.logging").info(
            "Removed %d log files older than %d days",
            removed,
            max_age_days,
        )
    return removed
