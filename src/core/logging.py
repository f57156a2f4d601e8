"""
Logging setup for carwatch runs.

Every run logs to stdout and to a dated file under the log directory, so an
unattended schedule leaves one file per day:
    logs/carwatch_YYYYMMDD.log

Modules log through `get_logger(__name__)` and prefix messages with a short
bracket tag ([nav], [extract], [paginate], [ledger], [supervisor]).
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP clients pulled in by the Supabase error sink log every request at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "hpack", "postgrest")


def dated_log_path(log_dir: Path, when: Optional[datetime] = None) -> Path:
    """
    Example:
        >>> dated_log_path(Path("logs"), datetime(2026, 3, 1)).name
        'carwatch_20260301.log'
    """
    when = when or datetime.now()
    return Path(log_dir) / f"carwatch_{when.strftime('%Y%m%d')}.log"


def _attach(root: logging.Logger, handler: logging.Handler, level: int, formatter: logging.Formatter) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def setup_logging(
    level: str = DEFAULT_LOG_LEVEL,
    log_file: Optional[str] = None,
    console: bool = True,
    log_dir: Path = Path("logs"),
) -> logging.Logger:
    """
    Configure the root logger for a crawl run.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Explicit log file (default: dated file under log_dir)
        console: Also log to stdout
        log_dir: Directory for the dated log file

    Returns:
        Configured root logger

    Example:
        >>> logger = setup_logging(level="DEBUG", log_dir=Path("logs"))
        >>> logger.info("Campaign started")
    """
    numeric = getattr(logging, level.upper(), logging.INFO)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric)

    # A relaunch in the same interpreter must not double every line
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    if console:
        _attach(root_logger, logging.StreamHandler(sys.stdout), numeric, formatter)

    log_path = Path(log_file) if log_file else dated_log_path(log_dir)
    log_path.parent.mkdir(exist_ok=True, parents=True)
    _attach(root_logger, logging.FileHandler(log_path, encoding="utf-8"), numeric, formatter)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))

    root_logger.info(f"Logging initialized - Level: {level}, File: {log_path}")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module (typically `__name__`)."""
    return logging.getLogger(name)


def init_campaign_logging(verbose: bool = False, log_dir: Path = Path("logs")) -> logging.Logger:
    """Initialize logging with DEBUG when verbose, INFO otherwise."""
    return setup_logging(level="DEBUG" if verbose else "INFO", log_dir=log_dir)
