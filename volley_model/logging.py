"""Logging configuration using Loguru.

Every record carries a ``run`` field naming the season profile being built
(``s4/v2/>=5``), so interleaved logs from several seasons stay readable.
Console output is colored; the file sink writes one JSON line per record.

Example:
    >>> from volley_model.logging import setup_logging, get_logger, profile_run
    >>> setup_logging(level="DEBUG")
    >>> logger = get_logger(__name__)
    >>> with profile_run(4, "v2", 5):
    ...     logger.info("Built {} vectors", 24)

Status Tags:
    >>> from volley_model.logging import SUCCESS, FAIL, WARN
    >>> logger.info(f"{SUCCESS} Season 4 profile built")
    >>> logger.warning(f"{WARN} No players reached 10 sets in season 4")
"""

from __future__ import annotations

import logging
import sys
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any

from loguru import logger

# ANSI tags, rendered by colorize=True on the console sink
SUCCESS = "\033[92m[SUCCESS]\033[0m"
FAIL = "\033[91m[FAIL]\033[0m"
WARN = "\033[93m[WARN]\033[0m"

NO_RUN = "-"
LOG_FILE_PATTERN = "profiles_{time:YYYY-MM-DD}.log"

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[run]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[run]} | {name}:{line} | {message}"


def run_label(season_number: int, version: str, min_sets_played: float) -> str:
    """Short label for one profiling run, e.g. ``s4/v2/>=5``."""
    return f"s{season_number}/{version}/>={min_sets_played:g}"


def profile_run(
    season_number: int,
    version: str,
    min_sets_played: float,
) -> AbstractContextManager[None]:
    """Tag every record logged inside the block with the run label."""
    return logger.contextualize(run=run_label(season_number, version, min_sets_played))


class InterceptHandler(logging.Handler):
    """Route stdlib logging (pandas, typer) through loguru's sinks."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Walk out of the logging module to the real caller
        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(
    level: str = "INFO",
    log_dir: str | Path = "logs",
    rotation: str = "1 day",
    retention: str = "30 days",
    serialize: bool = True,
) -> None:
    """Configure console and rotating file sinks.

    Args:
        level: Minimum log level for both sinks.
        log_dir: Directory for ``profiles_<date>.log`` files; created if missing.
        rotation: When to rotate log files (e.g., "1 day", "100 MB").
        retention: How long to keep old log files.
        serialize: Write JSON lines instead of plain text to the file sink.
    """
    logger.remove()
    logger.configure(extra={"run": NO_RUN})

    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_path / LOG_FILE_PATTERN,
        level=level,
        format=FILE_FORMAT,
        rotation=rotation,
        retention=retention,
        serialize=serialize,
        enqueue=True,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def get_logger(name: str) -> Any:
    """Loguru logger bound with the calling module's name."""
    return logger.bind(name=name)


__all__ = [
    "FAIL",
    "SUCCESS",
    "WARN",
    "get_logger",
    "logger",
    "profile_run",
    "run_label",
    "setup_logging",
]
