"""Logging setup for the CLI; the library itself never installs handlers."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

_ROOT_LOGGER = "nowquery"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class LoggingState:
    level: int
    handlers: list[logging.Handler]
    propagate: bool


def _level_for_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def configure_logging(
    *,
    verbosity: int,
    log_file: Path | None,
    enable_file: bool,
) -> LoggingState:
    """
    Route ``nowquery.*`` log records to stderr (and optionally a file).

    Returns the previous logger state for `restore_logging`.
    """
    logger = logging.getLogger(_ROOT_LOGGER)
    previous = LoggingState(
        level=logger.level,
        handlers=list(logger.handlers),
        propagate=logger.propagate,
    )

    level = _level_for_verbosity(verbosity)
    handlers: list[logging.Handler] = []

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level)
    stderr_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    handlers.append(stderr_handler)

    if enable_file and log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as exc:
            sys.stderr.write(f"Warning: cannot open log file {log_file}: {exc}\n")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(_FORMAT))
            handlers.append(file_handler)

    logger.handlers = handlers
    logger.setLevel(min(h.level for h in handlers))
    logger.propagate = False
    return previous


def restore_logging(previous: LoggingState) -> None:
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in logger.handlers:
        if handler not in previous.handlers:
            handler.close()
    logger.handlers = previous.handlers
    logger.setLevel(previous.level)
    logger.propagate = previous.propagate
