# sfflow/utils/logger.py
from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "sfflow"

_LEVELS = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_FMT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def level_from_env(default: str = "WARNING") -> int:
    """Resolve LOG_LEVEL from the environment; unknown names fall back to default."""
    name = os.getenv("LOG_LEVEL", default).upper()
    return _LEVELS.get(name, _LEVELS.get(default.upper(), logging.WARNING))


class _ColorFormatter(logging.Formatter):
    """Wrap a formatted record in an ANSI color when the stream is a terminal."""

    _COLORS = (
        (logging.ERROR, "\033[91m"),    # red
        (logging.WARNING, "\033[93m"),  # yellow
        (logging.INFO, "\033[92m"),     # green
    )

    def __init__(self, stream, **kwargs):
        super().__init__(**kwargs)
        self._tty = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if not self._tty:
            return text
        for threshold, color in self._COLORS:
            if record.levelno >= threshold:
                return f"{color}{text}\033[0m"
        return text


def init_logger(
    name: str = ROOT_LOGGER,
    level: int | None = None,
    log_dir: str | Path | None = None,
    file_name: str = "sfflow.log",
    file_max_mb: int = 5,
    file_backup: int = 3,
) -> logging.Logger:
    """
    Configure the sfflow logger:
      - colored stderr handler, so stdout stays free for command output
      - optional rotating file handler under log_dir
    Calling it again replaces the handlers instead of stacking them.
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(level if level is not None else level_from_env())

    stream = sys.stderr
    sh = logging.StreamHandler(stream)
    sh.setFormatter(_ColorFormatter(stream, fmt=_FMT, datefmt=_DATEFMT))
    logger.addHandler(sh)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / file_name),
            maxBytes=file_max_mb * 1024 * 1024,
            backupCount=file_backup,
            encoding="utf-8",
        )
        fh.setFormatter(logging.Formatter(fmt=_FMT, datefmt=_DATEFMT))
        logger.addHandler(fh)

    return logger


def get_logger(child: str) -> logging.Logger:
    """Child logger under the sfflow root, e.g. get_logger("codec") -> sfflow.codec."""
    return logging.getLogger(ROOT_LOGGER).getChild(child)
