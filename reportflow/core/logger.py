from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys


LOG_DIR_ENV = "REPORTFLOW_LOG_DIR"

_LOGGER: logging.Logger | None = None


def _default_log_dir() -> Path:
    env = os.getenv(LOG_DIR_ENV)
    if env:
        return Path(env)
    return Path.home() / ".reportflow" / "logs"


DEDUPE_KEY = "dedupe"
DEDUPE_LIMIT = 512


class DuplicateMessageFilter(logging.Filter):
    """Drop repeats of records logged with ``extra={"dedupe": True}``.

    Synthesis runs on every mapping edit, so a diagnostic about the same
    mapping would otherwise repeat on each call. Unmarked records always
    pass. At most ``limit`` messages are remembered; the oldest is forgotten
    first.
    """

    def __init__(self, name: str = "", limit: int = DEDUPE_LIMIT) -> None:
        super().__init__(name)
        self._limit = limit
        self._seen: dict[tuple[str, int, str], None] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, DEDUPE_KEY, False):
            return True
        key = (record.name, record.levelno, record.getMessage())
        if key in self._seen:
            return False
        self._seen[key] = None
        if len(self._seen) > self._limit:
            del self._seen[next(iter(self._seen))]
        return True


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the configured ``reportflow`` logger writing to ``<log_dir>/app.log``.

    Creates the directory if needed. Uses rotating file handler.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    base = Path(log_dir) if log_dir is not None else _default_log_dir()
    base.mkdir(parents=True, exist_ok=True)
    log_path = base / "app.log"

    logger = logging.getLogger("reportflow")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    fmt = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    dedup = DuplicateMessageFilter()

    file_handler = RotatingFileHandler(log_path, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(fmt)
    file_handler.addFilter(dedup)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    console.addFilter(dedup)
    logger.addHandler(console)

    _LOGGER = logger
    return logger


def reset_logger() -> None:
    """Detach handlers installed by :func:`get_logger` (used by tests)."""

    global _LOGGER
    if _LOGGER is None:
        return
    for handler in list(_LOGGER.handlers):
        _LOGGER.removeHandler(handler)
        handler.close()
    _LOGGER.propagate = True
    _LOGGER.setLevel(logging.NOTSET)
    _LOGGER = None
