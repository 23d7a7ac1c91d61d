from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

Level = Union[int, str, None]


def resolve_level(level: Level = None) -> int:
    """Explicit level, else LOG_LEVEL, else INFO. Unknown names mean INFO."""
    if level is None or level == "":
        level = os.getenv("LOG_LEVEL") or logging.INFO
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _is_console(handler: logging.Handler) -> bool:
    # FileHandler is a StreamHandler too
    return (
        type(handler) is logging.StreamHandler
        and handler.stream in (sys.stderr, sys.stdout)
    )


def _writes_to(handler: logging.Handler, path: Path) -> bool:
    return (
        isinstance(handler, RotatingFileHandler)
        and Path(handler.baseFilename).resolve() == path.resolve()
    )


def _rotating_file(path: Path, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
        delay=True,
    )


def get_logger(
    name: Optional[str] = None,
    *,
    level: Level = None,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    propagate: bool = False,
    fmt: str = LOG_FORMAT,
    datefmt: str = LOG_DATEFMT,
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure `name` (normally the package root, "parcel_status") and return it.

    Repeated calls are cheap: a stderr handler and one rotating handler per file
    are added only once, and every attached handler follows the latest level.
    Module loggers such as "parcel_status.api.client" write through these handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(level))
    logger.propagate = propagate

    wanted: list[logging.Handler] = []
    if console and not any(_is_console(h) for h in logger.handlers):
        wanted.append(logging.StreamHandler(stream=sys.stderr))
    if log_file is not None:
        path = Path(log_file)
        if not any(_writes_to(h, path) for h in logger.handlers):
            wanted.append(_rotating_file(path, max_bytes, backup_count))

    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)
    for handler in wanted:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(logger.level)
    return logger
