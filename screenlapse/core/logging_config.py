"""Root logging setup for screenlapse runs.

A periodic capture can run for days, so the optional log file rotates at a
few megabytes. Only handlers installed here are ever replaced; handlers added
by an embedding application (or pytest) are left alone.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from screenlapse.config import CaptureSettings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"

# One debug line per state transition at a 30s interval is ~1 MB a day.
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# PIL logs every PNG chunk at DEBUG; asyncio reports slow to_thread callbacks.
QUIET_LOGGERS = ("PIL", "asyncio")

_OWNED_ATTR = "_screenlapse_owned"


def coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level '{level}'")
        return numeric
    return int(level)


def _own(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _OWNED_ATTR, True)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    return handler


def owned_handlers(root: Optional[logging.Logger] = None) -> list[logging.Handler]:
    root = root or logging.getLogger()
    return [h for h in root.handlers if getattr(h, _OWNED_ATTR, False)]


def _drop_owned_handlers(root: logging.Logger) -> None:
    for handler in owned_handlers(root):
        root.removeHandler(handler)
        handler.close()


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    log_file: Optional[Union[str, Path]] = None,
    console: bool = True,
) -> int:
    """(Re)install the console and rotating file handlers. Returns the level.

    Calling this again replaces the previous screenlapse handlers, so the
    early fallback setup used for configuration errors can be upgraded once
    settings are known.
    """
    numeric_level = coerce_level(level)
    root = logging.getLogger()
    _drop_owned_handlers(root)

    if console:
        root.addHandler(_own(logging.StreamHandler(sys.stdout)))

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        root.addHandler(
            _own(
                RotatingFileHandler(
                    log_path,
                    maxBytes=LOG_FILE_MAX_BYTES,
                    backupCount=LOG_FILE_BACKUPS,
                    encoding="utf-8",
                )
            )
        )

    root.setLevel(numeric_level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))
    return numeric_level


def configure_from_settings(settings: "CaptureSettings") -> int:
    return configure_logging(settings.log_level, log_file=settings.log_file)


__all__ = [
    "LOG_DATEFMT",
    "LOG_FILE_BACKUPS",
    "LOG_FILE_MAX_BYTES",
    "LOG_FORMAT",
    "coerce_level",
    "configure_from_settings",
    "configure_logging",
    "owned_handlers",
]
