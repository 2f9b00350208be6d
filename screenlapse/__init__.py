"""Periodic multi-display screen capture with timelapse assembly."""

from __future__ import annotations

import asyncio
from importlib import metadata
from typing import Optional, Sequence

from .app.main import main
from .core.logging_utils import get_module_logger

try:
    __version__ = metadata.version("screenlapse")
except metadata.PackageNotFoundError:  # pragma: no cover - local dev
    __version__ = "0.0.0"

EXIT_INTERRUPTED = 130


def run(argv: Optional[Sequence[str]] = None) -> int:
    """Run the async entry point; Ctrl+C is the only way to stop a periodic run."""
    try:
        return asyncio.run(main(list(argv) if argv is not None else None))
    except KeyboardInterrupt:
        get_module_logger("screenlapse.app").info("Interrupted, stopping")
        return EXIT_INTERRUPTED


__all__ = ["__version__", "main", "run"]
