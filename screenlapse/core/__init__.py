"""Core helpers shared across screenlapse: logging, config parsing, errors."""

from .errors import (
    CompositionError,
    ConfigError,
    ExternalToolError,
    FrameFormatError,
    FrameTimeoutError,
    NoDisplaysFoundError,
    NoImagesForDayError,
    NoInputImagesError,
    PersistenceError,
    ScreenlapseError,
    SourceFatalError,
)
from .logging_utils import LoggerLike, StructuredLogger, ensure_structured_logger, get_module_logger

__all__ = [
    "CompositionError",
    "ConfigError",
    "ExternalToolError",
    "FrameFormatError",
    "FrameTimeoutError",
    "LoggerLike",
    "NoDisplaysFoundError",
    "NoImagesForDayError",
    "NoInputImagesError",
    "PersistenceError",
    "ScreenlapseError",
    "SourceFatalError",
    "StructuredLogger",
    "ensure_structured_logger",
    "get_module_logger",
]
