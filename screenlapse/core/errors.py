"""Exception hierarchy for the capture pipeline.

Everything above the frame-poll level is "stop and report": none of these
errors are retried automatically.
"""

from __future__ import annotations

from typing import Optional, Sequence


class ScreenlapseError(Exception):
    """Base class for every error raised by screenlapse."""


class ConfigError(ScreenlapseError):
    """A configuration value is missing or out of range."""


class NoDisplaysFoundError(ScreenlapseError):
    """Enumeration returned no displays."""


class SourceFatalError(ScreenlapseError):
    """A display failed with something other than "not ready yet"."""

    def __init__(self, message: str, *, source: Optional[str] = None) -> None:
        super().__init__(message)
        self.source = source


class FrameTimeoutError(SourceFatalError):
    """A display stayed not-ready for longer than the configured frame timeout."""


class FrameFormatError(ScreenlapseError):
    """A raw frame buffer does not match its declared geometry or layout."""


class CompositionError(ScreenlapseError):
    """Per-display images could not be combined."""


class NoInputImagesError(CompositionError):
    """``compose`` was called with an empty image list."""


class PersistenceError(ScreenlapseError):
    """Writing or deleting an artifact on disk failed."""


class NoImagesForDayError(ScreenlapseError):
    """No persisted images match the requested timelapse day."""


class ExternalToolError(ScreenlapseError):
    """An external process could not be started, timed out or exited abnormally."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr

    def __str__(self) -> str:
        text = super().__str__()
        if self.stderr:
            return f"{text}: {self.stderr.strip()[:500]}"
        return text


__all__ = [
    "ScreenlapseError",
    "ConfigError",
    "NoDisplaysFoundError",
    "SourceFatalError",
    "FrameTimeoutError",
    "FrameFormatError",
    "CompositionError",
    "NoInputImagesError",
    "PersistenceError",
    "NoImagesForDayError",
    "ExternalToolError",
]
