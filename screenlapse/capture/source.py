"""Frame source capability shared by every capture backend.

A backend provides two things: a :class:`SourceProvider` that enumerates the
displays connected right now, and one :class:`FrameSource` per display.
``FrameSource.poll`` returns a :class:`RawFrame` when one is available, the
:data:`NOT_READY` sentinel when the display has nothing yet, and raises
:class:`SourceFatalError` for everything else.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import Callable, Dict, Final, Literal, Union

from screenlapse.core.errors import ConfigError

from .frame import DisplayInfo, RawFrame


class _NotReady(enum.Enum):
    NOT_READY = "not-ready"

    def __repr__(self) -> str:
        return "NOT_READY"


NOT_READY: Final = _NotReady.NOT_READY
NotReady = Literal[_NotReady.NOT_READY]
PollResult = Union[RawFrame, NotReady]


class FrameSource(ABC):
    """One physical display."""

    def __init__(self, display: DisplayInfo) -> None:
        self.display = display

    @property
    def name(self) -> str:
        return self.display.label

    @abstractmethod
    def poll(self) -> PollResult:
        """Return a frame, or ``NOT_READY``; raise ``SourceFatalError`` on failure."""

    def close(self) -> None:
        """Release backend resources. Safe to call more than once."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class SourceProvider(ABC):
    """Enumerates the displays available for one cycle."""

    name: str = "abstract"

    @abstractmethod
    def list_sources(self) -> list[FrameSource]:
        """Return one source per display in enumeration order.

        Raises ``NoDisplaysFoundError`` when nothing is connected.
        """


_BACKENDS: Dict[str, Callable[[], SourceProvider]] = {}


def register_backend(name: str, factory: Callable[[], SourceProvider]) -> None:
    _BACKENDS[name.lower()] = factory


def available_backends() -> list[str]:
    return sorted(_BACKENDS)


def create_provider(name: str) -> SourceProvider:
    try:
        factory = _BACKENDS[name.lower()]
    except KeyError:
        raise ConfigError(
            f"Unknown capture backend '{name}' (available: {', '.join(available_backends()) or 'none'})"
        ) from None
    return factory()


__all__ = [
    "FrameSource",
    "NOT_READY",
    "NotReady",
    "PollResult",
    "SourceProvider",
    "available_backends",
    "create_provider",
    "register_backend",
]
