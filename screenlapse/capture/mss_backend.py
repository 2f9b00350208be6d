"""Frame source backend built on the ``mss`` screenshot library.

mss handles are bound to the thread that opened them, and polls may run on
any executor thread, so every enumeration and every grab opens its own
short-lived ``mss.mss()`` context.
"""

from __future__ import annotations

import mss
from mss.exception import ScreenShotError

from screenlapse.core.errors import NoDisplaysFoundError, SourceFatalError
from screenlapse.core.logging_utils import get_module_logger

from .frame import DisplayInfo, RawFrame
from .source import FrameSource, PollResult, SourceProvider, register_backend

logger = get_module_logger(__name__)

# mss always hands back BGRA, with the alpha byte unset on most platforms.
MSS_CHANNEL_ORDER = "BGRA"


class MssFrameSource(FrameSource):

    def _region(self) -> dict:
        info = self.display
        return {"left": info.left, "top": info.top, "width": info.width, "height": info.height}

    def poll(self) -> PollResult:
        try:
            with mss.mss() as sct:
                shot = sct.grab(self._region())
        except ScreenShotError as exc:
            raise SourceFatalError(f"Capture failed for {self.name}: {exc}", source=self.name) from exc

        width, height = shot.width, shot.height
        raw = bytes(shot.raw)
        if height <= 0 or not raw:
            raise SourceFatalError(f"{self.name} returned an empty frame", source=self.name)

        return RawFrame(
            width=width,
            height=height,
            stride=len(raw) // height,
            data=raw,
            channel_order=MSS_CHANNEL_ORDER,
        )


class MssSourceProvider(SourceProvider):

    name = "mss"

    def list_sources(self) -> list[FrameSource]:
        try:
            with mss.mss() as sct:
                # monitors[0] is the union of all displays
                monitors = list(sct.monitors[1:])
        except ScreenShotError as exc:
            raise NoDisplaysFoundError(f"Couldn't enumerate displays: {exc}") from exc

        if not monitors:
            raise NoDisplaysFoundError("Couldn't find any display")

        sources: list[FrameSource] = []
        for index, monitor in enumerate(monitors):
            info = DisplayInfo(
                index=index,
                left=int(monitor["left"]),
                top=int(monitor["top"]),
                width=int(monitor["width"]),
                height=int(monitor["height"]),
                primary=index == 0,
            )
            logger.debug("Found %s", info.label)
            sources.append(MssFrameSource(info))
        return sources


register_backend(MssSourceProvider.name, MssSourceProvider)


__all__ = ["MSS_CHANNEL_ORDER", "MssFrameSource", "MssSourceProvider"]
