"""One capture cycle: every display captured once and persisted.

The cycle moves through ``ENUMERATING -> CAPTURING -> (COMPOSING | PERSISTING)
-> RECOMPRESSING -> CLEANING_UP -> DONE``. Any error moves it to ``FAILED``
and propagates; nothing is retried except a source reporting ``NOT_READY``.

In combined mode the per-display images are written to disk once every display
has been captured, before composing, and deleted only after the composite has
been persisted (and recompressed, when enabled).
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Optional

from screenlapse.capture.compose import compose
from screenlapse.capture.frame import CanonicalImage, RawFrame
from screenlapse.capture.source import NOT_READY, FrameSource, SourceProvider, create_provider
from screenlapse.capture.transcode import transcode
from screenlapse.config import CaptureSettings
from screenlapse.core.errors import (
    FrameTimeoutError,
    NoDisplaysFoundError,
    ScreenlapseError,
    SourceFatalError,
)
from screenlapse.core.logging_utils import LoggerLike, ensure_structured_logger
from screenlapse.tools.recompress import PngRecompressor
from screenlapse.tools.runner import ExternalToolRunner

from .storage import ArtifactStore

SleepFunc = Callable[[float], Awaitable[None]]


class CycleState(Enum):
    IDLE = "idle"
    ENUMERATING = "enumerating"
    CAPTURING = "capturing"
    COMPOSING = "composing"
    PERSISTING = "persisting"
    RECOMPRESSING = "recompressing"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


@dataclass(slots=True)
class CycleResult:
    timestamp: datetime
    images: list[CanonicalImage] = field(default_factory=list)
    merged: Optional[CanonicalImage] = None
    artifacts: list[Path] = field(default_factory=list)  # kept on disk
    intermediates: list[Path] = field(default_factory=list)  # written, then deleted


class CaptureCycle:

    def __init__(
        self,
        provider: SourceProvider,
        store: ArtifactStore,
        *,
        combine_displays: bool = True,
        recompressor: Optional[PngRecompressor] = None,
        poll_interval: float = 1.0 / 60.0,
        frame_timeout: Optional[float] = None,
        parallel_capture: bool = False,
        sleep: SleepFunc = asyncio.sleep,
        logger: LoggerLike = None,
    ) -> None:
        self.provider = provider
        self.store = store
        self.combine_displays = combine_displays
        self.recompressor = recompressor
        self.poll_interval = poll_interval
        self.frame_timeout = frame_timeout
        self.parallel_capture = parallel_capture
        self._sleep = sleep
        self.logger = ensure_structured_logger(logger, fallback_name=__name__)
        self._state = CycleState.IDLE

    @classmethod
    def from_settings(
        cls,
        settings: CaptureSettings,
        *,
        provider: Optional[SourceProvider] = None,
        runner: Optional[ExternalToolRunner] = None,
        logger: LoggerLike = None,
    ) -> "CaptureCycle":
        log = ensure_structured_logger(logger, fallback_name=__name__)
        recompressor = None
        if settings.compress:
            recompressor = PngRecompressor(
                runner,
                quality=settings.quality,
                executable=settings.pngquant_path,
                timeout=settings.tool_timeout,
                logger=log.getChild("pngquant"),
            )
        return cls(
            provider or create_provider(settings.backend),
            ArtifactStore(settings.output_dir, settings.file_prefix, logger=log.getChild("store")),
            combine_displays=settings.combine_displays,
            recompressor=recompressor,
            poll_interval=settings.poll_interval,
            frame_timeout=settings.frame_timeout,
            parallel_capture=settings.parallel_capture,
            logger=log,
        )

    @property
    def state(self) -> CycleState:
        return self._state

    def _enter(self, state: CycleState) -> None:
        self.logger.debug("%s -> %s", self._state.value, state.value)
        self._state = state

    # ------------------------------------------------------------------
    # Cycle

    async def run(self, timestamp: datetime) -> CycleResult:
        """Capture every display once, stamping all artifacts with ``timestamp``."""
        result = CycleResult(timestamp=timestamp.replace(microsecond=0))
        sources: list[FrameSource] = []
        self._state = CycleState.IDLE

        try:
            self._enter(CycleState.ENUMERATING)
            sources = await asyncio.to_thread(self.provider.list_sources)
            if not sources:
                raise NoDisplaysFoundError("Couldn't find any display")
            self.logger.debug("Capturing %d display(s)", len(sources))
            await asyncio.to_thread(self.store.ensure_output_dir)

            self._enter(CycleState.CAPTURING)
            result.images = await self._capture_all(sources)
            display_paths = self.store.display_paths(result.timestamp, result.images)

            if self.combine_displays:
                for image, path in zip(result.images, display_paths):
                    await self.store.save_async(image, path)
                result.intermediates = display_paths

                self._enter(CycleState.COMPOSING)
                self.logger.debug("Combining %d display images", len(result.images))
                result.merged = compose(result.images)
                merged_path = self.store.composite_path(result.timestamp)
                await self.store.save_async(result.merged, merged_path)
                result.artifacts = [merged_path]
            else:
                self._enter(CycleState.PERSISTING)
                for image, path in zip(result.images, display_paths):
                    await self.store.save_async(image, path)
                result.artifacts = display_paths

            if self.recompressor is not None:
                self._enter(CycleState.RECOMPRESSING)
                for path in result.artifacts:
                    await self.recompressor.compress(path)

            self._enter(CycleState.CLEANING_UP)
            if result.intermediates:
                await self.store.delete_async(result.intermediates)

            self._enter(CycleState.DONE)
        except BaseException:
            self._enter(CycleState.FAILED)
            raise
        finally:
            self._close_sources(sources)

        self.logger.info(
            "Captured %d display(s) -> %s",
            len(result.images),
            ", ".join(path.name for path in result.artifacts),
        )
        return result

    def _close_sources(self, sources: list[FrameSource]) -> None:
        for source in sources:
            try:
                source.close()
            except Exception as exc:
                self.logger.warning("Failed to close %s: %s", source.name, exc)

    # ------------------------------------------------------------------
    # Capture

    async def _capture_all(self, sources: list[FrameSource]) -> list[CanonicalImage]:
        if not self.parallel_capture or len(sources) == 1:
            return [await self.capture_source(source) for source in sources]

        tasks = [
            asyncio.create_task(self.capture_source(source), name=f"capture-{source.name}")
            for source in sources
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def capture_source(self, source: FrameSource) -> CanonicalImage:
        frame = await self.wait_for_frame(source)
        image = transcode(frame)
        self.logger.debug("Captured %s as %dx%d", source.name, image.width, image.height)
        return image

    async def wait_for_frame(self, source: FrameSource) -> RawFrame:
        """Poll ``source`` until it yields a frame.

        Without a frame timeout this waits as long as the source keeps
        answering ``NOT_READY``.
        """
        loop = asyncio.get_running_loop()
        started = loop.time()
        retries = 0

        while True:
            try:
                polled = await asyncio.to_thread(source.poll)
            except ScreenlapseError:
                raise
            except Exception as exc:
                raise SourceFatalError(f"{source.name}: {exc}", source=source.name) from exc

            if polled is not NOT_READY:
                if retries:
                    self.logger.debug("%s ready after %d retries", source.name, retries)
                return polled

            retries += 1
            if self.frame_timeout is not None and loop.time() - started >= self.frame_timeout:
                raise FrameTimeoutError(
                    f"{source.name} produced no frame within {self.frame_timeout:.1f}s",
                    source=source.name,
                )
            await self._sleep(self.poll_interval)


__all__ = ["CaptureCycle", "CycleResult", "CycleState"]
