"""Scripted displays and tool runners for pipeline tests.

``MockFrameSource`` replays a script of poll outcomes so tests can exercise
the not-ready retry path and fatal errors without a real screen.
``RecordingToolRunner`` stands in for ``ExternalToolRunner`` and records every
invocation instead of spawning a process.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from screenlapse.capture.frame import DisplayInfo, RawFrame
from screenlapse.capture.source import NOT_READY, FrameSource, PollResult, SourceProvider
from screenlapse.core.errors import ExternalToolError, NoDisplaysFoundError
from screenlapse.tools.runner import ToolInvocation, ToolResult

PollStep = Union[RawFrame, Exception, object]


class MockFrameSource(FrameSource):
    """Frame source that replays ``script`` one step per poll.

    Each step is a RawFrame (returned), ``NOT_READY`` (returned) or an
    exception instance (raised). The last step repeats once the script runs
    out, so ``[NOT_READY]`` is a display that never becomes ready.
    """

    def __init__(self, frame_or_script: Union[RawFrame, Sequence[PollStep]], index: int = 0) -> None:
        script = [frame_or_script] if isinstance(frame_or_script, RawFrame) else list(frame_or_script)
        first_frame = next((step for step in script if isinstance(step, RawFrame)), None)
        width = first_frame.width if first_frame else 1
        height = first_frame.height if first_frame else 1
        super().__init__(DisplayInfo(index=index, left=0, top=0, width=width, height=height))
        self._script = deque(script)
        self.poll_count = 0
        self.closed = False

    def poll(self) -> PollResult:
        self.poll_count += 1
        step = self._script[0] if len(self._script) == 1 else self._script.popleft()
        if isinstance(step, BaseException):
            raise step
        return step

    def close(self) -> None:
        self.closed = True


class MockSourceProvider(SourceProvider):
    """Hands out a fresh list of sources per enumeration."""

    name = "mock"

    def __init__(self, factory: Callable[[], List[FrameSource]]) -> None:
        self._factory = factory
        self.enumerations = 0
        self.issued: List[FrameSource] = []

    @classmethod
    def of_frames(cls, frames: Iterable[RawFrame]) -> "MockSourceProvider":
        frames = list(frames)
        return cls(lambda: [MockFrameSource(frame, index) for index, frame in enumerate(frames)])

    def list_sources(self) -> List[FrameSource]:
        self.enumerations += 1
        sources = self._factory()
        if not sources:
            raise NoDisplaysFoundError("No mock displays")
        self.issued.extend(sources)
        return sources


class RecordingToolRunner:
    """Records invocations; optionally fails or touches an output file."""

    def __init__(
        self,
        *,
        returncode: int = 0,
        stderr: str = "",
        creates: Optional[Path] = None,
    ) -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.creates = creates
        self.invocations: List[ToolInvocation] = []

    @property
    def commands(self) -> List[List[str]]:
        return [[str(part) for part in inv.command] for inv in self.invocations]

    async def run(self, invocation: ToolInvocation) -> ToolResult:
        self.invocations.append(invocation)
        cmd = [str(part) for part in invocation.command]
        if not invocation.success(self.returncode):
            raise ExternalToolError(
                f"{invocation.program} failed (exit code {self.returncode})",
                command=cmd,
                returncode=self.returncode,
                stderr=self.stderr,
            )
        if self.creates is not None:
            self.creates.write_bytes(b"\x00")
        return ToolResult(command=cmd, returncode=self.returncode, stderr=self.stderr)


__all__ = [
    "MockFrameSource",
    "MockSourceProvider",
    "NOT_READY",
    "RecordingToolRunner",
]
