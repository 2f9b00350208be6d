"""Injectable runner for the external command-line tools (pngquant, ffmpeg)."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from screenlapse.core.errors import ExternalToolError
from screenlapse.core.logging_utils import LoggerLike, ensure_structured_logger


def exit_zero(returncode: int) -> bool:
    return returncode == 0


@dataclass(slots=True)
class ToolInvocation:
    """One external command and how to judge its exit status."""

    command: Sequence[str]
    success: Callable[[int], bool] = exit_zero
    timeout: Optional[float] = None

    @property
    def program(self) -> str:
        return str(self.command[0]) if self.command else "<empty>"


@dataclass(slots=True)
class ToolResult:
    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = field(default="", repr=False)


class ExternalToolRunner:
    """Runs an invocation as a subprocess and checks its exit status.

    Raises ``ExternalToolError`` when the program is missing, exceeds its
    timeout, or exits with a status the invocation does not accept.
    """

    def __init__(self, *, logger: LoggerLike = None) -> None:
        self.logger = ensure_structured_logger(logger, fallback_name=__name__)

    async def run(self, invocation: ToolInvocation) -> ToolResult:
        cmd = [str(part) for part in invocation.command]
        if not cmd:
            raise ExternalToolError("No command given")

        self.logger.debug("Running %s", " ".join(cmd))

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as exc:
            raise ExternalToolError(
                f"Could not start {invocation.program}: {exc}",
                command=cmd,
            ) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=invocation.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise ExternalToolError(
                f"{invocation.program} timed out after {invocation.timeout} seconds",
                command=cmd,
            ) from None

        result = ToolResult(
            command=cmd,
            returncode=process.returncode,
            stdout=stdout.decode('utf-8', errors='ignore'),
            stderr=stderr.decode('utf-8', errors='ignore'),
        )

        if not invocation.success(result.returncode):
            raise ExternalToolError(
                f"{invocation.program} failed (exit code {result.returncode})",
                command=cmd,
                returncode=result.returncode,
                stderr=result.stderr,
            )

        self.logger.debug("%s exited with %d", invocation.program, result.returncode)
        return result


__all__ = ["ExternalToolRunner", "ToolInvocation", "ToolResult", "exit_zero"]
