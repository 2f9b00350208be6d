"""Assemble one day of captures into a timelapse video with ffmpeg."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Optional

from screenlapse.core.errors import ExternalToolError, NoImagesForDayError
from screenlapse.core.logging_utils import LoggerLike, ensure_structured_logger
from screenlapse.pipeline.storage import day_pattern, timelapse_name

from .runner import ExternalToolRunner, ToolInvocation

DEFAULT_INPUT_FRAMERATE = 2
DEFAULT_VIDEO_CODEC = "libx265"
DEFAULT_PIXEL_FORMAT = "yuv420p"


class TimelapseBuilder:

    def __init__(
        self,
        runner: Optional[ExternalToolRunner] = None,
        *,
        executable: str = "ffmpeg",
        framerate: int = DEFAULT_INPUT_FRAMERATE,
        codec: str = DEFAULT_VIDEO_CODEC,
        pixel_format: str = DEFAULT_PIXEL_FORMAT,
        timeout: Optional[float] = None,
        logger: LoggerLike = None,
    ) -> None:
        self.logger = ensure_structured_logger(logger, fallback_name=__name__)
        self.runner = runner or ExternalToolRunner(logger=self.logger)
        self.executable = executable
        self.framerate = framerate
        self.codec = codec
        self.pixel_format = pixel_format
        self.timeout = timeout

    def build_command(self, input_pattern: str, output_path: Path) -> list[str]:
        return [
            self.executable, '-y',
            '-framerate', str(self.framerate),
            '-pattern_type', 'glob',
            '-i', input_pattern,
            '-c:v', self.codec,
            '-pix_fmt', self.pixel_format,
            '-fps_mode', 'cfr',
            str(output_path),
        ]

    async def build(self, day: date, source_dir: Path, name_prefix: str) -> Path:
        """Encode every ``{name_prefix}_{YYYYMMDD}*.png`` in ``source_dir``.

        Returns the path of the written ``{name_prefix}_{YYYYMMDD}.mp4``.
        """
        source_dir = Path(source_dir)
        pattern = day_pattern(name_prefix, day)
        frames = sorted(source_dir.glob(pattern))
        if not frames:
            raise NoImagesForDayError(f"No images matching {pattern} in {source_dir}")

        output_path = source_dir / timelapse_name(name_prefix, day)
        self.logger.info(
            "Encoding %d image(s) for %s into %s", len(frames), day.isoformat(), output_path.name
        )

        await self.runner.run(
            ToolInvocation(
                self.build_command(str(source_dir / pattern), output_path),
                timeout=self.timeout,
            )
        )

        if not output_path.exists():
            raise ExternalToolError(
                f"{self.executable} completed but {output_path} was not written"
            )

        self.logger.info("Timelapse written: %s", output_path)
        return output_path


__all__ = ["TimelapseBuilder"]
