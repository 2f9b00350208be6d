"""Lossy PNG recompression through pngquant."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from screenlapse.core.errors import ConfigError
from screenlapse.core.logging_utils import LoggerLike, ensure_structured_logger

from .runner import ExternalToolRunner, ToolInvocation

DEFAULT_QUALITY = (40, 60)

# pngquant leaves the input untouched with these codes when --skip-if-larger
# or --quality rules out a smaller file.
EXIT_SKIPPED_LARGER = 98
EXIT_QUALITY_TOO_LOW = 99
ACCEPTED_EXIT_CODES = frozenset({0, EXIT_SKIPPED_LARGER, EXIT_QUALITY_TOO_LOW})


def parse_quality(value: str) -> tuple[int, int]:
    """Parse a ``min-max`` pngquant quality range such as ``"40-60"``."""
    text = str(value).strip()
    low, sep, high = text.partition("-")
    try:
        quality = (int(low), int(high)) if sep else (int(low), int(low))
    except ValueError:
        raise ConfigError(f"Invalid quality range '{value}', expected MIN-MAX") from None
    validate_quality(quality)
    return quality


def validate_quality(quality: tuple[int, int]) -> None:
    low, high = quality
    if not (0 <= low <= high <= 100):
        raise ConfigError(f"Quality range {low}-{high} must satisfy 0 <= min <= max <= 100")


class PngRecompressor:
    """Recompresses PNG files in place."""

    def __init__(
        self,
        runner: Optional[ExternalToolRunner] = None,
        *,
        quality: tuple[int, int] = DEFAULT_QUALITY,
        executable: str = "pngquant",
        timeout: Optional[float] = 60.0,
        logger: LoggerLike = None,
    ) -> None:
        validate_quality(quality)
        self.logger = ensure_structured_logger(logger, fallback_name=__name__)
        self.runner = runner or ExternalToolRunner(logger=self.logger)
        self.quality = quality
        self.executable = executable
        self.timeout = timeout

    def build_command(self, path: Path) -> list[str]:
        low, high = self.quality
        return [
            self.executable,
            '--force',
            '--skip-if-larger',
            '--quality', f'{low}-{high}',
            '--output', str(path),
            str(path),
        ]

    async def compress(self, path: Path) -> bool:
        """Recompress ``path``. Returns False when pngquant kept the original."""
        self.logger.debug("Compressing %s", path.name)
        result = await self.runner.run(
            ToolInvocation(
                self.build_command(path),
                success=ACCEPTED_EXIT_CODES.__contains__,
                timeout=self.timeout,
            )
        )
        if result.returncode != 0:
            self.logger.info(
                "Kept original %s (pngquant exit %d)", path.name, result.returncode
            )
            return False
        return True


__all__ = [
    "ACCEPTED_EXIT_CODES",
    "DEFAULT_QUALITY",
    "PngRecompressor",
    "parse_quality",
    "validate_quality",
]
