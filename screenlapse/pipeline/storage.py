"""Artifact naming and PNG persistence.

Filenames are ``{prefix}_{YYYYMMDD_HHMMSS}.png`` for composites and
``{prefix}_{YYYYMMDD_HHMMSS}_{width}.png`` for per-display images. The
timelapse builder globs on ``{prefix}_{YYYYMMDD}*.png``, so the format must
stay exactly as is.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Optional

from screenlapse.capture.frame import CanonicalImage
from screenlapse.core.errors import PersistenceError
from screenlapse.core.logging_utils import LoggerLike, ensure_structured_logger

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DAY_FORMAT = "%Y%m%d"
IMAGE_SUFFIX = ".png"
VIDEO_SUFFIX = ".mp4"


def artifact_name(
    prefix: str,
    timestamp: datetime,
    width: Optional[int] = None,
    duplicate: int = 0,
) -> str:
    stem = f"{prefix}_{timestamp.strftime(TIMESTAMP_FORMAT)}"
    if width is not None:
        stem = f"{stem}_{width}"
        if duplicate:
            stem = f"{stem}-{duplicate}"
    return f"{stem}{IMAGE_SUFFIX}"


def day_pattern(prefix: str, day: date) -> str:
    return f"{prefix}_{day.strftime(DAY_FORMAT)}*{IMAGE_SUFFIX}"


def timelapse_name(prefix: str, day: date) -> str:
    return f"{prefix}_{day.strftime(DAY_FORMAT)}{VIDEO_SUFFIX}"


def _write_png(image: CanonicalImage, path: Path) -> None:
    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb",
            dir=str(path.parent),
            prefix=f".{path.stem}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            tmp_path = Path(tmp.name)
            image.to_pil().save(tmp, format="PNG")
        os.replace(tmp_path, path)
        tmp_path = None
    finally:
        if tmp_path is not None:
            with contextlib.suppress(FileNotFoundError):
                tmp_path.unlink()


class ArtifactStore:
    """Owns the output directory shared by every cycle."""

    def __init__(self, output_dir: Path, prefix: str, *, logger: LoggerLike = None) -> None:
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self.logger = ensure_structured_logger(logger, fallback_name=__name__)

    def ensure_output_dir(self) -> Path:
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot create output directory {self.output_dir}: {exc}") from exc
        return self.output_dir

    def composite_path(self, timestamp: datetime) -> Path:
        return self.output_dir / artifact_name(self.prefix, timestamp)

    def display_paths(self, timestamp: datetime, images: Iterable[CanonicalImage]) -> list[Path]:
        """One path per image; same-width displays get a ``-n`` counter."""
        paths: list[Path] = []
        seen: dict[int, int] = {}
        for image in images:
            duplicate = seen.get(image.width, 0)
            seen[image.width] = duplicate + 1
            paths.append(
                self.output_dir / artifact_name(self.prefix, timestamp, image.width, duplicate)
            )
        return paths

    def save(self, image: CanonicalImage, path: Path) -> Path:
        try:
            _write_png(image, path)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"Failed to write {path}: {exc}") from exc
        self.logger.debug("Saved %s (%dx%d)", path.name, image.width, image.height)
        return path

    def delete(self, paths: Iterable[Path]) -> None:
        for path in paths:
            try:
                path.unlink()
            except FileNotFoundError:
                self.logger.warning("Intermediate %s already gone", path.name)
            except OSError as exc:
                raise PersistenceError(f"Failed to delete {path}: {exc}") from exc
            else:
                self.logger.debug("Deleted individual display file %s", path.name)

    async def save_async(self, image: CanonicalImage, path: Path) -> Path:
        return await asyncio.to_thread(self.save, image, path)

    async def delete_async(self, paths: Iterable[Path]) -> None:
        await asyncio.to_thread(self.delete, list(paths))

    def images_for_day(self, day: date) -> list[Path]:
        return sorted(self.output_dir.glob(day_pattern(self.prefix, day)))


__all__ = [
    "ArtifactStore",
    "DAY_FORMAT",
    "TIMESTAMP_FORMAT",
    "artifact_name",
    "day_pattern",
    "timelapse_name",
]
