from __future__ import annotations

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict

from screenlapse.capture.source import available_backends
from screenlapse.core.errors import ConfigError
from screenlapse.tools.recompress import parse_quality


LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# argparse dest -> CaptureSettings field
SETTING_DESTS = (
    "interval",
    "output_dir",
    "file_prefix",
    "combine_displays",
    "compress",
    "quality",
    "frame_timeout",
    "parallel_capture",
    "backend",
    "pngquant_path",
    "ffmpeg_path",
    "log_level",
    "log_file",
)


def parse_day(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from None


def _quality(value: str) -> tuple[int, int]:
    try:
        return parse_quality(value)
    except ConfigError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a number, got '{value}'") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {number}")
    return number


def add_common_cli_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by capturing and ``generate``.

    Defaults are ``None`` so that only flags given on the command line
    override the config file.
    """
    parser.add_argument(
        "-o", "--output-dir",
        type=Path,
        default=None,
        help="Directory where captures and videos are stored (default: ./)",
    )

    parser.add_argument(
        "-f", "--file-prefix",
        type=str,
        default=None,
        help="Filename prefix for every artifact (default: screen)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Optional key = value configuration file providing defaults",
    )

    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=None,
        help="Logging verbosity (default: info)",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path to a rotating log file",
    )

    parser.add_argument(
        "--ffmpeg",
        dest="ffmpeg_path",
        type=str,
        default=None,
        help="ffmpeg executable used by 'generate'",
    )


def add_capture_cli_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-i", "--interval",
        type=_non_negative_int,
        default=None,
        help="Seconds between captures, 0 for a single capture (default: 30)",
    )

    combine_group = parser.add_mutually_exclusive_group()
    combine_group.add_argument(
        "-s", "--split-images",
        dest="combine_displays",
        action="store_const",
        const=False,
        default=None,
        help="Save each display to its own file instead of combining them",
    )
    combine_group.add_argument(
        "--combine-images",
        dest="combine_displays",
        action="store_const",
        const=True,
        help="Combine all displays into one image (default)",
    )

    compression_group = parser.add_mutually_exclusive_group()
    compression_group.add_argument(
        "-n", "--no-compression",
        dest="compress",
        action="store_const",
        const=False,
        default=None,
        help="Do not recompress captures with pngquant",
    )
    compression_group.add_argument(
        "--compression",
        dest="compress",
        action="store_const",
        const=True,
        help="Recompress captures with pngquant (default)",
    )

    parser.add_argument(
        "--quality",
        type=_quality,
        default=None,
        help="pngquant quality range MIN-MAX (default: 40-60)",
    )

    parser.add_argument(
        "--frame-timeout",
        type=_positive_float,
        default=None,
        help="Fail the cycle when a display yields no frame for this many seconds (default: wait forever)",
    )

    parser.add_argument(
        "--parallel",
        dest="parallel_capture",
        action="store_const",
        const=True,
        default=None,
        help="Capture all displays concurrently",
    )

    parser.add_argument(
        "--backend",
        choices=available_backends(),
        default=None,
        help="Frame source backend (default: mss)",
    )

    parser.add_argument(
        "--pngquant",
        dest="pngquant_path",
        type=str,
        default=None,
        help="pngquant executable",
    )


def settings_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Collect the settings given explicitly on the command line."""
    return {dest: getattr(args, dest, None) for dest in SETTING_DESTS}


__all__ = [
    "LOG_LEVELS",
    "add_capture_cli_arguments",
    "add_common_cli_arguments",
    "parse_day",
    "settings_overrides",
]
