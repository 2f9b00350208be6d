"""Command-line entry point: capture loop and ``generate`` subcommand."""

from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

from screenlapse.cli.common import (
    add_capture_cli_arguments,
    add_common_cli_arguments,
    parse_day,
    settings_overrides,
)
from screenlapse.config import CaptureSettings, load_settings
from screenlapse.core.errors import ConfigError, ScreenlapseError
from screenlapse.core.logging_config import configure_from_settings, configure_logging
from screenlapse.core.logging_utils import get_module_logger
from screenlapse.pipeline.cycle import CaptureCycle
from screenlapse.pipeline.scheduler import Scheduler
from screenlapse.tools.timelapse import TimelapseBuilder

logger = get_module_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="screenlapse",
        description="Capture screenshots of every display at regular intervals",
    )
    add_common_cli_arguments(parser)
    add_capture_cli_arguments(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="command")
    generate = subparsers.add_parser(
        "generate",
        help="Generate a timelapse video from one day of captures",
    )
    generate.add_argument(
        "-d", "--date",
        dest="day",
        type=parse_day,
        required=True,
        help="Day of images to process into video (YYYY-MM-DD)",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(list(argv) if argv is not None else None)


async def capture(settings: CaptureSettings) -> int:
    cycle = CaptureCycle.from_settings(settings, logger=get_module_logger("screenlapse.cycle"))
    scheduler = Scheduler(cycle, settings.interval, logger=get_module_logger("screenlapse.scheduler"))
    return await scheduler.run()


async def generate(settings: CaptureSettings, day: date) -> Path:
    builder = TimelapseBuilder(
        executable=settings.ffmpeg_path,
        timeout=settings.timelapse_timeout,
        logger=get_module_logger("screenlapse.timelapse"),
    )
    return await builder.build(day, settings.output_dir, settings.file_prefix)


async def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        settings = load_settings(args.config, settings_overrides(args))
    except ConfigError as exc:
        configure_logging()
        logger.error("Invalid configuration: %s", exc)
        return EXIT_FAILURE

    configure_from_settings(settings)

    try:
        if args.command == "generate":
            await generate(settings, args.day)
        else:
            await capture(settings)
    except ScreenlapseError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected failure")
        return EXIT_FAILURE

    return EXIT_OK


__all__ = ["build_parser", "capture", "generate", "main", "parse_args"]
