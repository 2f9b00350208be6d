"""Typed configuration for screenlapse.

Settings come from three layers, later ones winning: the defaults below, an
optional ``key = value`` config file, and explicit command-line flags.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from screenlapse.core.config_loader import ConfigLoader
from screenlapse.core.errors import ConfigError
from screenlapse.core.logging_config import coerce_level
from screenlapse.core.logging_utils import LoggerLike, ensure_structured_logger
from screenlapse.tools.recompress import DEFAULT_QUALITY, parse_quality, validate_quality

DEFAULT_INTERVAL = 30
DEFAULT_OUTPUT_DIR = Path("./")
DEFAULT_FILE_PREFIX = "screen"
DEFAULT_POLL_INTERVAL = 1.0 / 60.0
DEFAULT_BACKEND = "mss"
DEFAULT_TOOL_TIMEOUT = 60.0
DEFAULT_LOG_LEVEL = "info"


@dataclass(slots=True)
class CaptureSettings:
    interval: int = DEFAULT_INTERVAL  # 0 = capture once
    output_dir: Path = DEFAULT_OUTPUT_DIR
    file_prefix: str = DEFAULT_FILE_PREFIX
    combine_displays: bool = True
    compress: bool = True
    quality: Tuple[int, int] = DEFAULT_QUALITY
    poll_interval: float = DEFAULT_POLL_INTERVAL
    frame_timeout: Optional[float] = None  # None = wait for a frame forever
    parallel_capture: bool = False
    backend: str = DEFAULT_BACKEND
    pngquant_path: str = "pngquant"
    ffmpeg_path: str = "ffmpeg"
    tool_timeout: Optional[float] = DEFAULT_TOOL_TIMEOUT
    timelapse_timeout: Optional[float] = None  # None = let ffmpeg finish
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: Optional[Path] = None

    @property
    def once(self) -> bool:
        return self.interval == 0

    def validate(self) -> "CaptureSettings":
        if self.interval < 0:
            raise ConfigError(f"interval must be >= 0 seconds, got {self.interval}")
        if not self.file_prefix:
            raise ConfigError("file_prefix must not be empty")
        if any(sep in self.file_prefix for sep in ("/", "\\")):
            raise ConfigError(f"file_prefix must not contain path separators: {self.file_prefix!r}")
        if self.poll_interval <= 0:
            raise ConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.frame_timeout is not None and self.frame_timeout <= 0:
            raise ConfigError(f"frame_timeout must be positive, got {self.frame_timeout}")
        if self.tool_timeout is not None and self.tool_timeout <= 0:
            raise ConfigError(f"tool_timeout must be positive, got {self.tool_timeout}")
        if self.timelapse_timeout is not None and self.timelapse_timeout <= 0:
            raise ConfigError(f"timelapse_timeout must be positive, got {self.timelapse_timeout}")
        validate_quality(self.quality)
        try:
            coerce_level(self.log_level)
        except ValueError as exc:
            raise ConfigError(str(exc)) from None
        return self

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _file_defaults() -> Dict[str, Any]:
    # ConfigLoader parses against the type of each default; quality is read
    # as a "min-max" string and optional values are guessed.
    defaults = {f.name: getattr(CaptureSettings(), f.name) for f in fields(CaptureSettings)}
    low, high = DEFAULT_QUALITY
    defaults["quality"] = f"{low}-{high}"
    return defaults


def _coerce(key: str, value: Any) -> Any:
    if key == "quality" and isinstance(value, str):
        return parse_quality(value)
    if key in ("output_dir", "log_file") and value is not None:
        return Path(value).expanduser()
    if key in ("frame_timeout", "tool_timeout", "timelapse_timeout") and value is not None:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Config key '{key}' expects seconds, got '{value}'") from None
    return value


def load_settings(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    *,
    logger: LoggerLike = None,
) -> CaptureSettings:
    """Build validated settings from an optional config file plus overrides.

    ``None`` values in ``overrides`` mean "not given" and leave the lower
    layers in place.
    """
    log = ensure_structured_logger(logger, fallback_name=__name__)
    merged: Dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path).expanduser()
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        defaults = _file_defaults()
        loaded = ConfigLoader.load(config_path, defaults=defaults, strict=True)
        merged.update({key: value for key, value in loaded.items() if value != defaults[key]})

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                merged[key] = value

    known = {f.name for f in fields(CaptureSettings)}
    unknown = set(merged) - known
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

    settings = replace(
        CaptureSettings(),
        **{key: _coerce(key, value) for key, value in merged.items()},
    )
    log.debug("Effective settings: %s", settings.as_dict())
    return settings.validate()


__all__ = ["CaptureSettings", "load_settings"]
