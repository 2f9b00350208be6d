from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigError
from .logging_utils import get_module_logger

logger = get_module_logger(__name__)

_TRUE_WORDS = ('true', 'yes', 'on', '1')
_BOOL_WORDS = _TRUE_WORDS + ('false', 'no', 'off', '0')
_NONE_WORDS = ('', 'none', 'null')


class ConfigLoader:
    """Loader for ``key = value`` config files.

    Values are parsed against the type of the matching default when one is
    given, otherwise they are guessed (bool, int, float, then str).
    """

    @staticmethod
    def load(
        config_path: Path,
        defaults: Optional[Dict[str, Any]] = None,
        strict: bool = False
    ) -> Dict[str, Any]:
        config = defaults.copy() if defaults else {}

        if not config_path.exists():
            if defaults:
                logger.debug("Config file not found at %s, using defaults", config_path)
            else:
                logger.warning("Config file not found at %s and no defaults provided", config_path)
            return config

        logger.debug("Loading config from: %s", config_path)

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc

        for line_num, line in enumerate(lines, 1):
            line = line.strip()

            if not line or line.startswith('#'):
                continue

            if '=' not in line:
                logger.warning(
                    "Invalid config line %d (missing '='): %s",
                    line_num, line
                )
                continue

            key, value = line.split('=', 1)
            key = key.strip().replace('-', '_')
            value = value.strip()

            if '#' in value:
                value = value.split('#', 1)[0].strip()

            if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                value = value[1:-1]

            if strict and defaults is not None and key not in defaults:
                logger.warning(
                    "Unknown config key '%s' (line %d) - ignored in strict mode",
                    key, line_num
                )
                continue

            if defaults and key in defaults and defaults[key] is not None:
                config[key] = ConfigLoader._parse_value_with_type(
                    key, value, type(defaults[key])
                )
            else:
                config[key] = ConfigLoader._parse_value(value)

        logger.info("Loaded config from %s (%d values)", config_path, len(config))
        return config

    @staticmethod
    def _parse_value(value: str) -> Any:
        value_lower = value.lower()
        if value_lower in _NONE_WORDS:
            return None
        if value_lower in _BOOL_WORDS:
            return value_lower in _TRUE_WORDS

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    @staticmethod
    def _parse_value_with_type(key: str, value: str, target_type: type) -> Any:
        if target_type is bool:
            value_lower = value.lower()
            if value_lower not in _BOOL_WORDS:
                raise ConfigError(f"Config key '{key}' expects a boolean, got '{value}'")
            return value_lower in _TRUE_WORDS

        if target_type in (int, float):
            try:
                return int(value, 0) if target_type is int else float(value)
            except ValueError as exc:
                raise ConfigError(
                    f"Config key '{key}' expects {target_type.__name__}, got '{value}'"
                ) from exc

        if issubclass(target_type, Path):
            return Path(value).expanduser()

        return value


__all__ = ["ConfigLoader"]
