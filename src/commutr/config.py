"""
Configuration management for Commutr.

Reads configs/commutr.toml (or COMMUTR_CONFIG_PATH) and checks every
numeric parameter against PARAM_BOUNDS before anything runs. Sections or
keys left out of the file are taken from DEFAULT_CONFIG.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional
import toml
import logging

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "COMMUTR_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "configs/commutr.toml"


class ConfigError(Exception):
    """Raised when the config file is unreadable or a value is invalid."""
    pass


class Config:
    """Validated Commutr settings."""

    # (min, max) for numeric params; None marks a free-form string
    PARAM_BOUNDS = {
        "selection": {
            "overbook_pct": (0.0, 0.25),
        },
        "topup": {
            "threshold_seconds": (0, 600),
            "request_timeout_seconds": (1, 120),
            "recommend_url": None,
            "recommend_path": None,
        },
        "playlist": {
            "target_duration_minutes": (1, 240),
            "topic": None,
            "difficulty": None,
            "vibe": None,
            "output_dir": None,
        },
        "catalog": {
            "path": None,
        },
    }

    DEFAULT_CONFIG = {
        "config_version": "1.0",
        "selection": {
            "overbook_pct": 0.03,
        },
        "topup": {
            "threshold_seconds": 30,
            "request_timeout_seconds": 10,
            "recommend_url": "http://localhost:3000",
            "recommend_path": "/api/recommend",
        },
        "playlist": {
            "target_duration_minutes": 30,
            "topic": "python",
            "difficulty": "",
            "vibe": "focused",
            "output_dir": "data/playlists",
        },
        "catalog": {
            "path": "data/catalog.json",
        },
    }

    # Empty difficulty defers to the vibe preset
    VALID_DIFFICULTIES = ("", "beginner", "intermediate", "advanced")

    def __init__(self, data: Dict[str, Any]):
        self.data = data
        self._fill_defaults()
        self._check_bounds()
        self._check_difficulty()
        logger.info("✅ Config validation passed")

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """
        Read and validate a TOML config file.

        Args:
            path: File to read. Falls back to $COMMUTR_CONFIG_PATH, then
                configs/commutr.toml. A missing file yields the defaults.

        Returns:
            Config instance.

        Raises:
            ConfigError: If the file cannot be parsed or a value is invalid.
        """
        config_file = Path(path or os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))

        if not config_file.exists():
            logger.warning(f"No config at {config_file}; running with defaults")
            return cls(copy.deepcopy(cls.DEFAULT_CONFIG))

        try:
            data = toml.load(config_file)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigError(f"Cannot read config {config_file}: {e}") from e

        logger.info(f"Config read from {config_file}")
        return cls(data)

    def _fill_defaults(self) -> None:
        for section, defaults in self.DEFAULT_CONFIG.items():
            if not isinstance(defaults, dict):
                continue
            if section not in self.data:
                logger.warning(f"Config section [{section}] absent; using defaults")
                self.data[section] = copy.deepcopy(defaults)
                continue
            current = self.data[section]
            for key, value in defaults.items():
                if key not in current:
                    logger.warning(f"{section}.{key} not set; defaulting to {value!r}")
                    current[key] = value

    def _check_bounds(self) -> None:
        """
        Raises:
            ConfigError: If a numeric param is not a number or is out of range.
        """
        for section, params in self.PARAM_BOUNDS.items():
            for key, bounds in params.items():
                if bounds is None:
                    continue
                value = self.data[section][key]
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ConfigError(f"{section}.{key}={value!r} must be numeric")
                low, high = bounds
                if value < low or value > high:
                    raise ConfigError(f"{section}.{key}={value} out of bounds [{low}, {high}]")

    def _check_difficulty(self) -> None:
        difficulty = self.data["playlist"].get("difficulty") or ""
        if not isinstance(difficulty, str) or difficulty.lower() not in self.VALID_DIFFICULTIES:
            raise ConfigError(f"Unknown playlist.difficulty: {difficulty!r}")

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """config.get("topup", "threshold_seconds")"""
        return self.data.get(section, {}).get(key, default)

    def __getitem__(self, section: str) -> Dict[str, Any]:
        return self.data.get(section, {})

    def __repr__(self) -> str:
        return f"Config(version={self.data.get('config_version', 'unknown')})"
