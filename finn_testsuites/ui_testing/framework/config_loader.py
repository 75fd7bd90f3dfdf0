"""
================================================================================
Configuration Loader
================================================================================

Suite settings from config/config.yaml, overridable per key from the
environment.

Features:
    - Typed section settings (ui, reports, logging) as frozen dataclasses
    - Any frozen dataclass with defaults can be loaded as a section, which is
      how RetryPolicy / PollPolicy read `retry.*` and `poll.*`
    - Environment override per dot path (ui.base_url -> UI_BASE_URL), parsed
      to the type of the field default
    - FINN_CONFIG points the suite at another YAML file

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

import yaml
from loguru import logger


# Repository root / config / config.yaml
DEFAULT_CONFIG_PATH = Path(__file__).parents[3] / "config" / "config.yaml"

CONFIG_PATH_ENV_VAR = "FINN_CONFIG"

S = TypeVar("S")

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class ConfigurationError(Exception):
    """Raised when the configuration file or an override is invalid."""
    pass


def env_var_for(key: str) -> str:
    """Environment variable overriding a dot path: ui.viewport.width -> UI_VIEWPORT_WIDTH."""
    return key.upper().replace(".", "_")


def parse_env_value(key: str, raw: str, reference: Any) -> Any:
    """
    Parse an environment string to the type of `reference`.

    Strings and untyped (None) references are returned as-is.

    Raises:
        ConfigurationError: If the value does not parse as the expected type
    """
    if reference is None or isinstance(reference, str):
        return raw

    if isinstance(reference, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    else:
        try:
            return type(reference)(raw)
        except ValueError:
            pass

    raise ConfigurationError(
        f"{env_var_for(key)}={raw!r} is not a valid {type(reference).__name__} "
        f"for '{key}'"
    )


# =============================================================================
# Section Settings
# =============================================================================

@dataclass(frozen=True)
class UISettings:
    """`ui.*`: target site and browser defaults."""
    base_url: str = "https://www.finn.no"
    search_path: str = "/realestate/homes/search.html?filters="
    locale: str = "nb-NO"
    timezone_id: str = "Europe/Oslo"
    browser: str = "chromium"
    headless: bool = True
    action_timeout: int = 15000
    navigation_timeout: int = 30000
    viewport_width: int = field(default=1280, metadata={"key": "viewport.width"})
    viewport_height: int = field(default=720, metadata={"key": "viewport.height"})

    @property
    def viewport(self) -> Dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}


@dataclass(frozen=True)
class ReportSettings:
    """`reports.*`: output directories."""
    screenshots_dir: str = "screenshots"
    results_dir: str = "test-results"


@dataclass(frozen=True)
class LogSettings:
    """`logging.*`: arguments for init_logger."""
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "7 days"


class ConfigLoader:
    """
    Process-wide configuration access.

    Lookup order for every key: environment variable, YAML file, default.

    Usage:
        >>> config = ConfigLoader()
        >>> config.ui().base_url
        'https://www.finn.no'
        >>> config.get("poll.interval", 1.0)
        1.0
        >>> config.section("retry", RetryPolicy)
        RetryPolicy(max_attempts=3, initial_delay=1.0, backoff_multiplier=2.0)
    """

    _instance: Optional["ConfigLoader"] = None

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Args:
            config_path: YAML file; defaults to $FINN_CONFIG, then
                         DEFAULT_CONFIG_PATH. Ignored once loaded.
        """
        if self._initialized:
            return

        if config_path is None:
            config_path = os.environ.get(CONFIG_PATH_ENV_VAR) or DEFAULT_CONFIG_PATH
        self.config_path = Path(config_path)
        self._data: Dict[str, Any] = self._read(self.config_path)
        self._initialized = True

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        if not path.exists():
            logger.warning(f"⚠️ Config file not found: {path}. Using defaults.")
            return {}

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a mapping at the top level")
        logger.debug(f"Loaded configuration from: {path}")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Value for a dot path such as "ui.viewport.width".

        An environment override is parsed to the type of `default`.
        """
        raw = os.environ.get(env_var_for(key))
        if raw is not None:
            return parse_env_value(key, raw, default)

        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    def section(self, name: str, schema: Type[S]) -> S:
        """
        Build a frozen dataclass from `name.<field>` keys.

        Fields may name their key with metadata={"key": "nested.path"}.
        Validation in the dataclass surfaces as ConfigurationError.
        """
        if not is_dataclass(schema):
            raise TypeError(f"{schema!r} is not a dataclass")

        values = {}
        for f in fields(schema):
            default = None if f.default is MISSING else f.default
            values[f.name] = self.get(f"{name}.{f.metadata.get('key', f.name)}", default)

        try:
            return schema(**values)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid '{name}' configuration: {e}") from e

    def ui(self) -> UISettings:
        return self.section("ui", UISettings)

    def reports(self) -> ReportSettings:
        return self.section("reports", ReportSettings)

    def log_settings(self) -> LogSettings:
        return self.section("logging", LogSettings)

    @classmethod
    def reset(cls) -> None:
        """Drop the loaded instance (used by tests)."""
        cls._instance = None


__all__ = [
    "CONFIG_PATH_ENV_VAR",
    "ConfigLoader",
    "ConfigurationError",
    "LogSettings",
    "ReportSettings",
    "UISettings",
    "env_var_for",
    "parse_env_value",
]
