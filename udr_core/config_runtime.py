"""
UDR Core Config Runtime - Runtime Configuration Management

This module provides the reader settings and the runtime configuration
singleton. Settings come from a JSON file (--config option or the
UDR_CONFIG environment variable), section defaults, and UDR_* environment
overrides, in that order of increasing precedence.
"""

from __future__ import annotations
import os
import json
import logging
import threading
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "UDR_CONFIG"

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off")

SECTIONS = ("parser", "lint", "logging")


@dataclass
class ParserSettings:
    """Settings consumed by the CoNLL-U reader"""
    strict_features: bool = True
    encoding: str = "utf-8"
    extensions: List[str] = field(default_factory=lambda: [".conllu"])

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "strict_features": self.strict_features,
            "encoding": self.encoding,
            "extensions": list(self.extensions)
        }


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"Not a boolean value: {value!r}")


class RuntimeConfig:
    """Main runtime configuration class"""

    _instance: Optional["RuntimeConfig"] = None
    _lock = threading.Lock()

    def __new__(cls, *args, **kwargs):
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._initialized = False
            return cls._instance

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        if self._initialized:
            return

        if config_path is None and os.environ.get(CONFIG_ENV_VAR):
            config_path = os.environ[CONFIG_ENV_VAR]

        self.config_path: Optional[Path] = Path(config_path) if config_path else None
        self._settings: Dict[str, Any] = {}

        self._load_settings()
        self._apply_environment()

        self._initialized = True
        logger.debug(f"RuntimeConfig initialized: config_path={self.config_path}")

    def _load_settings(self):
        """Load settings from config file"""
        if self.config_path is not None:
            if self.config_path.exists():
                try:
                    with open(self.config_path, "r", encoding="utf-8") as f:
                        loaded = json.load(f)
                    if isinstance(loaded, dict):
                        self._settings = loaded
                    else:
                        logger.warning(f"Ignoring settings in {self.config_path}: top level is not an object")
                except (OSError, json.JSONDecodeError) as e:
                    logger.warning(f"Failed to load settings from {self.config_path}: {e}")
            else:
                logger.warning(f"Settings file not found: {self.config_path}")

        for section in SECTIONS:
            value = self._settings.get(section)
            if value is not None and not isinstance(value, dict):
                logger.warning(f"Ignoring section {section!r} in {self.config_path}: not an object")
                value = None
            if value is None:
                self._settings[section] = {}

        defaults = ParserSettings()

        strict = self._settings["parser"].get("strict_features")
        if isinstance(strict, str):
            try:
                self._settings["parser"]["strict_features"] = _parse_bool(strict)
            except ValueError as e:
                logger.warning(f"Ignoring parser.strict_features: {e}")
                del self._settings["parser"]["strict_features"]

        self._settings.setdefault("parser", {})
        self._settings["parser"].setdefault("strict_features", defaults.strict_features)
        self._settings["parser"].setdefault("encoding", defaults.encoding)

        self._settings.setdefault("lint", {})
        self._settings["lint"].setdefault("extensions", list(defaults.extensions))

        self._settings.setdefault("logging", {})
        self._settings["logging"].setdefault("level", "WARNING")
        self._settings["logging"].setdefault("json", False)

    def _apply_environment(self):
        """Apply UDR_* environment overrides"""
        strict = os.environ.get("UDR_STRICT_FEATURES")
        if strict is not None:
            try:
                self.set_setting("parser", "strict_features", _parse_bool(strict))
            except ValueError as e:
                logger.warning(f"Ignoring UDR_STRICT_FEATURES: {e}")

        encoding = os.environ.get("UDR_ENCODING")
        if encoding:
            self.set_setting("parser", "encoding", encoding)

        level = os.environ.get("UDR_LOG_LEVEL")
        if level:
            self.set_setting("logging", "level", level.upper())

    def get_setting(self, section: str, key: str, default: Any = None) -> Any:
        """Get a setting value"""
        return self._settings.get(section, {}).get(key, default)

    def set_setting(self, section: str, key: str, value: Any):
        """Set a setting value"""
        if section not in self._settings:
            self._settings[section] = {}
        self._settings[section][key] = value

    def parser_settings(self) -> ParserSettings:
        """Build reader settings from the loaded configuration"""
        strict = self.get_setting("parser", "strict_features", True)
        if isinstance(strict, str):
            strict = _parse_bool(strict)
        return ParserSettings(
            strict_features=bool(strict),
            encoding=self.get_setting("parser", "encoding", "utf-8"),
            extensions=list(self.get_setting("lint", "extensions", [".conllu"]))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "config_path": str(self.config_path) if self.config_path else None,
            "settings": self._settings
        }


def get_runtime_config(config_path: Optional[Union[str, Path]] = None) -> RuntimeConfig:
    """Get the singleton runtime configuration instance"""
    return RuntimeConfig(config_path)


def get_setting(section: str, key: str, default: Any = None) -> Any:
    """Get a setting from runtime config"""
    return get_runtime_config().get_setting(section, key, default)


def reset_runtime_config():
    """Drop the singleton so the next access reloads settings"""
    with RuntimeConfig._lock:
        RuntimeConfig._instance = None
