"""
================================================================================
Harness Common Utilities
================================================================================

Shared configuration management and logging setup for the harness.

Exports:
    - GlobalConfig: Singleton configuration manager
    - get_config: Convenience function to get configuration values
    - set_config: Convenience function to override a value at runtime
    - init_logger: Function to initialize loguru logger with standard settings

Usage:
    from pageroute.common import get_config, init_logger

    init_logger()
    base_url = get_config("ui.base_url", "http://localhost:3000")

================================================================================
"""

import copy
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from loguru import logger

# ============================================================
# Configuration Management
# ============================================================

DEFAULT_CONFIG: Dict[str, Any] = {
    "ui": {
        "base_url": "http://localhost:3000",
    },
    "harness": {
        "default_timeout": 10000,
        "poll_interval": 100,
        "retry_delay": 150,
        "visit_default_path_index": -1,
    },
    "routes": {
        "pattern": "**/routes.yaml",
        "root": ".",
    },
    "browser": {
        "type": "chromium",
        "headless": True,
    },
    "logging": {
        "level": "INFO",
    },
}

# Environment variable -> dot-notation key
ENV_MAPPING: Dict[str, str] = {
    "UI_BASE_URL": "ui.base_url",
    "HARNESS_DEFAULT_TIMEOUT": "harness.default_timeout",
    "HARNESS_POLL_INTERVAL": "harness.poll_interval",
    "ROUTES_PATTERN": "routes.pattern",
    "ROUTES_ROOT": "routes.root",
    "BROWSER_TYPE": "browser.type",
    "BROWSER_HEADLESS": "browser.headless",
    "LOG_LEVEL": "logging.level",
    "LOG_FILE": "logging.file",
}


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _convert_type(value: str, reference: Any) -> Any:
    """
    Convert an environment string to match the type of the default value.
    """
    if reference is None:
        return value
    if isinstance(reference, bool):
        return value.lower() in ("true", "1", "yes", "on")
    if isinstance(reference, int):
        try:
            return int(value)
        except ValueError:
            return value
    if isinstance(reference, float):
        try:
            return float(value)
        except ValueError:
            return value
    return value


class GlobalConfig:
    """
    Singleton class to manage the harness configuration.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (UI_BASE_URL, LOG_LEVEL, ...)
        2. Environment-specific YAML (config/{ENV}.yaml)
        3. config/harness.yaml
        4. Built-in defaults
    """
    _instance: Optional["GlobalConfig"] = None

    def __new__(cls, config_dir: Optional[Path] = None) -> "GlobalConfig":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_dir: Optional[Path] = None):
        if self._initialized:
            return
        self._config_dir = config_dir
        self._config: Dict[str, Any] = {}
        self._load_configs()
        self._initialized = True

    def _candidate_dirs(self) -> List[Path]:
        if self._config_dir is not None:
            return [Path(self._config_dir)]
        return [
            Path("config"),
            Path(__file__).parent.parent.parent / "config",
        ]

    def _load_configs(self) -> None:
        """
        Loads configurations from YAML files and environment variables.
        """
        self._config = _deep_merge({}, DEFAULT_CONFIG)

        config_dir = next((d for d in self._candidate_dirs() if d.is_dir()), None)
        if config_dir is None:
            logger.debug("No configuration directory found. Using defaults.")
        else:
            self._merge_file(config_dir / "harness.yaml")
            env = os.getenv("ENVIRONMENT", os.getenv("ENV", ""))
            if env:
                self._merge_file(config_dir / f"{env}.yaml")

        for env_key, config_key in ENV_MAPPING.items():
            if env_key in os.environ:
                self._set_nested(
                    config_key,
                    _convert_type(os.environ[env_key], self.get(config_key)),
                )

    def _merge_file(self, path: Path) -> None:
        if not path.exists():
            return
        with open(path, "r", encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
        self._config = _deep_merge(self._config, file_config)
        logger.debug(f"Loaded configuration from {path}")

    def _set_nested(self, key: str, value: Any) -> None:
        """
        Sets a nested configuration value using dot notation.
        """
        keys = key.split(".")
        current = self._config
        for k in keys[:-1]:
            if not isinstance(current.get(k), dict):
                current[k] = {}
            current = current[k]
        current[keys[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieves a configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "harness.default_timeout")
            default: Default value if key is not found

        Returns:
            Configuration value or default
        """
        value = self._config
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Sets a configuration value.
        """
        self._set_nested(key, value)

    def get_all(self) -> Dict[str, Any]:
        """
        Returns a copy of the entire configuration dictionary.
        """
        return _deep_merge({}, self._config)

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """
    Convenience function to get a configuration value.

    Example:
        timeout = get_config("harness.default_timeout", 10000)
    """
    return GlobalConfig().get(key, default)


def set_config(key: str, value: Any) -> None:
    """
    Convenience function to set a configuration value.
    """
    GlobalConfig().set(key, value)


# ============================================================
# Logging Setup
# ============================================================

_logger_initialized = False


def init_logger(
    level: str = None,
    format_string: str = None,
    log_file: str = None
) -> None:
    """
    Initializes the loguru logger with standard settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config value.
        format_string: Log format string. Uses default if not provided.
        log_file: Optional file path to write logs to.

    Example:
        init_logger()  # Use defaults
        init_logger(level="DEBUG", log_file="logs/harness.log")
    """
    global _logger_initialized

    if _logger_initialized:
        return

    logger.remove()

    level = (level or get_config("logging.level", "INFO")).upper()
    format_string = format_string or get_config(
        "logging.format",
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
        "<level>{message}</level>"
    )

    logger.add(
        sys.stderr,
        format=format_string,
        level=level,
        colorize=True,
    )

    log_file = log_file or get_config("logging.file")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

        logger.add(
            log_file,
            format=format_string,
            level=level,
            rotation=get_config("logging.rotation", "10 MB"),
            retention=get_config("logging.retention", "7 days"),
        )

    _logger_initialized = True
    logger.debug("Logger initialized successfully")


__all__ = [
    "DEFAULT_CONFIG",
    "GlobalConfig",
    "get_config",
    "set_config",
    "init_logger",
]
