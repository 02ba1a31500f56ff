"""
Configuration management for StudyPlanner.

Handles loading, validation, and saving of application configuration.
"""

import copy
import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple


APP_DIR_NAME = ".studyplanner"

PROVIDER_ENV_VAR = "STUDYPLANNER_CALENDAR_PROVIDER"

VALID_PROVIDERS = ["google", "backend", "host_context", "mock"]
VALID_WEEK_STARTS = [
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
]


def get_app_dir() -> Path:
    """Return the root directory for StudyPlanner user data."""
    return Path.home() / APP_DIR_NAME


logger = logging.getLogger("studyplanner.config")


class ConfigManager:
    """Manages application configuration with validation and persistence."""

    def __init__(self, config_dir: Optional[Path] = None):
        """
        Initialize the configuration manager.

        Args:
            config_dir: Directory holding the user config file,
                        defaults to ~/.studyplanner
        """
        self.default_config_path = (
            Path(__file__).parent / "default_config.json"
        )
        self.user_config_dir = Path(config_dir) if config_dir else get_app_dir()
        self.user_config_path = self.user_config_dir / "app_config.json"
        self._config: Dict[str, Any] = {}
        self._default_config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from user config or default config."""
        try:
            logger.info(
                "Loading default configuration from %s",
                self.default_config_path
            )
            with open(self.default_config_path, 'r', encoding='utf-8') as f:
                self._default_config = json.load(f)

            user_config: Dict[str, Any] = {}
            if self.user_config_path.exists():
                logger.info(
                    "Loading user configuration from %s",
                    self.user_config_path
                )
                with open(self.user_config_path, 'r', encoding='utf-8') as f:
                    user_config = json.load(f)
                if not isinstance(user_config, dict):
                    raise TypeError(
                        f"User configuration must be a JSON object, got "
                        f"{type(user_config).__name__}"
                    )

            self._config = self._deep_merge(self._default_config, user_config)
            self._apply_env_overrides()

            self._validate_config()
            logger.info("Configuration loaded and validated successfully")

        except FileNotFoundError as e:
            logger.error("Configuration file not found: %s", e)
            raise
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in configuration file: %s", e)
            raise
        except Exception as e:
            logger.error("Error loading configuration: %s", e)
            raise

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides on top of file values."""
        provider = os.environ.get(PROVIDER_ENV_VAR)
        if provider:
            logger.info("Calendar provider overridden by environment: %s", provider)
            self.set("calendar.provider", provider.strip().lower())

    def _validate_config(self) -> None:
        """Validate required configuration fields and types."""
        required_fields = {
            "version": str,
            "calendar": dict,
            "http": dict,
            "logging": dict,
        }

        for field_name, expected_type in required_fields.items():
            if field_name not in self._config:
                raise ValueError(
                    f"Missing required configuration field: {field_name}"
                )
            if not isinstance(self._config[field_name], expected_type):
                raise TypeError(
                    f"Configuration field '{field_name}' must be of type "
                    f"{expected_type.__name__}, got "
                    f"{type(self._config[field_name]).__name__}"
                )

        self._validate_calendar_config()
        self._validate_http_config()

    def _validate_calendar_config(self) -> None:
        """Validate calendar configuration."""
        cal_config = self._config["calendar"]
        required = ["provider", "lookahead_days", "week_start", "default_event_title"]
        for field_name in required:
            if field_name not in cal_config:
                raise ValueError(
                    f"Missing required field: calendar.{field_name}"
                )

        if cal_config["provider"] not in VALID_PROVIDERS:
            raise ValueError(
                f"calendar.provider must be one of {VALID_PROVIDERS}"
            )

        lookahead = cal_config["lookahead_days"]
        if (isinstance(lookahead, bool) or not isinstance(lookahead, int) or
                not (1 <= lookahead <= 90)):
            raise ValueError(
                "calendar.lookahead_days must be an integer between 1 and 90"
            )

        week_start = cal_config["week_start"]
        if not isinstance(week_start, str) or week_start.lower() not in VALID_WEEK_STARTS:
            raise ValueError(
                f"calendar.week_start must be one of {VALID_WEEK_STARTS}"
            )

        if not isinstance(cal_config["default_event_title"], str):
            raise TypeError("calendar.default_event_title must be a string")

        tz_name = cal_config.get("timezone", "")
        if not isinstance(tz_name, str):
            raise TypeError("calendar.timezone must be a string")
        if tz_name:
            from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
            try:
                ZoneInfo(tz_name)
            except (ZoneInfoNotFoundError, ValueError) as exc:
                raise ValueError(
                    f"calendar.timezone is not a valid IANA name: {tz_name}"
                ) from exc

        if "candidate_paths" in cal_config:
            paths = cal_config["candidate_paths"]
            if not isinstance(paths, list) or not all(
                isinstance(path, list) and path and
                all(isinstance(key, str) for key in path)
                for path in paths
            ):
                raise TypeError(
                    "calendar.candidate_paths must be a list of non-empty key lists"
                )

    def _validate_http_config(self) -> None:
        """Validate HTTP client configuration."""
        http_config = self._config["http"]

        if "max_retries" in http_config:
            max_retries = http_config["max_retries"]
            if not isinstance(max_retries, int) or max_retries < 0:
                raise ValueError(
                    "http.max_retries must be a non-negative integer"
                )

        for name in ("timeout", "base_delay"):
            if name in http_config:
                value = http_config[name]
                if not isinstance(value, (int, float)) or value < 0:
                    raise ValueError(
                        f"http.{name} must be a non-negative number"
                    )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by key.

        Supports nested keys using dot notation (e.g., "calendar.provider").

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key is not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value by key.

        Supports nested keys using dot notation (e.g., "calendar.provider").

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split('.')
        config = self._config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def save(self) -> None:
        """Save the current configuration to the user config file."""
        try:
            self.user_config_dir.mkdir(parents=True, exist_ok=True)

            self._validate_config()

            with open(self.user_config_path, 'w', encoding='utf-8') as f:
                json.dump(self._config, f, indent=2, ensure_ascii=False)

            try:
                os.chmod(self.user_config_path, 0o600)
                logger.debug("Set secure permissions for config file")
            except OSError as e:
                logger.warning("Could not set file permissions: %s", e)

            logger.info("Configuration saved to %s", self.user_config_path)

        except Exception as e:
            logger.error("Error saving configuration: %s", e)
            raise

    def get_all(self) -> Dict[str, Any]:
        """
        Get the entire configuration dictionary.

        Returns:
            Complete configuration dictionary
        """
        return self._clone_value(self._config)

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._load_config()

    def get_defaults(self) -> Mapping[str, Any]:
        """Return an immutable view of the default configuration."""
        return self._deep_freeze(self._default_config)

    @classmethod
    def _deep_merge(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two dictionaries without mutating inputs."""
        result: Dict[str, Any] = {}

        for key, base_value in base.items():
            if key in override:
                override_value = override[key]
                if isinstance(base_value, dict) and isinstance(override_value, dict):
                    result[key] = cls._deep_merge(base_value, override_value)
                else:
                    result[key] = cls._clone_value(override_value)
            else:
                result[key] = cls._clone_value(base_value)

        for key, override_value in override.items():
            if key not in base:
                result[key] = cls._clone_value(override_value)

        return result

    @classmethod
    def _clone_value(cls, value: Any) -> Any:
        """Return a deep copy of supported container types."""
        if isinstance(value, dict):
            return {k: cls._clone_value(v) for k, v in value.items()}
        if isinstance(value, list):
            return [cls._clone_value(v) for v in value]
        return copy.deepcopy(value)

    @classmethod
    def _deep_freeze(cls, value: Any) -> Any:
        """Create an immutable representation of nested configuration data."""
        if isinstance(value, dict):
            frozen = {k: cls._deep_freeze(v) for k, v in value.items()}
            return MappingProxyType(frozen)
        if isinstance(value, list):
            return tuple(cls._deep_freeze(v) for v in value)
        return value


@dataclass
class CalendarSettings:
    """Typed view of the ``calendar`` and ``http`` configuration sections."""

    provider: str = "mock"
    lookahead_days: int = 14
    week_start: str = "sunday"
    timezone: str = ""
    default_event_title: str = "Calendar Event"
    candidate_paths: Optional[List[Tuple[str, ...]]] = None
    google: Dict[str, Any] = field(default_factory=dict)
    backend: Dict[str, Any] = field(default_factory=dict)
    http: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: ConfigManager) -> 'CalendarSettings':
        paths = config.get("calendar.candidate_paths")
        return cls(
            provider=config.get("calendar.provider", "mock"),
            lookahead_days=config.get("calendar.lookahead_days", 14),
            week_start=config.get("calendar.week_start", "sunday").lower(),
            timezone=config.get("calendar.timezone", ""),
            default_event_title=config.get("calendar.default_event_title", "Calendar Event"),
            candidate_paths=[tuple(path) for path in paths] if paths else None,
            google=dict(config.get("calendar.google", {})),
            backend=dict(config.get("calendar.backend", {})),
            http=dict(config.get("http", {})),
        )
