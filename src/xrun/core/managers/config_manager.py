# src/xrun/core/managers/config_manager.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from xrun.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Returns base updated with override; nested dicts are merged, not replaced."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


class ConfigManager:
    """
    A singleton class to manage the task runner's configuration.
    Packaged defaults come from settings.json; a project-local xrun.json
    is merged on top of them.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self):
        self._config: Dict[str, Any] = {}
        self.reset()
        logger.debug("ConfigManager initialized.")

    def get_all(self) -> Dict[str, Any]:
        """Returns the entire current configuration dictionary."""
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Safely retrieves a nested value from the configuration.
        e.g., 'usage.table_width'.
        """
        keys = key_path.split('.')
        value = self._config
        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
            else:
                return default
        return value if value is not None else default

    def set_nested(self, key_path: str, value: Any) -> bool:
        """
        Sets a nested value in the in-memory configuration.
        e.g., 'debug.level', 'INFO'
        """
        keys = key_path.split('.')
        d = self._config
        for key in keys[:-1]:
            d = d.setdefault(key, {})
            if not isinstance(d, dict):
                logger.error("Cannot set value: '%s' is not a dictionary.", key)
                return False

        # Cast to the type of the value being replaced
        original_value = d.get(keys[-1])
        if original_value is not None:
            try:
                value = type(original_value)(value)
            except (ValueError, TypeError):
                logger.warning(
                    "Could not cast new value for '%s' to type %s. Storing as is.",
                    key_path, type(original_value).__name__
                )

        d[keys[-1]] = value
        logger.debug("Configuration updated: %s = %s", key_path, value)
        return True

    def reset(self):
        """Reloads the defaults and the project overrides from disk."""
        defaults_path = PathUtils.get_default_settings_file()
        try:
            self._config = _read_json(defaults_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to load %s: %s", defaults_path, e, exc_info=True)
            self._config = {}

        project_path = PathUtils.get_project_settings_file()
        if not project_path.exists():
            logger.debug("No project settings at %s.", project_path)
            return
        try:
            self._config = _deep_merge(self._config, _read_json(project_path))
            logger.debug("Merged project settings from %s.", project_path)
        except (OSError, ValueError) as e:
            logger.error("Ignoring invalid project settings %s: %s", project_path, e)

    def load_environment(self) -> bool:
        """Loads the project's .env into os.environ without overriding it."""
        env_path = PathUtils.get_env_file()
        if not env_path.exists():
            return False
        loaded = load_dotenv(env_path, override=False)
        logger.debug("Loaded environment from %s.", env_path)
        return loaded


# The global singleton instance that the entire application will use.
config_manager = ConfigManager()
