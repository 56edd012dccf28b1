# src/xrun/core/utils/path_utils.py
from typing import Optional

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

PROJECT_MARKERS = ("pyproject.toml", ".git")


class PathUtils:
    """
    A central utility for reliably retrieving the paths the task runner needs.
    """

    # --- Package paths

    @staticmethod
    def get_package_root() -> Path:
        return Path(__file__).resolve().parents[2]

    @staticmethod
    def get_handlers_dir() -> Path:
        return PathUtils.get_package_root() / "core" / "handlers"

    @staticmethod
    def get_default_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"

    # --- Project paths (the project x is run in) ---

    @staticmethod
    def get_project_root(start: Optional[Path] = None) -> Path:
        """
        Returns the closest directory, from start (default: cwd) upwards,
        that holds a pyproject.toml or a .git entry. Falls back to start.
        """
        origin = (start or Path.cwd()).resolve()
        current_path = origin
        while True:
            if any((current_path / marker).exists() for marker in PROJECT_MARKERS):
                return current_path
            if current_path == current_path.parent:
                logger.debug("No project marker found above %s", origin)
                return origin
            current_path = current_path.parent

    @staticmethod
    def get_project_settings_file() -> Path:
        """Project-local overrides, e.g. /path/to/project/xrun.json"""
        return PathUtils.get_project_root() / "xrun.json"

    @staticmethod
    def get_env_file() -> Path:
        return PathUtils.get_project_root() / ".env"
