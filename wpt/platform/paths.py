"""User-level directories.

Project-specific paths live in core/project.py; this module only locates
the per-user config directory that holds the credential store.
"""

from __future__ import annotations

import os
import sys
from functools import lru_cache
from pathlib import Path

__all__ = ["APP_NAME", "clear_caches", "home", "user_config_dir"]

APP_NAME = "wp-tools"


def is_windows() -> bool:
    return sys.platform == "win32"


@lru_cache(maxsize=1)
def home() -> Path:
    """User's home directory (USERPROFILE on Windows, HOME elsewhere)."""
    if is_windows():
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)

    return Path.home()


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """Per-user configuration directory.

    Location: ~/.config/wp-tools/ (Linux/macOS, honours XDG_CONFIG_HOME)
    or %APPDATA%/wp-tools/ (Windows).
    """
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME
        return home() / "AppData" / "Roaming" / APP_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME
    return home() / ".config" / APP_NAME


def clear_caches() -> None:
    """Clear cached paths (tests change HOME / XDG_CONFIG_HOME)."""
    home.cache_clear()
    user_config_dir.cache_clear()
