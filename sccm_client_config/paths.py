"""Path utilities for locating application directories."""
from __future__ import annotations

import os
import sys
from pathlib import Path

from sccm_client_config.user_settings import SETTINGS_DIRNAME


def get_application_directory() -> Path:
    """
    Get the directory where the application is located.

    A frozen build (PyInstaller) resolves to the folder holding the .exe,
    a source checkout resolves to the project root.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def _is_writable_checkout(directory: Path) -> bool:
    return (directory / "pyproject.toml").is_file() and os.access(directory, os.W_OK)


def get_log_directory() -> Path:
    """
    Directory for the rotating tool log.

    Frozen builds and source checkouts log beside the application; an
    installed package logs under the per-user settings folder instead of
    site-packages.
    """
    app_dir = get_application_directory()
    if getattr(sys, "frozen", False) or _is_writable_checkout(app_dir):
        return app_dir / "logs"
    return Path.home() / SETTINGS_DIRNAME / "logs"
