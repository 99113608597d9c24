"""Admin privilege helpers for Windows."""
from __future__ import annotations

import ctypes
import logging
import sys
from typing import Iterable

from services.remoting import is_local_computer

logger = logging.getLogger(__name__)

_MB_OK = 0x00000000
_MB_ICONWARNING = 0x00000030


def is_admin() -> bool:
    try:
        return bool(ctypes.windll.shell32.IsUserAnAdmin())
    except AttributeError:
        return False


def needs_elevation(computer_names: Iterable[str | None]) -> bool:
    """SCCM client methods on this machine need an elevated token; remote targets do not."""
    return any(not name or is_local_computer(name) for name in computer_names)


def relaunch_as_admin() -> bool:
    if not sys.platform.startswith("win"):
        return False
    if getattr(sys, "frozen", False):
        params = " ".join(f'"{arg}"' for arg in sys.argv[1:])
    else:
        params = " ".join(f'"{arg}"' for arg in sys.argv)
    result = ctypes.windll.shell32.ShellExecuteW(None, "runas", sys.executable, params, None, 1)
    return result > 32


def _show_admin_required_dialog() -> None:
    if not sys.platform.startswith("win"):
        return
    try:
        ctypes.windll.user32.MessageBoxW(
            None,
            "Administrator privileges are required to manage the local SCCM client.",
            "Administrator Required",
            _MB_OK | _MB_ICONWARNING,
        )
    except OSError as exc:
        logger.debug("Unable to show elevation prompt: %s", exc)


def ensure_admin(*, interactive: bool = True) -> bool:
    if not sys.platform.startswith("win"):
        return True
    if is_admin():
        return True
    logger.warning("Not elevated; relaunching with administrator rights")
    if interactive:
        _show_admin_required_dialog()
    relaunch_as_admin()
    return False
