"""Logging configuration shared by the CLI and the GUI."""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from sccm_client_config.paths import get_log_directory


LOG_FILENAME = "sccm_client_tools.log"

_APP_LOGGERS = ("services.", "sccm_client_config.", "ui.", "cli", "main")


class _ConsoleNoiseFilter(logging.Filter):
    """Keep tool logs on the console; third-party libraries only at ERROR+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_APP_LOGGERS):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Configure a filtered console handler and a rotating debug log file.

    Call once, before the first remote call. Returns the log file path.
    """
    log_dir = Path(log_dir) if log_dir is not None else get_log_directory()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILENAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(str(log_file), maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    file_handler.setLevel(file_level)
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
