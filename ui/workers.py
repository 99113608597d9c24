"""Run remote SCCM calls off the UI thread."""
from __future__ import annotations

import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QRunnable, Signal, Slot

logger = logging.getLogger(__name__)


class WorkerSignals(QObject):
    finished = Signal(object)
    error = Signal(str)
    progress = Signal(int, int, str)


class RemoteCallWorker(QRunnable):
    """Runs ``fn`` on the thread pool; ``description`` names the call in logs and errors."""

    def __init__(self, description: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.description = description
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = WorkerSignals()

    def emit_progress(self, current: int, total: int, label: str) -> None:
        self.signals.progress.emit(current, total, label)

    @Slot()
    def run(self) -> None:
        try:
            result = self.fn(*self.args, **self.kwargs)
        except Exception as exc:  # pragma: no cover - surfaced via signal
            logger.exception("%s failed", self.description)
            self.signals.error.emit(f"{self.description}: {exc}")
        else:
            self.signals.finished.emit(result)
