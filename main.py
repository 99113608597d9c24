"""Application entrypoint for the SCCM Client Tools PySide6 GUI."""
from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from sccm_client_config.logging_setup import setup_logging
from services.privilege import ensure_admin
from ui.main_window import MainWindow


def main() -> int:
    if not ensure_admin():
        return 0
    setup_logging()
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
