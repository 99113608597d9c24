"""Main window for the SCCM Client Tools."""
from __future__ import annotations

import logging
import re

from PySide6.QtCore import Qt, QThreadPool
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QSplitter,
    QTabWidget,
    QTextEdit,
    QVBoxLayout,
    QWidget,
)

from sccm_client_config.user_settings import SettingsStore
from services.remoting import ManagementTransport, build_transport
from ui.client_tab import ClientTab
from ui.inventory_tab import InventoryTab
from ui.settings_dialog import SettingsDialog

logger = logging.getLogger(__name__)


def split_computer_names(text: str) -> list[str | None]:
    names = [part for part in re.split(r"[,;\s]+", text) if part]
    return list(names) or [None]


class MainWindow(QMainWindow):
    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle("SCCM Client Tools")
        self.resize(1100, 700)
        self._thread_pool = QThreadPool.globalInstance()
        self._settings_store = SettingsStore()
        self._settings = self._settings_store.load()
        self._password = ""

        self._hosts_field = QLineEdit()
        self._hosts_field.setPlaceholderText("Computer name(s), blank for this computer")
        btn_settings = QPushButton("Settings")
        btn_settings.clicked.connect(self._open_settings)
        host_row = QHBoxLayout()
        host_row.addWidget(QLabel("Computers"))
        host_row.addWidget(self._hosts_field, 1)
        host_row.addWidget(btn_settings)

        self._log_view = QTextEdit()
        self._log_view.setReadOnly(True)
        self._log_view.setMinimumHeight(120)
        self._tabs = QTabWidget()
        self._tabs.addTab(
            ClientTab(self.computer_names, self.transport, self.log_message, self._thread_pool),
            "Client Actions",
        )
        self._tabs.addTab(
            InventoryTab(self.computer_names, self.transport, self.log_message, self._thread_pool),
            "Inventory",
        )

        splitter = QSplitter(Qt.Vertical)
        splitter.addWidget(self._tabs)
        splitter.addWidget(self._log_view)
        splitter.setStretchFactor(0, 4)
        splitter.setStretchFactor(1, 1)

        container = QWidget()
        layout = QVBoxLayout(container)
        layout.addLayout(host_row)
        layout.addWidget(splitter)
        self.setCentralWidget(container)

    def computer_names(self) -> list[str | None]:
        return split_computer_names(self._hosts_field.text())

    def transport(self) -> ManagementTransport:
        return build_transport(self._settings, password=self._password)

    def log_message(self, message: str) -> None:
        logger.info("%s", message)
        self._log_view.append(message)

    def _open_settings(self) -> None:
        dialog = SettingsDialog(self._settings, self._settings_store, self._password, self)
        if dialog.exec():
            self._password = dialog.password()
            self.log_message(f"Remoting transport: {self._settings.transport}")
