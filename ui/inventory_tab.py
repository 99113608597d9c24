"""Inventory table for one or more SCCM clients."""
from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QThreadPool
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QHeaderView,
    QLabel,
    QPushButton,
    QTableWidget,
    QTableWidgetItem,
    QVBoxLayout,
    QWidget,
)

from sccm_client_config.constants import INVENTORY_FIELDS
from services.inventory import ComputerInfoService, InventoryResult
from services.remoting import ManagementTransport
from ui.workers import RemoteCallWorker

LogCallback = Callable[[str], None]
HostsProvider = Callable[[], list[str | None]]
TransportProvider = Callable[[], ManagementTransport]

COLUMNS = ("ComputerName",) + INVENTORY_FIELDS


class InventoryTab(QWidget):
    def __init__(
        self,
        hosts_provider: HostsProvider,
        transport_provider: TransportProvider,
        log_callback: LogCallback,
        thread_pool: QThreadPool,
    ) -> None:
        super().__init__()
        self._hosts = hosts_provider
        self._transport = transport_provider
        self._log = log_callback
        self._thread_pool = thread_pool
        self._workers: set[RemoteCallWorker] = set()
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        self._status = QLabel("Enter one or more computer names and press Query.")
        layout.addWidget(self._status)

        self._table = QTableWidget(0, len(COLUMNS))
        self._table.setHorizontalHeaderLabels(list(COLUMNS))
        self._table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        layout.addWidget(self._table)

        self._btn_query = QPushButton("Query")
        self._btn_query.clicked.connect(self._start_query)
        layout.addWidget(self._btn_query)

    def _start_query(self) -> None:
        hosts = [host for host in self._hosts() if host]
        try:
            service = ComputerInfoService(self._transport())
        except ValueError as exc:
            self._log(f"[ERROR] {exc}")
            return
        self._btn_query.setEnabled(False)
        self._table.setRowCount(0)
        self._status.setText("Querying...")
        worker = RemoteCallWorker("Inventory query", service.query_many, hosts)
        worker.kwargs["progress_callback"] = worker.emit_progress
        worker.signals.progress.connect(self._handle_progress)
        worker.signals.finished.connect(lambda results: self._handle_results(worker, results))
        worker.signals.error.connect(lambda message: self._handle_error(worker, message))
        self._workers.add(worker)
        self._thread_pool.start(worker)

    def _handle_progress(self, current: int, total: int, name: str) -> None:
        self._status.setText(f"Queried {current}/{total}: {name}")

    def _handle_results(self, worker: RemoteCallWorker, results: list[InventoryResult]) -> None:
        self._workers.discard(worker)
        self._table.setRowCount(len(results))
        failures = 0
        for row, result in enumerate(results):
            self._table.setItem(row, 0, QTableWidgetItem(result.computer_name))
            if result.info is None:
                failures += 1
                item = QTableWidgetItem(result.error or "Query failed")
                item.setForeground(QColor("#f44336"))
                self._table.setItem(row, 1, item)
                self._table.setSpan(row, 1, 1, len(INVENTORY_FIELDS))
                self._log(f"[ERROR] {result.computer_name}: {result.error}")
                continue
            for column, value in enumerate(result.info.to_record().values(), start=1):
                self._table.setItem(row, column, QTableWidgetItem(value))
        summary = f"{len(results) - failures} of {len(results)} computer(s) queried."
        self._status.setText(summary)
        self._log(summary)
        self._btn_query.setEnabled(True)

    def _handle_error(self, worker: RemoteCallWorker, message: str) -> None:
        self._workers.discard(worker)
        self._log(f"[ERROR] {message}")
        self._status.setText("Query failed.")
        self._btn_query.setEnabled(True)
