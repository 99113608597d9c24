"""Provisioning mode and maintenance cycle actions."""
from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QThreadPool
from PySide6.QtWidgets import (
    QComboBox,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from sccm_client_config.constants import ClientTask, ProvisioningAction
from services.client_tasks import ClientTaskService
from services.provisioning import ProvisioningModeService
from services.remoting import ManagementTransport
from ui.workers import RemoteCallWorker

LogCallback = Callable[[str], None]
HostsProvider = Callable[[], list[str | None]]
TransportProvider = Callable[[], ManagementTransport]


class ClientTab(QWidget):
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
        self._busy = False
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)

        provisioning_box = QGroupBox("Provisioning Mode")
        provisioning_layout = QHBoxLayout(provisioning_box)
        provisioning_layout.addWidget(QLabel("Suspend or resume normal client operation"))
        self._btn_start = QPushButton("Start")
        self._btn_start.clicked.connect(lambda: self._start_provisioning(ProvisioningAction.START))
        self._btn_stop = QPushButton("Stop")
        self._btn_stop.clicked.connect(lambda: self._start_provisioning(ProvisioningAction.STOP))
        provisioning_layout.addWidget(self._btn_start)
        provisioning_layout.addWidget(self._btn_stop)
        layout.addWidget(provisioning_box)

        task_box = QGroupBox("Maintenance Cycles")
        task_layout = QHBoxLayout(task_box)
        self._task_combo = QComboBox()
        for task in ClientTask:
            self._task_combo.addItem(task.value, task)
        task_layout.addWidget(self._task_combo, 1)
        self._btn_trigger = QPushButton("Trigger")
        self._btn_trigger.clicked.connect(self._start_trigger)
        task_layout.addWidget(self._btn_trigger)
        layout.addWidget(task_box)
        layout.addStretch()

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        for button in (self._btn_start, self._btn_stop, self._btn_trigger):
            button.setEnabled(not busy)

    def _run(self, description: str, fn: Callable[[], None]) -> None:
        if self._busy:
            QMessageBox.information(self, "In Progress", "Please wait for current operation to finish.")
            return
        self._set_busy(True)
        self._log(f"{description}...")
        worker = RemoteCallWorker(description, fn)
        worker.signals.finished.connect(lambda _: self._handle_done(worker))
        worker.signals.error.connect(lambda message: self._handle_error(worker, message))
        self._workers.add(worker)
        self._thread_pool.start(worker)

    def _start_provisioning(self, action: ProvisioningAction) -> None:
        hosts = self._hosts()
        try:
            service = ProvisioningModeService(self._transport())
        except ValueError as exc:
            self._log(f"[ERROR] {exc}")
            return

        def _apply() -> None:
            for host in hosts:
                service.set_mode(action, host)

        self._run(f"{action.value} provisioning mode on {self._describe(hosts)}", _apply)

    def _start_trigger(self) -> None:
        task: ClientTask = self._task_combo.currentData()
        hosts = self._hosts()
        try:
            service = ClientTaskService(self._transport())
        except ValueError as exc:
            self._log(f"[ERROR] {exc}")
            return

        def _apply() -> None:
            for host in hosts:
                service.trigger(task, host)

        self._run(f"Trigger {task.value} on {self._describe(hosts)}", _apply)

    def _describe(self, hosts: list[str | None]) -> str:
        return ", ".join(host or "this computer" for host in hosts)

    def _handle_done(self, worker: RemoteCallWorker) -> None:
        self._workers.discard(worker)
        self._log(f"[OK] {worker.description}")
        self._set_busy(False)

    def _handle_error(self, worker: RemoteCallWorker, message: str) -> None:
        self._workers.discard(worker)
        self._log(f"[ERROR] {message}")
        self._set_busy(False)
