"""Settings dialog for the remoting transport."""
from __future__ import annotations

from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from sccm_client_config.user_settings import (
    CERT_VALIDATION_CHOICES,
    WINRM_AUTH_CHOICES,
    SettingsStore,
    UserSettings,
)


class SettingsDialog(QDialog):
    def __init__(
        self,
        settings: UserSettings,
        store: SettingsStore,
        password: str = "",
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._settings = settings
        self._store = store
        self._password = password
        self.setWindowTitle("Remoting Settings")
        self.setMinimumWidth(460)
        self._build_ui()

    def password(self) -> str:
        return self._password

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        form = QFormLayout()

        self._transport = QComboBox()
        self._transport.addItem("PowerShell remoting (this machine)", "powershell")
        self._transport.addItem("WinRM session (pywinrm)", "winrm")
        index = self._transport.findData(self._settings.transport)
        if index >= 0:
            self._transport.setCurrentIndex(index)
        form.addRow("Transport", self._transport)

        self._username = QLineEdit(self._settings.winrm_username)
        self._username.setPlaceholderText(r"DOMAIN\user or user@domain")
        form.addRow("WinRM User", self._username)

        self._password_field = QLineEdit(self._password)
        self._password_field.setEchoMode(QLineEdit.Password)
        form.addRow("WinRM Password", self._password_field)
        form.addRow("", QLabel("The password is kept for this session only."))

        self._port = QSpinBox()
        self._port.setRange(0, 65535)
        self._port.setSpecialValueText("Default")
        self._port.setValue(self._settings.winrm_port)
        form.addRow("WinRM Port", self._port)

        self._use_https = QCheckBox("Use HTTPS")
        self._use_https.setChecked(self._settings.winrm_use_https)
        form.addRow("", self._use_https)

        self._auth = QComboBox()
        self._auth.addItems(list(WINRM_AUTH_CHOICES))
        self._auth.setCurrentText(self._settings.winrm_auth)
        form.addRow("Authentication", self._auth)

        self._cert_validation = QComboBox()
        self._cert_validation.addItems(list(CERT_VALIDATION_CHOICES))
        self._cert_validation.setCurrentText(self._settings.winrm_cert_validation)
        form.addRow("Certificate Validation", self._cert_validation)

        layout.addLayout(form)

        buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self._transport.currentIndexChanged.connect(self._update_winrm_fields)
        self._update_winrm_fields()

    def _update_winrm_fields(self) -> None:
        enabled = self._transport.currentData() == "winrm"
        for widget in (
            self._username,
            self._password_field,
            self._port,
            self._use_https,
            self._auth,
            self._cert_validation,
        ):
            widget.setEnabled(enabled)

    def _save(self) -> None:
        self._settings.transport = self._transport.currentData()
        self._settings.winrm_username = self._username.text().strip()
        self._settings.winrm_port = self._port.value()
        self._settings.winrm_use_https = self._use_https.isChecked()
        self._settings.winrm_auth = self._auth.currentText()
        self._settings.winrm_cert_validation = self._cert_validation.currentText()
        self._password = self._password_field.text()
        self._store.save(self._settings)
        self.accept()
