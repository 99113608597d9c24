"""User-configurable remoting settings persisted locally."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


SETTINGS_DIRNAME = ".sccm_client_tools"
SETTINGS_FILENAME = "settings.json"

TRANSPORT_CHOICES = ("powershell", "winrm")
WINRM_AUTH_CHOICES = ("ntlm", "kerberos", "credssp", "basic")
CERT_VALIDATION_CHOICES = ("validate", "ignore")

DEFAULT_WINRM_PORT = 5985
DEFAULT_WINRM_HTTPS_PORT = 5986


def default_settings_path() -> Path:
    return Path.home() / SETTINGS_DIRNAME / SETTINGS_FILENAME


@dataclass
class UserSettings:
    transport: str = "powershell"
    winrm_username: str = ""
    winrm_port: int = 0  # 0 selects 5985 or 5986 from the scheme
    winrm_use_https: bool = False
    winrm_auth: str = "ntlm"
    winrm_cert_validation: str = "validate"

    def to_dict(self) -> dict[str, Any]:
        return {
            "transport": self.transport,
            "winrm_username": self.winrm_username,
            "winrm_port": self.winrm_port,
            "winrm_use_https": self.winrm_use_https,
            "winrm_auth": self.winrm_auth,
            "winrm_cert_validation": self.winrm_cert_validation,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserSettings":
        def _choice(key: str, choices: tuple[str, ...], default: str) -> str:
            value = str(data.get(key) or "").strip().lower()
            return value if value in choices else default

        try:
            port = int(data.get("winrm_port") or 0)
        except (TypeError, ValueError):
            port = 0

        return cls(
            transport=_choice("transport", TRANSPORT_CHOICES, "powershell"),
            winrm_username=str(data.get("winrm_username") or ""),
            winrm_port=port,
            winrm_use_https=bool(data.get("winrm_use_https", False)),
            winrm_auth=_choice("winrm_auth", WINRM_AUTH_CHOICES, "ntlm"),
            winrm_cert_validation=_choice("winrm_cert_validation", CERT_VALIDATION_CHOICES, "validate"),
        )


class SettingsStore:
    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_settings_path()

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> UserSettings:
        if not self._path.exists():
            return UserSettings()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            return UserSettings()
        if not isinstance(data, dict):
            return UserSettings()
        return UserSettings.from_dict(data)

    def save(self, settings: UserSettings) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(settings.to_dict(), indent=2, sort_keys=True)
        self._path.write_text(payload, encoding="utf-8")
