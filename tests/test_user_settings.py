from __future__ import annotations

import json
from pathlib import Path

from sccm_client_config.user_settings import SettingsStore, UserSettings


def test_missing_file_loads_defaults(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "settings.json")
    assert not store.exists()
    assert store.load() == UserSettings()


def test_corrupt_file_loads_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert SettingsStore(path).load() == UserSettings()


def test_save_then_load(tmp_path: Path) -> None:
    store = SettingsStore(tmp_path / "nested" / "settings.json")
    settings = UserSettings(transport="winrm", winrm_username="CORP\\admin", winrm_use_https=True)
    store.save(settings)
    assert store.load() == settings
    assert "password" not in store.path.read_text(encoding="utf-8")


def test_unknown_values_fall_back() -> None:
    settings = UserSettings.from_dict(
        json.loads('{"transport": "ssh", "winrm_port": "abc", "winrm_auth": "KERBEROS"}')
    )
    assert settings.transport == "powershell"
    assert settings.winrm_port == 0
    assert settings.winrm_auth == "kerberos"
