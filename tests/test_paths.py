from __future__ import annotations

from pathlib import Path

import pytest

from sccm_client_config import paths
from sccm_client_config.user_settings import SETTINGS_DIRNAME


@pytest.fixture()
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home_dir = tmp_path / "home"
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home_dir))
    return home_dir


def test_source_checkout_logs_beside_project(tmp_path: Path, home: Path, monkeypatch) -> None:
    checkout = tmp_path / "checkout"
    checkout.mkdir()
    (checkout / "pyproject.toml").write_text("[project]\n", encoding="utf-8")
    monkeypatch.setattr(paths, "get_application_directory", lambda: checkout)
    assert paths.get_log_directory() == checkout / "logs"


def test_installed_package_logs_under_user_directory(tmp_path: Path, home: Path, monkeypatch) -> None:
    site_packages = tmp_path / "site-packages"
    site_packages.mkdir()
    monkeypatch.setattr(paths, "get_application_directory", lambda: site_packages)
    assert paths.get_log_directory() == home / SETTINGS_DIRNAME / "logs"


def test_read_only_checkout_logs_under_user_directory(tmp_path: Path, home: Path, monkeypatch) -> None:
    checkout = tmp_path / "checkout"
    checkout.mkdir()
    (checkout / "pyproject.toml").write_text("[project]\n", encoding="utf-8")
    monkeypatch.setattr(paths, "get_application_directory", lambda: checkout)
    monkeypatch.setattr(paths.os, "access", lambda path, mode: False)
    assert paths.get_log_directory() == home / SETTINGS_DIRNAME / "logs"
