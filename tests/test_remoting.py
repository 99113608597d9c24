from __future__ import annotations

import base64
import subprocess
from types import SimpleNamespace
from typing import Sequence

import pytest
import requests

from sccm_client_config.user_settings import UserSettings
from services.remoting import (
    SCRIPT_PREAMBLE,
    CommandResult,
    PowerShellTransport,
    RemoteCommandError,
    WinRmTransport,
    build_transport,
    _LOCAL_ALIASES,
    is_local_computer,
    quote_ps,
    validate_computer_name,
)


class FakeRunner:
    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.commands: list[Sequence[str]] = []

    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        self.commands.append(tuple(command))
        return subprocess.CompletedProcess(command, self.returncode, self.stdout, self.stderr)


class FakeSession:
    instances: list["FakeSession"] = []

    def __init__(self, endpoint: str, **kwargs) -> None:
        self.endpoint = endpoint
        self.kwargs = kwargs
        self.scripts: list[str] = []
        FakeSession.instances.append(self)

    def run_ps(self, script: str) -> SimpleNamespace:
        self.scripts.append(script)
        return SimpleNamespace(status_code=0, std_out=b'{"ok": true}\r\n', std_err=b"")


@pytest.fixture(autouse=True)
def _reset_sessions() -> None:
    FakeSession.instances.clear()


def _decoded_script(command: Sequence[str]) -> str:
    assert command[-2] == "-EncodedCommand"
    return base64.b64decode(command[-1]).decode("utf-16-le")


@pytest.mark.parametrize("name", ["localhost", ".", "LOCALPC", "localpc", "LOCALPC.corp.example.com"])
def test_local_names_detected(name: str) -> None:
    assert is_local_computer(name)


def test_remote_name_not_local() -> None:
    assert not is_local_computer("PC01")


@pytest.mark.parametrize("name", ["", "   ", "PC01; Remove-Item C:\\", "a'b", "-PC01", "PC 01"])
def test_invalid_computer_names_rejected(name: str) -> None:
    with pytest.raises(ValueError):
        validate_computer_name(name)


def test_valid_computer_name_is_trimmed() -> None:
    assert validate_computer_name(" pc01.corp.example.com ") == "pc01.corp.example.com"


def test_quote_ps_escapes_single_quotes() -> None:
    assert quote_ps("O'Brien") == "'O''Brien'"


def test_powershell_local_runs_script_directly() -> None:
    runner = FakeRunner(stdout="done")
    transport = PowerShellTransport(command_runner=runner)
    result = transport.run_script("LOCALPC", "Get-Date")

    command = runner.commands[0]
    assert command[:2] == ("powershell", "-NoProfile")
    script = _decoded_script(command)
    assert script == SCRIPT_PREAMBLE + "Get-Date"
    assert result == CommandResult("LOCALPC", 0, "done", "")


def test_powershell_remote_wraps_in_invoke_command() -> None:
    runner = FakeRunner()
    PowerShellTransport(command_runner=runner).run_script("PC01", "Get-Date")
    script = _decoded_script(runner.commands[0])
    assert "Invoke-Command -ComputerName 'PC01' -ScriptBlock {" in script
    assert script.count("$ErrorActionPreference = 'Stop'") == 2
    assert "Get-Date" in script


def test_invalid_name_issues_no_command() -> None:
    runner = FakeRunner()
    with pytest.raises(ValueError):
        PowerShellTransport(command_runner=runner).run_script("bad name", "Get-Date")
    assert runner.commands == []


def test_check_raises_with_stderr() -> None:
    runner = FakeRunner(returncode=1, stderr="Access is denied.")
    result = PowerShellTransport(command_runner=runner).run_script("PC01", "Get-Date")
    assert not result.succeeded
    with pytest.raises(RemoteCommandError, match="PC01.*Access is denied") as excinfo:
        result.check()
    assert excinfo.value.returncode == 1


def test_winrm_http_session() -> None:
    transport = WinRmTransport("CORP\\admin", "secret", session_factory=FakeSession)
    result = transport.run_script("PC01", "Get-Date")

    session = FakeSession.instances[0]
    assert session.endpoint == "http://PC01:5985/wsman"
    assert session.kwargs == {"auth": ("CORP\\admin", "secret"), "transport": "ntlm"}
    assert session.scripts == [SCRIPT_PREAMBLE + "Get-Date"]
    assert result.succeeded
    assert result.stdout == '{"ok": true}\r\n'


def test_winrm_https_defaults_port_and_cert_validation() -> None:
    transport = WinRmTransport(
        "admin",
        "secret",
        use_https=True,
        auth="kerberos",
        cert_validation="ignore",
        session_factory=FakeSession,
    )
    transport.run_script("pc01.corp.example.com", "Get-Date")
    session = FakeSession.instances[0]
    assert session.endpoint == "https://pc01.corp.example.com:5986/wsman"
    assert session.kwargs["server_cert_validation"] == "ignore"
    assert session.kwargs["transport"] == "kerberos"


def test_build_transport_selects_implementation() -> None:
    assert isinstance(build_transport(UserSettings()), PowerShellTransport)
    settings = UserSettings(transport="winrm", winrm_username="admin", winrm_port=15985)
    transport = build_transport(settings, password="secret")
    assert isinstance(transport, WinRmTransport)
    assert transport.endpoint("PC01") == "http://PC01:15985/wsman"


def test_build_transport_winrm_requires_username() -> None:
    with pytest.raises(ValueError):
        build_transport(UserSettings(transport="winrm"))


@pytest.mark.parametrize("name", sorted(_LOCAL_ALIASES))
def test_local_aliases_are_valid_computer_names(name: str) -> None:
    assert validate_computer_name(name) == name


class RaisingRunner:
    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(2, "No such file or directory", command[0])


def test_missing_powershell_raises_remote_command_error() -> None:
    transport = PowerShellTransport(command_runner=RaisingRunner())
    with pytest.raises(RemoteCommandError, match="PC01.*FileNotFoundError") as excinfo:
        transport.run_script("PC01", "Get-Date")
    assert excinfo.value.returncode is None
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


class RefusingSession(FakeSession):
    def run_ps(self, script: str) -> SimpleNamespace:
        raise requests.exceptions.ConnectionError("Connection refused")


def test_winrm_connection_error_raises_remote_command_error() -> None:
    transport = WinRmTransport("admin", "secret", session_factory=RefusingSession)
    with pytest.raises(RemoteCommandError, match="PC01.*Connection refused") as excinfo:
        transport.run_script("PC01", "Get-Date")
    assert excinfo.value.computer_name == "PC01"
    assert isinstance(excinfo.value.__cause__, requests.exceptions.ConnectionError)
