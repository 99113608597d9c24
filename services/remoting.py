"""Transports that run management scripts against local or remote Windows hosts."""
from __future__ import annotations

import base64
import logging
import re
import subprocess
from dataclasses import dataclass
from typing import Callable, Protocol, Sequence

import requests
import winrm
from winrm.exceptions import WinRMError, WinRMOperationTimeoutError, WinRMTransportError

from sccm_client_config.constants import default_computer_name
from sccm_client_config.user_settings import DEFAULT_WINRM_HTTPS_PORT, DEFAULT_WINRM_PORT, UserSettings

logger = logging.getLogger(__name__)

SCRIPT_PREAMBLE = "$ErrorActionPreference = 'Stop'\n$ProgressPreference = 'SilentlyContinue'\n"

_LOCAL_ALIASES = {"localhost", ".", "127.0.0.1"}
_COMPUTER_NAME_RE = re.compile(r"^[A-Za-z0-9_](?:[A-Za-z0-9_.\-]{0,253}[A-Za-z0-9_])?$")


class RemoteCommandError(RuntimeError):
    def __init__(self, computer_name: str, returncode: int | None, stderr: str, stdout: str = "") -> None:
        detail = stderr.strip() or stdout.strip() or "no output"
        if returncode is None:
            super().__init__(f"Remote command failed on {computer_name}: {detail}")
        else:
            super().__init__(f"Remote command failed on {computer_name} (exit code {returncode}): {detail}")
        self.computer_name = computer_name
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout

    @classmethod
    def from_exception(cls, computer_name: str, exc: BaseException) -> "RemoteCommandError":
        """Transport-level failure with no exit code (host unreachable, refused, auth rejected)."""
        return cls(computer_name, None, f"{type(exc).__name__}: {exc}")


@dataclass
class CommandResult:
    computer_name: str
    returncode: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        if not self.succeeded:
            raise RemoteCommandError(self.computer_name, self.returncode, self.stderr, self.stdout)
        return self


class CommandRunner(Protocol):
    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:  # pragma: no cover - protocol
        ...


class SubprocessRunner:
    def run(self, command: Sequence[str]) -> subprocess.CompletedProcess[str]:
        return subprocess.run(command, capture_output=True, text=True, check=False)


class ManagementTransport(Protocol):
    def run_script(self, computer_name: str, script: str) -> CommandResult:  # pragma: no cover - protocol
        ...


def validate_computer_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if cleaned == ".":
        return cleaned
    if not cleaned or not _COMPUTER_NAME_RE.match(cleaned):
        raise ValueError(f"Invalid computer name: {name!r}")
    return cleaned


def is_local_computer(name: str) -> bool:
    lowered = name.strip().lower()
    if lowered in _LOCAL_ALIASES:
        return True
    local = default_computer_name().lower()
    return lowered == local or lowered.split(".", 1)[0] == local.split(".", 1)[0]


def quote_ps(value: str) -> str:
    """Render a single-quoted PowerShell string literal."""
    return "'" + value.replace("'", "''") + "'"


def encode_ps(script: str) -> str:
    return base64.b64encode(script.encode("utf-16-le")).decode("ascii")


def cim_method_script(namespace: str, class_name: str, method: str, arguments: dict[str, str]) -> str:
    """Build an Invoke-CimMethod call; argument values must already be PowerShell literals."""
    rendered = "; ".join(f"{key} = {value}" for key, value in arguments.items())
    return (
        f"Invoke-CimMethod -Namespace {quote_ps(namespace)} -ClassName {quote_ps(class_name)} "
        f"-MethodName {quote_ps(method)} -Arguments @{{ {rendered} }} | Out-Null"
    )


class PowerShellTransport:
    """Runs scripts through the local Windows PowerShell, remoting with Invoke-Command."""

    def __init__(self, *, executable: str = "powershell", command_runner: CommandRunner | None = None) -> None:
        self._executable = executable
        self._runner = command_runner or SubprocessRunner()

    def build_command(self, computer_name: str, script: str) -> list[str]:
        body = SCRIPT_PREAMBLE + script
        if not is_local_computer(computer_name):
            body = (
                SCRIPT_PREAMBLE
                + f"Invoke-Command -ComputerName {quote_ps(computer_name)} -ScriptBlock {{\n{body}\n}}"
            )
        return [
            self._executable,
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy",
            "Bypass",
            "-EncodedCommand",
            encode_ps(body),
        ]

    def run_script(self, computer_name: str, script: str) -> CommandResult:
        name = validate_computer_name(computer_name)
        command = self.build_command(name, script)
        logger.debug("PowerShell script for %s:\n%s", name, script)
        try:
            completed = self._runner.run(command)
        except OSError as exc:
            raise RemoteCommandError.from_exception(name, exc) from exc
        return CommandResult(name, completed.returncode, completed.stdout or "", completed.stderr or "")


def _decode(payload: bytes | str | None) -> str:
    if not payload:
        return ""
    if isinstance(payload, str):
        return payload
    return payload.decode("utf-8", errors="replace")


_WINRM_FAILURES = (
    requests.exceptions.RequestException,
    WinRMError,
    WinRMTransportError,
    WinRMOperationTimeoutError,
    OSError,
)


class WinRmTransport:
    """Runs scripts directly on the target host over a pywinrm session."""

    def __init__(
        self,
        username: str,
        password: str,
        *,
        port: int | None = None,
        use_https: bool = False,
        auth: str = "ntlm",
        cert_validation: str = "validate",
        session_factory: Callable[..., winrm.Session] | None = None,
    ) -> None:
        self._username = username
        self._password = password
        self._use_https = use_https
        self._port = port or (DEFAULT_WINRM_HTTPS_PORT if use_https else DEFAULT_WINRM_PORT)
        self._auth = auth
        self._cert_validation = cert_validation
        self._session_factory = session_factory or winrm.Session

    def endpoint(self, computer_name: str) -> str:
        scheme = "https" if self._use_https else "http"
        host = "localhost" if computer_name == "." else computer_name
        return f"{scheme}://{host}:{self._port}/wsman"

    def run_script(self, computer_name: str, script: str) -> CommandResult:
        name = validate_computer_name(computer_name)
        kwargs = {}
        if self._use_https:
            kwargs["server_cert_validation"] = self._cert_validation
        logger.debug("WinRM script for %s:\n%s", name, script)
        try:
            session = self._session_factory(
                self.endpoint(name),
                auth=(self._username, self._password),
                transport=self._auth,
                **kwargs,
            )
            response = session.run_ps(SCRIPT_PREAMBLE + script)
        except _WINRM_FAILURES as exc:
            raise RemoteCommandError.from_exception(name, exc) from exc
        return CommandResult(name, response.status_code, _decode(response.std_out), _decode(response.std_err))


def build_transport(settings: UserSettings, *, password: str = "") -> ManagementTransport:
    if settings.transport == "winrm":
        if not settings.winrm_username:
            raise ValueError("WinRM transport requires a username")
        return WinRmTransport(
            settings.winrm_username,
            password,
            port=settings.winrm_port,
            use_https=settings.winrm_use_https,
            auth=settings.winrm_auth,
            cert_validation=settings.winrm_cert_validation,
        )
    return PowerShellTransport()
