from __future__ import annotations

import pytest

from services.remoting import CommandResult


class FakeTransport:
    def __init__(self) -> None:
        self.outputs: dict[str, str] = {}
        self.failures: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    def run_script(self, computer_name: str, script: str) -> CommandResult:
        self.calls.append((computer_name, script))
        if computer_name in self.failures:
            return CommandResult(computer_name, 1, "", self.failures[computer_name])
        return CommandResult(computer_name, 0, self.outputs.get(computer_name, ""), "")


@pytest.fixture()
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture(autouse=True)
def local_computer(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setenv("COMPUTERNAME", "LOCALPC")
    return "LOCALPC"
