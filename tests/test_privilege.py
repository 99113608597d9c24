from __future__ import annotations

import sys

import pytest

from services.privilege import ensure_admin, needs_elevation


def test_local_targets_need_elevation(local_computer: str) -> None:
    assert needs_elevation([None])
    assert needs_elevation(["localhost"])
    assert needs_elevation(["PC01", local_computer])


def test_remote_targets_do_not_need_elevation() -> None:
    assert not needs_elevation(["PC01", "PC02.corp.example.com"])


@pytest.mark.skipif(sys.platform.startswith("win"), reason="elevation check only runs on Windows")
def test_non_windows_skips_elevation() -> None:
    assert ensure_admin(interactive=False) is True
