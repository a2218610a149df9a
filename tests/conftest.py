from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "tunnelboot-home"
    monkeypatch.setenv("TUNNELBOOT_HOME", str(home))
    monkeypatch.delenv("TUNNELBOOT_CF", raising=False)
    monkeypatch.delenv("TUNNELBOOT_DEBUG", raising=False)
    monkeypatch.chdir(tmp_path)
    return home
