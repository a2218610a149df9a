from __future__ import annotations

import io
import subprocess
from types import SimpleNamespace

import pytest

import tunnelboot.cf.connection as connection_mod
from tunnelboot.cf.connection import CfCliConnection, PlatformCommandError


def test_captured_command_splits_lines(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_run(cmd, capture_output, text, env=None, check=False):  # noqa: ARG001
        seen["cmd"] = cmd
        return SimpleNamespace(returncode=0, stdout="abc\ndef\n", stderr="")

    monkeypatch.setattr(connection_mod.subprocess, "run", fake_run)

    lines = CfCliConnection("cf").cli_command_without_terminal_output("ssh-code")

    assert lines == ["abc", "def"]
    assert seen["cmd"] == ["cf", "ssh-code"]


def test_captured_command_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd, capture_output, text, env=None, check=False):  # noqa: ARG001
        return SimpleNamespace(returncode=1, stdout="FAILED\n", stderr="App 'demo' not found\n")

    monkeypatch.setattr(connection_mod.subprocess, "run", fake_run)

    with pytest.raises(PlatformCommandError) as excinfo:
        CfCliConnection("cf").cli_command_without_terminal_output("env", "demo")

    assert excinfo.value.returncode == 1
    assert "App 'demo' not found" in str(excinfo.value)
    assert excinfo.value.output == ["FAILED"]


def test_missing_executable_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(*args, **kwargs):  # noqa: ARG001
        raise FileNotFoundError("cf")

    monkeypatch.setattr(connection_mod.subprocess, "run", fake_run)

    with pytest.raises(PlatformCommandError, match="Command not found: cf"):
        CfCliConnection("cf").cli_command_without_terminal_output("apps")


class FakeProcess:
    def __init__(self, output: str, returncode: int) -> None:
        self.stdout = io.StringIO(output)
        self._returncode = returncode

    def wait(self) -> int:
        return self._returncode


def test_streamed_command_echoes_and_returns_lines(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[list[str]] = []

    def fake_popen(cmd, stdout, stderr, text, env=None):  # noqa: ARG001
        calls.append(cmd)
        assert stderr == subprocess.STDOUT
        return FakeProcess("Pushing app demo...\nOK\n", 0)

    monkeypatch.setattr(connection_mod.subprocess, "Popen", fake_popen)
    out = io.StringIO()

    lines = CfCliConnection("cf", out=out).cli_command("push", "demo")

    assert lines == ["Pushing app demo...", "OK"]
    assert out.getvalue() == "Pushing app demo...\nOK\n"
    assert calls == [["cf", "push", "demo"]]


def test_streamed_command_failure_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        connection_mod.subprocess,
        "Popen",
        lambda cmd, stdout, stderr, text, env=None: FakeProcess("FAILED\n", 1),  # noqa: ARG005
    )

    with pytest.raises(PlatformCommandError) as excinfo:
        CfCliConnection("cf", out=io.StringIO()).cli_command("push", "demo")

    assert excinfo.value.returncode == 1
    assert excinfo.value.output == ["FAILED"]


def test_env_is_merged_with_process_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_run(cmd, capture_output, text, env=None, check=False):  # noqa: ARG001
        seen["env"] = env
        return SimpleNamespace(returncode=0, stdout="", stderr="")

    monkeypatch.setenv("PATH", "/usr/bin")
    monkeypatch.setattr(connection_mod.subprocess, "run", fake_run)

    CfCliConnection("cf", env={"CF_HOME": "/tmp/cf"}).cli_command_without_terminal_output("target")

    env = seen["env"]
    assert isinstance(env, dict)
    assert env["CF_HOME"] == "/tmp/cf"
    assert env["PATH"] == "/usr/bin"
