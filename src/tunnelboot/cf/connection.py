"""Execution of ``cf`` CLI commands."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from typing import Mapping, Protocol, TextIO

logger = logging.getLogger(__name__)


class PlatformCommandError(RuntimeError):
    """Raised when a ``cf`` command cannot be run or exits non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None, output: list[str] | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output or []


class PlatformConnection(Protocol):
    """The two call shapes the plugin needs from the host CLI."""

    def cli_command(self, *args: str) -> list[str]:
        """Run a command echoing its output to the terminal; return the output lines."""
        ...

    def cli_command_without_terminal_output(self, *args: str) -> list[str]:
        """Run a command silently and return its output lines."""
        ...


class CfCliConnection:
    """Runs commands through the local ``cf`` executable."""

    def __init__(
        self,
        executable: str = "cf",
        *,
        env: Mapping[str, str] | None = None,
        out: TextIO | None = None,
    ) -> None:
        self.executable = executable
        self._env = env
        self._out = out

    def cli_command(self, *args: str) -> list[str]:
        command = [self.executable, *args]
        logger.debug("Running %s", " ".join(command))
        out = self._out or sys.stdout
        try:
            process = subprocess.Popen(  # noqa: S603,S607
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=self._merged_env(),
            )
        except FileNotFoundError as exc:
            raise PlatformCommandError(f"Command not found: {self.executable}") from exc
        output_lines: list[str] = []
        try:
            if process.stdout is not None:
                for line in process.stdout:
                    stripped = line.rstrip("\n")
                    output_lines.append(stripped)
                    out.write(stripped + "\n")
                    out.flush()
        finally:
            return_code = process.wait()
        if return_code != 0:
            raise PlatformCommandError(
                f"'{' '.join(command)}' exited with status {return_code}",
                returncode=return_code,
                output=output_lines,
            )
        return output_lines

    def cli_command_without_terminal_output(self, *args: str) -> list[str]:
        command = [self.executable, *args]
        logger.debug("Running %s (captured)", " ".join(command))
        try:
            completed = subprocess.run(  # noqa: S603,S607
                command,
                capture_output=True,
                text=True,
                env=self._merged_env(),
                check=False,
            )
        except FileNotFoundError as exc:
            raise PlatformCommandError(f"Command not found: {self.executable}") from exc
        output_lines = (completed.stdout or "").splitlines()
        if completed.returncode != 0:
            detail = (completed.stderr or "").strip() or "\n".join(output_lines).strip()
            raise PlatformCommandError(
                f"'{' '.join(command)}' exited with status {completed.returncode}: {detail}",
                returncode=completed.returncode,
                output=output_lines,
            )
        return output_lines

    def _merged_env(self) -> dict[str, str] | None:
        if not self._env:
            return None
        return {**os.environ, **self._env}


__all__ = ["CfCliConnection", "PlatformCommandError", "PlatformConnection"]
