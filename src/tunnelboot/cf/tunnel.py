"""Reverse ssh tunnel from the local machine into a Cloud Foundry app instance."""

from __future__ import annotations

import io
import logging
import shutil
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import IO, BinaryIO, Callable, Sequence

logger = logging.getLogger(__name__)

DEFAULT_SSH_HOST = "ssh.run.pivotal.io"
DEFAULT_SSH_PORT = 2222
DEFAULT_REMOTE_PORT = 8080
_CHUNK_SIZE = 4096


class TunnelError(RuntimeError):
    """Raised when the tunnel process cannot be started or monitored."""


@dataclass(slots=True)
class TunnelResult:
    """Exit status and captured output of the ssh child process."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0


@dataclass(frozen=True, slots=True)
class TunnelEndpoint:
    guid: str
    local_port: str
    instance: int = 0
    ssh_host: str = DEFAULT_SSH_HOST
    ssh_port: int = DEFAULT_SSH_PORT
    remote_port: int = DEFAULT_REMOTE_PORT

    @property
    def login(self) -> str:
        return f"cf:{self.guid}/{self.instance}@{self.ssh_host}"

    @property
    def forward(self) -> str:
        return f"*:{self.remote_port}:localhost:{self.local_port}"


def ssh_command(endpoint: TunnelEndpoint) -> list[str]:
    return ["ssh", "-N", "-p", str(endpoint.ssh_port), endpoint.login, "-R", endpoint.forward]


def sshpass_command(endpoint: TunnelEndpoint, code: str) -> list[str]:
    return ["sshpass", "-p", code, *ssh_command(endpoint)]


def sshpass_available(which: Callable[[str], str | None] = shutil.which) -> bool:
    return which("sshpass") is not None


def _copy_stream(source: IO[bytes], sinks: Sequence[BinaryIO], errors: list[BaseException]) -> None:
    try:
        while True:
            chunk = source.read1(_CHUNK_SIZE)
            if not chunk:
                break
            for sink in sinks:
                sink.write(chunk)
                sink.flush()
    except (OSError, ValueError) as exc:
        errors.append(exc)


class ReverseTunnel:
    """Runs the tunnel command and mirrors its output to the terminal and to buffers.

    One reader thread per output stream copies the child's bytes into the
    terminal stream and a capture buffer; each buffer has a single writer.
    ``cancel`` terminates the child and is safe to call from a signal handler.
    """

    def __init__(
        self,
        command: Sequence[str],
        *,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self.command = list(command)
        self._terminal_out = stdout if stdout is not None else sys.stdout.buffer
        self._terminal_err = stderr if stderr is not None else sys.stderr.buffer
        self._popen = popen
        self._process: subprocess.Popen | None = None
        self._readers: list[threading.Thread] = []
        self._stdout_buffer = io.BytesIO()
        self._stderr_buffer = io.BytesIO()
        self._stdout_errors: list[BaseException] = []
        self._stderr_errors: list[BaseException] = []
        self._cancelled = threading.Event()

    def start(self) -> None:
        logger.debug("Starting tunnel: %s", " ".join(self.command))
        try:
            self._process = self._popen(  # noqa: S603
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            raise TunnelError(f"Failed to start '{self.command[0]}': {exc}") from exc

        streams = (
            (self._process.stdout, (self._terminal_out, self._stdout_buffer), self._stdout_errors, "stdout"),
            (self._process.stderr, (self._terminal_err, self._stderr_buffer), self._stderr_errors, "stderr"),
        )
        for source, sinks, errors, name in streams:
            if source is None:
                continue
            reader = threading.Thread(
                target=_copy_stream,
                args=(source, sinks, errors),
                name=f"tunnel-{name}",
                daemon=True,
            )
            reader.start()
            self._readers.append(reader)

    def wait(self) -> TunnelResult:
        if self._process is None:
            raise TunnelError("Tunnel has not been started.")
        returncode = self._process.wait()
        for reader in self._readers:
            reader.join()
        if self._stdout_errors or self._stderr_errors:
            raise TunnelError("failed to capture stdout or stderr")
        return TunnelResult(
            command=self.command,
            returncode=returncode,
            stdout=self._stdout_buffer.getvalue().decode("utf-8", errors="replace"),
            stderr=self._stderr_buffer.getvalue().decode("utf-8", errors="replace"),
            cancelled=self._cancelled.is_set(),
        )

    def run(self) -> TunnelResult:
        self.start()
        return self.wait()

    def cancel(self) -> None:
        """Terminate the child process if it is still running."""
        self._cancelled.set()
        process = self._process
        if process is None or process.poll() is not None:
            return
        logger.debug("Terminating tunnel process %s", process.pid)
        process.terminate()

    def install_signal_handlers(self, signals: Sequence[int] = (signal.SIGINT, signal.SIGTERM)) -> Callable[[], None]:
        """Route ``signals`` to :meth:`cancel`; return a callable restoring the previous handlers."""
        previous = {}

        def _handler(signum: int, frame) -> None:  # noqa: ARG001
            logger.info("Received signal %s, stopping tunnel", signum)
            self.cancel()

        for signum in signals:
            previous[signum] = signal.signal(signum, _handler)

        def _restore() -> None:
            for signum, handler in previous.items():
                signal.signal(signum, handler)

        return _restore


__all__ = [
    "ReverseTunnel",
    "TunnelEndpoint",
    "TunnelError",
    "TunnelResult",
    "ssh_command",
    "sshpass_available",
    "sshpass_command",
]
