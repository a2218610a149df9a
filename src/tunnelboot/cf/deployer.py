"""Platform interactions behind the tunnel-boot commands."""

from __future__ import annotations

import logging
import sys
from typing import Callable, TextIO

from .connection import PlatformCommandError, PlatformConnection

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[str, Exception], None]

SSHD_PORT_IN_SHADOW_APP = 9099
LOCAL_FORWARD_PORT = 2225
INET_ADDR_COMMAND = r"""/sbin/ifconfig eth0 | grep "inet addr" | sed 's/^[^:]*:\([^ ]*\).*$/\1/'"""


class Deployer:
    """Runs the ``cf`` commands needed by push-tunnel-app, get-local-env and start-tunnel.

    Failures of the platform connection are passed to ``error_func`` together with
    a short description. The CLI's handler exits the process; if a handler
    returns instead, the call returns an empty result.
    """

    def __init__(
        self,
        connection: PlatformConnection,
        error_func: ErrorHandler,
        *,
        out: TextIO | None = None,
        sshd_port_in_app: int = SSHD_PORT_IN_SHADOW_APP,
        local_forward_port: int = LOCAL_FORWARD_PORT,
    ) -> None:
        self.connection = connection
        self.error_func = error_func
        self._out = out
        self.sshd_port_in_app = sshd_port_in_app
        self.local_forward_port = local_forward_port

    def push_app(self, application_name: str, manifest_path: str) -> None:
        args = ["push", application_name]
        self._echo(f"Pushing {application_name}")
        if manifest_path:
            args.extend(["-f", manifest_path])
        self._run("Could not push new version", args, capture=False)

    def get_env_vars(self, application_name: str) -> list[str]:
        return self._run("Could not get env vars", ["env", application_name], capture=True)

    def create_tunnel_in(self, application_name: str) -> None:
        args = [
            "ssh",
            application_name,
            "--force-pseudo-tty",
            "-L",
            f"{self.local_forward_port}:localhost:{self.sshd_port_in_app}",
        ]
        self._echo("Creating local tunnel")
        self._run("Problem creating tunnel", args, capture=False)
        self._echo("End of tunnel creation...")

    def get_ssh_code(self) -> str:
        self._echo("Fetching ssh-code, command:\n  cf ssh-code")
        return "".join(self._run("Problem fetching an ssh-code", ["ssh-code"], capture=True))

    def get_guid(self, application_name: str) -> str:
        self._echo(f"Fetching guid, command:\n  cf app {application_name} --guid")
        output = self._run("Problem fetching guid", ["app", application_name, "--guid"], capture=True)
        return "".join(output)

    def fetch_inet_addr(self, application_name: str) -> str:
        args = ["ssh", application_name, "--force-pseudo-tty", "-c", INET_ADDR_COMMAND]
        self._echo("Fetching inet address")
        address = "".join(self._run("Problem fetch inet addr", args, capture=False))
        self._echo(f"Fetched: {address}")
        return address

    def _run(self, message: str, args: list[str], *, capture: bool) -> list[str]:
        logger.debug("cf %s", " ".join(args))
        try:
            if capture:
                return self.connection.cli_command_without_terminal_output(*args)
            return self.connection.cli_command(*args)
        except PlatformCommandError as exc:
            self.error_func(message, exc)
            return []

    def _echo(self, message: str) -> None:
        out = self._out or sys.stdout
        out.write(message + "\n")


__all__ = ["Deployer", "ErrorHandler", "INET_ADDR_COMMAND", "LOCAL_FORWARD_PORT", "SSHD_PORT_IN_SHADOW_APP"]
