"""Plugin metadata advertised to the cf CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from importlib import metadata

from tunnelboot.core.version import FailFunc, PluginVersion, parse_plugin_version

PLUGIN_NAME = "tunnel-boot"
DISTRIBUTION_NAME = "tunnel-boot"
INVALID_VERSION = "invalid version - plugin was not built correctly"
MIN_CLI_VERSION = PluginVersion(major=6, minor=7, build=0)


@dataclass(frozen=True)
class PluginUsage:
    usage: str
    options: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PluginCommand:
    name: str
    alias: str
    help_text: str
    usage: PluginUsage


@dataclass(frozen=True)
class PluginMetadata:
    name: str
    version: PluginVersion
    min_cli_version: PluginVersion
    commands: tuple[PluginCommand, ...]

    def command(self, name: str) -> PluginCommand | None:
        for command in self.commands:
            if name in {command.name, command.alias}:
                return command
        return None


COMMANDS: tuple[PluginCommand, ...] = (
    PluginCommand(
        name="push-tunnel-app",
        alias="pta",
        help_text="Push an application to act as an ssh tunnel host",
        usage=PluginUsage(
            usage="   cf push-tunnel-app CF_APPLICATION_NAME SPRING_APPLICATION_NAME",
            options={
                "--services/--s <servicesList>": "comma separated list of services to bind to",
            },
        ),
    ),
    PluginCommand(
        name="get-local-env",
        alias="gle",
        help_text="Retrieve environment vars to specify for local app launching",
        usage=PluginUsage(
            usage="   cf get-local-env APPLICATION_NAME",
            options={
                "--create-eclipse-launch-config": "Produce a .launch file suitable for eclipse",
                "--project <ideProjectName>": "for eclipse config creation, this is the eclipse project name",
                "--application-main <fqAppClassName>": "for eclipse config creation, the application main class",
                "--port <nnnn>": "for eclipse config creation, the local port number being tunneled to",
                "--target-dir <folder>": "for eclipse config creation, target directory in which to create .launch file",
            },
        ),
    ),
    PluginCommand(
        name="start-tunnel",
        alias="stun",
        help_text="Create the ssh tunnel to connect a local port to the CF application",
        usage=PluginUsage(usage="   cf start-tunnel CF_APPLICATION_NAME LOCAL_PORT"),
    ),
)


def plugin_version_string() -> str:
    """Return the version stamped into the installed distribution."""
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return INVALID_VERSION


def plugin_metadata(fail: FailFunc, version: str | None = None) -> PluginMetadata:
    pv = plugin_version_string() if version is None else version
    return PluginMetadata(
        name=PLUGIN_NAME,
        version=parse_plugin_version(pv, fail),
        min_cli_version=MIN_CLI_VERSION,
        commands=COMMANDS,
    )


__all__ = [
    "COMMANDS",
    "INVALID_VERSION",
    "MIN_CLI_VERSION",
    "PLUGIN_NAME",
    "PluginCommand",
    "PluginMetadata",
    "PluginUsage",
    "plugin_metadata",
    "plugin_version_string",
]
