"""CLI package for tunnel-boot."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, NoReturn

import typer
import typer.rich_utils

from tunnelboot.cf import (
    CfCliConnection,
    Deployer,
    DeployError,
    PlatformConnection,
    ReverseTunnel,
    TunnelEndpoint,
    TunnelError,
)
from tunnelboot.cf.push import make_staging_dir, unpack_tunnel_application, write_manifest
from tunnelboot.cf.tunnel import ssh_command, sshpass_available, sshpass_command
from tunnelboot.core import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG_DIR,
    ConfigManager,
    ConfigurationError,
    LaunchConfigOptions,
    ManifestOptions,
    TunnelBootConfig,
    extract_variables,
    render_launch_config,
)
from tunnelboot.core.config import PROJECT_DIRNAME
from tunnelboot.core.templates import format_ide_variables, format_shell_variables, launch_config_filename
from tunnelboot.plugin import COMMANDS, PluginCommand, plugin_metadata

from .args import ArgConsumer
from .branding import themed_console

typer.rich_utils.USE_RICH = False

logger = logging.getLogger(__name__)

app = typer.Typer(help="tunnel-boot cf CLI plugin", no_args_is_help=False, add_completion=False)

CLI_CONSOLE = themed_console()

STANDALONE_NOTICE = (
    "This program is a plugin which expects to be installed into the cf CLI. "
    "It is not intended to be run stand-alone."
)


def styled_echo(message: str = "", *, nl: bool = True, markup: bool = True) -> None:
    """Print using the tunnel-boot themed console."""
    CLI_CONSOLE.print(message, end="" if not nl else "\n", markup=markup, highlight=False, soft_wrap=True)


def plain_echo(message: str = "", *, nl: bool = True) -> None:
    """Print text verbatim; used for data the user copies into other tools."""
    typer.echo(message, nl=nl)


@dataclass
class RuntimeContext:
    config: TunnelBootConfig
    verbose: bool = False


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"", "0", "false", "no"}


def _config_home() -> Path:
    env_home = os.environ.get("TUNNELBOOT_HOME")
    if env_home:
        return Path(env_home).expanduser()
    return DEFAULT_CONFIG_DIR


def _configure_logging(verbose: bool, log_dir: Path | None) -> None:
    root_logger = logging.getLogger()
    if verbose:
        if not root_logger.handlers:
            logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
        root_logger.setLevel(logging.DEBUG)
    else:
        if root_logger.handlers:
            root_logger.setLevel(logging.WARNING)
        else:
            logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if verbose and log_dir is not None:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.warning("Unable to create log directory %s: %s", log_dir, exc)
            return
        handler = logging.FileHandler(log_dir / "tunnel-boot.log", encoding="utf-8")
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)


def _load_config(config_file: Path | None) -> TunnelBootConfig:
    override_path: Path | None = None
    if config_file is not None:
        override_path = config_file.expanduser()
        if not override_path.exists():
            styled_echo(f"❌ Config file '{override_path}' not found.", markup=False)
            raise typer.Exit(code=1)
        override_path = override_path.resolve()

    project_config_path: Path | None = None
    if override_path is None:
        candidate = Path.cwd() / PROJECT_DIRNAME / CONFIG_FILENAME
        if candidate.exists():
            project_config_path = candidate

    manager = ConfigManager(
        config_dir=_config_home(),
        echo_fn=styled_echo,
        project_config_path=project_config_path,
        override_config_path=override_path,
    )
    try:
        return manager.ensure()
    except ConfigurationError as exc:
        styled_echo(f"❌ {exc}", markup=False)
        raise typer.Exit(code=1) from exc


def _runtime(ctx: typer.Context) -> RuntimeContext:
    runtime = ctx.find_object(RuntimeContext)
    if runtime is None:
        runtime = RuntimeContext(config=_load_config(None))
        ctx.obj = runtime
    return runtime


# ----------------------------------------------------------------------
# Failure policies
# ----------------------------------------------------------------------
def diagnose_with_help(message: str, command: str) -> None:
    styled_echo(f"{message} See 'cf help {command}'.", markup=False)
    raise typer.Exit(code=1)


def fatal_platform_error(message: str, err: Exception) -> None:
    logger.debug("Platform command failed: %s", message, exc_info=err)
    styled_echo(f"❌ {message} - {err}", markup=False)
    raise typer.Exit(code=1) from err


def fail_installation(fmt: str, *inserts: Any) -> None:
    # Standard output and error are swallowed during plugin installation.
    styled_echo(fmt % inserts, markup=False)
    raise typer.Exit(code=64)


def _fail_runtime(exc: Exception) -> NoReturn:
    styled_echo(f"❌ {exc}", markup=False)
    raise typer.Exit(code=1) from exc


# ----------------------------------------------------------------------
# Collaborator factories
# ----------------------------------------------------------------------
def _build_connection(config: TunnelBootConfig) -> PlatformConnection:
    return CfCliConnection(config.cf_executable)


def _build_deployer(config: TunnelBootConfig) -> Deployer:
    return Deployer(
        _build_connection(config),
        fatal_platform_error,
        sshd_port_in_app=config.sshd_port_in_app,
        local_forward_port=config.local_forward_port,
    )


def _arg_consumer(command: PluginCommand, args: list[str] | None) -> ArgConsumer:
    return ArgConsumer([command.name, *(args or [])], diagnose_with_help)


def _plugin_command(name: str) -> PluginCommand:
    return next(command for command in COMMANDS if command.name == name)


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------
@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),  # noqa: B008
    config: Path | None = typer.Option(None, "--config", help="Use an alternate config file and skip project overrides"),  # noqa: B008
) -> None:
    """Tunnel traffic from a Cloud Foundry app to a service running locally."""
    verbose = verbose or _env_flag("TUNNELBOOT_DEBUG")
    _configure_logging(verbose, log_dir=_config_home() / "logs" if verbose else None)
    if ctx.resilient_parsing or ctx.invoked_subcommand in {"version", "metadata"}:
        return
    ctx.obj = RuntimeContext(config=_load_config(config), verbose=verbose)


def push_tunnel_app(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(None, metavar="CF_APP_NAME SPRING_APP_NAME"),  # noqa: B008
    services: str = typer.Option("", "--services", "--s", "-s", help="comma separated list of services to bind to"),  # noqa: B008
) -> None:
    runtime = _runtime(ctx)
    consumer = _arg_consumer(_plugin_command("push-tunnel-app"), args)
    cf_application_name = consumer.consume(1, "application name")
    spring_application_name = consumer.consume(2, "application name")
    consumer.check_all_consumed()

    config = runtime.config
    styled_echo(f"Pushing tunnel hosting application: {cf_application_name}", markup=False)
    try:
        staging_dir = make_staging_dir()
        override = Path(config.tunnel_app_path) if config.tunnel_app_path else None
        app_path = unpack_tunnel_application(staging_dir, override)
        styled_echo(f"Unpacked tunnel application to {app_path}", markup=False)
        manifest_path, manifest = write_manifest(
            staging_dir,
            ManifestOptions(
                cf_application_name=cf_application_name,
                spring_application_name=spring_application_name,
                app_path=app_path,
                services=services,
                memory=config.memory,
                remote_port=config.remote_port,
            ),
        )
    except DeployError as exc:
        _fail_runtime(exc)
    plain_echo("Manifest to be used for deployment of tunnel application:")
    plain_echo(manifest)
    _build_deployer(config).push_app(cf_application_name, str(manifest_path))


def get_local_env(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(None, metavar="APP_NAME"),  # noqa: B008
    create_eclipse_launch_config: bool = typer.Option(  # noqa: B008
        False, "--create-eclipse-launch-config", "--celc", help="Produce a .launch file suitable for eclipse"
    ),
    project: str = typer.Option("", "--project", help="for eclipse config creation, this is the eclipse project name"),  # noqa: B008
    application_main: str = typer.Option("", "--application-main", help="for eclipse config creation, the application main class"),  # noqa: B008
    port: int | None = typer.Option(None, "--port", help="for eclipse config creation, the local port number being tunneled to"),  # noqa: B008
    target_dir: str = typer.Option("", "--target-dir", help="for eclipse config creation, target directory in which to create .launch file"),  # noqa: B008
) -> None:
    runtime = _runtime(ctx)
    consumer = _arg_consumer(_plugin_command("get-local-env"), args)
    application_name = consumer.consume(1, "application name")
    consumer.check_all_consumed()

    var_data = _build_deployer(runtime.config).get_env_vars(application_name)
    variables = extract_variables(var_data)
    logger.debug("Extracted variables: %s", ", ".join(sorted(variables)))

    if not create_eclipse_launch_config:
        plain_echo("Variables for use in your IDE:")
        for line in format_ide_variables(variables):
            plain_echo(line)
        plain_echo("Variables for use on the command line:")
        for line in format_shell_variables(variables):
            plain_echo(line)
        return

    document = render_launch_config(
        LaunchConfigOptions(
            project_name=project,
            application_main=application_main,
            port="" if port is None else str(port),
            env_vars=variables,
        )
    )
    if not target_dir:
        plain_echo(document, nl=False)
        return
    launch_config_file = Path(target_dir).expanduser() / launch_config_filename(project)
    try:
        launch_config_file.write_text(document)
    except OSError as exc:
        _fail_runtime(exc)
    styled_echo(f"Created launch configuration {launch_config_file}", markup=False)


def start_tunnel(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(None, metavar="CF_APP_NAME LOCAL_PORT"),  # noqa: B008
) -> None:
    runtime = _runtime(ctx)
    consumer = _arg_consumer(_plugin_command("start-tunnel"), args)
    application_name = consumer.consume(1, "application name")
    local_port = consumer.consume(2, "local port")
    consumer.check_all_consumed()

    config = runtime.config
    deployer = _build_deployer(config)
    code = deployer.get_ssh_code()
    guid = deployer.get_guid(application_name)
    styled_echo(f"The guid for the app is {guid}", markup=False)
    styled_echo(f"The one time ssh code is {code}", markup=False)

    endpoint = TunnelEndpoint(
        guid=guid,
        local_port=local_port,
        instance=config.app_instance,
        ssh_host=config.ssh_host,
        ssh_port=config.ssh_port,
        remote_port=config.remote_port,
    )
    if not sshpass_available():
        styled_echo(
            "Unable to find sshpass, please install it and re-run or execute the following "
            "ssh command manually to start the tunnel",
            markup=False,
        )
        styled_echo("  " + " ".join(ssh_command(endpoint)), markup=False)
        styled_echo("(supply the sshcode printed above, or create a new one via: cf ssh-code)", markup=False)
        raise typer.Exit(code=1)

    command = sshpass_command(endpoint, code)
    styled_echo("Connecting tunnel, command:\n  " + " ".join(command), markup=False)
    tunnel = ReverseTunnel(command)
    restore_signals = tunnel.install_signal_handlers()
    try:
        result = tunnel.run()
    except TunnelError as exc:
        _fail_runtime(exc)
    finally:
        restore_signals()

    plain_echo(f"\nout:\n{result.stdout}\nerr:\n{result.stderr}")
    if result.cancelled:
        styled_echo("[tunnelboot.warning]Tunnel stopped.[/]")
        return
    if not result.success:
        styled_echo(f"❌ Tunnel command exited with status {result.returncode}", markup=False)
        raise typer.Exit(code=1)


def _register_plugin_command(name: str, handler: Callable[..., None]) -> None:
    command = _plugin_command(name)
    epilog = command.usage.usage.strip()
    app.command(name=command.name, help=command.help_text, epilog=epilog)(handler)
    app.command(name=command.alias, help=command.help_text, epilog=epilog, hidden=True)(handler)


_register_plugin_command("push-tunnel-app", push_tunnel_app)
_register_plugin_command("get-local-env", get_local_env)
_register_plugin_command("start-tunnel", start_tunnel)


@app.command()
def version() -> None:
    """Show the plugin version."""
    styled_echo(STANDALONE_NOTICE, markup=False)
    pv = plugin_metadata(fail_installation).version
    styled_echo(f"Plugin version: {pv}", markup=False)


@app.command(name="metadata")
def show_metadata() -> None:
    """Show the metadata the plugin registers with the cf CLI."""
    info = plugin_metadata(fail_installation)
    styled_echo(f"[tunnelboot.command]{info.name}[/] {info.version} (cf CLI >= {info.min_cli_version})")
    for command in info.commands:
        styled_echo("")
        styled_echo(f"[tunnelboot.command]{command.name}[/] ({command.alias}) - {command.help_text}")
        styled_echo(command.usage.usage, markup=False)
        for option, description in command.usage.options.items():
            styled_echo(f"     {option}: {description}", markup=False)


def main() -> None:
    """Console script entrypoint."""
    args = sys.argv[1:]
    if not args:
        app(args=["version"])
        return
    app(args=args)


__all__ = ["app", "main", "diagnose_with_help", "fail_installation", "fatal_platform_error"]
