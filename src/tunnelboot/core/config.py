"""Configuration management for tunnel-boot."""

from __future__ import annotations

import os
from collections.abc import Callable
from copy import deepcopy
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, ValidationError

try:  # Python 3.11+
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore

import typer

DEFAULT_CONFIG_DIR = Path(os.environ.get("TUNNELBOOT_HOME", Path.home() / ".tunnelboot"))
CONFIG_FILENAME = "config.toml"
PROJECT_DIRNAME = ".tunnelboot"


class ConfigurationError(RuntimeError):
    """Raised when configuration loading fails."""


class TunnelBootConfig(BaseModel):
    """Persisted tunnel-boot settings."""

    config_version: int = 1
    cf_executable: str = "cf"
    ssh_host: str = "ssh.run.pivotal.io"
    ssh_port: int = 2222
    remote_port: int = 8080
    app_instance: int = 0
    sshd_port_in_app: int = 9099
    local_forward_port: int = 2225
    memory: str = "768M"
    tunnel_app_path: str | None = None


class ConfigManager:
    """Loads, merges and persists tunnel-boot configuration."""

    def __init__(
        self,
        config_dir: Path | None = None,
        echo_fn: Callable[[str], None] | None = None,
        project_config_path: Path | None = None,
        override_config_path: Path | None = None,
    ) -> None:
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.config_path = self.config_dir / CONFIG_FILENAME
        self._echo = echo_fn or typer.echo
        self.project_config_path = project_config_path
        self.override_config_path = override_config_path

    def ensure(self) -> TunnelBootConfig:
        """Return the merged configuration, writing defaults on first use."""
        if not self.config_path.exists():
            try:
                self.config_dir.mkdir(parents=True, exist_ok=True)
                self._save_config(TunnelBootConfig())
            except OSError as exc:
                self._echo(f"⚠️  Unable to write default config to {self.config_path}: {exc}")
        config = self._load_config()
        cf_override = os.environ.get("TUNNELBOOT_CF")
        if cf_override:
            config.cf_executable = cf_override
        return config

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _load_config(self) -> TunnelBootConfig:
        data: dict[str, Any] = self._read_config_dict(self.config_path)
        if self.project_config_path:
            data = self._merge_dicts(data, self._read_config_dict(self.project_config_path))
        if self.override_config_path:
            data = self._merge_dicts(data, self._read_config_dict(self.override_config_path))
        try:
            return TunnelBootConfig(**data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc

    def _save_config(self, config: TunnelBootConfig) -> None:
        self.config_path.write_text(tomli_w.dumps(config.model_dump(exclude_none=True)))

    def _read_config_dict(self, path: Path | None) -> dict[str, Any]:
        if path is None:
            return {}
        if not path.exists():
            return {}
        try:
            return tomllib.loads(path.read_text())
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Failed to load config from {path}: {exc}") from exc

    def _merge_dicts(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        result = deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_dicts(result[key], value)
            else:
                result[key] = value
        return result


__all__ = ["ConfigManager", "TunnelBootConfig", "ConfigurationError", "DEFAULT_CONFIG_DIR", "CONFIG_FILENAME"]
