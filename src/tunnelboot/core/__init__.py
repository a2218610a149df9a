"""Core services for tunnel-boot."""

from .config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG_DIR,
    ConfigManager,
    ConfigurationError,
    TunnelBootConfig,
)
from .env_vars import extract_variables, extract_variables_from_text
from .templates import (
    LaunchConfigOptions,
    ManifestOptions,
    TemplateError,
    TemplateNotFoundError,
    render_launch_config,
    render_manifest,
)
from .version import PluginVersion, parse_plugin_version

__all__ = [
    "CONFIG_FILENAME",
    "ConfigManager",
    "ConfigurationError",
    "DEFAULT_CONFIG_DIR",
    "TunnelBootConfig",
    "extract_variables",
    "extract_variables_from_text",
    "LaunchConfigOptions",
    "ManifestOptions",
    "TemplateError",
    "TemplateNotFoundError",
    "render_launch_config",
    "render_manifest",
    "PluginVersion",
    "parse_plugin_version",
]
