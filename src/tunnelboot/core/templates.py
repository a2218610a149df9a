"""Rendering of the tunnel app manifest, Eclipse launch configs and variable listings."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Mapping

MANIFEST_TEMPLATE = "manifest.yml.template"
TUNNEL_APP_JAR = "tunnelapp.jar"

_PLACEHOLDER_RE = re.compile(r"\b(?:APPNAME|MEMORY|PATH|REMOTE_PORT)\b")


class TemplateError(RuntimeError):
    """Base error for template operations."""


class TemplateNotFoundError(TemplateError):
    """Raised when a bundled resource is missing."""


@dataclass
class ManifestOptions:
    cf_application_name: str
    spring_application_name: str
    app_path: Path
    services: str = ""
    memory: str = "768M"
    remote_port: int = 8080


@dataclass
class LaunchConfigOptions:
    project_name: str
    application_main: str
    port: str = ""
    env_vars: Mapping[str, str] = field(default_factory=dict)


def read_resource(name: str) -> bytes:
    """Return the bytes of a resource bundled with the package."""
    resource = resources.files("tunnelboot").joinpath("resources", name)
    try:
        return resource.read_bytes()
    except (FileNotFoundError, OSError) as exc:
        raise TemplateNotFoundError(f"Bundled resource '{name}' not found.") from exc


def render_manifest(options: ManifestOptions) -> str:
    """Fill in the tunnel app manifest template."""
    template = read_resource(MANIFEST_TEMPLATE).decode("utf-8")
    replacements: dict[str, str] = {
        "APPNAME": options.cf_application_name,
        "MEMORY": options.memory,
        "PATH": str(options.app_path),
        "REMOTE_PORT": str(options.remote_port),
    }
    # Single pass; substituted values are not rescanned.
    template = _PLACEHOLDER_RE.sub(lambda match: replacements[match.group(0)], template)

    manifest = template + f"    spring.application.name: {options.spring_application_name}\n"
    if options.services:
        manifest += "  services:\n"
        for service in options.services.split(","):
            manifest += f"    - {service}\n"
    return manifest


def quote(value: str) -> str:
    """Escape double quotes for use inside an XML attribute."""
    return value.replace('"', "&quot;")


def launch_config_extra_props(port: str) -> dict[str, str]:
    return {
        "spring.boot.prop.eureka.client.register-with-eureka:0": "false",
        "spring.boot.prop.server.port:1": port,
        "spring.boot.prop.spring.profiles.active:2": "cloud",
    }


def render_launch_config(options: LaunchConfigOptions) -> str:
    """Render an Eclipse/STS Spring Boot launch configuration."""
    lines = [
        '<?xml version="1.0" encoding="UTF-8" standalone="no"?>',
        '<launchConfiguration type="org.springframework.ide.eclipse.boot.launch">',
    ]
    if options.env_vars:
        lines.append('<mapAttribute key="org.eclipse.debug.core.environmentVariables">')
        for key in sorted(options.env_vars):
            lines.append(f'<mapEntry key="{key}" value="{quote(options.env_vars[key])}"/>')
        lines.append("</mapAttribute>")
    else:
        lines.append("")
    lines.extend(
        [
            '<booleanAttribute key="org.eclipse.jdt.launching.ATTR_USE_START_ON_FIRST_THREAD" value="true"/>',
            f'<stringAttribute key="org.eclipse.jdt.launching.MAIN_TYPE" value="{options.application_main}"/>',
            f'<stringAttribute key="org.eclipse.jdt.launching.PROJECT_ATTR" value="{options.project_name}"/>',
            '<booleanAttribute key="spring.boot.ansi.console" value="true"/>',
            '<booleanAttribute key="spring.boot.dash.hidden" value="false"/>',
            '<booleanAttribute key="spring.boot.debug.enable" value="false"/>',
            '<booleanAttribute key="spring.boot.fast.startup" value="true"/>',
            '<booleanAttribute key="spring.boot.jmx.enable" value="true"/>',
            '<booleanAttribute key="spring.boot.lifecycle.enable" value="true"/>',
            '<stringAttribute key="spring.boot.lifecycle.termination.timeout" value="15000"/>',
            '<booleanAttribute key="spring.boot.livebean.enable" value="false"/>',
            '<stringAttribute key="spring.boot.livebean.port" value="0"/>',
            '<stringAttribute key="spring.boot.profile" value=""/>',
        ]
    )
    extra_props = launch_config_extra_props(options.port)
    for key in sorted(extra_props):
        # STS prefixes enabled property values with "1".
        lines.append(f'<stringAttribute key="{key}" value="1{extra_props[key]}"/>')
    lines.append("</launchConfiguration>")
    return "\n".join(lines) + "\n"


def launch_config_filename(project_name: str) -> str:
    return f"{project_name} (local).launch"


def format_ide_variables(variables: Mapping[str, str]) -> list[str]:
    return [f"{name}={variables[name]}" for name in sorted(variables)]


def format_shell_variables(variables: Mapping[str, str]) -> list[str]:
    lines: list[str] = []
    for name in sorted(variables):
        escaped = variables[name].replace('"', '\\"')
        lines.append(f'{name}="{escaped}"')
    return lines


__all__ = [
    "LaunchConfigOptions",
    "ManifestOptions",
    "MANIFEST_TEMPLATE",
    "TUNNEL_APP_JAR",
    "TemplateError",
    "TemplateNotFoundError",
    "format_ide_variables",
    "format_shell_variables",
    "launch_config_extra_props",
    "launch_config_filename",
    "quote",
    "read_resource",
    "render_launch_config",
    "render_manifest",
]
