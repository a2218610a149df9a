"""Plugin version parsing for tunnel-boot."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable

NUM_COMPONENTS = 3
_INTEGER_RE = re.compile(r"[+-]?[0-9]+")

FailFunc = Callable[..., Any]


@dataclass(frozen=True, slots=True)
class PluginVersion:
    """Three-part plugin version as reported to the host CLI."""

    major: int = 0
    minor: int = 0
    build: int = 0

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.build}"


def parse_plugin_version(pv: str, fail: FailFunc) -> PluginVersion:
    """Parse ``pv`` of the form ``<major>.<minor>.<build>``.

    If the version is invalid, ``fail`` is called printf-style with a
    suitable message and a zero version is returned. Outside of tests the
    fail function will typically exit the process.
    """
    components = _version_components(pv, fail)
    return PluginVersion(major=components[0], minor=components[1], build=components[2])


def _version_components(pv: str, fail: FailFunc) -> list[int]:
    int_components = [0] * NUM_COMPONENTS
    components = pv.split(".")
    if len(components) != NUM_COMPONENTS:
        fail(
            "pluginVersion %r has invalid format. Expected %d dot-separated integer components.",
            pv,
            NUM_COMPONENTS,
        )
        return [0] * NUM_COMPONENTS

    for index, component in enumerate(components):
        if _INTEGER_RE.fullmatch(component) is None:
            fail("pluginVersion %r has invalid format. Expected integer components.", pv)
            return [0] * NUM_COMPONENTS
        int_components[index] = int(component, 10)
    return int_components


__all__ = ["NUM_COMPONENTS", "PluginVersion", "parse_plugin_version"]
