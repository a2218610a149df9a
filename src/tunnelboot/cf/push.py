"""Staging of the tunnel host application before ``cf push``."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path

from tunnelboot.core.templates import (
    TUNNEL_APP_JAR,
    ManifestOptions,
    TemplateError,
    read_resource,
    render_manifest,
)

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.yml"


class DeployError(RuntimeError):
    """Raised when the tunnel application cannot be staged for push."""


def make_staging_dir() -> Path:
    try:
        return Path(tempfile.mkdtemp(prefix="tunnel-boot"))
    except OSError as exc:
        raise DeployError(f"Unable to create a temporary directory: {exc}") from exc


def unpack_tunnel_application(staging_dir: Path, override_path: Path | None = None) -> Path:
    """Place the tunnel app jar in ``staging_dir`` and return its path.

    ``override_path`` takes precedence over the jar bundled with the package.
    """
    target = staging_dir / TUNNEL_APP_JAR
    try:
        if override_path is not None:
            source = override_path.expanduser()
            if not source.is_file():
                raise DeployError(f"Tunnel application not found at {source}")
            shutil.copyfile(source, target)
        else:
            target.write_bytes(read_resource(TUNNEL_APP_JAR))
    except TemplateError as exc:
        raise DeployError(
            f"{exc} Build TunnelApp with `mvn package` and set tunnel_app_path in config.toml."
        ) from exc
    except OSError as exc:
        raise DeployError(f"Unable to write {target}: {exc}") from exc
    logger.debug("Unpacked tunnel application to %s", target)
    return target


def write_manifest(staging_dir: Path, options: ManifestOptions) -> tuple[Path, str]:
    """Render the manifest into ``staging_dir``; return its path and content."""
    try:
        content = render_manifest(options)
    except TemplateError as exc:
        raise DeployError(str(exc)) from exc
    manifest_path = staging_dir / MANIFEST_FILENAME
    try:
        manifest_path.write_text(content)
    except OSError as exc:
        raise DeployError(f"Unable to write {manifest_path}: {exc}") from exc
    return manifest_path, content


__all__ = ["DeployError", "MANIFEST_FILENAME", "make_staging_dir", "unpack_tunnel_application", "write_manifest"]
