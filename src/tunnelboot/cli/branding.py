"""tunnel-boot console styling."""

from __future__ import annotations

from rich.console import Console
from rich.theme import Theme

TUNNELBOOT_THEME = Theme(
    {
        "tunnelboot.info": "#38BDF8",
        "tunnelboot.success": "bold #14F195",
        "tunnelboot.warning": "#FBBF24",
        "tunnelboot.error": "bold #FB7185",
        "tunnelboot.command": "bold #A855F7",
        "tunnelboot.text.dim": "dim #64748B",
    }
)


def themed_console(**kwargs: object) -> Console:
    """Return a Console configured with the tunnel-boot theme."""
    return Console(theme=TUNNELBOOT_THEME, **kwargs)


__all__ = ["TUNNELBOOT_THEME", "themed_console"]
