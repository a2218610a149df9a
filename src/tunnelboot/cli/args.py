"""Positional argument bookkeeping for plugin commands."""

from __future__ import annotations

from collections.abc import Callable, Sequence

DiagnosticFunc = Callable[[str, str], None]


class ArgConsumer:
    """Tracks which positional arguments a command has read.

    ``positional_args[0]`` is the command name and always counts as consumed.
    Missing required arguments and leftovers are reported through ``diagnose``,
    which receives the message and the command name. Whether that ends the
    invocation is up to the callback.
    """

    def __init__(self, positional_args: Sequence[str], diagnose: DiagnosticFunc) -> None:
        self.positional_args = list(positional_args)
        self.command = self.positional_args[0] if self.positional_args else ""
        self.consumed: set[int] = {0}
        self._diagnose = diagnose

    def consume(self, index: int, description: str) -> str:
        value = self._lookup(index)
        if not value:
            self._diagnose(f"Incorrect usage: {description} not specified.", self.command)
            return ""
        self.consumed.add(index)
        return value

    def consume_optional(self, index: int, description: str) -> str:  # noqa: ARG002
        value = self._lookup(index)
        if not value:
            return ""
        self.consumed.add(index)
        return value

    def check_all_consumed(self) -> None:
        if len(self.consumed) >= len(self.positional_args):
            return
        extra = [arg for i, arg in enumerate(self.positional_args) if i not in self.consumed]
        if not extra:
            return
        insert = "arguments" if len(extra) > 1 else "argument"
        self._diagnose(f"Incorrect usage: invalid {insert} '{' '.join(extra)}'.", self.command)

    def _lookup(self, index: int) -> str:
        if index < 0 or index >= len(self.positional_args):
            return ""
        return self.positional_args[index]


__all__ = ["ArgConsumer", "DiagnosticFunc"]
