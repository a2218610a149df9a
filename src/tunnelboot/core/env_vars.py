"""Extraction of ``VCAP_*`` variable blocks from ``cf env`` output.

``cf env`` prints prose followed by one JSON-ish document per variable::

    Getting env variables for app demo...
    System-Provided:
    {
     "VCAP_SERVICES": {
      "p-mysql": [...]
     }
    }

    {
     "VCAP_APPLICATION": {
      ...
     }
    }

Each top-level document is reduced to ``NAME -> "{" + stripped inner lines``.
The text is never parsed as JSON; malformed blocks are dropped silently.
"""

from __future__ import annotations

from typing import Iterable

Accumulator = list[str] | None


def step(accumulator: Accumulator, line: str, variables: dict[str, str]) -> Accumulator:
    """Advance the extraction state by one line and return the new accumulator.

    The incoming accumulator is never modified; a completed block is written
    into ``variables``. The closing ``}`` line is checked before appending, so
    it never becomes part of the block it closes.
    """
    if line.startswith("}") and accumulator is not None:
        _close_block(accumulator, variables)
        accumulator = None
    if accumulator is not None:
        accumulator = [*accumulator, line]
    if line.startswith("{"):
        accumulator = []
    return accumulator


def _close_block(accumulator: list[str], variables: dict[str, str]) -> None:
    if not accumulator:
        return
    name = _block_name(accumulator[0])
    if name is None:
        return
    variables[name] = "{" + "".join(part.strip() for part in accumulator[1:])


def _block_name(header: str) -> str | None:
    first = header.find('"')
    last = header.rfind('"')
    if first < 0 or last <= first:
        return None
    return header[first + 1 : last]


def extract_variables(lines: Iterable[str]) -> dict[str, str]:
    """Return the ``NAME -> raw value`` mapping for every closed block."""
    variables: dict[str, str] = {}
    accumulator: Accumulator = None
    for line in lines:
        accumulator = step(accumulator, line, variables)
    return variables


def extract_variables_from_text(text: str) -> dict[str, str]:
    return extract_variables(text.splitlines())


__all__ = ["Accumulator", "extract_variables", "extract_variables_from_text", "step"]
