"""Command payload decoding.

The coordinator sends each command as JSON in one of two shapes:

- a bare name, e.g. ``"Left"``
- a single-entry object pairing the name with one argument, e.g.
  ``{"Forward": 3}`` or ``{"ItemInfo": 5}``

:func:`interpret` turns either shape into a :class:`Simple` or
:class:`WithArgs` value; nothing downstream looks at raw payloads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

import structlog

log = structlog.get_logger("commands")


class InvalidCommand(ValueError):
    """Payload is neither a bare name nor a name/argument mapping."""


@dataclass(frozen=True)
class Simple:
    name: str

    @property
    def argument(self) -> None:
        return None


@dataclass(frozen=True)
class WithArgs:
    name: str
    argument: Any


Command = Union[Simple, WithArgs]


def interpret(payload: Any) -> Command | None:
    """Decode a raw command payload; ``None`` means there is nothing to run.

    A mapping with several entries is resolved to its lexicographically
    smallest key so the outcome never depends on key order.
    """
    if payload is None:
        return None
    if isinstance(payload, dict):
        if not payload:
            raise InvalidCommand("empty command object")
        key = min(payload, key=str)
        if len(payload) > 1:
            log.warning("multi_entry_command", keys=sorted(map(str, payload)), chosen=str(key))
        return WithArgs(str(key), payload[key])
    if isinstance(payload, (str, int, float, bool)):
        return Simple(str(payload))
    raise InvalidCommand(f"unsupported command payload: {payload!r}")
