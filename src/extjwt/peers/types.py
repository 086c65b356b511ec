"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Peer message types and the peer capability protocol.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

# ---------------------------------------------------------------------------
# Message types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class IrcMessage:
    """
    One inbound protocol message received from a peer.

    Attributes:
        command: Upper-cased command name or three digit numeric.
        params: Ordered parameters, trailing parameter included last.
        prefix: Optional source prefix (server or user mask).
        tags: Optional message tags, values left unescaped. Not part of
            equality or hashing.
    """

    command: str
    params: tuple[str, ...] = ()
    prefix: str | None = None
    tags: dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def payload(self) -> str:
        """Last parameter, which carries the value for most replies."""
        return self.params[-1] if self.params else ""

    @staticmethod
    def parse(line: str) -> "IrcMessage":
        """
        Parse one raw line such as ``:srv EXTJWT * irc.example :eyJ...``.

        Raises:
            ValueError: If the line carries no command.
        """
        rest = line.rstrip("\r\n")
        tags: dict[str, str] = {}
        if rest.startswith("@"):
            raw_tags, _, rest = rest[1:].partition(" ")
            for item in raw_tags.split(";"):
                if not item:
                    continue
                key, _, value = item.partition("=")
                tags[key] = value

        prefix: str | None = None
        rest = rest.lstrip(" ")
        if rest.startswith(":"):
            prefix, _, rest = rest[1:].partition(" ")

        trailing: str | None = None
        if rest.startswith(":"):
            rest, trailing = "", rest[1:]
        elif " :" in rest:
            rest, trailing = rest.split(" :", 1)

        parts = rest.split()
        if not parts:
            raise ValueError(f"IRC line has no command: {line!r}")
        params = parts[1:]
        if trailing is not None:
            params.append(trailing)
        return IrcMessage(
            command=parts[0].upper(),
            params=tuple(params),
            prefix=prefix,
            tags=tags,
        )


MessageListener = Callable[[IrcMessage], None]

# ---------------------------------------------------------------------------
# Peer protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class Peer(Protocol):
    """
    Capability contract for one remote connection.

    Peers are opaque hashable handles: the token cache uses them as keys and
    as the target of raw commands, never as owned state. ``isupport`` is the
    advertised capability map, or ``None`` when the peer does not expose one.
    """

    isupport: Mapping[str, str] | None

    def add_listener(self, listener: MessageListener) -> None: ...

    def remove_listener(self, listener: MessageListener) -> None: ...

    def send_raw(self, command: str, *args: str) -> None: ...
