"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

In-memory peers and peer registry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping

from .types import IrcMessage, MessageListener, Peer

logger = logging.getLogger("extjwt.peers")

SendHook = Callable[["InMemoryPeer", str, tuple[str, ...]], None]


class InMemoryPeer:
    """
    In-process peer with a synchronous listener list.

    Suitable for embedding behind another transport and for testing.
    Inbound messages are delivered in arrival order to a snapshot of the
    listeners registered when ``feed`` is called.
    """

    def __init__(
        self,
        name: str,
        *,
        isupport: Mapping[str, str] | None = None,
        on_send: SendHook | None = None,
    ) -> None:
        self.name = name
        self.isupport = dict(isupport) if isupport is not None else None
        self.sent: list[tuple[str, ...]] = []
        self._listeners: list[MessageListener] = []
        self._on_send = on_send

    def __repr__(self) -> str:
        return f"InMemoryPeer({self.name!r})"

    def add_listener(self, listener: MessageListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: MessageListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            logger.debug("Listener already removed from peer %s", self.name)

    @property
    def listener_count(self) -> int:
        """Number of currently registered listeners."""
        return len(self._listeners)

    def send_raw(self, command: str, *args: str) -> None:
        """Record an outbound command and hand it to the send hook."""
        command = command.upper()
        self.sent.append((command, *args))
        if self._on_send is not None:
            self._on_send(self, command, tuple(args))

    def sent_count(self, command: str) -> int:
        """Return how many times ``command`` was sent."""
        command = command.upper()
        return sum(1 for row in self.sent if row[0] == command)

    def feed(self, message: IrcMessage | str) -> None:
        """Deliver one inbound message (or raw line) to every listener."""
        if isinstance(message, str):
            message = IrcMessage.parse(message)
        for listener in list(self._listeners):
            listener(message)


class PeerRegistry:
    """Name to peer mapping used to resolve peers by connection name."""

    def __init__(self) -> None:
        self._peers: dict[str, Peer] = {}

    def register(self, name: str, peer: Peer) -> Peer:
        """
        Register a peer under ``name``.

        Raises:
            ValueError: If the name is already registered.
        """
        if name in self._peers:
            raise ValueError(f"Peer '{name}' is already registered")
        self._peers[name] = peer
        return peer

    def unregister(self, name: str) -> None:
        """Remove a peer; unknown names are ignored."""
        self._peers.pop(name, None)

    def get(self, name: str) -> Peer:
        """
        Return the peer registered under ``name``.

        Raises:
            KeyError: If the name is not registered.
        """
        peer = self._peers.get(name)
        if peer is None:
            raise KeyError(f"Peer '{name}' is not registered")
        return peer

    def __contains__(self, name: object) -> bool:
        return name in self._peers

    @property
    def registered_peers(self) -> list[str]:
        """List of currently registered peer names."""
        return list(self._peers.keys())
