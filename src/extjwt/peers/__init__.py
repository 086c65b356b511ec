"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Peer abstractions consumed by the token cache.
"""

from .memory import InMemoryPeer, PeerRegistry
from .types import IrcMessage, MessageListener, Peer

__all__ = [
    "IrcMessage",
    "MessageListener",
    "Peer",
    "InMemoryPeer",
    "PeerRegistry",
]
