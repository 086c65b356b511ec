"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Per-peer EXTJWT token cache with negative caching of unsupported peers.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from typing import Literal

from ..cache import CacheLoader
from ..errors import StaleValueError, UnsupportedProtocolError
from ..peers import Peer, PeerRegistry
from ..protocol import EXTJWT_COMMAND, request_extjwt
from ..settings import TokenSettings
from .types import TokenRecord, TokenState, UnsupportedMark

logger = logging.getLogger("extjwt.tokens")

Clock = Callable[[], float]
TokenResult = str | Literal[False]


def _mark_retrieved(waiter: asyncio.Future[TokenResult]) -> None:
    if not waiter.cancelled():
        waiter.exception()


class TokenManager:
    """
    Acquire, cache and refresh EXTJWT tokens per peer.

    ``get`` answers synchronously when it can: a fresh cached token is
    returned as ``str`` and a peer known not to support the command as
    ``False``. Otherwise it returns a future resolving to the token, or to
    ``False`` when the peer turns out not to support the command. Timeouts
    and malformed replies reject the future and are not cached.

    Each caller gets its own future, so cancelling one does not cancel the
    load for the others. Failures are logged once by the loader; a future
    that is dropped without being awaited does not report them again.
    """

    def __init__(
        self,
        *,
        settings: TokenSettings | None = None,
        peers: PeerRegistry | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self._settings = settings or TokenSettings()
        self._peers = peers
        self._clock = clock
        self._unsupported: dict[Peer, UnsupportedMark] = {}
        self._loader: CacheLoader[Peer, TokenRecord] = CacheLoader(
            self._load,
            self._assert_fresh,
            expected_errors=(UnsupportedProtocolError,),
        )

    @property
    def settings(self) -> TokenSettings:
        return self._settings

    def get(self, peer: Peer | str) -> TokenResult | asyncio.Future[TokenResult]:
        """
        Return the token for ``peer``, ``False``, or a future of either.

        Raises:
            KeyError: If ``peer`` is a name unknown to the peer registry.
        """
        peer = self._resolve(peer)
        if self._is_unsupported(peer) or not self._advertises_support(peer):
            return False

        result = self._loader.get(peer)
        if isinstance(result, TokenRecord):
            logger.debug("Serving cached token for %r", peer)
            return result.token
        waiter = asyncio.ensure_future(self._await_token(result))
        waiter.add_done_callback(_mark_retrieved)
        return waiter

    async def acquire(self, peer: Peer | str) -> TokenResult:
        """Await the token for ``peer`` whether or not it is cached."""
        result = self.get(peer)
        if isinstance(result, asyncio.Future):
            return await result
        return result

    async def acquire_all(self, peers: Iterable[Peer | str]) -> dict[Peer, TokenResult]:
        """
        Acquire tokens for several peers concurrently.

        Duplicate peers share one result. The first unexpected failure
        (for example a timeout) propagates.
        """
        unique = list(dict.fromkeys(self._resolve(peer) for peer in peers))
        results = await asyncio.gather(*(self.acquire(peer) for peer in unique))
        return dict(zip(unique, results))

    def state(self, peer: Peer | str) -> TokenState:
        """Report where ``peer`` currently sits in the token lifecycle."""
        peer = self._resolve(peer)
        mark = self._unsupported.get(peer)
        if mark is not None and not mark.expired(
            self._clock(), self._settings.unsupported_ttl_s
        ):
            return TokenState.UNSUPPORTED
        if self._loader.is_loading(peer):
            return TokenState.PENDING
        record = self._loader.peek(peer)
        if record is None:
            return TokenState.NO_RECORD
        if record.age(self._clock()) > self._settings.token_max_age_s:
            return TokenState.STALE
        return TokenState.VALID

    def forget(self, peer: Peer | str) -> None:
        """Drop the cached token and any unsupported mark for ``peer``."""
        peer = self._resolve(peer)
        self._loader.invalidate(peer)
        self._unsupported.pop(peer, None)

    def clear(self) -> None:
        self._loader.clear()
        self._unsupported.clear()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve(self, peer: Peer | str) -> Peer:
        if not isinstance(peer, str):
            return peer
        if self._peers is None:
            raise KeyError(f"Cannot resolve peer '{peer}' without a peer registry")
        return self._peers.get(peer)

    def _is_unsupported(self, peer: Peer) -> bool:
        mark = self._unsupported.get(peer)
        if mark is None:
            return False
        if mark.expired(self._clock(), self._settings.unsupported_ttl_s):
            del self._unsupported[peer]
            logger.info("Unsupported mark for %r expired, retrying %s", peer, EXTJWT_COMMAND)
            return False
        return True

    def _advertises_support(self, peer: Peer) -> bool:
        if not self._settings.require_isupport:
            return True
        isupport = getattr(peer, "isupport", None)
        if isupport is None:
            return True
        advertised = isupport.get(EXTJWT_COMMAND)
        if advertised is None:
            logger.debug("Peer %r does not advertise %s", peer, EXTJWT_COMMAND)
            return False
        # ISUPPORT value is "<version>[,<extra>...]"
        version = str(advertised).split(",", 1)[0].strip()
        return version == self._settings.supported_version

    def _assert_fresh(self, record: TokenRecord) -> None:
        age = record.age(self._clock())
        if age > self._settings.token_max_age_s:
            raise StaleValueError(f"Token is {age:.1f}s old")

    async def _load(self, peer: Peer) -> TokenRecord:
        try:
            token = await request_extjwt(
                peer, timeout_s=self._settings.request_timeout_s
            )
        except UnsupportedProtocolError:
            self._unsupported[peer] = UnsupportedMark(peer=peer, marked_at=self._clock())
            logger.info(
                "Peer %r does not support %s, skipping for %gs",
                peer,
                EXTJWT_COMMAND,
                self._settings.unsupported_ttl_s,
            )
            raise
        logger.debug("Acquired %s token for %r", EXTJWT_COMMAND, peer)
        return TokenRecord(token=token, acquired_at=self._clock())

    @staticmethod
    async def _await_token(pending: asyncio.Future[TokenRecord]) -> TokenResult:
        try:
            record = await asyncio.shield(pending)
        except UnsupportedProtocolError:
            return False
        return record.token
