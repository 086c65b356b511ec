"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Request/response correlation over a peer's inbound message stream.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from ..errors import CorrelationTimeoutError
from ..peers.types import IrcMessage, Peer

logger = logging.getLogger("extjwt.protocol.correlator")


class Match(enum.Enum):
    """Verdict returned by a matcher for one inbound message."""

    IGNORE = "ignore"
    PARTIAL = "partial"
    COMPLETE = "complete"


Matcher = Callable[[IrcMessage], Match | bool | None]


@dataclass(frozen=True, slots=True)
class CorrelatedResponse:
    """Every message that matched one exchange, in arrival order."""

    messages: tuple[IrcMessage, ...]

    @property
    def payload(self) -> str:
        """Concatenated payload fragments of all matched messages."""
        return "".join(message.payload for message in self.messages)

    @property
    def last(self) -> IrcMessage:
        return self.messages[-1]


def _coerce(verdict: Match | bool | None) -> Match:
    if isinstance(verdict, Match):
        return verdict
    return Match.COMPLETE if verdict else Match.IGNORE


def await_response(
    peer: Peer,
    matcher: Matcher,
    timeout_s: float,
) -> asyncio.Future[CorrelatedResponse]:
    """
    Listen on ``peer`` until ``matcher`` accepts a terminal message.

    The listener is registered before this function returns, so callers send
    their request afterwards without racing the reply. Exceptions raised by
    the matcher reject the returned future. Exactly one listener is added and
    removed per call, whether the exchange resolves, fails, times out or the
    future is cancelled by the caller.

    Raises (through the future):
        CorrelationTimeoutError: If no terminal message arrives in time.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[CorrelatedResponse] = loop.create_future()
    matched: list[IrcMessage] = []
    registered = True

    def release() -> None:
        nonlocal registered
        if not registered:
            return
        registered = False
        timer.cancel()
        peer.remove_listener(on_message)

    def on_message(message: IrcMessage) -> None:
        if future.done():
            return
        try:
            verdict = _coerce(matcher(message))
        except Exception as exc:
            release()
            future.set_exception(exc)
            return
        if verdict is Match.IGNORE:
            return
        matched.append(message)
        if verdict is Match.PARTIAL:
            logger.debug("Partial response %s (%d so far)", message.command, len(matched))
            return
        release()
        future.set_result(CorrelatedResponse(messages=tuple(matched)))

    def on_timeout() -> None:
        if future.done():
            return
        release()
        future.set_exception(
            CorrelationTimeoutError(f"No response within {timeout_s:g}s")
        )

    timer = loop.call_later(timeout_s, on_timeout)
    peer.add_listener(on_message)
    future.add_done_callback(lambda _: release())
    return future
