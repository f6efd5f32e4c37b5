from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..errors import InputAlreadyPending, InputTimeout

log = logging.getLogger("sfxrelay.pending_inputs")

InputKey = tuple[int, int]


@dataclass(eq=False)
class PendingInput:
    channel_id: int
    author_id: int
    future: "asyncio.Future[str]"

    @property
    def key(self) -> InputKey:
        return (self.channel_id, self.author_id)


class PendingInputs:
    """One-shot waits for the next message from an author in a channel.

    Entries exist only while someone is waiting: they are removed when the
    message arrives, when the wait times out, or when it is cancelled.
    """

    def __init__(self) -> None:
        self._waiting: dict[InputKey, PendingInput] = {}

    def __len__(self) -> int:
        return len(self._waiting)

    def is_waiting(self, channel_id: int, author_id: int) -> bool:
        return (channel_id, author_id) in self._waiting

    def expect(self, channel_id: int, author_id: int) -> PendingInput:
        key = (channel_id, author_id)
        if key in self._waiting:
            raise InputAlreadyPending()
        pending = PendingInput(channel_id, author_id, asyncio.get_running_loop().create_future())
        self._waiting[key] = pending
        return pending

    async def receive(self, pending: PendingInput, timeout: float) -> str:
        try:
            return await asyncio.wait_for(pending.future, timeout=timeout)
        except asyncio.TimeoutError as e:
            log.info("No reply from %s in channel %s within %.0fs", pending.author_id, pending.channel_id, timeout)
            raise InputTimeout() from e
        finally:
            self.discard(pending)

    def discard(self, pending: PendingInput) -> None:
        if self._waiting.get(pending.key) is pending:
            del self._waiting[pending.key]
        if not pending.future.done():
            pending.future.cancel()

    def feed(self, channel_id: int, author_id: int, content: str | None) -> bool:
        """Offer an inbound message. Returns True if a waiter consumed it."""
        text = (content or "").strip()
        if not text:
            return False
        pending = self._waiting.pop((channel_id, author_id), None)
        if pending is None:
            return False
        if pending.future.done():
            return False
        pending.future.set_result(text)
        return True
