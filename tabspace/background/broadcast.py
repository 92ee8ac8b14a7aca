"""In-process publish/subscribe channel from the engine to UI clients.

Each UI client (popup, new-tab page, or the adapter relaying to them) holds
a ``Subscription`` with its own bounded queue.  Publishing never blocks the
engine: when a slow subscriber's queue is full the oldest snapshot is
dropped, since only the newest Model matters to a renderer.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from loguru import logger

from tabspace.background.models.messages import Broadcast


class Subscription:
    """A single client's view of the channel."""

    def __init__(self, channel: BroadcastChannel, maxsize: int) -> None:
        self._channel = channel
        self._queue: asyncio.Queue[Broadcast | None] = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def _offer(self, message: Broadcast | None) -> None:
        if self._queue.full():
            self._queue.get_nowait()
            logger.warning("Broadcast: subscriber backlog full, dropped oldest snapshot")
        self._queue.put_nowait(message)

    def pending(self) -> list[Broadcast]:
        """Drain and return every queued message without waiting."""
        messages: list[Broadcast] = []
        while not self._queue.empty():
            message = self._queue.get_nowait()
            if message is None:
                self.closed = True
            else:
                messages.append(message)
        return messages

    async def get(self) -> Broadcast | None:
        """Wait for the next message.  Returns ``None`` once the channel closes."""
        if self.closed and self._queue.empty():
            return None
        message = await self._queue.get()
        if message is None:
            self.closed = True
        return message

    def close(self) -> None:
        self._channel.unsubscribe(self)

    def __aiter__(self) -> AsyncIterator[Broadcast]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Broadcast]:
        while (message := await self.get()) is not None:
            yield message

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class BroadcastChannel:
    """Fan-out of engine broadcasts to every live subscription."""

    def __init__(self, maxsize: int = 100) -> None:
        self._maxsize = maxsize
        self._subscriptions: list[Subscription] = []

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._maxsize)
        self._subscriptions.append(subscription)
        logger.debug("Broadcast: subscriber added (total={})", len(self._subscriptions))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            subscription._offer(None)
            logger.debug("Broadcast: subscriber removed (total={})", len(self._subscriptions))

    def publish(self, message: Broadcast) -> int:
        """Deliver *message* to every subscriber.  Returns the number reached."""
        for subscription in self._subscriptions:
            subscription._offer(message)
        return len(self._subscriptions)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def close(self) -> None:
        """Close every subscription; pending ``get`` calls return ``None``."""
        for subscription in list(self._subscriptions):
            self.unsubscribe(subscription)
