"""
Queue strategies using Strategy Pattern.
Decouples redirect handling from hit accounting.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List

from .models import HitEvent

logger = logging.getLogger(__name__)


class QueueStrategy(ABC):
    """
    Abstract base class for queue strategies.

    This is the Strategy Pattern interface - allows multiple queue implementations
    without changing the service/worker code.
    """

    @abstractmethod
    async def publish(self, message: HitEvent) -> bool:
        """
        Publish a message to the queue without blocking.

        Args:
            message: HitEvent to publish

        Returns:
            True if queued, False if the message was dropped
        """
        pass

    @abstractmethod
    async def consume(self, batch_size: int = 1, block_time: int = 1000) -> List[HitEvent]:
        """
        Consume messages from the queue.

        Args:
            batch_size: Maximum number of messages to retrieve
            block_time: Time to wait for the first message (milliseconds)

        Returns:
            List of HitEvent messages (empty on timeout)
        """
        pass

    @abstractmethod
    async def ack(self, count: int) -> None:
        """
        Acknowledge consumed messages (mark as processed).

        Args:
            count: Number of messages processed since the last ack
        """
        pass

    @abstractmethod
    async def get_queue_length(self) -> int:
        """Get the number of pending messages in queue"""
        pass


class InMemoryQueue(QueueStrategy):
    """
    Bounded in-memory queue implementation using asyncio.Queue.

    Pros:
    - Simple (no external dependencies)
    - Fast (no network overhead)
    - Bounded (memory cannot grow without limit)

    Cons:
    - Not persistent (pending hits are lost on crash)
    - Not distributed (each process has its own queue)

    When full, new hits are dropped: accounting is best-effort and must
    never slow down or fail a redirect.

    Must be created inside the event loop that will use it.
    """

    def __init__(self, maxsize: int = 10000):
        self.maxsize = maxsize
        self._queue: "asyncio.Queue[HitEvent]" = asyncio.Queue(maxsize=maxsize)
        self.dropped = 0

    async def publish(self, message: HitEvent) -> bool:
        """Add message to the queue, dropping it if the queue is full"""
        try:
            self._queue.put_nowait(message)
            return True
        except asyncio.QueueFull:
            self.dropped += 1
            logger.warning(
                "Hit queue full (%d), dropping hit for %s", self.maxsize, message.short_code
            )
            return False

    async def consume(self, batch_size: int = 1, block_time: int = 1000) -> List[HitEvent]:
        """Wait up to block_time for one message, then take what else is ready"""
        try:
            first = await asyncio.wait_for(self._queue.get(), timeout=block_time / 1000)
        except asyncio.TimeoutError:
            return []

        messages = [first]
        while len(messages) < batch_size:
            try:
                messages.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                break
        return messages

    def consume_nowait(self) -> List[HitEvent]:
        """Take every message currently queued"""
        messages = []
        while True:
            try:
                messages.append(self._queue.get_nowait())
            except asyncio.QueueEmpty:
                return messages

    async def ack(self, count: int) -> None:
        for _ in range(count):
            self._queue.task_done()

    async def join(self) -> None:
        """Wait until every published message has been acknowledged"""
        await self._queue.join()

    async def get_queue_length(self) -> int:
        return self._queue.qsize()
