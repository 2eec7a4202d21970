"""
Hit Processor Worker

This worker consumes hit events published by redirects and applies them
to the per-code counters through the stats engine.

Architecture:
- Runs as a background asyncio task inside the web application
- Consumes messages from the queue in batches
- Store writes run in the threadpool (they block on SQLite I/O)
- A failed hit is logged and dropped; the worker keeps going
"""

import asyncio
import logging
from typing import List

from fastapi.concurrency import run_in_threadpool

from kvshortener.queue.models import HitEvent
from kvshortener.queue.strategies import InMemoryQueue
from kvshortener.services.stats_engine import StatsEngine

logger = logging.getLogger(__name__)


class HitWorker:
    """
    Hit processor worker with batch processing.

    Features:
    - Batch consumption
    - Best-effort accounting (no retries, no delivery guarantee)
    - Drains pending hits on shutdown
    """

    def __init__(
        self,
        queue: InMemoryQueue,
        stats: StatsEngine,
        batch_size: int = 100,
        block_time: int = 1000
    ):
        """
        Initialize worker with dependencies.

        Args:
            queue: Queue to consume hit events from
            stats: Stats engine applying the hits
            batch_size: Maximum hits taken per round
            block_time: Poll wait in milliseconds
        """
        self.queue = queue
        self.stats = stats
        self.batch_size = batch_size
        self.block_time = block_time
        self.running = False
        self.processed_count = 0
        self.failed_count = 0

    async def start(self):
        """Start the worker loop (until stop() or cancellation)"""
        self.running = True
        logger.info("Hit worker started (batch size %d)", self.batch_size)

        while self.running:
            try:
                messages = await self.queue.consume(
                    batch_size=self.batch_size,
                    block_time=self.block_time
                )
                if messages:
                    await self._process_batch(messages)
            except asyncio.CancelledError:
                logger.debug("Hit worker task cancelled")
                break

        self.running = False
        logger.info(
            "Hit worker stopped (processed %d, failed %d)",
            self.processed_count, self.failed_count
        )

    async def drain(self):
        """Apply every hit still queued (used on shutdown)"""
        messages = self.queue.consume_nowait()
        if messages:
            logger.info("Draining %d pending hits", len(messages))
            await self._process_batch(messages)

    async def _process_batch(self, messages: List[HitEvent]):
        """Apply each hit in its own store transaction"""
        try:
            for hit in messages:
                try:
                    await run_in_threadpool(self.stats.record_hit, hit.short_code)
                    self.processed_count += 1
                    logger.debug(
                        "Hit for %s applied (redirect served at %s)",
                        hit.short_code, hit.timestamp.isoformat()
                    )
                except Exception:
                    # Accounting is best-effort: the redirect already succeeded
                    self.failed_count += 1
                    logger.exception("Failed during updating the stats for %s", hit.short_code)
        finally:
            await self.queue.ack(len(messages))

    def stop(self):
        """Stop the worker after the current round"""
        self.running = False
