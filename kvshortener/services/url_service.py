from typing import Optional

from fastapi.concurrency import run_in_threadpool

from kvshortener.config import Settings
from kvshortener.models.stats import LinkStats
from kvshortener.queue.models import HitEvent
from kvshortener.queue.strategies import QueueStrategy
from kvshortener.services.registrar import Registrar
from kvshortener.services.settings_store import CodeLengthSetting
from kvshortener.services.short_code_strategies import ShortCodeStrategy
from kvshortener.services.stats_engine import StatsEngine
from kvshortener.storage import KeyValueStore
from kvshortener.storage import keys
from kvshortener.storage.codec import decode_string


class URLService:
    """
    URL Service with dependency injection for store and queue.

    This follows the Dependency Injection pattern:
    - Store, queue and code length cell are injected (not created internally)
    - Easy to test (inject an in-memory store / fake generator)

    Store calls are blocking, so they run in the threadpool and the
    event loop stays free for other requests.
    """

    def __init__(
        self,
        store: KeyValueStore,
        code_length: CodeLengthSetting,
        queue: Optional[QueueStrategy] = None,
        settings: Optional[Settings] = None,
        generator: Optional[ShortCodeStrategy] = None
    ):
        """
        Initialize URL service with dependencies.

        Args:
            store: Key-value store holding all state
            code_length: Shared code length cell (one per application)
            queue: Queue strategy for async hit tracking (optional)
            settings: Settings for retry budget and base URL
            generator: Short code strategy (random by default)
        """
        self.store = store
        self.queue = queue
        self.settings = settings or Settings()
        self.registrar = Registrar(
            store,
            code_length,
            generator=generator,
            max_trials=self.settings.max_trials,
            length_growth_trials=self.settings.length_growth_trials
        )
        self.stats = StatsEngine(store)

    def short_url(self, short_code: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}/{short_code}"

    async def create_short_url(self, long_url: bytes) -> str:
        """Create a new short URL, returns the assigned code

        Note: Always creates a new code even if the target already exists.

        Raises:
            GenerationExhaustedError: No free code within the retry budget
            DataStoreError: On key-value store failure
        """
        return await run_in_threadpool(self.registrar.assign, long_url)

    def _lookup(self, short_code: str) -> Optional[str]:
        with self.store.view("getting shortened url") as txn:
            target = txn.get(keys.url_key(short_code))
        return None if target is None else decode_string(target)

    async def get_long_url(self, short_code: str) -> Optional[str]:
        """Get the target of a short code without recording a hit"""
        return await run_in_threadpool(self._lookup, short_code)

    async def get_long_url_for_redirect(self, short_code: str) -> Optional[str]:
        """
        Get long URL for redirection and schedule hit tracking.

        Flow:
        1. Read the mapping (read-only transaction)
        2. If missing, return None - nothing is recorded
        3. Publish hit event to queue (never blocks, never fails the redirect)
        4. Return long URL

        The hit is applied later by the hit worker.
        """
        long_url = await self.get_long_url(short_code)
        if long_url is None:
            return None

        if self.queue:
            await self.queue.publish(HitEvent(short_code=short_code, target=long_url))

        return long_url

    async def get_url_stats(self, short_code: str) -> Optional[LinkStats]:
        """Get statistics for a short URL, None if it is not mapped"""
        return await run_in_threadpool(self.stats.stat, short_code)
