"""
Hit accounting.

Per code the store keeps:
- hits:overall:<code>   all-time counter
- hits:weeklog:<code>   nanosecond timestamps of the hits of the last 7 days

Windowed counts are derived on read by comparing timestamps with now.
Pruning only happens on write; the read path ignores stale entries by the
same comparison, so a late prune costs space, never correctness.
"""

import logging
import time
from typing import Callable, Optional

from kvshortener.constants import DAY_NANOS, WEEK_NANOS
from kvshortener.models.stats import LinkStats
from kvshortener.storage import KeyValueStore, Transaction
from kvshortener.storage import keys
from kvshortener.storage.codec import (
    decode_string,
    decode_uint64,
    decode_uint64_list,
    encode_uint64,
    encode_uint64_list,
)

logger = logging.getLogger(__name__)


class StatsEngine:
    """Maintains and reads per-code hit statistics"""

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = time.time_ns):
        """
        Args:
            store: Key-value store holding counters and logs
            clock: Returns the current time as nanoseconds since the epoch
        """
        self.store = store
        self.clock = clock

    def increment_counter(self, txn: Transaction, short_code: str) -> int:
        """Add one to the all-time counter, returns the new value"""
        counter_key = keys.counter_key(short_code)
        raw = txn.get(counter_key)
        counter = (0 if raw is None else decode_uint64(raw)) + 1
        txn.set(counter_key, encode_uint64(counter))
        return counter

    def increment_week_log(self, txn: Transaction, short_code: str, now: int) -> int:
        """
        Append now to the week log and drop entries older than 7 days.

        Returns:
            Number of timestamps retained
        """
        week_log_key = keys.week_log_key(short_code)
        raw = txn.get(week_log_key)
        week_log = [] if raw is None else decode_uint64_list(raw)
        week_log.append(now)

        week_ago = now - WEEK_NANOS
        cleaned_week_log = [ts for ts in week_log if ts > week_ago]

        txn.set(week_log_key, encode_uint64_list(cleaned_week_log))
        return len(cleaned_week_log)

    def record_hit(self, short_code: str, now: Optional[int] = None) -> None:
        """
        Account one redirect of short_code.

        Counter and week log are updated in the same transaction, so they
        never disagree about whether a hit happened.
        """
        now = self.clock() if now is None else now
        with self.store.update("recording hit") as txn:
            self.increment_counter(txn, short_code)
            self.increment_week_log(txn, short_code, now)

    def stat(self, short_code: str, now: Optional[int] = None) -> Optional[LinkStats]:
        """
        Read the usage of short_code.

        Returns:
            LinkStats, or None if the code is not mapped
        """
        now = self.clock() if now is None else now
        with self.store.view("reading URL stats") as txn:
            target = txn.get(keys.url_key(short_code))
            if target is None:
                return None
            raw_counter = txn.get(keys.counter_key(short_code))
            raw_week_log = txn.get(keys.week_log_key(short_code))

        counter = 0 if raw_counter is None else decode_uint64(raw_counter)
        week_log = [] if raw_week_log is None else decode_uint64_list(raw_week_log)

        week_ago = now - WEEK_NANOS
        day_ago = now - DAY_NANOS
        week_counter = 0
        day_counter = 0
        for ts in week_log:
            if ts > week_ago:
                week_counter += 1
            if ts > day_ago:
                day_counter += 1

        return LinkStats(
            short_code=short_code,
            long_url=decode_string(target),
            total_hits=counter,
            weekly_hits=week_counter,
            daily_hits=day_counter,
        )
