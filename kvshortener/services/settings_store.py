"""
Persisted tunables of the shortener.

There is one: the length of newly generated codes. It is read from the
store once at startup, cached here, and only ever grows. The Registrar
owns the growth; this cell owns the cached value, its lock and its
encoding in the store.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from kvshortener.constants import DEFAULT_CODE_LENGTH
from kvshortener.storage import KeyValueStore, Transaction
from kvshortener.storage import keys
from kvshortener.storage.codec import decode_uint64, encode_uint64

logger = logging.getLogger(__name__)


class CodeLengthSetting:
    """
    Cached, persisted code length.

    Invariants:
    - the cached value never decreases
    - the cached value is only raised after the transaction that persisted
      it has committed, so a rolled back growth is never observed
    """

    def __init__(self, default: int = DEFAULT_CODE_LENGTH):
        self.default = default
        self._value = default
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        return self._value

    @contextmanager
    def exclusive(self) -> Iterator[int]:
        """
        Hold the setting exclusively for a read-grow-persist sequence.

        Yields the current cached value.
        """
        with self._lock:
            yield self._value

    def load(self, store: KeyValueStore) -> int:
        """Initialize the cache from settings:last_length (default if absent)"""
        with store.view("loading code length setting") as txn:
            raw = txn.get(keys.code_length_key())
        with self._lock:
            self._value = self.default if raw is None else decode_uint64(raw)
        logger.info("Code length loaded: %d", self._value)
        return self._value

    def persist(self, txn: Transaction, length: int) -> None:
        """Write a new length inside the caller's read-write transaction"""
        txn.set(keys.code_length_key(), encode_uint64(length))

    def publish(self, length: int) -> None:
        """
        Update the cache after a successful commit.
        Must be called while holding exclusive().
        """
        if length > self._value:
            logger.info("Code length grown from %d to %d", self._value, length)
            self._value = length
