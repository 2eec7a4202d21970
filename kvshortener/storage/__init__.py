"""
Key-value storage module.

This module implements the Strategy Pattern for the embedded transactional
store that holds all of the shortener's state, plus the key schema and the
binary codec of the persisted values.
"""

from .strategies import (
    Transaction,
    KeyValueStore,
    SQLiteKeyValueStore,
    InMemoryKeyValueStore,
)
from .factory import KeyValueStoreFactory, StoreBackend

__all__ = [
    "Transaction",
    "KeyValueStore",
    "SQLiteKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStoreFactory",
    "StoreBackend",
]
