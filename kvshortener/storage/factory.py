"""
Factory for creating key-value store instances.
"""

import logging
from enum import Enum
from typing import Optional

from .strategies import KeyValueStore, SQLiteKeyValueStore, InMemoryKeyValueStore
from kvshortener.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class StoreBackend(Enum):
    """Available key-value store backends"""
    SQLITE = "sqlite"
    MEMORY = "memory"


class KeyValueStoreFactory:
    """
    Simple factory for creating key-value store instances.

    Gets configuration from settings (not passed as parameters).
    A store is owned by the application that created it and is closed in
    its lifespan, so instances are not cached here.
    """

    @classmethod
    def create(
        cls,
        backend: Optional[StoreBackend] = None,
        settings: Optional[Settings] = None
    ) -> KeyValueStore:
        """
        Create a key-value store.

        Args:
            backend: Type of store backend (from enum).
                     If None, uses value from settings.
            settings: Settings to read paths/timeouts from

        Returns:
            Opened key-value store

        Raises:
            ValueError: If backend is unknown
            DataStoreError: If the store cannot be opened
        """
        settings = settings or default_settings
        if backend is None:
            backend = StoreBackend(settings.store_backend)

        if backend == StoreBackend.SQLITE:
            return SQLiteKeyValueStore(
                db_path=settings.store_path,
                busy_timeout=settings.store_busy_timeout
            )

        elif backend == StoreBackend.MEMORY:
            logger.info("In-memory key-value store initialized")
            return InMemoryKeyValueStore()

        raise ValueError(f"Unknown store backend: {backend}")
