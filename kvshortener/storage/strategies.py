"""
Key-value store strategies using Strategy Pattern.

Allows switching between different embedded engines:
- SQLite (via SQLAlchemy): persistent, default
- In-memory: development/testing

Both expose the same transactional interface: read-only ``view`` and
read-write ``update`` context managers yielding a ``Transaction`` with
get/set/delete. All writes of a transaction are applied together on
commit or not at all.
"""

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import ContextManager, Dict, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from kvshortener.database.connection import Base, READONLY_OPTION, create_kv_engine
from kvshortener.exceptions import DataStoreError, ReadOnlyTransactionError
from kvshortener.models.kv import KVEntry

logger = logging.getLogger(__name__)


class Transaction(ABC):
    """
    A single transaction against the key-value store.

    Keys are strings (UTF-8 on disk), values are bytes.
    Reads observe the transaction's own earlier writes.
    """

    def __init__(self, readonly: bool):
        self.readonly = readonly

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        """Return the value stored under key, or None if absent"""
        pass

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Store value under key (insert or overwrite)"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present"""
        pass

    def _check_writable(self, key: str):
        if self.readonly:
            raise ReadOnlyTransactionError(f"Cannot write '{key}' in a read-only transaction")


class KeyValueStore(ABC):
    """
    Abstract base class for key-value store strategies.

    Usage:
        with store.update("assigning short code") as txn:
            txn.set("url:abcd", b"https://example.com")

    The operation label is used to give store failures context:
    any engine error surfaces as DataStoreError("... while <operation>").

    Pattern: Strategy Pattern
    """

    @abstractmethod
    def view(self, operation: str) -> ContextManager[Transaction]:
        """Open a read-only transaction"""
        pass

    @abstractmethod
    def update(self, operation: str) -> ContextManager[Transaction]:
        """Open a read-write transaction, committed when the block exits cleanly"""
        pass

    def close(self) -> None:
        """Release engine resources"""
        pass


class SQLiteTransaction(Transaction):
    """Transaction backed by a SQLAlchemy session on the kv table"""

    def __init__(self, session: Session, readonly: bool):
        super().__init__(readonly)
        self.session = session

    def get(self, key: str) -> Optional[bytes]:
        entry = self.session.get(KVEntry, key.encode("utf-8"))
        return None if entry is None else entry.value

    def set(self, key: str, value: bytes) -> None:
        self._check_writable(key)
        self.session.merge(KVEntry(key=key.encode("utf-8"), value=value))
        self.session.flush()

    def delete(self, key: str) -> None:
        self._check_writable(key)
        entry = self.session.get(KVEntry, key.encode("utf-8"))
        if entry is not None:
            self.session.delete(entry)
            self.session.flush()


class SQLiteKeyValueStore(KeyValueStore):
    """
    SQLite implementation of the key-value store.

    Pros:
    - Zero configuration (single file, no server)
    - ACID transactions, crash-safe
    - Ordered keys via the primary key B-tree

    Cons:
    - One writer at a time (writers queue on the busy timeout)
    - Not distributed
    """

    def __init__(self, db_path: str = "kvshortener.db", busy_timeout: float = 30.0):
        """
        Open (and create if needed) the key-value file.

        Args:
            db_path: Path to SQLite database file
            busy_timeout: Seconds a writer waits for a competing writer

        Raises:
            DataStoreError: If the database file cannot be opened
        """
        self.db_path = db_path
        self.engine = create_kv_engine(db_path, busy_timeout)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            self.engine.dispose()
            raise DataStoreError(f"Couldn't open key-value store at {db_path}") from e
        logger.info("SQLite key-value store opened at %s", db_path)

    @contextmanager
    def _transaction(self, operation: str, readonly: bool) -> Iterator[Transaction]:
        session = self.SessionLocal()
        try:
            # Must be the first call in the session: the begin hook reads it
            session.connection(execution_options={READONLY_OPTION: readonly})
            yield SQLiteTransaction(session, readonly)
            if readonly:
                session.rollback()
            else:
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise DataStoreError(f"Key-value store failure while {operation}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def view(self, operation: str) -> ContextManager[Transaction]:
        return self._transaction(operation, readonly=True)

    def update(self, operation: str) -> ContextManager[Transaction]:
        return self._transaction(operation, readonly=False)

    def close(self) -> None:
        self.engine.dispose()
        logger.info("SQLite key-value store at %s closed", self.db_path)


class InMemoryTransaction(Transaction):
    """Transaction that buffers writes until commit"""

    _DELETED = object()

    def __init__(self, data: Dict[str, bytes], readonly: bool):
        super().__init__(readonly)
        self._data = data
        self._pending: Dict[str, object] = {}

    def get(self, key: str) -> Optional[bytes]:
        if key in self._pending:
            value = self._pending[key]
            return None if value is self._DELETED else value
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._check_writable(key)
        self._pending[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._check_writable(key)
        self._pending[key] = self._DELETED

    def commit(self) -> None:
        for key, value in self._pending.items():
            if value is self._DELETED:
                self._data.pop(key, None)
            else:
                self._data[key] = value
        self._pending.clear()


class InMemoryKeyValueStore(KeyValueStore):
    """
    In-memory key-value store using a Python dict.

    Pros:
    - Simple (no files)
    - Fast
    - Good for development and testing

    Cons:
    - Not persistent (lost on restart)
    - Transactions are fully serialized by one lock
    """

    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._lock = threading.RLock()

    @contextmanager
    def _transaction(self, operation: str, readonly: bool) -> Iterator[Transaction]:
        with self._lock:
            txn = InMemoryTransaction(self._data, readonly)
            yield txn
            if not readonly:
                txn.commit()

    def view(self, operation: str) -> ContextManager[Transaction]:
        return self._transaction(operation, readonly=True)

    def update(self, operation: str) -> ContextManager[Transaction]:
        return self._transaction(operation, readonly=False)

    def close(self) -> None:
        self._data.clear()
