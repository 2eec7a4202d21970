"""
SQLite engine setup for the key-value store.

SQLite is used purely as an embedded, transactional, ordered byte-string
engine: a single table of (key BLOB PRIMARY KEY, value BLOB).

pysqlite's own transaction handling defers BEGIN until the first write,
which would let reads inside a read-modify-write escape the transaction.
We switch it off and emit BEGIN ourselves:
- read-only transactions: BEGIN (deferred, snapshot in WAL mode)
- read-write transactions: BEGIN IMMEDIATE (takes the write lock up front,
  so concurrent writers queue on the busy timeout instead of deadlocking)
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Execution option consulted by the "begin" hook below
READONLY_OPTION = "kv_readonly"


def create_kv_engine(db_path: str, busy_timeout: float = 30.0) -> Engine:
    """
    Create a SQLAlchemy engine for the key-value file.

    Args:
        db_path: Path to the SQLite database file
        busy_timeout: Seconds a connection waits for a competing writer

    Returns:
        Engine with WAL journaling and explicit BEGIN handling
    """
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False, "timeout": busy_timeout},
    )

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Disable pysqlite's emitting of the BEGIN statement entirely
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        if conn.get_execution_options().get(READONLY_OPTION):
            conn.exec_driver_sql("BEGIN")
        else:
            conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine
