from sqlalchemy import Column, LargeBinary
from kvshortener.database.connection import Base


class KVEntry(Base):
    """
    One key-value pair of the flat keyspace.

    Keys are UTF-8 encoded strings namespaced by prefix
    (settings:, url:, hits:overall:, hits:weeklog:).
    Values are opaque bytes, shaped by kvshortener.storage.codec.
    The primary key index keeps the keyspace ordered.
    """
    __tablename__ = "kv"

    key = Column(LargeBinary, primary_key=True)
    value = Column(LargeBinary, nullable=False)
