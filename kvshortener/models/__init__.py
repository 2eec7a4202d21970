"""
Data models for the URL shortener.

KVEntry is the only table: every entity (settings, mappings, counters,
hit logs) is a key-value pair. LinkStats is the read model returned
by the stats engine.
"""

from .kv import KVEntry
from .stats import LinkStats

__all__ = ["KVEntry", "LinkStats"]
