"""
Message queue module for URL shortener.
Implements Strategy Pattern for flexible queue backends.
"""

from .strategies import QueueStrategy, InMemoryQueue
from .models import HitEvent

__all__ = [
    "QueueStrategy",
    "InMemoryQueue",
    "HitEvent",
]
