"""
Short code generation strategies for URL shortener.
Uses Strategy Pattern to allow different generation algorithms.
"""

import random
from abc import ABC, abstractmethod
from typing import Optional

from kvshortener.constants import CODE_ALPHABET


class ShortCodeStrategy(ABC):
    """Abstract base class for short code generation strategies"""

    @abstractmethod
    def generate(self, length: int) -> str:
        """
        Generate a candidate short code.

        Args:
            length: Number of characters in the code

        Returns:
            A candidate code (uniqueness is checked by the caller)
        """
        pass


class RandomShortCodeStrategy(ShortCodeStrategy):
    """
    Random generation strategy.
    Each character is drawn independently and uniformly from a
    64-symbol URL-safe alphabet (a-z, A-Z, 0-9, '-', '_').

    Pros: Simple, unpredictable, no coordination
    Cons: Collisions are possible and must be probed by the caller
    """

    def __init__(self, rng: Optional[random.Random] = None):
        # SystemRandom is thread-safe and not seedable/predictable
        self.rng = rng or random.SystemRandom()
        self.characters = CODE_ALPHABET

    def generate(self, length: int) -> str:
        """Generate random short code of the given length"""
        if length < 0:
            raise ValueError(f"Code length must be non-negative (given value: {length})")
        return ''.join(self.rng.choice(self.characters) for _ in range(length))
