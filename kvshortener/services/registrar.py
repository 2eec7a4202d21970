"""
Short code assignment.

The Registrar finds an unused code for a target and persists the mapping,
all inside a single read-write transaction:

    for iteration in 1..max_trials:
        every length_growth_trials iterations -> length += 1 (persisted)
        candidate = random code of the current length
        if url:<candidate> is free -> store target, done

With the default budget (80) and threshold (50) the length grows at most
once per call, and the remaining iterations of that call use the new length.
If the budget runs out nothing is committed: no mapping and no length change.
"""

import logging
from typing import Optional

from kvshortener.constants import LENGTH_GROWTH_TRIALS, MAX_TRIALS
from kvshortener.exceptions import GenerationExhaustedError
from kvshortener.services.settings_store import CodeLengthSetting
from kvshortener.services.short_code_strategies import ShortCodeStrategy, RandomShortCodeStrategy
from kvshortener.storage import KeyValueStore
from kvshortener.storage import keys

logger = logging.getLogger(__name__)


class Registrar:
    """
    Assigns random short codes to targets.

    The code length cell is held exclusively for the whole transaction:
    growing the length is a read-modify-write of shared state, and two
    concurrent growths must not both apply.
    """

    def __init__(
        self,
        store: KeyValueStore,
        code_length: CodeLengthSetting,
        generator: Optional[ShortCodeStrategy] = None,
        max_trials: int = MAX_TRIALS,
        length_growth_trials: int = LENGTH_GROWTH_TRIALS
    ):
        self.store = store
        self.code_length = code_length
        self.generator = generator or RandomShortCodeStrategy()
        self.max_trials = max_trials
        self.length_growth_trials = length_growth_trials

    def assign(self, payload: bytes) -> str:
        """
        Map a new code to payload.

        Args:
            payload: Target URL bytes, stored verbatim

        Returns:
            The assigned code

        Raises:
            GenerationExhaustedError: If every candidate in the budget was taken
            DataStoreError: On key-value store failure
        """
        with self.code_length.exclusive() as length:
            with self.store.update("assigning short code") as txn:
                for iteration in range(1, self.max_trials + 1):
                    if iteration % self.length_growth_trials == 0:
                        length += 1
                        self.code_length.persist(txn, length)

                    short_code = self.generator.generate(length)
                    url_key = keys.url_key(short_code)

                    if txn.get(url_key) is None:
                        txn.set(url_key, payload)
                        break

                    logger.debug("Iteration %d: code %s already taken", iteration, short_code)
                else:
                    logger.warning(
                        "Failed to generate short code after %d attempts (length %d)",
                        self.max_trials, length
                    )
                    raise GenerationExhaustedError(
                        f"Could not generate unique short code after {self.max_trials} attempts"
                    )

            # Committed: the cache may now reflect the grown length
            self.code_length.publish(length)

        return short_code
