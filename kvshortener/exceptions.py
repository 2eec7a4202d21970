"""Exceptions raised by the shortener core.

Classes:
    ShortenerError:
        Generic base class; the HTTP layer maps it to a 500 response.

    GenerationExhaustedError:
        Raised when the retry budget is spent without finding a free code.

    DataStoreError:
        Raised on any key-value engine failure (I/O, locking, transaction).
        The message names the operation that was in flight.

    ReadOnlyTransactionError:
        Raised when a write is attempted inside a read-only transaction.

    CodecError:
        Raised when a stored value cannot be decoded to its expected shape.

Example:
    >>> from kvshortener.exceptions import DataStoreError
    >>> raise DataStoreError("Key-value store failure while assigning short code")
    Traceback (most recent call last):
        ...
    kvshortener.exceptions.DataStoreError: Key-value store failure while assigning short code
"""


class ShortenerError(Exception):
    """Generic base class for shortener exceptions."""

    pass


class GenerationExhaustedError(ShortenerError):
    """Exception raised when no unused short code was found within the retry budget."""

    pass


class DataStoreError(ShortenerError):
    """Exception raised when there is an error in the key-value store.

    e.g. file cannot be opened, lock timeouts, failed commits, etc.
    """

    pass


class ReadOnlyTransactionError(DataStoreError):
    """Exception raised when writing through a read-only transaction."""

    pass


class CodecError(DataStoreError):
    """Exception raised when a stored value has an unexpected binary shape."""

    pass
