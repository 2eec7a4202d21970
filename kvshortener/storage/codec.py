"""Binary value shapes persisted in the key-value store.

- uint64: 8 bytes, big-endian, unsigned
- string: raw UTF-8 bytes
- uint64 list: flat concatenation of 8-byte big-endian unsigned integers,
  in append order

Example:
    >>> encode_uint64(4)
    b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x04'
    >>> decode_uint64_list(encode_uint64_list([1, 2]))
    [1, 2]
"""

import struct
from typing import Iterable, List

from kvshortener.exceptions import CodecError

UINT64 = struct.Struct(">Q")
UINT64_MAX = 2**64 - 1


def encode_uint64(value: int) -> bytes:
    try:
        return UINT64.pack(value)
    except struct.error as e:
        raise CodecError(f"Value {value!r} does not fit in an unsigned 64-bit integer") from e


def decode_uint64(raw: bytes) -> int:
    if len(raw) != UINT64.size:
        raise CodecError(f"Expected {UINT64.size} bytes for uint64, got {len(raw)}")
    return UINT64.unpack(raw)[0]


def encode_string(value: str) -> bytes:
    return value.encode("utf-8")


def decode_string(raw: bytes) -> str:
    # Targets are stored verbatim, so undecodable bytes are replaced rather than rejected
    return raw.decode("utf-8", errors="replace")


def encode_uint64_list(values: Iterable[int]) -> bytes:
    values = list(values)
    try:
        return struct.pack(f">{len(values)}Q", *values)
    except struct.error as e:
        raise CodecError("List contains a value outside the unsigned 64-bit range") from e


def decode_uint64_list(raw: bytes) -> List[int]:
    if len(raw) % UINT64.size:
        raise CodecError(f"uint64 list length {len(raw)} is not a multiple of {UINT64.size}")
    return [value for (value,) in UINT64.iter_unpack(raw)]
