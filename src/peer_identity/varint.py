"""
Unsigned LEB128 varints for protobuf key records.

Marshaled keys are protobuf messages. Each field tag, the key type and
the key length are written as varints: 7 data bits per byte, low group
first, with the high bit set on every byte except the last.

Examples::

    0    -> 00
    33   -> 21          (compressed secp256k1 public key length)
    300  -> ac 02

References:
    https://protobuf.dev/programming-guides/encoding/#varints
"""

from __future__ import annotations

from typing import Final

MAX_VARINT_BYTES: Final = 10
"""A 64-bit value never needs more than 10 bytes."""


class VarintError(Exception):
    """Raised when a varint cannot be decoded."""


def encode_varint(value: int) -> bytes:
    """
    Encode a non-negative integer as a varint.

    Args:
        value: Integer to encode, at most 2^64 - 1.

    Returns:
        Encoded bytes (1 byte for values below 128).

    Raises:
        ValueError: If value is negative.
    """
    if value < 0:
        raise ValueError("Varint must be non-negative")

    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode a varint starting at `offset`.

    Args:
        data: Buffer holding the varint.
        offset: Position of the first varint byte.

    Returns:
        Tuple of (value, bytes_consumed).

    Raises:
        VarintError: If the buffer ends mid-varint or the varint is too long.
    """
    value = 0
    pos = offset

    for index in range(MAX_VARINT_BYTES):
        if pos >= len(data):
            raise VarintError("Truncated varint")

        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << (7 * index)

        if not byte & 0x80:
            return value, pos - offset

    raise VarintError("Varint too long")
