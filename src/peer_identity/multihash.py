"""
Multihash encoding for peer identities.

A multihash is a self-describing digest:

    [code (1 byte)][length (1 byte)][digest]

The code names the hash function, so parsers keep working when the
derivation moves to a different function. Peer identities are always
produced with sha3-256 (code 0x16, 32-byte digest), but any registered
code is accepted when decoding.

Textual forms cover the whole multihash, header included:
    - hex: lowercase, no prefix
    - base58: Bitcoin alphabet

References:
    - https://github.com/multiformats/multihash
    - https://github.com/multiformats/multicodec/blob/master/table.csv
"""

from __future__ import annotations

import binascii
import hashlib
from dataclasses import dataclass
from enum import IntEnum
from typing import Final

from peer_identity.types import DecodingError, EncodingError, InvalidInputError

__all__ = [
    "Base58",
    "Multihash",
    "MultihashCode",
    "decode",
    "encode",
    "from_base58",
    "from_hex",
    "to_base58",
    "to_hex",
]

MAX_DIGEST_LENGTH: Final = 255
"""The length prefix is a single byte."""

_HEADER_SIZE: Final = 2


class MultihashCode(IntEnum):
    """
    Registered hash function codes.

    Only codes that fit a single byte are listed; the header layout
    has no room for longer ones.
    """

    IDENTITY = 0x00
    SHA1 = 0x11
    SHA2_256 = 0x12
    SHA2_512 = 0x13
    SHA3_512 = 0x14
    SHA3_384 = 0x15
    SHA3_256 = 0x16
    """Function used for every identity this package derives."""
    SHA3_224 = 0x17
    KECCAK_224 = 0x1A
    KECCAK_256 = 0x1B
    KECCAK_384 = 0x1C
    KECCAK_512 = 0x1D
    SHA2_384 = 0x20

    @property
    def label(self) -> str:
        """Canonical multihash table name, e.g. "sha3-256"."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def from_name(cls, name: str) -> MultihashCode:
        """
        Look up a code by its multihash table name.

        Raises:
            EncodingError: If no registered function has that name.
        """
        for code in cls:
            if code.label == name.lower():
                return code
        raise EncodingError(f"Unknown hash function: {name!r}")


class Base58:
    """
    Base58 encoding/decoding (Bitcoin-style alphabet).

    Base58 excludes visually ambiguous characters (0, O, I, l) making it
    suitable for human-readable identifiers.
    """

    ALPHABET: Final[str] = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

    @classmethod
    def encode(cls, data: bytes) -> str:
        """Encode bytes; each leading zero byte becomes a leading '1'."""
        leading_zeros = len(data) - len(data.lstrip(b"\x00"))

        num = int.from_bytes(data, "big")
        chars: list[str] = []
        while num > 0:
            num, remainder = divmod(num, 58)
            chars.append(cls.ALPHABET[remainder])

        chars.extend(cls.ALPHABET[0] * leading_zeros)
        return "".join(reversed(chars))

    @classmethod
    def decode(cls, s: str) -> bytes:
        """
        Decode a Base58 string; each leading '1' becomes a zero byte.

        Raises:
            DecodingError: If the string contains a character outside the alphabet.
        """
        leading_ones = len(s) - len(s.lstrip(cls.ALPHABET[0]))

        num = 0
        for char in s:
            index = cls.ALPHABET.find(char)
            if index < 0:
                raise DecodingError("base58", f"invalid character {char!r}")
            num = num * 58 + index

        body = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
        return b"\x00" * leading_ones + body


@dataclass(frozen=True, slots=True)
class Multihash:
    """
    A digest tagged with the hash function that produced it.

    Attributes:
        code: Hash function identifier.
        digest: Hash output.
    """

    code: MultihashCode
    digest: bytes

    def encode(self) -> bytes:
        """Serialize as `[code][length][digest]`."""
        return encode(self.code, self.digest)

    @classmethod
    def decode(cls, data: bytes) -> Multihash:
        """Parse serialized multihash bytes."""
        return decode(data)

    @classmethod
    def sha3_256(cls, data: bytes) -> Multihash:
        """Hash `data` with sha3-256 and tag the result."""
        return cls(code=MultihashCode.SHA3_256, digest=hashlib.sha3_256(data).digest())


def encode(code: int, digest: bytes) -> bytes:
    """
    Encode a digest as multihash bytes.

    Args:
        code: Registered hash function code.
        digest: Hash output, at most 255 bytes.

    Returns:
        `[code][len(digest)][digest]`.

    Raises:
        EncodingError: If the code is unregistered or the digest is too long.
    """
    try:
        code = MultihashCode(code)
    except ValueError as e:
        raise EncodingError(f"Unknown hash function code: {code!r}") from e

    if len(digest) > MAX_DIGEST_LENGTH:
        raise EncodingError(
            f"Digest too large for single-byte length: {len(digest)} > {MAX_DIGEST_LENGTH}"
        )

    return bytes([code, len(digest)]) + bytes(digest)


def decode(data: bytes) -> Multihash:
    """
    Parse multihash bytes.

    The buffer must hold exactly the header plus the declared digest length.

    Raises:
        DecodingError: If the buffer is truncated, oversized or uses an unknown code.
        InvalidInputError: If `data` is not bytes-like.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise InvalidInputError("multihash bytes", data)
    if len(data) < _HEADER_SIZE:
        raise DecodingError("multihash", f"need at least {_HEADER_SIZE} bytes, got {len(data)}")

    raw_code, length = data[0], data[1]
    try:
        code = MultihashCode(raw_code)
    except ValueError as e:
        raise DecodingError("multihash", f"unknown hash function code 0x{raw_code:02x}") from e

    digest = bytes(data[_HEADER_SIZE:])
    if len(digest) != length:
        raise DecodingError(
            "multihash", f"declared digest length {length}, found {len(digest)} bytes"
        )

    return Multihash(code=code, digest=digest)


def to_hex(data: bytes) -> str:
    """Lowercase hex, no prefix."""
    return bytes(data).hex()


def from_hex(s: str) -> bytes:
    """
    Decode a hex string (either case).

    Raises:
        DecodingError: If the string is not valid hex.
        InvalidInputError: If `s` is not a string.
    """
    if not isinstance(s, str):
        raise InvalidInputError("a hex string", s)
    try:
        return binascii.unhexlify(s)
    except (binascii.Error, ValueError) as e:
        raise DecodingError("hex", str(e)) from e


def to_base58(data: bytes) -> str:
    """Base58 over the full multihash bytes."""
    return Base58.encode(bytes(data))


def from_base58(s: str) -> bytes:
    """
    Decode a base58 string.

    Raises:
        DecodingError: If the string contains invalid characters.
        InvalidInputError: If `s` is not a string.
    """
    if not isinstance(s, str):
        raise InvalidInputError("a base58 string", s)
    return Base58.decode(s)
