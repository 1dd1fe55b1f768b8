"""
Identity derivation from secp256k1 public keys.

A peer identity is a two-stage hash of the public key:

    1. address = keccak256(x || y)[-20:]     (Ethereum account address)
    2. digest  = sha3_256(address)
    3. id      = multihash(sha3-256, digest)

The address step is what ties a peer to its Ethereum account. Collapsing
the two stages into one hash changes every identity ever derived, so the
`ADDRESS` scheme is the default and the one peers must agree on.

The `DIRECT` scheme skips the address step and hashes the 64-byte key
itself. It exists for deployments whose keys have no account address;
identities from the two schemes never match.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from enum import Enum
from typing import Final

from Crypto.Hash import keccak

from peer_identity import config
from peer_identity.keys import COMPRESSED_PUBKEY_SIZE, RAW_PUBKEY_SIZE, Secp256k1PublicKey
from peer_identity.multihash import MultihashCode, encode
from peer_identity.types import MalformedKeyError

__all__ = [
    "DerivationScheme",
    "address_to_id",
    "address_to_id_async",
    "keccak256",
    "public_key_to_address",
    "public_key_to_id",
    "public_key_to_id_async",
    "sha3_256",
]

logger = logging.getLogger(__name__)

ADDRESS_SIZE: Final = 20


class DerivationScheme(Enum):
    """How a public key is reduced before the final sha3-256."""

    ADDRESS = "address"
    DIRECT = "direct"


def keccak256(data: bytes) -> bytes:
    """Original Keccak-256 (Ethereum), not the padded NIST SHA3-256."""
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


def sha3_256(data: bytes) -> bytes:
    """NIST SHA3-256."""
    return hashlib.sha3_256(data).digest()


def _raw_public_key(public_key_bytes: bytes) -> bytes:
    """Normalise a public key to the 64-byte x || y coordinates."""
    public_key_bytes = bytes(public_key_bytes)

    if len(public_key_bytes) == RAW_PUBKEY_SIZE:
        return public_key_bytes

    if len(public_key_bytes) == RAW_PUBKEY_SIZE + 1 and public_key_bytes[0] == 0x04:
        return public_key_bytes[1:]

    if len(public_key_bytes) == COMPRESSED_PUBKEY_SIZE:
        return Secp256k1PublicKey.from_bytes(public_key_bytes).to_uncompressed_bytes()

    raise MalformedKeyError(
        f"Expected a 33, 64 or 65 byte secp256k1 public key, got {len(public_key_bytes)} bytes"
    )


def public_key_to_address(public_key_bytes: bytes) -> bytes:
    """
    Compute the 20-byte Ethereum address of a public key.

    Args:
        public_key_bytes: Compressed (33), uncompressed (65) or raw (64) key.

    Raises:
        MalformedKeyError: If the key has the wrong length or is not on the curve.
    """
    return keccak256(_raw_public_key(public_key_bytes))[-ADDRESS_SIZE:]


def address_to_id(address: bytes) -> bytes:
    """Hash an address (or any address-equivalent value) into identity bytes."""
    return encode(MultihashCode.SHA3_256, sha3_256(address))


def public_key_to_id(
    public_key_bytes: bytes,
    scheme: DerivationScheme | None = None,
) -> bytes:
    """
    Derive identity bytes from a public key.

    Args:
        public_key_bytes: Compressed (33), uncompressed (65) or raw (64) key.
        scheme: Derivation scheme; defaults to the configured `PEER_ID_SCHEME`.

    Returns:
        Multihash-encoded sha3-256 identity (34 bytes).

    Raises:
        MalformedKeyError: If the public key is invalid.
    """
    if scheme is None:
        scheme = DerivationScheme(config.PEER_ID_SCHEME)

    if scheme is DerivationScheme.ADDRESS:
        peer_id = address_to_id(public_key_to_address(public_key_bytes))
    else:
        peer_id = address_to_id(_raw_public_key(public_key_bytes))

    logger.debug("Derived peer id %s (%s scheme)", peer_id.hex(), scheme.value)
    return peer_id


async def public_key_to_id_async(
    public_key_bytes: bytes,
    scheme: DerivationScheme | None = None,
) -> bytes:
    """Run `public_key_to_id` in a worker thread."""
    return await asyncio.to_thread(public_key_to_id, public_key_bytes, scheme)


async def address_to_id_async(address: bytes) -> bytes:
    """Run `address_to_id` in a worker thread."""
    return await asyncio.to_thread(address_to_id, address)
