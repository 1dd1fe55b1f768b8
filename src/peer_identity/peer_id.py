"""
Peer identities.

A `PeerIdentity` pairs the identity bytes (a sha3-256 multihash, see
`derivation`) with the key material it was derived from, when known.

Construction paths:
    - generate:           fresh key pair, full triple
    - from_private_key:   marshaled private key, full triple
    - from_public_key:    marshaled public key, no private key
    - from_address:       sha3-256 of a raw address, no keys
    - from_encoded:       existing id in binary, hex or base58, no keys
    - from_json:          persisted record, keys cross-checked against the id

Every path that hashes has an `_async` twin that runs the hashing in a
worker thread.

Persisted record (go-ipfs config layout)::

    {"id": "<base58>", "privKey": "<base64 protobuf>", "pubKey": "<base64 protobuf>"}
"""

from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any, Final

from pydantic import ValidationError

from peer_identity import multihash
from peer_identity.derivation import (
    address_to_id,
    address_to_id_async,
    public_key_to_id,
    public_key_to_id_async,
)
from peer_identity.keys import (
    Secp256k1PrivateKey,
    Secp256k1PublicKey,
    generate_key_pair,
    unmarshal_private_key,
    unmarshal_public_key,
)
from peer_identity.types import (
    ConsistencyError,
    DecodingError,
    InvalidInputError,
    KeyMismatchError,
    MalformedKeyError,
    StrictBaseModel,
)

__all__ = [
    "PeerIdentity",
    "PeerIdentityRecord",
    "is_peer_identity",
]

logger = logging.getLogger(__name__)

LEGACY_PREFIX: Final = "Qm"
"""Base58 prefix of every sha2-256 multihash; carries no information."""

DISPLAY_LENGTH: Final = 6
"""Characters of the base58 id kept by the short display form."""


class PeerIdentityRecord(StrictBaseModel):
    """JSON record of a peer identity. Absent keys are omitted on output."""

    id: str
    """Base58 identity multihash."""

    priv_key: str | None = None
    """Base64 marshaled private key (serialized as `privKey`)."""

    pub_key: str | None = None
    """Base64 marshaled public key (serialized as `pubKey`)."""


def _key_bytes(key: bytes | str, what: str) -> bytes:
    """Accept raw marshaled bytes or their base64 text."""
    if isinstance(key, str):
        try:
            return base64.b64decode(key, validate=True)
        except ValueError as e:
            raise MalformedKeyError(f"{what} is not valid base64: {e}") from e
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise InvalidInputError(f"{what} as bytes or a base64 string", key)


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class PeerIdentity:
    """
    An immutable peer identity.

    Equality and hashing use the identity bytes only, and a
    `PeerIdentity` compares equal to its raw identity bytes.

    Attributes:
        id: Identity multihash bytes.
        private_key: Private key, when this is a local peer.
        public_key: Public key; filled from `private_key` when omitted.
    """

    id: bytes
    private_key: Secp256k1PrivateKey | None = None
    public_key: Secp256k1PublicKey | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, (bytes, bytearray)):
            raise InvalidInputError("identity bytes", self.id)
        object.__setattr__(self, "id", bytes(self.id))

        if self.private_key is None:
            return
        derived = self.private_key.public_key
        if self.public_key is None:
            object.__setattr__(self, "public_key", derived)
        elif derived != self.public_key:
            raise KeyMismatchError("Private key does not match the public key")

    # ========================================================================
    # Construction
    # ========================================================================

    @classmethod
    def generate(cls) -> PeerIdentity:
        """Create an identity for a freshly generated secp256k1 key pair."""
        private_key, public_key = generate_key_pair()
        peer = cls(public_key_to_id(public_key.to_bytes()), private_key, public_key)
        logger.debug("Generated peer identity %s", peer)
        return peer

    @classmethod
    async def generate_async(cls) -> PeerIdentity:
        """Key generation and hashing in a worker thread."""
        return await asyncio.to_thread(cls.generate)

    @classmethod
    def from_private_key(cls, key: bytes | str) -> PeerIdentity:
        """
        Create an identity from a marshaled private key.

        Args:
            key: libp2p protobuf private key, raw or base64.

        Raises:
            MalformedKeyError: If the key cannot be unmarshaled.
            InvalidInputError: If `key` is neither bytes nor str.
        """
        private_key = unmarshal_private_key(_key_bytes(key, "private key"))
        public_key = private_key.public_key
        return cls(public_key_to_id(public_key.to_bytes()), private_key, public_key)

    @classmethod
    async def from_private_key_async(cls, key: bytes | str) -> PeerIdentity:
        """`from_private_key` with the hashing in a worker thread."""
        private_key = unmarshal_private_key(_key_bytes(key, "private key"))
        public_key = private_key.public_key
        peer_id = await public_key_to_id_async(public_key.to_bytes())
        return cls(peer_id, private_key, public_key)

    @classmethod
    def from_public_key(cls, key: bytes | str) -> PeerIdentity:
        """
        Create an identity from a marshaled public key.

        Args:
            key: libp2p protobuf public key, raw or base64.

        Raises:
            MalformedKeyError: If the key cannot be unmarshaled.
            InvalidInputError: If `key` is neither bytes nor str.
        """
        public_key = unmarshal_public_key(_key_bytes(key, "public key"))
        return cls(public_key_to_id(public_key.to_bytes()), None, public_key)

    @classmethod
    async def from_public_key_async(cls, key: bytes | str) -> PeerIdentity:
        """`from_public_key` with the hashing in a worker thread."""
        public_key = unmarshal_public_key(_key_bytes(key, "public key"))
        peer_id = await public_key_to_id_async(public_key.to_bytes())
        return cls(peer_id, None, public_key)

    @classmethod
    def from_address(cls, address: bytes) -> PeerIdentity:
        """
        Create a keyless identity from an address-equivalent value.

        The keccak address step is skipped: the id is sha3-256 of `address`.
        """
        if not isinstance(address, (bytes, bytearray)):
            raise InvalidInputError("address bytes", address)
        return cls(address_to_id(bytes(address)))

    @classmethod
    async def from_address_async(cls, address: bytes) -> PeerIdentity:
        """`from_address` with the hashing in a worker thread."""
        if not isinstance(address, (bytes, bytearray)):
            raise InvalidInputError("address bytes", address)
        return cls(await address_to_id_async(bytes(address)))

    @classmethod
    def from_bytes(cls, data: bytes) -> PeerIdentity:
        """
        Wrap existing identity bytes.

        Raises:
            DecodingError: If `data` is not a well-formed multihash.
            InvalidInputError: If `data` is not bytes-like.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise InvalidInputError("identity bytes", data)
        multihash.decode(data)
        return cls(bytes(data))

    @classmethod
    def from_hex(cls, s: str) -> PeerIdentity:
        """
        Parse a hex-encoded identity.

        Raises:
            DecodingError: If `s` is not hex or not a well-formed multihash.
            InvalidInputError: If `s` is not a string.
        """
        if not isinstance(s, str):
            raise InvalidInputError("a hex identity string", s)
        return cls.from_bytes(multihash.from_hex(s))

    @classmethod
    def from_base58(cls, s: str) -> PeerIdentity:
        """
        Parse a base58-encoded identity.

        Raises:
            DecodingError: If `s` is not base58 or not a well-formed multihash.
            InvalidInputError: If `s` is not a string.
        """
        if not isinstance(s, str):
            raise InvalidInputError("a base58 identity string", s)
        return cls.from_bytes(multihash.from_base58(s))

    @classmethod
    def from_encoded(cls, value: bytes | str) -> PeerIdentity:
        """
        Parse an identity given as bytes, hex or base58.

        A string that hex-decodes to a valid multihash is read as hex;
        any other string is read as base58. Some base58 strings use only
        hex digits (e.g. "1611" followed by 34 "a"s) and are then read as
        hex. Use `from_base58` or `from_hex` when the form is known.

        Raises:
            DecodingError: If the value is not a well-formed identity.
            InvalidInputError: If `value` is neither bytes nor str.
        """
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.from_bytes(bytes(value))
        if not isinstance(value, str):
            raise InvalidInputError("identity bytes or string", value)

        try:
            return cls.from_hex(value)
        except DecodingError:
            return cls.from_base58(value)

    @classmethod
    def from_json(cls, obj: Mapping[str, Any] | str | bytes) -> PeerIdentity:
        """
        Rebuild an identity from its JSON record.

        When a private key is present, the identity derived from it and the
        identity derived from the public key must both equal `id`, and the
        private key must own the public key.

        Args:
            obj: Parsed record or JSON text.

        Raises:
            ConsistencyError: If the id and keys disagree.
            DecodingError: If `id` is not a base58 multihash.
            MalformedKeyError: If a key cannot be unmarshaled.
            InvalidInputError: If the record has the wrong shape.
        """
        peer_id, private_key, public_key = _load_record(obj)
        if private_key is None:
            return cls(peer_id, None, public_key)

        if public_key is None:
            public_key = private_key.public_key
        private_id = public_key_to_id(private_key.public_key.to_bytes())
        public_id = public_key_to_id(public_key.to_bytes())

        _check_consistency(peer_id, private_key, public_key, private_id, public_id)
        return cls(peer_id, private_key, public_key)

    @classmethod
    async def from_json_async(cls, obj: Mapping[str, Any] | str | bytes) -> PeerIdentity:
        """`from_json` with both derivations awaited concurrently."""
        peer_id, private_key, public_key = _load_record(obj)
        if private_key is None:
            return cls(peer_id, None, public_key)

        if public_key is None:
            public_key = private_key.public_key
        private_id, public_id = await asyncio.gather(
            public_key_to_id_async(private_key.public_key.to_bytes()),
            public_key_to_id_async(public_key.to_bytes()),
        )

        _check_consistency(peer_id, private_key, public_key, private_id, public_id)
        return cls(peer_id, private_key, public_key)

    # ========================================================================
    # Key attachment
    # ========================================================================

    def with_private_key(self, private_key: Secp256k1PrivateKey | None) -> PeerIdentity:
        """
        Return a copy with `private_key` attached.

        Raises:
            KeyMismatchError: If it does not own the attached public key.
        """
        return replace(self, private_key=private_key)

    def with_public_key(self, public_key: Secp256k1PublicKey | None) -> PeerIdentity:
        """
        Return a copy with `public_key` attached.

        Raises:
            KeyMismatchError: If it does not belong to the attached private key.
        """
        return replace(self, public_key=public_key)

    # ========================================================================
    # Encoding
    # ========================================================================

    def to_bytes(self) -> bytes:
        """Raw identity multihash bytes."""
        return self.id

    def to_hex(self) -> str:
        """Lowercase hex of the full multihash, header included."""
        return multihash.to_hex(self.id)

    def to_base58(self) -> str:
        """
        Base58 of the full multihash.

        Returns:
            Canonical string form, as used in the JSON record `id`.
        """
        return multihash.to_base58(self.id)

    def to_display_string(self) -> str:
        """
        Short form for logs, e.g. `<peer.ID Xoypiz>`.

        The legacy "Qm" prefix is dropped before truncating.
        """
        pid = self.to_base58()
        if pid.startswith(LEGACY_PREFIX):
            pid = pid[len(LEGACY_PREFIX) :]
        return f"<peer.ID {pid[:DISPLAY_LENGTH]}>"

    def marshal_public_key(self) -> bytes | None:
        """libp2p protobuf of the public key, matching go-ipfs formatting."""
        return self.public_key.marshal() if self.public_key is not None else None

    def marshal_private_key(self) -> bytes | None:
        """libp2p protobuf of the private key, matching go-ipfs formatting."""
        return self.private_key.marshal() if self.private_key is not None else None

    def to_record(self) -> PeerIdentityRecord:
        """
        Build the JSON record model.

        Returns:
            Record with the base58 id and the base64 marshaled keys that are attached.
        """
        priv = self.marshal_private_key()
        pub = self.marshal_public_key()
        return PeerIdentityRecord(
            id=self.to_base58(),
            priv_key=base64.b64encode(priv).decode() if priv is not None else None,
            pub_key=base64.b64encode(pub).decode() if pub is not None else None,
        )

    def to_json(self) -> dict[str, str]:
        """JSON-ready record: `id`, plus `privKey`/`pubKey` when present."""
        return self.to_record().model_dump(by_alias=True, exclude_none=True)

    def to_json_string(self) -> str:
        """`to_json` serialized as compact JSON text."""
        return self.to_record().model_dump_json(by_alias=True, exclude_none=True)

    # ========================================================================
    # Comparison
    # ========================================================================

    def validate(self) -> None:
        """
        Check that a private key is attached and owns the public key.

        Raises:
            KeyMismatchError: If there is no private key or the keys differ.
        """
        if self.private_key is None:
            raise KeyMismatchError("Keys not match: no private key attached")
        if self.public_key is None or self.private_key.public_key != self.public_key:
            raise KeyMismatchError("Keys not match: private key does not own the public key")

    def is_equal(self, other: PeerIdentity | bytes) -> bool:
        """
        Compare identity bytes with another identity or a raw buffer.

        Raises:
            InvalidInputError: If `other` is neither.
        """
        if isinstance(other, (PeerIdentity, bytes, bytearray)):
            return self == other
        raise InvalidInputError("a PeerIdentity or identity bytes", other)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, PeerIdentity):
            return self.id == other.id
        if isinstance(other, (bytes, bytearray)):
            return self.id == bytes(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.to_base58()

    def __repr__(self) -> str:
        return self.to_display_string()


def is_peer_identity(obj: object) -> bool:
    """Return True when `obj` is a `PeerIdentity`, not merely its bytes."""
    return isinstance(obj, PeerIdentity)


def _load_record(
    obj: Mapping[str, Any] | str | bytes,
) -> tuple[bytes, Secp256k1PrivateKey | None, Secp256k1PublicKey | None]:
    """Validate a JSON record and decode its id and keys."""
    try:
        if isinstance(obj, (str, bytes, bytearray)):
            record = PeerIdentityRecord.model_validate_json(obj)
        else:
            record = PeerIdentityRecord.model_validate(obj)
    except ValidationError as e:
        raise InvalidInputError("a peer identity record", obj) from e

    peer_id = multihash.from_base58(record.id)
    multihash.decode(peer_id)

    private_key = None
    if record.priv_key is not None:
        private_key = unmarshal_private_key(_key_bytes(record.priv_key, "privKey"))

    public_key = None
    if record.pub_key is not None:
        public_key = unmarshal_public_key(_key_bytes(record.pub_key, "pubKey"))

    logger.debug(
        "Loaded record %s (privKey: %s, pubKey: %s)",
        record.id,
        private_key is not None,
        public_key is not None,
    )
    return peer_id, private_key, public_key


def _check_consistency(
    peer_id: bytes,
    private_key: Secp256k1PrivateKey,
    public_key: Secp256k1PublicKey,
    private_id: bytes,
    public_id: bytes,
) -> None:
    if private_id != peer_id:
        raise ConsistencyError("Id and private key do not match")
    if public_id != peer_id:
        raise ConsistencyError("Id and public key do not match")
    if private_key.public_key != public_key:
        raise ConsistencyError("Public and private key do not match")
