"""
secp256k1 keys and their libp2p-crypto marshaling.

Keys are exchanged as the protobuf messages from libp2p's crypto.proto:

    message PublicKey {
        required KeyType Type = 1;  // Field 1, varint
        required bytes Data = 2;    // Field 2, length-delimited
    }

`PrivateKey` has the same two fields. Wire format:

    [0x08][type_varint][0x12][length_varint][key_bytes]

For secp256k1 the key bytes are the 33-byte compressed point (public) or
the 32-byte scalar (private), so records are 37 and 36 bytes:

    public:  08 02 12 21 <33 bytes>
    private: 08 02 12 20 <32 bytes>

This layout is shared with go-libp2p and js-libp2p; marshaled keys must
match theirs byte for byte.

References:
    - https://github.com/libp2p/go-libp2p/blob/master/core/crypto/pb/crypto.proto
    - https://github.com/libp2p/specs/blob/master/peer-ids/peer-ids.md#keys
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Final

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

from peer_identity.types import InvalidInputError, MalformedKeyError
from peer_identity.varint import VarintError, decode_varint, encode_varint

__all__ = [
    "KeyType",
    "KeyProto",
    "Secp256k1PrivateKey",
    "Secp256k1PublicKey",
    "generate_key_pair",
    "marshal_private_key",
    "marshal_public_key",
    "unmarshal_private_key",
    "unmarshal_public_key",
]

PRIVATE_KEY_SIZE: Final = 32
COMPRESSED_PUBKEY_SIZE: Final = 33
RAW_PUBKEY_SIZE: Final = 64
"""Uncompressed point without the 0x04 prefix (x || y)."""


class KeyType(IntEnum):
    """
    libp2p-crypto key type codes (from crypto.proto KeyType enum).

    Only SECP256K1 keys can be created or unmarshaled here; the other
    codes are listed so that records naming them are reported as
    unsupported rather than unknown.
    """

    RSA = 0
    ED25519 = 1
    SECP256K1 = 2
    ECDSA = 3


class _ProtobufTag(IntEnum):
    """Field tags: (field_number << 3) | wire_type."""

    TYPE = 0x08  # field 1, varint
    DATA = 0x12  # field 2, length-delimited


@dataclass(frozen=True, slots=True)
class KeyProto:
    """
    A key in libp2p-crypto protobuf format.

    Attributes:
        key_type: Key algorithm.
        key_data: Raw key bytes (format depends on key_type).
    """

    key_type: KeyType
    key_data: bytes

    def encode(self) -> bytes:
        """
        Encode as deterministic protobuf: minimal varints, fields in tag order.
        """
        type_field = bytes([_ProtobufTag.TYPE]) + encode_varint(self.key_type)
        data_field = bytes([_ProtobufTag.DATA]) + encode_varint(len(self.key_data)) + self.key_data
        return type_field + data_field

    @classmethod
    def decode(cls, data: bytes) -> KeyProto:
        """
        Parse a protobuf key record.

        Raises:
            MalformedKeyError: If the record is truncated, has unexpected
                fields or trailing bytes, or names an unknown key type.
        """
        data = bytes(data)
        try:
            if data[:1] != bytes([_ProtobufTag.TYPE]):
                raise MalformedKeyError("Key record must start with the Type field")
            raw_type, consumed = decode_varint(data, 1)
            pos = 1 + consumed

            if data[pos : pos + 1] != bytes([_ProtobufTag.DATA]):
                raise MalformedKeyError("Key record is missing the Data field")
            length, consumed = decode_varint(data, pos + 1)
            pos += 1 + consumed
        except VarintError as e:
            raise MalformedKeyError(f"Malformed key record: {e}") from e

        key_data = data[pos : pos + length]
        if len(key_data) != length or pos + length != len(data):
            raise MalformedKeyError(
                f"Key record declares {length} key bytes, found {len(data) - pos}"
            )

        try:
            key_type = KeyType(raw_type)
        except ValueError as e:
            raise MalformedKeyError(f"Unknown key type: {raw_type}") from e

        return cls(key_type=key_type, key_data=key_data)


@dataclass(frozen=True, slots=True, eq=False)
class Secp256k1PublicKey:
    """
    A secp256k1 public key.

    Two keys are equal when their compressed encodings are equal.
    """

    key: ec.EllipticCurvePublicKey

    @classmethod
    def from_bytes(cls, data: bytes) -> Secp256k1PublicKey:
        """
        Load a public key from its SEC1 encoding.

        Args:
            data: 33-byte compressed point, 65-byte uncompressed point,
                or 64-byte `x || y` without the prefix.

        Raises:
            MalformedKeyError: If the bytes are not a point on the curve.
        """
        data = bytes(data)
        if len(data) == RAW_PUBKEY_SIZE:
            data = b"\x04" + data

        try:
            key = ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), data)
        except ValueError as e:
            raise MalformedKeyError(f"Invalid secp256k1 public key: {e}") from e
        return cls(key=key)

    def to_bytes(self) -> bytes:
        """Return the 33-byte compressed point (the libp2p raw key form)."""
        return self.key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )

    def to_uncompressed_bytes(self) -> bytes:
        """Return the 64-byte `x || y` coordinates, 0x04 prefix stripped."""
        uncompressed = self.key.public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.UncompressedPoint,
        )
        return uncompressed[1:]

    def marshal(self) -> bytes:
        """Return the libp2p protobuf encoding."""
        return KeyProto(key_type=KeyType.SECP256K1, key_data=self.to_bytes()).encode()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secp256k1PublicKey):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())


@dataclass(frozen=True, slots=True, eq=False)
class Secp256k1PrivateKey:
    """
    A secp256k1 private key.

    The matching public key is derived on demand.
    """

    key: ec.EllipticCurvePrivateKey

    @classmethod
    def generate(cls) -> Secp256k1PrivateKey:
        """Generate a new random key."""
        return cls(key=ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_bytes(cls, data: bytes) -> Secp256k1PrivateKey:
        """
        Load a key from its 32-byte big-endian scalar.

        Raises:
            MalformedKeyError: If the length is wrong or the scalar is out of range.
        """
        if len(data) != PRIVATE_KEY_SIZE:
            raise MalformedKeyError(
                f"secp256k1 private key must be {PRIVATE_KEY_SIZE} bytes, got {len(data)}"
            )

        try:
            key = ec.derive_private_key(int.from_bytes(data, "big"), ec.SECP256K1())
        except ValueError as e:
            raise MalformedKeyError(f"Invalid secp256k1 private key: {e}") from e
        return cls(key=key)

    def to_bytes(self) -> bytes:
        """Return the 32-byte private scalar."""
        return self.key.private_numbers().private_value.to_bytes(PRIVATE_KEY_SIZE, "big")

    @property
    def public_key(self) -> Secp256k1PublicKey:
        """The public key belonging to this private key."""
        return Secp256k1PublicKey(key=self.key.public_key())

    def marshal(self) -> bytes:
        """Return the libp2p protobuf encoding."""
        return KeyProto(key_type=KeyType.SECP256K1, key_data=self.to_bytes()).encode()

    def sign(self, message: bytes) -> bytes:
        """Sign a message with ECDSA-SHA256, returning a DER signature."""
        return self.key.sign(message, ec.ECDSA(hashes.SHA256()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Secp256k1PrivateKey):
            return NotImplemented
        return self.to_bytes() == other.to_bytes()

    def __hash__(self) -> int:
        return hash(self.to_bytes())


def generate_key_pair(
    key_type: KeyType = KeyType.SECP256K1,
) -> tuple[Secp256k1PrivateKey, Secp256k1PublicKey]:
    """
    Generate a fresh key pair.

    Raises:
        InvalidInputError: If a key type other than secp256k1 is requested.
    """
    if key_type != KeyType.SECP256K1:
        raise InvalidInputError("KeyType.SECP256K1", key_type)

    private_key = Secp256k1PrivateKey.generate()
    return private_key, private_key.public_key


def marshal_public_key(key: Secp256k1PublicKey) -> bytes:
    """Marshal a public key to its libp2p protobuf record."""
    return key.marshal()


def marshal_private_key(key: Secp256k1PrivateKey) -> bytes:
    """Marshal a private key to its libp2p protobuf record."""
    return key.marshal()


def _unmarshal(data: bytes) -> bytes:
    proto = KeyProto.decode(data)
    if proto.key_type != KeyType.SECP256K1:
        raise MalformedKeyError(f"Unsupported key type: {proto.key_type.name}")
    return proto.key_data


def unmarshal_public_key(data: bytes) -> Secp256k1PublicKey:
    """
    Parse a marshaled public key.

    Raises:
        MalformedKeyError: If the record or the key bytes are invalid.
    """
    return Secp256k1PublicKey.from_bytes(_unmarshal(data))


def unmarshal_private_key(data: bytes) -> Secp256k1PrivateKey:
    """
    Parse a marshaled private key.

    Raises:
        MalformedKeyError: If the record or the key bytes are invalid.
    """
    return Secp256k1PrivateKey.from_bytes(_unmarshal(data))
