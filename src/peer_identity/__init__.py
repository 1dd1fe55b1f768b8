"""Exports the peer identity components."""

from .derivation import (
    DerivationScheme,
    address_to_id,
    keccak256,
    public_key_to_address,
    public_key_to_id,
    public_key_to_id_async,
    sha3_256,
)
from .keys import (
    KeyProto,
    KeyType,
    Secp256k1PrivateKey,
    Secp256k1PublicKey,
    generate_key_pair,
    marshal_private_key,
    marshal_public_key,
    unmarshal_private_key,
    unmarshal_public_key,
)
from .multihash import Base58, Multihash, MultihashCode
from .peer_id import PeerIdentity, PeerIdentityRecord, is_peer_identity
from .types import (
    ConsistencyError,
    DecodingError,
    EncodingError,
    InvalidInputError,
    KeyMismatchError,
    MalformedKeyError,
    PeerIdentityError,
)

__all__ = [
    # Identity
    "PeerIdentity",
    "PeerIdentityRecord",
    "is_peer_identity",
    # Derivation
    "DerivationScheme",
    "address_to_id",
    "keccak256",
    "public_key_to_address",
    "public_key_to_id",
    "public_key_to_id_async",
    "sha3_256",
    # Keys
    "KeyProto",
    "KeyType",
    "Secp256k1PrivateKey",
    "Secp256k1PublicKey",
    "generate_key_pair",
    "marshal_private_key",
    "marshal_public_key",
    "unmarshal_private_key",
    "unmarshal_public_key",
    # Multihash
    "Base58",
    "Multihash",
    "MultihashCode",
    # Errors
    "PeerIdentityError",
    "InvalidInputError",
    "EncodingError",
    "DecodingError",
    "MalformedKeyError",
    "ConsistencyError",
    "KeyMismatchError",
]
