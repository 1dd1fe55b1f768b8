"""Shared fixtures for peer identity tests."""

from __future__ import annotations

import pytest

from peer_identity import PeerIdentity, Secp256k1PrivateKey


@pytest.fixture
def scalar_one_key() -> Secp256k1PrivateKey:
    """Private key with scalar value 1; its public key is the curve generator."""
    return Secp256k1PrivateKey.from_bytes((1).to_bytes(32, "big"))


@pytest.fixture
def peer() -> PeerIdentity:
    """A freshly generated identity with both keys."""
    return PeerIdentity.generate()


@pytest.fixture
def other_peer() -> PeerIdentity:
    """A second, unrelated identity."""
    return PeerIdentity.generate()
