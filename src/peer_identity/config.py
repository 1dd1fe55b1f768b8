"""
Global configuration for peer identity derivation.

This module contains environment-specific settings that apply to every derivation.
"""

import os

_SUPPORTED_PEER_ID_SCHEMES: list[str] = ["address", "direct"]

PEER_ID_SCHEME = os.environ.get("PEER_ID_SCHEME", "address").lower()
"""
How public keys are turned into identities ('address' or 'direct').

'address' hashes the keccak256 account address of the key (the canonical,
interoperable scheme). 'direct' hashes the uncompressed key itself.
"""

if PEER_ID_SCHEME not in _SUPPORTED_PEER_ID_SCHEMES:
    raise ValueError(
        f"Invalid PEER_ID_SCHEME environment variable: '{PEER_ID_SCHEME}'. "
        f"Supported values: {_SUPPORTED_PEER_ID_SCHEMES}"
    )
