"""Base models and exceptions shared across the package."""

from .base import CamelModel, StrictBaseModel
from .exceptions import (
    ConsistencyError,
    DecodingError,
    EncodingError,
    InvalidInputError,
    KeyMismatchError,
    MalformedKeyError,
    PeerIdentityError,
)

__all__ = [
    "CamelModel",
    "StrictBaseModel",
    "PeerIdentityError",
    "InvalidInputError",
    "EncodingError",
    "DecodingError",
    "MalformedKeyError",
    "ConsistencyError",
    "KeyMismatchError",
]
