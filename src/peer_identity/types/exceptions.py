"""Exception hierarchy for peer identity derivation and encoding."""

from __future__ import annotations

from typing import Any


class PeerIdentityError(Exception):
    """
    Base exception for all peer identity errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class InvalidInputError(PeerIdentityError):
    """
    Raised when a construction path receives a value of the wrong type or shape.

    Attributes:
        expected: Description of what was expected.
        value: The offending value (may be truncated for display).
    """

    def __init__(self, expected: str, value: Any = None) -> None:
        self.expected = expected
        self.value = value

        msg = f"Expected {expected}, got {type(value).__name__}"
        if value is not None:
            value_repr = repr(value)
            if len(value_repr) > 50:
                value_repr = value_repr[:47] + "..."
            msg = f"{msg}: {value_repr}"

        super().__init__(msg)


class EncodingError(PeerIdentityError):
    """Raised when a digest cannot be encoded as a multihash."""


class DecodingError(PeerIdentityError):
    """
    Raised when hex, base58 or multihash input cannot be decoded.

    Attributes:
        kind: The format being decoded (e.g. "multihash", "base58").
        detail: Description of what went wrong.
    """

    def __init__(self, kind: str, detail: str) -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"Failed to decode {kind}: {detail}")


class MalformedKeyError(PeerIdentityError):
    """Raised when a marshaled key cannot be unmarshaled."""


class ConsistencyError(PeerIdentityError):
    """Raised when a JSON record's id and keys do not describe the same peer."""


class KeyMismatchError(PeerIdentityError):
    """Raised when a private key does not correspond to the attached public key."""
