"""Tests for the varints used in protobuf key records."""

from __future__ import annotations

import pytest

from peer_identity.varint import VarintError, decode_varint, encode_varint

# (value, encoding) pairs from the protobuf encoding guide.
PROTOBUF_VECTORS: list[tuple[int, bytes]] = [
    (0, b"\x00"),
    (1, b"\x01"),
    (2, b"\x02"),
    (32, b"\x20"),
    (33, b"\x21"),
    (127, b"\x7f"),
    (128, b"\x80\x01"),
    (150, b"\x96\x01"),
    (300, b"\xac\x02"),
    (16384, b"\x80\x80\x01"),
    (2**64 - 1, b"\xff\xff\xff\xff\xff\xff\xff\xff\xff\x01"),
]


class TestEncodeVarint:
    """Encoding against reference vectors."""

    @pytest.mark.parametrize("value,expected", PROTOBUF_VECTORS)
    def test_vectors(self, value: int, expected: bytes) -> None:
        assert encode_varint(value) == expected

    def test_negative_raises(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            encode_varint(-1)


class TestDecodeVarint:
    """Decoding against reference vectors and malformed input."""

    @pytest.mark.parametrize("expected,data", PROTOBUF_VECTORS)
    def test_vectors(self, expected: int, data: bytes) -> None:
        assert decode_varint(data) == (expected, len(data))

    def test_offset(self) -> None:
        """Decoding starts at the offset and reports bytes consumed."""
        assert decode_varint(b"\x08\xac\x02\x12", offset=1) == (300, 2)

    def test_truncated(self) -> None:
        with pytest.raises(VarintError, match="Truncated"):
            decode_varint(b"\x80")

    def test_empty(self) -> None:
        with pytest.raises(VarintError, match="Truncated"):
            decode_varint(b"")

    def test_too_long(self) -> None:
        with pytest.raises(VarintError, match="too long"):
            decode_varint(b"\xff" * 11)
