"""Tests for unsigned varint encoding and decoding.

Test vectors sourced from:
- multiformats unsigned-varint: https://github.com/multiformats/unsigned-varint
- multicodec table: https://github.com/multiformats/multicodec/blob/master/table.csv
"""

from __future__ import annotations

import pytest

from sup_network.networking.varint import VarintError, decode_varint, encode_varint

# Each entry is (integer_value, expected_encoded_bytes).
VARINT_VECTORS: list[tuple[int, bytes]] = [
    (0, b"\x00"),
    (1, b"\x01"),
    (127, b"\x7f"),
    (128, b"\x80\x01"),
    (255, b"\xff\x01"),
    (300, b"\xac\x02"),
    (16383, b"\xff\x7f"),
    (16384, b"\x80\x80\x01"),
    # Multiaddr protocol codes
    (421, b"\xa5\x03"),  # p2p
    (460, b"\xcc\x03"),  # quic
    (273, b"\x91\x02"),  # udp
]


class TestEncodeVarint:
    """Tests for varint encoding against reference vectors."""

    @pytest.mark.parametrize(("value", "expected"), VARINT_VECTORS)
    def test_encode(self, value: int, expected: bytes) -> None:
        """encode_varint produces the expected wire bytes."""
        assert encode_varint(value) == expected

    def test_negative_raises(self) -> None:
        """Negative values are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            encode_varint(-1)


class TestDecodeVarint:
    """Tests for varint decoding."""

    @pytest.mark.parametrize(("expected", "data"), VARINT_VECTORS)
    def test_decode(self, expected: int, data: bytes) -> None:
        """decode_varint reconstructs the original value and its length."""
        assert decode_varint(data) == (expected, len(data))

    def test_decode_at_offset(self) -> None:
        """Decoding starts at the given offset and ignores trailing bytes."""
        data = b"\x04\x7f\x00\x00\x01\xa5\x03rest"
        assert decode_varint(data, 5) == (421, 2)

    def test_truncated_raises(self) -> None:
        """A continuation bit on the last byte means the input is truncated."""
        with pytest.raises(VarintError, match="Truncated"):
            decode_varint(b"\x80")

    def test_empty_raises(self) -> None:
        """Empty input raises."""
        with pytest.raises(VarintError, match="Truncated"):
            decode_varint(b"")

    def test_too_long_raises(self) -> None:
        """More than 10 bytes cannot be a 64-bit value."""
        with pytest.raises(VarintError, match="too long"):
            decode_varint(b"\x80" * 11)

    def test_nine_bytes_accepted(self) -> None:
        """The largest 63-bit value fits in exactly 9 bytes."""
        value = (1 << 63) - 1
        encoded = encode_varint(value)

        assert len(encoded) == 9
        assert decode_varint(encoded) == (value, 9)

    def test_ten_bytes_rejected(self) -> None:
        """Encodings past 9 bytes are refused even if they would fit 64 bits."""
        with pytest.raises(VarintError, match="too long"):
            decode_varint(b"\xff" * 9 + b"\x01")

    @pytest.mark.parametrize("data", [b"\x80\x00", b"\x92\x00", b"\x81\x80\x00", b"\xa5\x83\x00"])
    def test_non_minimal_rejected(self, data: bytes) -> None:
        """Padding with zero groups would give one value two encodings."""
        with pytest.raises(VarintError, match="not minimally encoded"):
            decode_varint(data)


class TestVarintBounds:
    """Tests for the encoder's value range."""

    def test_encode_rejects_64_bit_values(self) -> None:
        """Values needing more than 63 bits cannot be encoded."""
        with pytest.raises(ValueError, match="exceeds 63 bits"):
            encode_varint(1 << 63)
