"""
Unsigned varints as used by multiformats.

Multiaddrs and multihashes are self-describing: every protocol code, hash
code and length prefix is written as an unsigned LEB128 varint. Each byte
carries 7 bits of the value, low-order group first, and the MSB signals
that more bytes follow::

    [C|D D D D D D D]
     ^-- Continuation bit (1 = more bytes, 0 = last byte)

Examples from the multiaddr protocol table::

    tcp  (6)    -> 0x06
    p2p  (421)  -> 0xa5 0x03
    quic (460)  -> 0xcc 0x03

Only minimal encodings of at most 9 bytes (63 bits) are accepted, as the
multiformats unsigned-varint rules require. A padded encoding such as
`0x92 0x00` for 18 is rejected, so every value has exactly one encoding.

References:
    https://github.com/multiformats/unsigned-varint
    https://protobuf.dev/programming-guides/encoding/#varints
"""

from __future__ import annotations

__all__ = [
    "MAX_VARINT_BYTES",
    "VarintError",
    "encode_varint",
    "decode_varint",
]

MAX_VARINT_BYTES = 9
"""Longest accepted encoding."""


class VarintError(Exception):
    """Raised when a varint cannot be decoded."""


def encode_varint(value: int) -> bytes:
    """
    Encode a non-negative integer as an unsigned varint.

    Args:
        value: Integer to encode.

    Returns:
        Encoded bytes (1 byte for values below 128).

    Raises:
        ValueError: If value is negative or needs more than 63 bits.
    """
    if value < 0:
        raise ValueError("Varint must be non-negative")
    if value >= 1 << (7 * MAX_VARINT_BYTES):
        raise ValueError("Varint value exceeds 63 bits")

    result = bytearray()
    while value >= 0x80:
        result.append((value & 0x7F) | 0x80)
        value >>= 7
    result.append(value)

    return bytes(result)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """
    Decode a varint from bytes at the given offset.

    Args:
        data: Input bytes containing the varint.
        offset: Starting position in data.

    Returns:
        Tuple of (decoded_value, bytes_consumed).

    Raises:
        VarintError: If the input is truncated or not a minimal encoding of
            at most MAX_VARINT_BYTES bytes.
    """
    result = 0
    shift = 0
    pos = offset

    while True:
        if pos >= len(data):
            raise VarintError("Truncated varint")

        byte = data[pos]
        pos += 1

        result |= (byte & 0x7F) << shift
        shift += 7

        if not (byte & 0x80):
            # A zero final group after the first byte adds nothing.
            if byte == 0 and pos - offset > 1:
                raise VarintError("Varint is not minimally encoded")
            break

        if pos - offset >= MAX_VARINT_BYTES:
            raise VarintError("Varint too long")

    return result, pos - offset
