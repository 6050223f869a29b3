"""
Peer identities.

A PeerId is the multihash of a peer's public key:
    1. Encode the public key as protobuf (libp2p-crypto format)
    2. If encoded <= 42 bytes: PeerId = multihash(identity, encoded)
    3. If encoded > 42 bytes: PeerId = multihash(sha256, sha256(encoded))

Protobuf wire format (from crypto.proto):
    message PublicKey {
        required KeyType Type = 1;  // Field 1, varint
        required bytes Data = 2;    // Field 2, length-delimited
    }

    [0x08][type_varint][0x12][length_varint][key_bytes]

The multihash bytes are what travel inside `/p2p/...` multiaddr segments.
Their text form is Base58 (Bitcoin alphabet):

    - Ed25519 keys: "12D3KooW..." (identity multihash)
    - secp256k1 keys: "16Uiu2..." (identity multihash)
    - RSA and other large keys: "Qm..." (sha2-256 multihash)

A PeerId only ever holds one of those two shapes. Anything else is
rejected when the PeerId is constructed.

References:
    - https://github.com/libp2p/specs/blob/master/peer-ids/peer-ids.md
    - https://github.com/multiformats/multihash
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import IntEnum
from typing import Final

from .config import MAX_INLINE_KEY_LENGTH, MAX_MULTIHASH_DIGEST_LENGTH
from .varint import VarintError, decode_varint, encode_varint

__all__ = [
    "PeerId",
    "PublicKeyProto",
    "Multihash",
    "KeyType",
    "MultihashCode",
    "Base58",
]


class KeyType(IntEnum):
    """libp2p-crypto key type codes (from the crypto.proto KeyType enum)."""

    RSA = 0
    ED25519 = 1
    SECP256K1 = 2
    ECDSA = 3


class MultihashCode(IntEnum):
    """
    Multihash function codes accepted in peer ids.

    See: https://github.com/multiformats/multicodec/blob/master/table.csv
    """

    IDENTITY = 0x00
    """Identity "hash": the digest is the data itself."""

    SHA256 = 0x12
    """sha2-256 (32-byte output)."""


class _ProtobufTag(IntEnum):
    """Protobuf field tags for the PublicKey message: (field_number << 3) | wire_type."""

    TYPE = 0x08
    DATA = 0x12


class Base58:
    """
    Base58 encoding/decoding (Bitcoin-style alphabet).

    Base58 excludes visually ambiguous characters (0, O, I, l).
    """

    ALPHABET: Final[str] = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

    @classmethod
    def encode(cls, data: bytes) -> str:
        """
        Encode bytes as a Base58 string.

        Leading zero bytes become leading '1' characters.
        """
        leading_zeros = len(data) - len(data.lstrip(b"\x00"))

        num = int.from_bytes(data, "big")
        result: list[str] = []
        while num > 0:
            num, remainder = divmod(num, 58)
            result.append(cls.ALPHABET[remainder])

        result.extend([cls.ALPHABET[0]] * leading_zeros)
        return "".join(reversed(result))

    @classmethod
    def decode(cls, s: str) -> bytes:
        """
        Decode a Base58 string to bytes.

        Leading '1' characters become leading zero bytes.

        Raises:
            ValueError: If the string contains a character outside the alphabet.
        """
        leading_ones = len(s) - len(s.lstrip("1"))

        num = 0
        for char in s:
            index = cls.ALPHABET.find(char)
            if index < 0:
                raise ValueError(f"Invalid Base58 character: {char!r}")
            num = num * 58 + index

        result = num.to_bytes((num.bit_length() + 7) // 8, "big") if num else b""
        return b"\x00" * leading_ones + result


@dataclass(frozen=True, slots=True)
class Multihash:
    """
    A self-describing hash: [code (varint)][length (varint)][digest].

    Attributes:
        code: Hash function identifier. Kept as a plain int so that
            multihashes with codes we do not know can still be decoded.
        digest: Hash output (or raw data for identity).
    """

    code: int
    digest: bytes

    def encode(self) -> bytes:
        """Encode as multihash bytes."""
        return encode_varint(self.code) + encode_varint(len(self.digest)) + self.digest

    @classmethod
    def decode(cls, data: bytes) -> Multihash:
        """
        Decode multihash bytes.

        The declared length must match the remaining bytes exactly.

        Raises:
            ValueError: If the bytes are not a well-formed multihash.
        """
        try:
            code, code_len = decode_varint(data, 0)
            length, length_len = decode_varint(data, code_len)
        except VarintError as e:
            raise ValueError(f"Malformed multihash header: {e}") from e

        if length > MAX_MULTIHASH_DIGEST_LENGTH:
            raise ValueError(f"Multihash digest too long: {length} bytes")

        digest = data[code_len + length_len :]
        if len(digest) != length:
            raise ValueError(
                f"Multihash length mismatch: declared {length}, got {len(digest)} bytes"
            )
        return cls(code=code, digest=digest)

    @classmethod
    def identity(cls, data: bytes) -> Multihash:
        """Create an identity multihash (no hashing)."""
        return cls(code=MultihashCode.IDENTITY, digest=data)

    @classmethod
    def sha256(cls, data: bytes) -> Multihash:
        """Create a sha2-256 multihash of data."""
        return cls(code=MultihashCode.SHA256, digest=hashlib.sha256(data).digest())

    @classmethod
    def from_data(cls, data: bytes) -> Multihash:
        """
        Create a multihash using libp2p's size-based selection.

        Data of at most 42 bytes is inlined with the identity hash, larger
        data is hashed with sha2-256.
        """
        if len(data) <= MAX_INLINE_KEY_LENGTH:
            return cls.identity(data)
        return cls.sha256(data)


@dataclass(frozen=True, slots=True)
class PublicKeyProto:
    """
    A public key in libp2p-crypto protobuf format.

    Attributes:
        key_type: Cryptographic algorithm identifier.
        key_data: Raw public key bytes (format depends on key_type).
    """

    key_type: KeyType
    key_data: bytes

    def encode(self) -> bytes:
        """
        Encode as deterministic protobuf: Type first, then Data, minimal varints.

        Returns:
            Protobuf-encoded PublicKey message bytes.
        """
        type_field = bytes([_ProtobufTag.TYPE]) + encode_varint(self.key_type)
        data_field = bytes([_ProtobufTag.DATA]) + encode_varint(len(self.key_data)) + self.key_data
        return type_field + data_field


@dataclass(frozen=True, slots=True)
class PeerId:
    """
    A libp2p peer identifier.

    Holds the raw multihash bytes. The bytes are validated on construction,
    so every PeerId in the program is a usable identity.

    Attributes:
        multihash: The underlying multihash bytes.
    """

    multihash: bytes

    def __post_init__(self) -> None:
        """Reject bytes that are not a valid peer id multihash."""
        mh = Multihash.decode(self.multihash)
        if mh.code == MultihashCode.SHA256:
            return
        if mh.code == MultihashCode.IDENTITY:
            if len(mh.digest) > MAX_INLINE_KEY_LENGTH:
                raise ValueError(
                    f"Identity multihash too long for a peer id: {len(mh.digest)} bytes"
                )
            return
        raise ValueError(f"Unsupported multihash code for a peer id: {mh.code:#x}")

    def __str__(self) -> str:
        """Return the Base58-encoded PeerId string."""
        return Base58.encode(self.multihash)

    def __repr__(self) -> str:
        return f"PeerId({self!s})"

    def to_base58(self) -> str:
        """Return the Base58-encoded PeerId string."""
        return Base58.encode(self.multihash)

    def to_bytes(self) -> bytes:
        """Return the raw multihash bytes."""
        return self.multihash

    def to_multihash(self) -> Multihash:
        """Return the decoded multihash."""
        return Multihash.decode(self.multihash)

    @classmethod
    def from_base58(cls, s: str) -> PeerId:
        """
        Parse a Base58-encoded PeerId.

        Raises:
            ValueError: If the string is not Base58 or not a valid peer id.
        """
        return cls(multihash=Base58.decode(s))

    @classmethod
    def from_bytes(cls, data: bytes) -> PeerId:
        """
        Create a PeerId from raw multihash bytes.

        Raises:
            ValueError: If the bytes are not a valid peer id multihash.
        """
        return cls(multihash=bytes(data))

    @classmethod
    def from_multihash(cls, mh: Multihash) -> PeerId:
        """Create a PeerId from a decoded multihash."""
        return cls(multihash=mh.encode())

    @classmethod
    def from_public_key(cls, public_key: PublicKeyProto) -> PeerId:
        """Derive a PeerId from a public key."""
        return cls.from_multihash(Multihash.from_data(public_key.encode()))

    @classmethod
    def from_secp256k1(cls, public_key_bytes: bytes) -> PeerId:
        """
        Derive a PeerId from a compressed secp256k1 public key.

        Args:
            public_key_bytes: 33-byte compressed key (starts with 0x02 or 0x03).

        Returns:
            Derived PeerId (starts with "16Uiu2").

        Raises:
            ValueError: If the key is not 33 bytes.
        """
        if len(public_key_bytes) != 33:
            raise ValueError(
                f"secp256k1 compressed key must be 33 bytes, got {len(public_key_bytes)}"
            )
        return cls.from_public_key(
            PublicKeyProto(key_type=KeyType.SECP256K1, key_data=public_key_bytes)
        )

    @classmethod
    def derive(cls, key_data: bytes, key_type: KeyType) -> PeerId:
        """Derive a PeerId from raw key bytes and type."""
        return cls.from_public_key(PublicKeyProto(key_type=key_type, key_data=key_data))
