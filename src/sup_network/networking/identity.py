"""
secp256k1 identity keypair.

A node's PeerId is derived from its public key, compressed to 33 bytes
and wrapped in an identity multihash. Operators use this to produce the
`/p2p/...` suffix of the addresses they publish as boot nodes.
"""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .peer_id import PeerId

__all__ = [
    "IdentityKeypair",
]


@dataclass(frozen=True, slots=True)
class IdentityKeypair:
    """
    secp256k1 keypair backing a peer identity.

    Attributes:
        private_key: The secp256k1 private key.
    """

    private_key: ec.EllipticCurvePrivateKey

    @classmethod
    def generate(cls) -> IdentityKeypair:
        """Generate a new random keypair."""
        return cls(private_key=ec.generate_private_key(ec.SECP256K1()))

    @classmethod
    def from_bytes(cls, data: bytes) -> IdentityKeypair:
        """
        Load a keypair from raw private key bytes.

        Args:
            data: 32-byte secp256k1 private key scalar.

        Raises:
            ValueError: If data is not a valid secp256k1 private key.
        """
        if len(data) != 32:
            raise ValueError(f"Expected 32 bytes, got {len(data)}")

        private_key = ec.derive_private_key(int.from_bytes(data, "big"), ec.SECP256K1())
        return cls(private_key=private_key)

    def private_key_bytes(self) -> bytes:
        """Return the raw 32-byte private key."""
        return self.private_key.private_numbers().private_value.to_bytes(32, "big")

    def public_key_bytes(self) -> bytes:
        """
        Return the compressed public key (33 bytes).

        The first byte is 0x02 (even y) or 0x03 (odd y), followed by the
        32-byte x coordinate.
        """
        return self.private_key.public_key().public_bytes(
            encoding=serialization.Encoding.X962,
            format=serialization.PublicFormat.CompressedPoint,
        )

    def to_peer_id(self) -> PeerId:
        """Derive the PeerId of this keypair."""
        return PeerId.from_secp256k1(self.public_key_bytes())
