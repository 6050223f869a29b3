"""Networking configuration constants."""

from typing_extensions import Final

DEFAULT_CHAIN_SPEC_PROTOCOL_ID: Final = b"sup"
"""Chain tag exchanged during handshakes to reject incompatible peers early."""

DEFAULT_EXECUTOR_THREADS: Final = 4
"""Worker threads used by the default thread-pool executor."""

MAX_INLINE_KEY_LENGTH: Final = 42
"""Largest encoded public key that is embedded in an identity multihash."""

MAX_MULTIHASH_DIGEST_LENGTH: Final = 64
"""Largest multihash digest accepted when decoding peer ids."""
