"""
Network startup configuration and peer address parsing for sup-network clients.

The two entry points most callers need are `builder()`, which collects the
parameters handed to the network worker, and `parse_str_addr()`, which
splits a boot node address into its peer id and transport address.
"""

from .networking import (
    InvalidPeerIdError,
    Multiaddr,
    MultiaddrParseError,
    NetworkBuilder,
    NetworkConfig,
    ParseError,
    PeerId,
    PeerIdMissingError,
    builder,
    parse_addr,
    parse_str_addr,
)

__all__ = [
    "InvalidPeerIdError",
    "Multiaddr",
    "MultiaddrParseError",
    "NetworkBuilder",
    "NetworkConfig",
    "ParseError",
    "PeerId",
    "PeerIdMissingError",
    "builder",
    "parse_addr",
    "parse_str_addr",
]
