"""Exports the networking components."""

from .address import (
    InvalidPeerIdError,
    MultiaddrParseError,
    ParseError,
    PeerIdMissingError,
    parse_addr,
    parse_str_addr,
    parse_str_addrs,
)
from .builder import BootNode, BuilderConsumedError, NetworkBuilder, NetworkConfig, builder
from .config import DEFAULT_CHAIN_SPEC_PROTOCOL_ID, DEFAULT_EXECUTOR_THREADS
from .executor import (
    CallableExecutor,
    EventLoopExecutor,
    Task,
    TaskExecutor,
    ThreadPoolTaskExecutor,
)
from .identity import IdentityKeypair
from .multiaddr import Multiaddr, MultiaddrError, Segment
from .peer_id import Base58, KeyType, Multihash, MultihashCode, PeerId, PublicKeyProto

__all__ = [
    # Builder
    "BootNode",
    "BuilderConsumedError",
    "NetworkBuilder",
    "NetworkConfig",
    "builder",
    "DEFAULT_CHAIN_SPEC_PROTOCOL_ID",
    "DEFAULT_EXECUTOR_THREADS",
    # Executors
    "Task",
    "TaskExecutor",
    "CallableExecutor",
    "EventLoopExecutor",
    "ThreadPoolTaskExecutor",
    # Addresses
    "Multiaddr",
    "MultiaddrError",
    "Segment",
    "ParseError",
    "MultiaddrParseError",
    "InvalidPeerIdError",
    "PeerIdMissingError",
    "parse_addr",
    "parse_str_addr",
    "parse_str_addrs",
    # Identities
    "Base58",
    "IdentityKeypair",
    "KeyType",
    "Multihash",
    "MultihashCode",
    "PeerId",
    "PublicKeyProto",
]
