"""
Peer address parsing.

Boot nodes and manually added peers are given as multiaddrs that end in
the peer's identity::

    /ip4/198.51.100.19/tcp/30333/p2p/QmSk5HQbn6LhUwDiNMseVUjuRYhEtYj4aUZ6WfWoGURpdV

Dialing needs the two halves separately: the transport address to connect
to, and the PeerId to authenticate the remote against. An address without
the trailing `/p2p/...` segment cannot be authenticated and is rejected.

Only the last segment is inspected. Everything before it is returned as is.
The functions here are pure and safe to call from any thread.
"""

from __future__ import annotations

from collections.abc import Iterable

from .multiaddr import Multiaddr, MultiaddrError
from .peer_id import PeerId

__all__ = [
    "ParseError",
    "MultiaddrParseError",
    "InvalidPeerIdError",
    "PeerIdMissingError",
    "parse_str_addr",
    "parse_addr",
    "parse_str_addrs",
]


class ParseError(Exception):
    """Base class for errors raised while splitting a peer address."""


class MultiaddrParseError(ParseError):
    """
    The text is not a well-formed multiaddr.

    Attributes:
        error: The underlying multiaddr diagnostic.
    """

    def __init__(self, error: MultiaddrError) -> None:
        self.error = error
        super().__init__(f"Invalid multiaddress: {error}")


class InvalidPeerIdError(ParseError):
    """The trailing `/p2p/...` segment does not hold a valid peer id."""

    def __init__(self) -> None:
        super().__init__("Peer id at the end of the address is invalid")


class PeerIdMissingError(ParseError):
    """The address does not end with a `/p2p/...` segment."""

    def __init__(self) -> None:
        super().__init__("Peer id is missing from the address")


def parse_str_addr(addr_str: str) -> tuple[PeerId, Multiaddr]:
    """
    Parse a string address and split it into PeerId and Multiaddr.

    Example::

        >>> peer_id, addr = parse_str_addr(
        ...     "/ip4/198.51.100.19/tcp/30333/p2p/QmSk5HQbn6LhUwDiNMseVUjuRYhEtYj4aUZ6WfWoGURpdV"
        ... )
        >>> str(peer_id)
        'QmSk5HQbn6LhUwDiNMseVUjuRYhEtYj4aUZ6WfWoGURpdV'
        >>> str(addr)
        '/ip4/198.51.100.19/tcp/30333'

    Raises:
        MultiaddrParseError: If the text is not a multiaddr.
        InvalidPeerIdError: If the trailing peer id is malformed.
        PeerIdMissingError: If there is no trailing peer id.
    """
    try:
        addr = Multiaddr.from_string(addr_str)
    except MultiaddrError as e:
        raise MultiaddrParseError(e) from e
    return parse_addr(addr)


def parse_addr(addr: Multiaddr) -> tuple[PeerId, Multiaddr]:
    """
    Split a Multiaddr into its PeerId and the address without it.

    Raises:
        InvalidPeerIdError: If the trailing peer id is malformed.
        PeerIdMissingError: If there is no trailing peer id.
    """
    remaining, last = addr.pop()
    if last is None or not last.is_p2p:
        raise PeerIdMissingError()

    try:
        who = PeerId.from_bytes(last.value)
    except ValueError as e:
        raise InvalidPeerIdError() from e

    return who, remaining


def parse_str_addrs(addr_strs: Iterable[str]) -> list[tuple[PeerId, Multiaddr]]:
    """
    Parse a list of boot node addresses, preserving order.

    The result can be passed straight to `NetworkBuilder.set_boot_nodes`.

    Raises:
        ParseError: For the first address that fails to parse.
    """
    return [parse_str_addr(addr_str) for addr_str in addr_strs]
