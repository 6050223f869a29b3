"""
Multiaddr: self-describing network addresses.

A multiaddr is an ordered list of protocol segments, outermost first::

    /ip4/198.51.100.19/tcp/30333/p2p/QmSk5HQbn6LhUwDiNMseVUjuRYhEtYj4aUZ6WfWoGURpdV
    └─────────┬──────┘└───┬───┘└──────────────────────┬──────────────────────┘
         network       transport                  peer identity

Text form
---------
Segments are written as `/name/value` (or `/name` for protocols without a
value). The empty string is the empty multiaddr. Anything else must start
with '/'.

Binary form
-----------
Each segment is `varint(code)` followed by its value. Fixed-size values are
written as is; variable-size values get a `varint(length)` prefix::

    /ip4/127.0.0.1/tcp/4001  ->  04 7f000001 06 0fa1

The binary form is the canonical one: two multiaddrs are equal when their
segments carry the same protocols and value bytes.

`p2p` values are multihashes. The text codec only checks the Base58
alphabet; whether the bytes form a valid peer id is decided by `PeerId`.

References:
    - https://github.com/multiformats/multiaddr
    - https://github.com/multiformats/multicodec/blob/master/table.csv
"""

from __future__ import annotations

import ipaddress
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import Final

from .peer_id import Base58
from .varint import VarintError, decode_varint, encode_varint

__all__ = [
    "Multiaddr",
    "MultiaddrError",
    "MultiaddrProtocol",
    "ProtocolCode",
    "Segment",
    "PROTOCOLS",
    "protocol_by_name",
    "protocol_by_code",
]


class MultiaddrError(Exception):
    """Raised when a multiaddr cannot be parsed or decoded."""


class ProtocolCode(IntEnum):
    """Multicodec codes of the supported multiaddr protocols."""

    IP4 = 4
    TCP = 6
    DCCP = 33
    IP6 = 41
    IP6ZONE = 42
    DNS = 53
    DNS4 = 54
    DNS6 = 55
    DNSADDR = 56
    SCTP = 132
    UDP = 273
    WEBRTC_DIRECT = 280
    P2P_CIRCUIT = 290
    UDT = 301
    UTP = 302
    UNIX = 400
    P2P = 421
    HTTPS = 443
    TLS = 448
    SNI = 449
    NOISE = 454
    QUIC = 460
    QUIC_V1 = 461
    WEBTRANSPORT = 465
    WS = 477
    WSS = 478
    HTTP = 480
    MEMORY = 777


VARIABLE_SIZE: Final = -1
"""Marker size for protocols whose value carries a varint length prefix."""


@dataclass(frozen=True, slots=True)
class _ValueCodec:
    """Converts a segment value between its text and byte forms."""

    from_text: Callable[[str], bytes]
    to_text: Callable[[bytes], str]


def _ip4_from_text(text: str) -> bytes:
    try:
        return ipaddress.IPv4Address(text).packed
    except ValueError as e:
        raise MultiaddrError(f"Invalid ip4 address: {text!r}") from e


def _ip4_to_text(value: bytes) -> str:
    return str(ipaddress.IPv4Address(value))


def _ip6_from_text(text: str) -> bytes:
    try:
        address = ipaddress.IPv6Address(text)
    except ValueError as e:
        raise MultiaddrError(f"Invalid ip6 address: {text!r}") from e
    # The packed form has no room for a zone; zones go in /ip6zone.
    if address.scope_id is not None:
        raise MultiaddrError(f"Invalid ip6 address: {text!r} carries a zone, use /ip6zone")
    return address.packed


def _ip6_to_text(value: bytes) -> str:
    return str(ipaddress.IPv6Address(value))


def _port_from_text(text: str) -> bytes:
    if not (text.isascii() and text.isdigit()) or int(text) > 0xFFFF:
        raise MultiaddrError(f"Invalid port: {text!r}")
    return int(text).to_bytes(2, "big")


def _port_to_text(value: bytes) -> str:
    return str(int.from_bytes(value, "big"))


def _u64_from_text(text: str) -> bytes:
    if not (text.isascii() and text.isdigit()) or int(text) >= 2**64:
        raise MultiaddrError(f"Invalid u64 value: {text!r}")
    return int(text).to_bytes(8, "big")


def _u64_to_text(value: bytes) -> str:
    return str(int.from_bytes(value, "big"))


def _utf8_from_text(text: str) -> bytes:
    if "/" in text:
        raise MultiaddrError(f"Segment value must not contain '/': {text!r}")
    return text.encode("utf-8")


def _utf8_to_text(value: bytes) -> str:
    try:
        text = value.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MultiaddrError("Segment value is not valid UTF-8") from e
    # The text form splits on '/', so such a value could not be parsed back.
    if "/" in text:
        raise MultiaddrError(f"Segment value must not contain '/': {text!r}")
    return text


def _base58_from_text(text: str) -> bytes:
    try:
        return Base58.decode(text)
    except ValueError as e:
        raise MultiaddrError(f"Invalid peer id encoding: {e}") from e


_IP4 = _ValueCodec(_ip4_from_text, _ip4_to_text)
_IP6 = _ValueCodec(_ip6_from_text, _ip6_to_text)
_PORT = _ValueCodec(_port_from_text, _port_to_text)
_U64 = _ValueCodec(_u64_from_text, _u64_to_text)
_UTF8 = _ValueCodec(_utf8_from_text, _utf8_to_text)
_BASE58 = _ValueCodec(_base58_from_text, Base58.encode)


@dataclass(frozen=True, slots=True)
class MultiaddrProtocol:
    """
    One entry of the multiaddr protocol table.

    Attributes:
        code: Multicodec code written in the binary form.
        name: Name written in the text form.
        size: Value size in bits, 0 for no value, or VARIABLE_SIZE.
        codec: Value codec, None when the protocol has no value.
    """

    code: ProtocolCode
    name: str
    size: int
    codec: _ValueCodec | None = None

    @property
    def has_value(self) -> bool:
        """Whether segments of this protocol carry a value."""
        return self.size != 0


PROTOCOLS: Final[tuple[MultiaddrProtocol, ...]] = (
    MultiaddrProtocol(ProtocolCode.IP4, "ip4", 32, _IP4),
    MultiaddrProtocol(ProtocolCode.TCP, "tcp", 16, _PORT),
    MultiaddrProtocol(ProtocolCode.DCCP, "dccp", 16, _PORT),
    MultiaddrProtocol(ProtocolCode.IP6, "ip6", 128, _IP6),
    MultiaddrProtocol(ProtocolCode.IP6ZONE, "ip6zone", VARIABLE_SIZE, _UTF8),
    MultiaddrProtocol(ProtocolCode.DNS, "dns", VARIABLE_SIZE, _UTF8),
    MultiaddrProtocol(ProtocolCode.DNS4, "dns4", VARIABLE_SIZE, _UTF8),
    MultiaddrProtocol(ProtocolCode.DNS6, "dns6", VARIABLE_SIZE, _UTF8),
    MultiaddrProtocol(ProtocolCode.DNSADDR, "dnsaddr", VARIABLE_SIZE, _UTF8),
    MultiaddrProtocol(ProtocolCode.SCTP, "sctp", 16, _PORT),
    MultiaddrProtocol(ProtocolCode.UDP, "udp", 16, _PORT),
    MultiaddrProtocol(ProtocolCode.WEBRTC_DIRECT, "webrtc-direct", 0),
    MultiaddrProtocol(ProtocolCode.P2P_CIRCUIT, "p2p-circuit", 0),
    MultiaddrProtocol(ProtocolCode.UDT, "udt", 0),
    MultiaddrProtocol(ProtocolCode.UTP, "utp", 0),
    MultiaddrProtocol(ProtocolCode.UNIX, "unix", VARIABLE_SIZE, _UTF8),
    MultiaddrProtocol(ProtocolCode.P2P, "p2p", VARIABLE_SIZE, _BASE58),
    MultiaddrProtocol(ProtocolCode.HTTPS, "https", 0),
    MultiaddrProtocol(ProtocolCode.TLS, "tls", 0),
    MultiaddrProtocol(ProtocolCode.SNI, "sni", VARIABLE_SIZE, _UTF8),
    MultiaddrProtocol(ProtocolCode.NOISE, "noise", 0),
    MultiaddrProtocol(ProtocolCode.QUIC, "quic", 0),
    MultiaddrProtocol(ProtocolCode.QUIC_V1, "quic-v1", 0),
    MultiaddrProtocol(ProtocolCode.WEBTRANSPORT, "webtransport", 0),
    MultiaddrProtocol(ProtocolCode.WS, "ws", 0),
    MultiaddrProtocol(ProtocolCode.WSS, "wss", 0),
    MultiaddrProtocol(ProtocolCode.HTTP, "http", 0),
    MultiaddrProtocol(ProtocolCode.MEMORY, "memory", 64, _U64),
)
"""Every protocol this module can parse, in multicodec table order."""

_BY_CODE: Final = {protocol.code: protocol for protocol in PROTOCOLS}
# "ipfs" is the legacy name for p2p, still accepted in text input.
_BY_NAME: Final = {protocol.name: protocol for protocol in PROTOCOLS} | {
    "ipfs": _BY_CODE[ProtocolCode.P2P]
}


def protocol_by_name(name: str) -> MultiaddrProtocol:
    """
    Look up a protocol by its text name.

    Raises:
        MultiaddrError: If the name is unknown.
    """
    try:
        return _BY_NAME[name]
    except KeyError:
        raise MultiaddrError(f"Unknown protocol string: {name!r}") from None


def protocol_by_code(code: int) -> MultiaddrProtocol:
    """
    Look up a protocol by its multicodec code.

    Raises:
        MultiaddrError: If the code is unknown.
    """
    try:
        return _BY_CODE[code]
    except KeyError:
        raise MultiaddrError(f"Unknown protocol code: {code}") from None


@dataclass(frozen=True, slots=True)
class Segment:
    """
    One `/name/value` component of a multiaddr.

    Attributes:
        protocol: The protocol of this segment.
        value: Value in binary form (empty for protocols without a value).
    """

    protocol: MultiaddrProtocol
    value: bytes = b""

    def __post_init__(self) -> None:
        if self.protocol.size > 0 and len(self.value) * 8 != self.protocol.size:
            raise MultiaddrError(
                f"{self.protocol.name} value must be {self.protocol.size // 8} bytes, "
                f"got {len(self.value)}"
            )
        if self.protocol.size == 0 and self.value:
            raise MultiaddrError(f"{self.protocol.name} takes no value")

    @classmethod
    def from_text(cls, name: str, value: str | None = None) -> Segment:
        """
        Build a segment from its text form, e.g. `Segment.from_text("tcp", "30333")`.

        Raises:
            MultiaddrError: If the protocol is unknown or the value is invalid.
        """
        protocol = protocol_by_name(name)
        if protocol.codec is None:
            if value is not None:
                raise MultiaddrError(f"{protocol.name} takes no value")
            return cls(protocol)
        if value is None:
            raise MultiaddrError(f"Missing value for protocol {protocol.name!r}")
        return cls(protocol, protocol.codec.from_text(value))

    @property
    def name(self) -> str:
        """Canonical protocol name."""
        return self.protocol.name

    @property
    def is_p2p(self) -> bool:
        """Whether this segment carries a peer identity."""
        return self.protocol.code == ProtocolCode.P2P

    def value_text(self) -> str | None:
        """Value in text form, or None for protocols without a value."""
        if self.protocol.codec is None:
            return None
        return self.protocol.codec.to_text(self.value)

    def to_bytes(self) -> bytes:
        """Encode the segment in binary form."""
        encoded = encode_varint(self.protocol.code)
        if self.protocol.size == VARIABLE_SIZE:
            encoded += encode_varint(len(self.value))
        return encoded + self.value

    def __str__(self) -> str:
        text = self.value_text()
        if text is None:
            return f"/{self.protocol.name}"
        return f"/{self.protocol.name}/{text}"


@dataclass(frozen=True, slots=True)
class Multiaddr:
    """
    An immutable multiaddr.

    Operations that "modify" the address return a new instance.

    Attributes:
        segments: Protocol segments, outermost first.
    """

    segments: tuple[Segment, ...] = ()

    @classmethod
    def from_string(cls, text: str) -> Multiaddr:
        """
        Parse the text form of a multiaddr.

        Raises:
            MultiaddrError: If the text is not a well-formed multiaddr.
        """
        if text == "":
            return cls()

        parts = text.split("/")
        if parts[0] != "":
            raise MultiaddrError(f"Multiaddr must start with '/': {text!r}")

        segments: list[Segment] = []
        remaining = iter(parts[1:])
        for name in remaining:
            protocol = protocol_by_name(name)
            if protocol.has_value:
                value = next(remaining, None)
                if value is None:
                    raise MultiaddrError(f"Missing value for protocol {protocol.name!r}")
                segments.append(Segment.from_text(name, value))
            else:
                segments.append(Segment(protocol))

        return cls(tuple(segments))

    @classmethod
    def from_bytes(cls, data: bytes) -> Multiaddr:
        """
        Decode the binary form of a multiaddr.

        Raises:
            MultiaddrError: If the bytes are truncated or use unknown codes.
        """
        segments: list[Segment] = []
        pos = 0
        try:
            while pos < len(data):
                code, consumed = decode_varint(data, pos)
                pos += consumed
                protocol = protocol_by_code(code)

                if protocol.size == VARIABLE_SIZE:
                    length, consumed = decode_varint(data, pos)
                    pos += consumed
                else:
                    length = protocol.size // 8

                value = bytes(data[pos : pos + length])
                if len(value) != length:
                    raise MultiaddrError(f"Truncated {protocol.name} value")
                pos += length

                segment = Segment(protocol, value)
                # Reject values the text form could not represent.
                segment.value_text()
                segments.append(segment)
        except VarintError as e:
            raise MultiaddrError(f"Malformed multiaddr bytes: {e}") from e

        return cls(tuple(segments))

    def to_bytes(self) -> bytes:
        """Encode the multiaddr in binary form."""
        return b"".join(segment.to_bytes() for segment in self.segments)

    @property
    def last(self) -> Segment | None:
        """The innermost segment, or None for the empty address."""
        return self.segments[-1] if self.segments else None

    def pop(self) -> tuple[Multiaddr, Segment | None]:
        """
        Split off the last segment.

        Returns:
            (address without its last segment, removed segment). For the
            empty address this is (the empty address, None).
        """
        if not self.segments:
            return self, None
        return Multiaddr(self.segments[:-1]), self.segments[-1]

    def with_segment(self, segment: Segment) -> Multiaddr:
        """Return a copy with segment appended."""
        return Multiaddr((*self.segments, segment))

    def protocols(self) -> list[str]:
        """Protocol names of all segments, outermost first."""
        return [segment.name for segment in self.segments]

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.segments)

    def __str__(self) -> str:
        return "".join(str(segment) for segment in self.segments)

    def __repr__(self) -> str:
        return f"Multiaddr({self!s})"
