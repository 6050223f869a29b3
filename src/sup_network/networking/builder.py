"""
Network configuration builder.

Startup parameters are collected on a mutable `NetworkBuilder` and frozen
into a `NetworkConfig` when `build` hands them to the network worker::

    boot_nodes = parse_str_addrs(["/ip4/198.51.100.19/tcp/30333/p2p/Qm..."])

    network = await (
        builder()
        .with_chain_spec_protocol_id(b"dot")
        .with_boot_nodes(boot_nodes)
        .build(start_network)
    )

Every `with_*` method is the chaining form of the matching `set_*` method
and behaves identically. A builder can be built once; afterwards every
method raises `BuilderConsumedError`.

The worker itself is not part of this package. `build` takes its start
coroutine function and returns whatever handle it produces.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Self, TypeVar

from pydantic import InstanceOf

from sup_network.types import StrictBaseModel

from .config import DEFAULT_CHAIN_SPEC_PROTOCOL_ID
from .executor import CallableExecutor, Task, TaskExecutor
from .multiaddr import Multiaddr
from .peer_id import PeerId

__all__ = [
    "BootNode",
    "BuilderConsumedError",
    "NetworkBuilder",
    "NetworkConfig",
    "builder",
]

logger = logging.getLogger(__name__)

BootNode = tuple[PeerId, Multiaddr]
"""A peer known at startup, with the address to reach it."""

HandleT = TypeVar("HandleT")

BytesLike = bytes | bytearray | memoryview | str
"""Values accepted as a chain tag. Strings are UTF-8 encoded."""


class NetworkConfig(StrictBaseModel):
    """Immutable startup parameters consumed by the network worker."""

    executor: InstanceOf[TaskExecutor] | None = None
    """How to spawn background tasks. None lets the worker use a thread pool."""

    chain_spec_protocol_id: bytes = DEFAULT_CHAIN_SPEC_PROTOCOL_ID
    """Short chain tag used to detect incompatible peers early."""

    boot_nodes: tuple[tuple[InstanceOf[PeerId], InstanceOf[Multiaddr]], ...] = ()
    """Peers known at startup, in the order they were given."""


class BuilderConsumedError(RuntimeError):
    """Raised when a builder is used after `build` was called."""

    def __init__(self) -> None:
        super().__init__("Network builder was already consumed by build()")


class NetworkBuilder:
    """Prototype of a network, configured before it starts."""

    def __init__(self) -> None:
        self._executor: TaskExecutor | None = None
        self._chain_spec_protocol_id: bytes = DEFAULT_CHAIN_SPEC_PROTOCOL_ID
        self._boot_nodes: list[BootNode] = []
        self._consumed = False

    def _check_not_consumed(self) -> None:
        if self._consumed:
            raise BuilderConsumedError()

    @property
    def executor(self) -> TaskExecutor | None:
        """Currently configured executor."""
        return self._executor

    @property
    def chain_spec_protocol_id(self) -> bytes:
        """Currently configured chain tag."""
        return self._chain_spec_protocol_id

    @property
    def boot_nodes(self) -> tuple[BootNode, ...]:
        """Currently configured boot nodes."""
        return tuple(self._boot_nodes)

    def set_executor(self, executor: TaskExecutor | Callable[[Task], object]) -> None:
        """
        Sets how to spawn background tasks, replacing any previous executor.

        Args:
            executor: A `TaskExecutor`, or a plain callable that accepts a
                coroutine and arranges for it to run.

        Raises:
            TypeError: If executor is neither.
        """
        self._check_not_consumed()
        if not isinstance(executor, TaskExecutor):
            if not callable(executor):
                raise TypeError(f"Expected a TaskExecutor or callable, got {executor!r}")
            executor = CallableExecutor(executor)
        self._executor = executor

    def with_executor(self, executor: TaskExecutor | Callable[[Task], object]) -> Self:
        """Sets how to spawn background tasks."""
        self.set_executor(executor)
        return self

    def set_boot_nodes(self, nodes: Iterable[BootNode]) -> None:
        """
        Sets the list of bootstrap nodes to use.

        A **bootstrap node** is a node known from the network at startup.
        The previous list is replaced, not extended.

        Raises:
            TypeError: If an entry is not a (PeerId, Multiaddr) pair. The
                previous list is kept.
        """
        self._check_not_consumed()
        boot_nodes: list[BootNode] = []
        for peer_id, addr in nodes:
            if not isinstance(peer_id, PeerId) or not isinstance(addr, Multiaddr):
                raise TypeError(
                    f"Expected a (PeerId, Multiaddr) boot node, got ({peer_id!r}, {addr!r})"
                )
            boot_nodes.append((peer_id, addr))
        self._boot_nodes = boot_nodes

    def with_boot_nodes(self, nodes: Iterable[BootNode]) -> Self:
        """Sets the list of bootstrap nodes to use."""
        self.set_boot_nodes(nodes)
        return self

    def set_chain_spec_protocol_id(self, protocol_id: BytesLike) -> None:
        """
        Sets the name of the chain used on the network to identify incompatible peers earlier.

        The bytes are copied. Strings are UTF-8 encoded.
        """
        self._check_not_consumed()
        if isinstance(protocol_id, str):
            protocol_id = protocol_id.encode("utf-8")
        self._chain_spec_protocol_id = bytes(protocol_id)
        if not self._chain_spec_protocol_id:
            logger.warning("Empty chain spec protocol id: incompatible peers will not be detected")

    def with_chain_spec_protocol_id(self, protocol_id: BytesLike) -> Self:
        """Sets the name of the chain used on the network to identify incompatible peers earlier."""
        self.set_chain_spec_protocol_id(protocol_id)
        return self

    async def build(self, start: Callable[[NetworkConfig], Awaitable[HandleT]]) -> HandleT:
        """
        Starts the networking.

        The builder is consumed: its settings are frozen into a
        `NetworkConfig` which is handed to start. Errors raised by start
        propagate unchanged.

        Args:
            start: The worker's start coroutine function.

        Returns:
            The network handle returned by start.

        Raises:
            BuilderConsumedError: If build was already called.
        """
        self._check_not_consumed()
        config = NetworkConfig(
            executor=self._executor,
            chain_spec_protocol_id=self._chain_spec_protocol_id,
            boot_nodes=tuple(self._boot_nodes),
        )
        self._consumed = True

        logger.info(
            "Starting network with %d boot nodes (chain spec protocol id %r)",
            len(config.boot_nodes),
            config.chain_spec_protocol_id,
        )
        for peer_id, addr in config.boot_nodes:
            logger.debug("Boot node %s at %s", peer_id, addr)

        return await start(config)

    def __repr__(self) -> str:
        return (
            f"NetworkBuilder(chain_spec_protocol_id={self._chain_spec_protocol_id!r}, "
            f"boot_nodes={len(self._boot_nodes)}, executor={self._executor!r}, "
            f"consumed={self._consumed})"
        )


def builder() -> NetworkBuilder:
    """Creates a new prototype of the network."""
    return NetworkBuilder()
