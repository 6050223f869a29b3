"""Tests for the network configuration builder."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

import pytest
from pydantic import ValidationError

from sup_network.networking import (
    DEFAULT_CHAIN_SPEC_PROTOCOL_ID,
    BuilderConsumedError,
    CallableExecutor,
    Multiaddr,
    NetworkBuilder,
    NetworkConfig,
    PeerId,
    Task,
    ThreadPoolTaskExecutor,
    builder,
    parse_str_addrs,
)


@dataclass
class RecordingWorker:
    """Stand-in for the network worker that records the configs it receives."""

    configs: list[NetworkConfig] = field(default_factory=list)

    async def start(self, config: NetworkConfig) -> str:
        self.configs.append(config)
        return f"network-{len(self.configs)}"


@pytest.fixture
def worker() -> RecordingWorker:
    """A fresh recording worker."""
    return RecordingWorker()


class TestDefaults:
    """A fresh builder carries the documented defaults."""

    def test_defaults(self) -> None:
        """No executor, 'sup' chain tag, no boot nodes."""
        b = builder()

        assert isinstance(b, NetworkBuilder)
        assert b.executor is None
        assert b.chain_spec_protocol_id == b"sup"
        assert b.boot_nodes == ()

    def test_default_config(self, worker: RecordingWorker) -> None:
        """Building without changes hands the defaults to the worker."""
        handle = asyncio.run(builder().build(worker.start))

        assert handle == "network-1"
        assert worker.configs == [NetworkConfig()]
        assert worker.configs[0].chain_spec_protocol_id == DEFAULT_CHAIN_SPEC_PROTOCOL_ID


class TestChainSpecProtocolId:
    """Tests for the chain tag setters."""

    def test_only_tag_differs(self, worker: RecordingWorker) -> None:
        """Setting the tag changes nothing else."""
        asyncio.run(builder().with_chain_spec_protocol_id(b"dot").build(worker.start))
        asyncio.run(builder().build(worker.start))

        custom, default = worker.configs
        assert custom.chain_spec_protocol_id == b"dot"
        assert custom.copy(chain_spec_protocol_id=b"sup") == default

    def test_last_write_wins(self) -> None:
        """Later calls replace earlier ones."""
        b = builder().with_chain_spec_protocol_id(b"ksm").with_chain_spec_protocol_id(b"dot")
        assert b.chain_spec_protocol_id == b"dot"

    def test_bytes_are_copied(self) -> None:
        """Mutating the caller's buffer afterwards has no effect."""
        tag = bytearray(b"dot")
        b = builder()
        b.set_chain_spec_protocol_id(tag)
        tag[0] = ord("x")

        assert b.chain_spec_protocol_id == b"dot"

    def test_long_and_str_tags(self) -> None:
        """Tags of any length are accepted; strings are UTF-8 encoded."""
        b = builder()
        b.set_chain_spec_protocol_id("polkadot-mainnet")
        assert b.chain_spec_protocol_id == b"polkadot-mainnet"

        b.set_chain_spec_protocol_id(memoryview(bytes(64)))
        assert b.chain_spec_protocol_id == bytes(64)

    def test_empty_tag_accepted_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        """An empty tag is stored as given and logged."""
        b = builder()
        with caplog.at_level(logging.WARNING, logger="sup_network.networking.builder"):
            b.set_chain_spec_protocol_id(b"")

        assert b.chain_spec_protocol_id == b""
        assert "Empty chain spec protocol id" in caplog.text


class TestBootNodes:
    """Tests for the boot node setters."""

    def test_replaces_previous_list(self, peer_id: PeerId, peer_id_2: PeerId) -> None:
        """A second call replaces the first list entirely."""
        a = [(peer_id, Multiaddr.from_string("/ip4/10.0.0.1/tcp/1"))]
        b = [(peer_id_2, Multiaddr.from_string("/ip4/10.0.0.2/tcp/2"))]

        nb = builder().with_boot_nodes(a).with_boot_nodes(b)

        assert nb.boot_nodes == tuple(b)

    def test_empty_clears(self, peer_id: PeerId, addr: Multiaddr) -> None:
        """An empty iterable clears the list."""
        nb = builder().with_boot_nodes([(peer_id, addr)])
        nb.set_boot_nodes([])
        assert nb.boot_nodes == ()

    def test_consumed_eagerly(self, peer_id: PeerId, addr: Multiaddr) -> None:
        """Generators are drained immediately."""
        produced = []

        def nodes():
            produced.append(True)
            yield peer_id, addr

        nb = builder()
        nb.set_boot_nodes(nodes())

        assert produced == [True]
        assert nb.boot_nodes == ((peer_id, addr),)

    def test_order_and_duplicates_preserved(
        self, worker: RecordingWorker, peer_id: PeerId, peer_id_2: PeerId, addr: Multiaddr
    ) -> None:
        """Duplicates are kept and order is preserved through build."""
        nodes = [(peer_id, addr), (peer_id_2, addr), (peer_id, addr)]

        asyncio.run(builder().with_boot_nodes(nodes).build(worker.start))

        assert worker.configs[0].boot_nodes == tuple(nodes)

    def test_rejects_unparsed_address(
        self, worker: RecordingWorker, peer_id: PeerId, addr: Multiaddr
    ) -> None:
        """A string address is refused at set time and the builder stays usable."""
        nb = builder().with_boot_nodes([(peer_id, addr)])

        with pytest.raises(TypeError, match="PeerId, Multiaddr"):
            nb.set_boot_nodes([(peer_id, "/ip4/1.2.3.4/tcp/1")])  # type: ignore[list-item]

        assert nb.boot_nodes == ((peer_id, addr),)
        asyncio.run(nb.build(worker.start))
        assert worker.configs[0].boot_nodes == ((peer_id, addr),)

    def test_rejects_string_peer_id(self, addr: Multiaddr) -> None:
        """The peer id must already be parsed."""
        with pytest.raises(TypeError, match="PeerId, Multiaddr"):
            builder().set_boot_nodes(
                [("QmSk5HQbn6LhUwDiNMseVUjuRYhEtYj4aUZ6WfWoGURpdV", addr)]  # type: ignore[list-item]
            )

    def test_from_parsed_addresses(self, worker: RecordingWorker) -> None:
        """Parsed boot node strings feed straight into the builder."""
        nodes = parse_str_addrs(
            [
                "/ip4/198.51.100.19/tcp/30333/p2p/QmSk5HQbn6LhUwDiNMseVUjuRYhEtYj4aUZ6WfWoGURpdV",
                "/dns4/boot.example.org/tcp/30333/p2p/"
                "16Uiu2HAmLhLvBoYaoZfaMUKuibM6ac163GwKY74c5kiSLg5KvLpY",
            ]
        )

        asyncio.run(builder().with_boot_nodes(nodes).build(worker.start))

        config = worker.configs[0]
        assert [str(addr) for _, addr in config.boot_nodes] == [
            "/ip4/198.51.100.19/tcp/30333",
            "/dns4/boot.example.org/tcp/30333",
        ]


class TestExecutor:
    """Tests for the executor setters."""

    def test_callable_is_wrapped(self) -> None:
        """Plain callables are adapted to the executor interface."""
        received: list[Task] = []
        b = builder().with_executor(received.append)

        assert isinstance(b.executor, CallableExecutor)

    def test_executor_instance_kept(self) -> None:
        """TaskExecutor instances are stored as given."""
        executor = ThreadPoolTaskExecutor(max_workers=1)
        try:
            assert builder().with_executor(executor).executor is executor
        finally:
            executor.shutdown()

    def test_last_write_wins(self, worker: RecordingWorker) -> None:
        """Setting a second executor discards the first."""
        first = CallableExecutor(lambda task: None)
        second = CallableExecutor(lambda task: None)

        asyncio.run(builder().with_executor(first).with_executor(second).build(worker.start))

        assert worker.configs[0].executor is second

    def test_rejects_non_callable(self) -> None:
        """Values that cannot run tasks are rejected."""
        with pytest.raises(TypeError, match="TaskExecutor or callable"):
            builder().set_executor(42)  # type: ignore[arg-type]


class TestSetterForms:
    """The in-place and chaining forms reach the same state."""

    def test_equivalent(self, worker: RecordingWorker, peer_id: PeerId, addr: Multiaddr) -> None:
        """set_* followed by build equals with_* chained into build."""
        executor = CallableExecutor(lambda task: None)

        imperative = builder()
        imperative.set_executor(executor)
        imperative.set_chain_spec_protocol_id(b"dot")
        imperative.set_boot_nodes([(peer_id, addr)])
        asyncio.run(imperative.build(worker.start))

        chained = (
            builder()
            .with_executor(executor)
            .with_chain_spec_protocol_id(b"dot")
            .with_boot_nodes([(peer_id, addr)])
        )
        asyncio.run(chained.build(worker.start))

        assert worker.configs[0] == worker.configs[1]

    def test_with_returns_same_builder(self) -> None:
        """Chaining methods return the builder itself."""
        b = builder()
        assert b.with_chain_spec_protocol_id(b"x") is b
        assert b.with_boot_nodes([]) is b
        assert b.with_executor(lambda task: None) is b


class TestBuild:
    """Tests for the single-use build step."""

    def test_builder_consumed(
        self, worker: RecordingWorker, peer_id: PeerId, addr: Multiaddr
    ) -> None:
        """After build, every mutation and a second build are refused."""
        b = builder()
        asyncio.run(b.build(worker.start))

        with pytest.raises(BuilderConsumedError):
            b.set_chain_spec_protocol_id(b"dot")
        with pytest.raises(BuilderConsumedError):
            b.with_boot_nodes([(peer_id, addr)])
        with pytest.raises(BuilderConsumedError):
            b.set_executor(lambda task: None)
        with pytest.raises(BuilderConsumedError):
            asyncio.run(b.build(worker.start))

        assert len(worker.configs) == 1

    def test_worker_error_propagates(self) -> None:
        """Failures in the worker reach the caller unchanged, and the builder stays consumed."""

        async def failing_start(config: NetworkConfig) -> None:
            raise OSError("address already in use")

        b = builder()
        with pytest.raises(OSError, match="address already in use"):
            asyncio.run(b.build(failing_start))
        with pytest.raises(BuilderConsumedError):
            asyncio.run(b.build(failing_start))

    def test_build_logs_handoff(
        self, worker: RecordingWorker, caplog: pytest.LogCaptureFixture
    ) -> None:
        """The hand-off to the worker is logged."""
        with caplog.at_level(logging.INFO, logger="sup_network.networking.builder"):
            asyncio.run(builder().build(worker.start))

        assert "Starting network with 0 boot nodes" in caplog.text


class TestNetworkConfig:
    """Tests for the immutable configuration record."""

    def test_frozen(self) -> None:
        """Configs cannot be modified."""
        config = NetworkConfig()
        with pytest.raises(ValidationError):
            config.chain_spec_protocol_id = b"dot"  # type: ignore[misc]

    def test_strict_types(self) -> None:
        """Boot nodes must be (PeerId, Multiaddr) pairs."""
        with pytest.raises(ValidationError):
            NetworkConfig(boot_nodes=(("not a peer id", Multiaddr()),))  # type: ignore[arg-type]

    def test_camel_case_alias(self) -> None:
        """Fields can be given by their camelCase alias."""
        config = NetworkConfig.model_validate({"chainSpecProtocolId": b"dot"})
        assert config.chain_spec_protocol_id == b"dot"
