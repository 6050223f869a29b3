"""
Shared pytest fixtures for networking tests.

Provides peer ids and addresses.
"""

from __future__ import annotations

import pytest

from sup_network.networking import Multiaddr, PeerId

# -----------------------------------------------------------------------------
# Peer and Address Fixtures
# -----------------------------------------------------------------------------

EXAMPLE_PEER_ID = "QmSk5HQbn6LhUwDiNMseVUjuRYhEtYj4aUZ6WfWoGURpdV"
"""sha2-256 peer id used in the libp2p documentation examples."""

EXAMPLE_ADDR = "/ip4/198.51.100.19/tcp/30333"

SECP256K1_PEER_ID = "16Uiu2HAmLhLvBoYaoZfaMUKuibM6ac163GwKY74c5kiSLg5KvLpY"
"""Peer id of the secp256k1 key from the libp2p peer-id test vectors."""


@pytest.fixture
def peer_id() -> PeerId:
    """Primary test peer ID."""
    return PeerId.from_base58(EXAMPLE_PEER_ID)


@pytest.fixture
def peer_id_2() -> PeerId:
    """Secondary test peer ID."""
    return PeerId.from_base58(SECP256K1_PEER_ID)


@pytest.fixture
def addr() -> Multiaddr:
    """Transport address without a peer id."""
    return Multiaddr.from_string(EXAMPLE_ADDR)
