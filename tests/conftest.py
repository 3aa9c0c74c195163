# tests/conftest.py
"""Shared fixtures: one local key, an in-memory chain, and a wired context."""

from __future__ import annotations

import pytest

from proofmind.adapters import Ed25519Signer
from proofmind.config import Settings
from proofmind.context import create_context, demo_bridges
from proofmind.transport import MockNetworkProvider
from proofmind.wire import pubkey_to_address


CONTRACT = pubkey_to_address(bytes(8) + b"\x05\x00" + bytes(21) + b"\x01")
FIXED_TIME = 1_717_200_000  # 2024-06-01 00:00:00 UTC


@pytest.fixture
def signer() -> Ed25519Signer:
    return Ed25519Signer.from_seed(b"\x07" * 32)


@pytest.fixture
def other_signer() -> Ed25519Signer:
    return Ed25519Signer.from_seed(b"\x09" * 32)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        network="devnet",
        contract_address=CONTRACT,
        session_file=str(tmp_path / "session.json"),
    )


@pytest.fixture
def chain(signer) -> MockNetworkProvider:
    network = MockNetworkProvider(CONTRACT, clock=lambda: FIXED_TIME)
    network.fund(signer.address, 5 * 10**18)
    return network


@pytest.fixture
def bridges(signer):
    return demo_bridges(signer)


@pytest.fixture
def ctx(settings, chain, bridges):
    return create_context(settings, network=chain, bridges=bridges)


@pytest.fixture
def pending_chain(signer) -> MockNetworkProvider:
    """Chain that executes on the first status poll after one 404."""
    network = MockNetworkProvider(CONTRACT, clock=lambda: FIXED_TIME, execute_on_poll=True, unindexed_polls=1)
    network.fund(signer.address, 5 * 10**18)
    return network


@pytest.fixture
def pending_ctx(settings, pending_chain, bridges):
    settings = settings.model_copy(update={"tx_poll_interval": 0.0})
    return create_context(settings, network=pending_chain, bridges=bridges)
