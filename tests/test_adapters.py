# tests/test_adapters.py
"""
ProofMind Adapters: login, signing and broadcast for every wallet kind.

Each adapter runs against its Mock* bridge and the in-memory chain, which
verifies the Ed25519 signature of everything it receives.
"""

from __future__ import annotations

import pytest

from proofmind.adapters import (
    AdapterState,
    ExtensionAdapter,
    HardwareWalletAdapter,
    MockExtensionBridge,
    MockLedgerDevice,
    MockRedirectBridge,
    MockWCClient,
    WalletConnectAdapter,
    WebWalletAdapter,
)
from proofmind.config import DEFAULT_DAPP_METADATA, DEFAULT_RELAY_URL
from proofmind.errors import ConnectionError, NotConnectedError, TransactionError
from proofmind.models import ProviderKind, TransactionStatus
from proofmind.wire import Transaction, build_call_data, is_signed, new_transaction, text_value


WALLET_URL = "https://devnet-wallet.multiversx.com"


def contract_call(sender: str, receiver: str = "", nonce: int = 0) -> Transaction:
    return new_transaction(
        sender=sender,
        receiver=receiver or sender,
        gas_limit=10_000_000,
        gas_price=1_000_000_000,
        chain_id="D",
        data=build_call_data("noop", [text_value("x")]),
        nonce=nonce,
    )


def build(kind, signer, approve=True):
    """Adapter of ``kind`` plus its bridge."""
    if kind == ProviderKind.WEB:
        bridge = MockRedirectBridge(signer, approve=approve)
        return WebWalletAdapter(WALLET_URL, bridge), bridge
    if kind == ProviderKind.EXTENSION:
        bridge = MockExtensionBridge(signer, approve=approve)
        return ExtensionAdapter(bridge), bridge
    if kind == ProviderKind.WALLETCONNECT:
        bridge = MockWCClient(signer, approve=approve)
        return WalletConnectAdapter(bridge, project_id="test-project"), bridge
    bridge = MockLedgerDevice({0: signer}, approve=approve)
    return HardwareWalletAdapter(bridge), bridge


ALL_KINDS = list(ProviderKind)


# =============================================================================
# Common capability set
# =============================================================================

@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ALL_KINDS)
async def test_login_exposes_address(kind, signer):
    adapter, _ = build(kind, signer)
    assert adapter.kind == kind
    assert adapter.state == AdapterState.DISCONNECTED

    assert await adapter.login() is True
    assert adapter.is_logged_in
    assert adapter.get_address() == signer.address


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ALL_KINDS)
async def test_sign_and_send(kind, signer, chain):
    adapter, _ = build(kind, signer)
    adapter.bind_network(chain)
    await adapter.login()

    tx_hash = await adapter.sign_and_send_transaction(
        contract_call(signer.address, chain.contract_address)
    )

    assert len(tx_hash) == 64
    assert len(chain.sent) == 1
    assert is_signed(chain.sent[0])
    assert chain.tx_status[tx_hash] == TransactionStatus.FAIL  # "noop" is not a contract endpoint


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ALL_KINDS)
async def test_logout_clears_address(kind, signer):
    adapter, _ = build(kind, signer)
    await adapter.login()
    await adapter.logout()

    assert adapter.state == AdapterState.DISCONNECTED
    with pytest.raises(NotConnectedError):
        adapter.get_address()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ALL_KINDS)
async def test_signing_refusal(kind, signer, chain):
    adapter, bridge = build(kind, signer)
    adapter.bind_network(chain)
    await adapter.login()
    bridge.approve = False

    with pytest.raises(TransactionError):
        await adapter.sign_and_send_transaction(contract_call(signer.address))
    assert chain.sent == []


@pytest.mark.asyncio
async def test_send_requires_login(signer, chain):
    adapter, _ = build(ProviderKind.EXTENSION, signer)
    adapter.bind_network(chain)
    with pytest.raises(NotConnectedError):
        await adapter.sign_and_send_transaction(contract_call(signer.address))


@pytest.mark.asyncio
async def test_send_requires_network(signer):
    adapter, _ = build(ProviderKind.EXTENSION, signer)
    await adapter.login()
    with pytest.raises(TransactionError, match="No network provider"):
        await adapter.sign_and_send_transaction(contract_call(signer.address))


@pytest.mark.asyncio
async def test_signature_from_other_key_rejected(signer, other_signer, chain):
    # the wallet signs with a key that does not own the sender address
    adapter = ExtensionAdapter(MockExtensionBridge(other_signer))
    adapter.bind_network(chain)
    await adapter.login()

    with pytest.raises(TransactionError, match="invalid signature"):
        await adapter.sign_and_send_transaction(contract_call(signer.address))


# =============================================================================
# Web wallet
# =============================================================================

@pytest.mark.asyncio
async def test_web_hook_urls(signer):
    adapter, bridge = build(ProviderKind.WEB, signer)
    await adapter.login()
    assert bridge.visited[0].startswith(f"{WALLET_URL}/hook/login?callbackUrl=")

    await adapter.sign_transaction(contract_call(signer.address))
    assert bridge.visited[1].startswith(f"{WALLET_URL}/hook/sign?")
    assert "chainID=D" in bridge.visited[1]


@pytest.mark.asyncio
async def test_web_login_cancelled(signer):
    adapter, _ = build(ProviderKind.WEB, signer, approve=False)
    assert await adapter.login() is False
    assert adapter.state == AdapterState.ERROR


@pytest.mark.asyncio
async def test_web_resume_trusts_record(signer):
    adapter, bridge = build(ProviderKind.WEB, signer)
    assert await adapter.resume(signer.address)
    assert adapter.get_address() == signer.address
    assert bridge.visited == []


# =============================================================================
# Extension
# =============================================================================

@pytest.mark.asyncio
async def test_extension_not_installed(signer):
    adapter = ExtensionAdapter(MockExtensionBridge(signer, installed=False))
    with pytest.raises(ConnectionError, match="not installed"):
        await adapter.login()


@pytest.mark.asyncio
async def test_extension_resume(signer):
    bridge = MockExtensionBridge(signer)
    first = ExtensionAdapter(bridge)
    await first.login()

    second = ExtensionAdapter(bridge)
    assert await second.resume(signer.address)
    assert not await ExtensionAdapter(bridge).resume("erd1someoneelse")

    await first.logout()
    assert not await ExtensionAdapter(bridge).resume(signer.address)


# =============================================================================
# WalletConnect
# =============================================================================

@pytest.mark.asyncio
async def test_walletconnect_pairing_and_session(signer):
    adapter, client = build(ProviderKind.WALLETCONNECT, signer)
    assert not client.initialized

    uri = await adapter.get_pairing_uri()
    assert uri.startswith("wc:")
    assert adapter.pairing_uri == uri
    assert client.project_id == "test-project"
    assert client.relay_url == DEFAULT_RELAY_URL
    assert client.metadata.name == DEFAULT_DAPP_METADATA["name"]

    await adapter.login()
    assert adapter.pairing_uri is None
    assert adapter.chain == "mvx:D"
    assert adapter.session.namespaces["mvx"]["accounts"] == [f"mvx:D:{signer.address}"]
    assert adapter.session.relay == DEFAULT_RELAY_URL
    assert len(client.get_sessions()) == 1

    proposal = client.proposals[0]
    assert proposal["relay"] == DEFAULT_RELAY_URL
    assert proposal["proposer"]["metadata"] == DEFAULT_DAPP_METADATA
    assert proposal["requiredNamespaces"]["mvx"]["chains"] == ["mvx:D"]

    await adapter.logout()
    assert client.get_sessions() == []


@pytest.mark.asyncio
async def test_walletconnect_custom_relay_and_metadata(signer):
    client = MockWCClient(signer)
    metadata = {
        "name": "Certificates Desk",
        "description": "Issue certificates",
        "url": "https://certs.example.org",
        "icons": ["https://certs.example.org/icon.png"],
    }
    adapter = WalletConnectAdapter(
        client,
        project_id="desk-project",
        chain_id="T",
        metadata=metadata,
        relay_url="wss://relay.example.org",
    )
    await adapter.login()

    assert client.project_id == "desk-project"
    assert client.relay_url == "wss://relay.example.org"
    assert client.proposals[0]["proposer"]["metadata"] == metadata
    assert adapter.session.relay == "wss://relay.example.org"
    assert adapter.get_address() == signer.address


@pytest.mark.asyncio
async def test_walletconnect_client_initialized_once(signer):
    client = MockWCClient(signer)
    adapter = WalletConnectAdapter(client, project_id="test-project")
    await adapter.get_pairing_uri()
    client.project_id = "changed"
    await adapter.get_pairing_uri()
    assert client.project_id == "changed"


@pytest.mark.asyncio
async def test_walletconnect_pairing_needs_init(signer):
    with pytest.raises(Exception, match="not initialized"):
        await MockWCClient(signer).pair()


@pytest.mark.asyncio
async def test_walletconnect_rejected_pairing(signer):
    adapter, _ = build(ProviderKind.WALLETCONNECT, signer, approve=False)
    with pytest.raises(Exception, match="rejected"):
        await adapter.login()


@pytest.mark.asyncio
async def test_walletconnect_resume(signer):
    client = MockWCClient(signer)
    await WalletConnectAdapter(client).login()

    resumed = WalletConnectAdapter(client)
    assert await resumed.resume(signer.address)
    assert resumed.session is not None


# =============================================================================
# Hardware
# =============================================================================

@pytest.mark.asyncio
async def test_hardware_requires_app(signer):
    device = MockLedgerDevice({0: signer}, app_name="Bitcoin")
    adapter = HardwareWalletAdapter(device)
    with pytest.raises(ConnectionError, match="MultiversX"):
        await adapter.login()
    assert not device.is_open


@pytest.mark.asyncio
async def test_hardware_account_index(signer, other_signer):
    device = MockLedgerDevice({0: signer, 1: other_signer})
    adapter = HardwareWalletAdapter(device, account_index=1)
    await adapter.login()
    assert adapter.get_address() == other_signer.address
