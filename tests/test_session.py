# tests/test_session.py
"""
ProofMind: Wallet Session Manager and durable session record.
"""

from __future__ import annotations

import json

import pytest

from proofmind.adapters import ExtensionAdapter, MockExtensionBridge
from proofmind.context import create_context
from proofmind.errors import ConnectionError, NotConnectedError, TransportError
from proofmind.models import ProviderKind, WalletInfo
from proofmind.session import SessionStore, WalletSessionManager
from proofmind.transport import MockHTTPTransport, MockNetworkProvider, ProxyNetworkProvider


class UnreachableNetwork(MockNetworkProvider):
    async def get_account(self, address):
        raise TransportError("get account: connection refused")


# =============================================================================
# connect / disconnect
# =============================================================================

@pytest.mark.asyncio
async def test_connect_extension(ctx, signer):
    wallet = await ctx.session.connect("extension")

    assert wallet == WalletInfo(
        address=signer.address,
        balance=str(5 * 10**18),
        is_connected=True,
        provider=ProviderKind.EXTENSION,
    )
    assert ctx.session.is_connected
    assert ctx.session.wallet is wallet
    assert ctx.session.require_adapter().kind == ProviderKind.EXTENSION


@pytest.mark.asyncio
@pytest.mark.parametrize("name, kind", [
    ("web", ProviderKind.WEB),
    ("walletconnect", ProviderKind.WALLETCONNECT),
    ("remote-pair", ProviderKind.WALLETCONNECT),
    ("hardware", ProviderKind.HARDWARE),
])
async def test_connect_every_kind(ctx, signer, name, kind):
    wallet = await ctx.session.connect(name)
    assert wallet.provider == kind
    assert wallet.address == signer.address


@pytest.mark.asyncio
async def test_disconnect_without_session_is_noop(ctx):
    await ctx.session.disconnect()
    await ctx.session.disconnect()
    assert not ctx.session.is_connected
    assert ctx.session.wallet is None


@pytest.mark.asyncio
async def test_disconnect_logs_out(ctx, bridges):
    await ctx.session.connect("extension")
    assert bridges.extension.logged_in

    await ctx.session.disconnect()
    assert not bridges.extension.logged_in
    assert not ctx.session.is_connected
    with pytest.raises(NotConnectedError):
        ctx.session.require_adapter()


@pytest.mark.asyncio
async def test_connect_while_active_replaces_session(ctx, bridges):
    await ctx.session.connect("extension")
    wallet = await ctx.session.connect("hardware")

    assert wallet.provider == ProviderKind.HARDWARE
    assert ctx.session.adapter.kind == ProviderKind.HARDWARE
    assert not bridges.extension.logged_in


@pytest.mark.asyncio
async def test_connect_unsupported_kind(chain, signer):
    manager = WalletSessionManager(chain, {
        ProviderKind.EXTENSION: lambda: ExtensionAdapter(MockExtensionBridge(signer)),
    })
    with pytest.raises(ConnectionError, match="Unsupported"):
        await manager.connect("hardware")
    with pytest.raises(ConnectionError, match="Unsupported"):
        await manager.connect("carrier-pigeon")
    assert manager.supported_kinds == [ProviderKind.EXTENSION]


@pytest.mark.asyncio
async def test_connect_user_cancels(ctx, bridges):
    bridges.extension.approve = False
    with pytest.raises(ConnectionError, match="User cancelled login"):
        await ctx.session.connect("extension")
    assert not ctx.session.is_connected


@pytest.mark.asyncio
async def test_connect_login_declined(ctx, bridges):
    bridges.redirect.approve = False
    with pytest.raises(ConnectionError, match="declined"):
        await ctx.session.connect("web")
    assert ctx.session.wallet is None


@pytest.mark.asyncio
async def test_connect_adapter_error_passes_reason(ctx, bridges):
    bridges.extension.installed = False
    with pytest.raises(ConnectionError, match="not installed"):
        await ctx.session.connect("extension")


@pytest.mark.asyncio
async def test_connect_balance_failure(settings, bridges):
    ctx = create_context(settings, network=UnreachableNetwork("erd1contract"), bridges=bridges)
    with pytest.raises(ConnectionError, match="connection refused"):
        await ctx.session.connect("extension")
    assert not ctx.session.is_connected
    assert not bridges.extension.logged_in



@pytest.mark.asyncio
@pytest.mark.parametrize("account", [
    {"nonce": "abc", "balance": "1000"},
    {"nonce": 1, "balance": "12.5"},
    {"nonce": [1], "balance": "1000"},
])
async def test_connect_malformed_account(settings, bridges, signer, account):
    transport = MockHTTPTransport()
    transport.queue_response({
        "data": {"account": dict(account, address=signer.address)},
        "error": "",
        "code": "successful",
    })
    network = ProxyNetworkProvider("https://gateway.test", transport=transport)
    ctx = create_context(settings, network=network, bridges=bridges)

    with pytest.raises(ConnectionError, match="malformed account data"):
        await ctx.session.connect("extension")
    assert not ctx.session.is_connected
    assert not bridges.extension.logged_in


@pytest.mark.asyncio
async def test_walletconnect_settings_reach_client(settings, chain, bridges):
    settings = settings.model_copy(update={
        "walletconnect_project_id": "proofmind-cloud",
        "walletconnect_relay_url": "wss://relay.example.org",
        "dapp_name": "ProofMind Desk",
        "dapp_icon": "",
    })
    ctx = create_context(settings, network=chain, bridges=bridges)
    await ctx.session.connect("walletconnect")

    client = bridges.walletconnect
    assert client.project_id == "proofmind-cloud"
    assert client.relay_url == "wss://relay.example.org"
    assert client.metadata.name == "ProofMind Desk"
    assert client.metadata.icons == []
    assert client.proposals[0]["relay"] == "wss://relay.example.org"
    assert ctx.session.adapter.session.relay == "wss://relay.example.org"


@pytest.mark.asyncio
async def test_refresh_balance(ctx, chain, signer):
    with pytest.raises(NotConnectedError):
        await ctx.session.refresh_balance()

    await ctx.session.connect("extension")
    chain.fund(signer.address, 1)
    wallet = await ctx.session.refresh_balance()
    assert wallet.balance == str(5 * 10**18 + 1)


# =============================================================================
# restore
# =============================================================================

@pytest.mark.asyncio
async def test_restore_from_store(ctx, settings, chain, bridges, signer):
    wallet = await ctx.session.connect("extension")
    ctx.session_store.save(wallet)

    # next start: same bridges, fresh context
    restarted = create_context(settings, network=chain, bridges=bridges)
    restored = await restarted.session.restore(restarted.session_store.load())

    assert restored is not None
    assert restored.address == signer.address
    assert restored.provider == ProviderKind.EXTENSION
    assert restarted.session.is_connected


@pytest.mark.asyncio
async def test_restore_refreshes_balance(ctx, signer):
    record = WalletInfo(address=signer.address, balance="1", provider=ProviderKind.WEB).to_record()
    restored = await ctx.session.restore(record)
    assert restored.balance == str(5 * 10**18)


@pytest.mark.asyncio
@pytest.mark.parametrize("record", [
    None,
    {},
    {"address": "erd1abc", "provider": "fax"},
])
async def test_restore_unusable_record(ctx, record):
    assert await ctx.session.restore(record) is None
    assert not ctx.session.is_connected


@pytest.mark.asyncio
async def test_restore_when_backend_logged_out(ctx, signer):
    record = WalletInfo(address=signer.address, provider=ProviderKind.EXTENSION).to_record()
    assert await ctx.session.restore(record) is None


# =============================================================================
# SessionStore
# =============================================================================

def test_store_roundtrip(tmp_path):
    store = SessionStore(tmp_path / "session.json")
    assert store.load() is None

    wallet = WalletInfo(address="erd1abc", balance="10", provider=ProviderKind.WALLETCONNECT)
    store.save(wallet)
    data = json.loads(store.path.read_text())
    assert data == {"mvx-proofmind-wallet": wallet.to_record()}
    assert WalletInfo.from_record(store.load()) == wallet

    store.clear()
    assert store.load() is None


def test_store_clear_keeps_other_keys(tmp_path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"theme": "dark"}))
    store = SessionStore(path)
    store.save(WalletInfo(address="erd1abc"))
    store.clear()
    assert json.loads(path.read_text()) == {"theme": "dark"}


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"mvx-proofmind-wallet": "oops"}'])
def test_store_corrupt_record_is_absent(tmp_path, content):
    path = tmp_path / "session.json"
    path.write_text(content)
    assert SessionStore(path).load() is None
