# proofmind/context.py
"""
ProofMind: Application Context

Builds the object graph once at startup and hands it to whoever needs it.
There is no module-level instance; callers keep the AppContext they created.

Wallet bridges are supplied by the embedding application (a browser shell,
a device transport). Kinds without a bridge are simply not offered by the
session manager. demo_bridges() wires all four kinds to one local key.

Usage:
    ctx = create_context(Settings(contract_address="erd1qqq..."), bridges=bridges)
    wallet = await ctx.session.connect("extension")
    ctx.session_store.save(wallet)
    ...
    await ctx.aclose()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Dict

from .adapters import (
    Ed25519Signer,
    WebWalletAdapter,
    ExtensionAdapter,
    WalletConnectAdapter,
    HardwareWalletAdapter,
    RedirectBridge,
    ExtensionBridge,
    WCClient,
    DeviceBridge,
    MockRedirectBridge,
    MockExtensionBridge,
    MockWCClient,
    MockLedgerDevice,
)
from .config import Settings
from .gateway import ContractGateway
from .models import NetworkConfig, ProviderKind
from .session import WalletSessionManager, SessionStore, AdapterFactory
from .store import CertificateStore
from .transport import NetworkProvider, ProxyNetworkProvider


logger = logging.getLogger(__name__)


@dataclass
class WalletBridges:
    """External mechanisms behind each wallet kind."""
    redirect: Optional[RedirectBridge] = None
    extension: Optional[ExtensionBridge] = None
    walletconnect: Optional[WCClient] = None
    device: Optional[DeviceBridge] = None


def demo_bridges(signer: Optional[Ed25519Signer] = None) -> WalletBridges:
    """In-memory bridges that all sign with ``signer``."""
    signer = signer or Ed25519Signer()
    return WalletBridges(
        redirect=MockRedirectBridge(signer),
        extension=MockExtensionBridge(signer),
        walletconnect=MockWCClient(signer),
        device=MockLedgerDevice({0: signer}),
    )


def adapter_factories(
    settings: Settings,
    config: NetworkConfig,
    bridges: WalletBridges,
) -> Dict[ProviderKind, AdapterFactory]:
    """One factory per kind that has a bridge."""
    factories: Dict[ProviderKind, AdapterFactory] = {}
    if bridges.redirect is not None:
        factories[ProviderKind.WEB] = lambda: WebWalletAdapter(config.wallet_url, bridges.redirect)
    if bridges.extension is not None:
        factories[ProviderKind.EXTENSION] = lambda: ExtensionAdapter(bridges.extension)
    if bridges.walletconnect is not None:
        factories[ProviderKind.WALLETCONNECT] = lambda: WalletConnectAdapter(
            bridges.walletconnect,
            project_id=settings.walletconnect_project_id,
            chain_id=config.chain_id,
            metadata=settings.dapp_metadata(),
            relay_url=settings.walletconnect_relay_url,
        )
    if bridges.device is not None:
        factories[ProviderKind.HARDWARE] = lambda: HardwareWalletAdapter(bridges.device)
    return factories


@dataclass
class AppContext:
    """Everything the application needs, built once."""
    settings: Settings
    config: NetworkConfig
    network: NetworkProvider
    session: WalletSessionManager
    gateway: ContractGateway
    store: CertificateStore
    session_store: SessionStore

    async def aclose(self) -> None:
        """Release the HTTP client."""
        await self.network.aclose()


def create_context(
    settings: Optional[Settings] = None,
    network: Optional[NetworkProvider] = None,
    bridges: Optional[WalletBridges] = None,
    factories: Optional[Dict[ProviderKind, AdapterFactory]] = None,
) -> AppContext:
    """
    Build the application context.

    Args:
        settings: Settings (read from the environment if None)
        network: Network provider (proxy gateway client if None)
        bridges: Wallet bridges used to build the default adapter factories
        factories: Explicit adapter factories; overrides ``bridges``
    """
    settings = settings or Settings()
    config = settings.network_config()
    if network is None:
        network = ProxyNetworkProvider(config.api_url, timeout=settings.request_timeout)
    if factories is None:
        factories = adapter_factories(settings, config, bridges or WalletBridges())

    session = WalletSessionManager(network, factories)
    gateway = ContractGateway(config, network, session)
    logger.debug("Context ready for %s (chain %s)", settings.network, config.chain_id)

    return AppContext(
        settings=settings,
        config=config,
        network=network,
        session=session,
        gateway=gateway,
        store=CertificateStore(
            gateway,
            session,
            poll_interval=settings.tx_poll_interval,
            wait_timeout=settings.tx_wait_timeout,
        ),
        session_store=SessionStore(settings.session_file),
    )
