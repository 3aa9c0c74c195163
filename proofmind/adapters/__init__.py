# proofmind/adapters/__init__.py
"""
ProofMind Adapters: Wallet Integration Layer

Adapters:
    WalletAdapter          - Abstract base class for all wallet adapters
    WebWalletAdapter       - Web wallet redirect hooks
    ExtensionAdapter       - MultiversX DeFi Wallet browser extension
    WalletConnectAdapter   - WalletConnect v2 remote pairing (QR)
    HardwareWalletAdapter  - Ledger device

Each adapter wraps a bridge to its external mechanism; the Mock* bridges
sign with a local Ed25519 key for tests and demos.
"""

from .base import (
    WalletAdapter,
    AdapterState,
    Ed25519Signer,
)

from .web import (
    WebWalletAdapter,
    RedirectBridge,
    MockRedirectBridge,
)

from .extension import (
    ExtensionAdapter,
    ExtensionBridge,
    MockExtensionBridge,
)

from .walletconnect import (
    WalletConnectAdapter,
    WCClient,
    MockWCClient,
    WCSession,
    WCPairing,
    WCMetadata,
)

from .hardware import (
    HardwareWalletAdapter,
    DeviceBridge,
    MockLedgerDevice,
)

__all__ = [
    # === Base ===
    "WalletAdapter",
    "AdapterState",
    "Ed25519Signer",

    # === Web ===
    "WebWalletAdapter",
    "RedirectBridge",
    "MockRedirectBridge",

    # === Extension ===
    "ExtensionAdapter",
    "ExtensionBridge",
    "MockExtensionBridge",

    # === WalletConnect ===
    "WalletConnectAdapter",
    "WCClient",
    "MockWCClient",
    "WCSession",
    "WCPairing",
    "WCMetadata",

    # === Hardware ===
    "HardwareWalletAdapter",
    "DeviceBridge",
    "MockLedgerDevice",
]
