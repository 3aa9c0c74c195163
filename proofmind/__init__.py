# proofmind/__init__.py
"""
ProofMind: MultiversX Certificate Access Layer

Connect a MultiversX wallet, submit certificate records to the ProofMind
smart contract, and read back certificates and aggregate statistics.

Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │  proofmind                                              │
    │  ├── models.py        # Certificate, WalletInfo, ...    │
    │  ├── errors.py        # ProofMindError family           │
    │  ├── config.py        # Settings (pydantic-settings)    │
    │  ├── validation.py    # Request shape checks            │
    │  │                                                      │
    │  ├── wire/            # multiversx-sdk: ABI, txs        │
    │  ├── transport/       # Proxy gateway client (httpx)    │
    │  ├── adapters/        # Web / extension / WC / Ledger   │
    │  │                                                      │
    │  ├── session.py       # Wallet session manager          │
    │  ├── gateway.py       # Contract gateway                │
    │  ├── store.py         # Certificate store + dashboard   │
    │  └── context.py       # AppContext wiring               │
    └─────────────────────────────────────────────────────────┘
"""

__version__ = "0.1.0"

# =============================================================================
# Data model / errors / config
# =============================================================================

from .models import (
    Category,
    VerificationStatus,
    ProviderKind,
    Certificate,
    CreateCertificateRequest,
    UpdateCertificateRequest,
    WalletInfo,
    NetworkConfig,
    TransactionStatus,
    CategoryStats,
    DashboardStats,
    CERTIFICATE_CATEGORIES,
)

from .errors import (
    ProofMindError,
    ConnectionError,
    NotConnectedError,
    ValidationError,
    TransactionError,
    TransportError,
    QueryError,
    AddressError,
)

from .config import Settings, NETWORK_PRESETS

# =============================================================================
# Components
# =============================================================================

from .session import WalletSessionManager, SessionStore
from .gateway import ContractGateway
from .store import CertificateStore, CertificateFilter
from .context import AppContext, WalletBridges, create_context, demo_bridges

__all__ = [
    "__version__",
    # Models
    "Category",
    "VerificationStatus",
    "ProviderKind",
    "Certificate",
    "CreateCertificateRequest",
    "UpdateCertificateRequest",
    "WalletInfo",
    "NetworkConfig",
    "TransactionStatus",
    "CategoryStats",
    "DashboardStats",
    "CERTIFICATE_CATEGORIES",
    # Errors
    "ProofMindError",
    "ConnectionError",
    "NotConnectedError",
    "ValidationError",
    "TransactionError",
    "TransportError",
    "QueryError",
    "AddressError",
    # Config
    "Settings",
    "NETWORK_PRESETS",
    # Components
    "WalletSessionManager",
    "SessionStore",
    "ContractGateway",
    "CertificateStore",
    "CertificateFilter",
    "AppContext",
    "WalletBridges",
    "create_context",
    "demo_bridges",
]
