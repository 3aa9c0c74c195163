# proofmind/adapters/base.py
"""
ProofMind Adapters: Abstract Wallet Interface

Every wallet backend (web redirect, browser extension, remote pairing,
hardware device) exposes the same minimal capability set:

    login()                      -> bool
    logout()
    get_address()                -> str
    sign_and_send_transaction()  -> tx hash

sign_and_send_transaction is implemented once here: the concrete adapter only
signs (sign_transaction), and the base class broadcasts through the network
provider bound to it.

Concrete adapters talk to their external mechanism through a small bridge
interface (RedirectBridge, ExtensionBridge, WCClient, DeviceBridge). Each
bridge has an in-memory implementation backed by an Ed25519Signer, so the
whole flow can be exercised without a browser or device.

Usage:
    adapter = ExtensionAdapter(bridge=MockExtensionBridge(signer))
    adapter.bind_network(provider)

    if await adapter.login():
        tx_hash = await adapter.sign_and_send_transaction(tx)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Optional

from nacl.signing import SigningKey

from ..errors import NotConnectedError, TransactionError, TransportError
from ..models import ProviderKind
from ..transport import NetworkProvider
from ..wire import Transaction, bytes_for_signing, is_signed, pubkey_to_address


logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================

class AdapterState(Enum):
    """Adapter connection state."""
    DISCONNECTED = auto()
    CONNECTING = auto()
    CONNECTED = auto()
    ERROR = auto()


# =============================================================================
# Local signer (backs the mock bridges)
# =============================================================================

class Ed25519Signer:
    """Ed25519 key pair with its erd1 address."""

    def __init__(self, signing_key: Optional[SigningKey] = None):
        self._key = signing_key or SigningKey.generate()

    @classmethod
    def from_seed(cls, seed: bytes) -> Ed25519Signer:
        """Deterministic signer from a 32-byte seed."""
        return cls(SigningKey(seed))

    @property
    def public_key(self) -> bytes:
        return bytes(self._key.verify_key)

    @property
    def address(self) -> str:
        return pubkey_to_address(self.public_key)

    def sign(self, payload: bytes) -> bytes:
        """Detached 64-byte signature."""
        return self._key.sign(payload).signature

    def sign_transaction(self, tx: Transaction) -> Transaction:
        tx.signature = self.sign(bytes_for_signing(tx))
        return tx


# =============================================================================
# Abstract Base Class
# =============================================================================

class WalletAdapter(ABC):
    """
    Abstract base class for wallet adapters.

    Subclasses implement login/logout and sign_transaction; the session
    manager never needs to know which kind it holds.
    """

    def __init__(self, network: Optional[NetworkProvider] = None):
        self._network = network
        self._state = AdapterState.DISCONNECTED
        self._address: Optional[str] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    @abstractmethod
    def kind(self) -> ProviderKind:
        """Backend kind."""
        pass

    @property
    def state(self) -> AdapterState:
        return self._state

    @property
    def is_logged_in(self) -> bool:
        return self._state == AdapterState.CONNECTED

    def bind_network(self, network: NetworkProvider) -> None:
        """Set the provider used to broadcast signed transactions."""
        self._network = network

    # =========================================================================
    # Capability set
    # =========================================================================

    @abstractmethod
    async def login(self) -> bool:
        """
        Run the backend's login handshake.

        Returns:
            True on success, False if the user declined
        """
        pass

    @abstractmethod
    async def logout(self) -> None:
        pass

    def get_address(self) -> str:
        """
        Raises:
            NotConnectedError: If not logged in
        """
        if not self.is_logged_in or not self._address:
            raise NotConnectedError(f"{self.kind.value} wallet not logged in")
        return self._address

    @abstractmethod
    async def sign_transaction(self, tx: Transaction) -> Transaction:
        """
        Sign ``tx`` in place and return it.

        Raises:
            TransactionError: If the user or device rejects
        """
        pass

    async def sign_and_send_transaction(self, tx: Transaction) -> str:
        """
        Sign and broadcast.

        Returns:
            Transaction hash

        Raises:
            NotConnectedError: If not logged in
            TransactionError: If signing or broadcast fails
        """
        self.get_address()
        if self._network is None:
            raise TransactionError("No network provider bound to wallet adapter")

        try:
            signed = await self.sign_transaction(tx)
        except (TransactionError, NotConnectedError):
            raise
        except Exception as e:
            raise TransactionError(f"Signing failed: {e}")

        if not is_signed(signed):
            raise TransactionError("Wallet returned an unsigned transaction")

        try:
            tx_hash = await self._network.send_transaction(signed)
        except TransportError as e:
            raise TransactionError(f"Broadcast failed: {e}")

        logger.info("Transaction %s sent via %s wallet", tx_hash, self.kind.value)
        return tx_hash

    async def resume(self, address: str) -> bool:
        """
        Re-attach to an existing login without prompting.

        Backends that cannot resume silently return False.
        """
        return False

    # =========================================================================
    # Utility
    # =========================================================================

    def _set_connected(self, address: str) -> None:
        self._address = address
        self._state = AdapterState.CONNECTED

    def _set_disconnected(self) -> None:
        self._address = None
        self._state = AdapterState.DISCONNECTED
