# proofmind/adapters/extension.py
"""
ProofMind Adapters: Browser Extension

Integration with the MultiversX DeFi Wallet browser extension, reached
through a request/response bridge (the extension's injected provider in a
browser, or MockExtensionBridge in tests).

Bridge methods:
    init              -> bool    extension present and ready
    login             -> {"address": "erd1..."}
    getAccount        -> {"address": "erd1..."} or {}
    signTransactions  -> [{"signature": "<hex>"}, ...]
    logout            -> bool
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Any, List

from ..errors import ConnectionError, TransactionError
from ..models import ProviderKind
from ..transport import NetworkProvider
from ..wire import Transaction, bytes_for_signing, transaction_from_dict, transaction_to_dict
from .base import WalletAdapter, AdapterState, Ed25519Signer


EXT_INIT = "init"
EXT_LOGIN = "login"
EXT_GET_ACCOUNT = "getAccount"
EXT_SIGN_TRANSACTIONS = "signTransactions"
EXT_LOGOUT = "logout"


# =============================================================================
# Bridge
# =============================================================================

class ExtensionBridge(ABC):
    """Injected extension provider."""

    @abstractmethod
    async def request(self, method: str, params: Any = None) -> Any:
        pass


class MockExtensionBridge(ExtensionBridge):
    """Extension stand-in that signs with a local key."""

    def __init__(self, signer: Ed25519Signer, installed: bool = True, approve: bool = True):
        self.signer = signer
        self.installed = installed
        self.approve = approve
        self.logged_in = False
        self.calls: List[str] = []

    async def request(self, method: str, params: Any = None) -> Any:
        self.calls.append(method)

        if method == EXT_INIT:
            return self.installed

        if method == EXT_LOGIN:
            if not self.approve:
                raise Exception("User cancelled login")
            self.logged_in = True
            return {"address": self.signer.address}

        if method == EXT_GET_ACCOUNT:
            return {"address": self.signer.address} if self.logged_in else {}

        if method == EXT_SIGN_TRANSACTIONS:
            if not self.approve:
                raise Exception("Transaction canceled")
            return [
                {"signature": self.signer.sign(bytes_for_signing(transaction_from_dict(body))).hex()}
                for body in params["transactions"]
            ]

        if method == EXT_LOGOUT:
            self.logged_in = False
            return True

        raise Exception(f"Unsupported method: {method}")


# =============================================================================
# Adapter
# =============================================================================

class ExtensionAdapter(WalletAdapter):
    """MultiversX DeFi Wallet extension adapter."""

    def __init__(self, bridge: ExtensionBridge, network: Optional[NetworkProvider] = None):
        super().__init__(network)
        self._bridge = bridge

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.EXTENSION

    async def _init(self) -> None:
        if not await self._bridge.request(EXT_INIT):
            raise ConnectionError("MultiversX DeFi Wallet extension is not installed")

    async def login(self) -> bool:
        self._state = AdapterState.CONNECTING
        await self._init()
        account = await self._bridge.request(EXT_LOGIN)
        address = (account or {}).get("address")
        if not address:
            self._state = AdapterState.ERROR
            return False
        self._set_connected(address)
        return True

    async def logout(self) -> None:
        if self.is_logged_in:
            await self._bridge.request(EXT_LOGOUT)
        self._set_disconnected()

    async def resume(self, address: str) -> bool:
        await self._init()
        account = await self._bridge.request(EXT_GET_ACCOUNT) or {}
        if account.get("address") != address:
            return False
        self._set_connected(address)
        return True

    async def sign_transaction(self, tx: Transaction) -> Transaction:
        try:
            results = await self._bridge.request(
                EXT_SIGN_TRANSACTIONS, {"transactions": [transaction_to_dict(tx)]}
            )
        except Exception as e:
            raise TransactionError(f"Extension rejected transaction: {e}")
        if not results or not results[0].get("signature"):
            raise TransactionError("Extension returned no signature")
        tx.signature = bytes.fromhex(results[0]["signature"])
        return tx
