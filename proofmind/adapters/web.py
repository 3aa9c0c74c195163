# proofmind/adapters/web.py
"""
ProofMind Adapters: Web Wallet (redirect flow)

The web wallet is driven by redirects: the dApp sends the user to a hook URL
on the wallet site and receives the outcome as query parameters on its
callback URL.

    {wallet}/hook/login?callbackUrl=...      -> ?address=erd1...
    {wallet}/hook/sign?<tx fields>&callbackUrl=...
                                             -> ?status=signed&signature=...
    {wallet}/hook/logout?callbackUrl=...

RedirectBridge is whatever carries the user there and back (a browser, an
embedded webview); MockRedirectBridge answers from a local signer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Dict
from urllib.parse import urlencode, urlsplit, parse_qsl

from ..errors import TransactionError
from ..models import ProviderKind
from ..transport import NetworkProvider
from ..wire import Transaction, bytes_for_signing, call_data, new_transaction, receiver_of, sender_of
from .base import WalletAdapter, AdapterState, Ed25519Signer


HOOK_LOGIN = "/hook/login"
HOOK_SIGN = "/hook/sign"
HOOK_LOGOUT = "/hook/logout"

DEFAULT_CALLBACK_URL = "http://localhost:3000/"


# =============================================================================
# Bridge
# =============================================================================

class RedirectBridge(ABC):
    """Follows a wallet hook URL and returns the callback query parameters."""

    @abstractmethod
    async def open(self, url: str) -> Dict[str, str]:
        pass


class MockRedirectBridge(RedirectBridge):
    """Web wallet stand-in that signs with a local key."""

    def __init__(self, signer: Ed25519Signer, approve: bool = True):
        self.signer = signer
        self.approve = approve
        self.visited = []

    async def open(self, url: str) -> Dict[str, str]:
        self.visited.append(url)
        parts = urlsplit(url)
        params = dict(parse_qsl(parts.query, keep_blank_values=True))

        if not self.approve:
            return {"status": "cancelled"}

        if parts.path.endswith(HOOK_LOGIN):
            return {"address": self.signer.address}

        if parts.path.endswith(HOOK_SIGN):
            tx = new_transaction(
                sender=params["sender"],
                receiver=params["receiver"],
                gas_limit=int(params["gasLimit"]),
                gas_price=int(params["gasPrice"]),
                chain_id=params["chainID"],
                data=params.get("data", ""),
                nonce=int(params.get("nonce", 0)),
                value=int(params.get("value", 0)),
                version=int(params["version"]),
            )
            signature = self.signer.sign(bytes_for_signing(tx))
            return {"status": "signed", "signature": signature.hex()}

        return {}


# =============================================================================
# Adapter
# =============================================================================

class WebWalletAdapter(WalletAdapter):
    """Web wallet via login/sign hooks."""

    def __init__(
        self,
        wallet_url: str,
        bridge: RedirectBridge,
        callback_url: str = DEFAULT_CALLBACK_URL,
        network: Optional[NetworkProvider] = None,
    ):
        super().__init__(network)
        self._wallet_url = wallet_url.rstrip("/")
        self._bridge = bridge
        self._callback_url = callback_url

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.WEB

    def hook_url(self, hook: str, **params: str) -> str:
        params["callbackUrl"] = self._callback_url
        return f"{self._wallet_url}{hook}?{urlencode(params)}"

    async def login(self) -> bool:
        self._state = AdapterState.CONNECTING
        result = await self._bridge.open(self.hook_url(HOOK_LOGIN))
        address = result.get("address")
        if not address:
            self._state = AdapterState.ERROR
            return False
        self._set_connected(address)
        return True

    async def logout(self) -> None:
        if self.is_logged_in:
            await self._bridge.open(self.hook_url(HOOK_LOGOUT))
        self._set_disconnected()

    async def resume(self, address: str) -> bool:
        # the web wallet keeps no dApp-side session; trust the stored address
        self._set_connected(address)
        return True

    async def sign_transaction(self, tx: Transaction) -> Transaction:
        url = self.hook_url(
            HOOK_SIGN,
            nonce=str(tx.nonce),
            value=str(tx.value),
            receiver=receiver_of(tx),
            sender=sender_of(tx),
            gasPrice=str(tx.gas_price),
            gasLimit=str(tx.gas_limit),
            data=call_data(tx),
            chainID=tx.chain_id,
            version=str(tx.version),
        )
        result = await self._bridge.open(url)
        if result.get("status") != "signed" or not result.get("signature"):
            raise TransactionError(f"Transaction {result.get('status', 'rejected')} in web wallet")
        tx.signature = bytes.fromhex(result["signature"])
        return tx
