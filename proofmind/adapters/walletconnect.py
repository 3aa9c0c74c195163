# proofmind/adapters/walletconnect.py
"""
ProofMind Adapters: WalletConnect v2 (remote pairing)

Connects a mobile wallet (xPortal) by pairing through the WalletConnect
relay: the dApp shows the pairing URI as a QR code, the wallet approves a
session for the "mvx" namespace, and signing requests are routed to it by
session topic.

Namespace:
    chains:   ["mvx:D"]
    accounts: ["mvx:D:erd1..."]
    methods:  mvx_signTransaction, mvx_signTransactions, mvx_signMessage

Usage:
    adapter = WalletConnectAdapter(client, project_id="...", chain_id="D")
    uri = await adapter.get_pairing_uri()   # render as QR
    await adapter.login()                   # waits for approval
"""

from __future__ import annotations

import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from ..config import DEFAULT_RELAY_URL, DEFAULT_DAPP_METADATA
from ..errors import TransactionError
from ..models import ProviderKind
from ..transport import NetworkProvider
from ..wire import Transaction, bytes_for_signing, transaction_from_dict, transaction_to_dict
from .base import WalletAdapter, AdapterState, Ed25519Signer


# =============================================================================
# Constants
# =============================================================================

MVX_NAMESPACE = "mvx"
MVX_SIGN_TRANSACTION = "mvx_signTransaction"
MVX_SIGN_TRANSACTIONS = "mvx_signTransactions"
MVX_SIGN_MESSAGE = "mvx_signMessage"

PAIRING_TTL = 300
SESSION_TTL = 7 * 86400


# =============================================================================
# WalletConnect Types
# =============================================================================

@dataclass
class WCMetadata:
    """WalletConnect metadata for dApp or wallet."""
    name: str
    description: str
    url: str
    icons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "url": self.url,
            "icons": self.icons,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> WCMetadata:
        return cls(
            name=data.get("name", "Unknown"),
            description=data.get("description", ""),
            url=data.get("url", ""),
            icons=data.get("icons", []),
        )


@dataclass
class WCPairing:
    """Pending pairing shown to the user as a QR code."""
    topic: str
    uri: str
    expiry: int

    @property
    def is_expired(self) -> bool:
        return time.time() > self.expiry


@dataclass
class WCSession:
    """Settled session."""
    topic: str
    namespaces: Dict[str, Any]
    expiry: int
    relay: str = DEFAULT_RELAY_URL
    peer_metadata: Optional[WCMetadata] = None

    @property
    def is_expired(self) -> bool:
        return time.time() > self.expiry

    def get_accounts(self, namespace: str = MVX_NAMESPACE) -> List[str]:
        # mvx:D:erd1... -> erd1...
        accounts = self.namespaces.get(namespace, {}).get("accounts", [])
        return [a.split(":")[-1] for a in accounts]


# =============================================================================
# Client
# =============================================================================

class WCClient(ABC):
    """Sign client talking to the relay."""

    @abstractmethod
    async def init(self, project_id: str, metadata: WCMetadata, relay_url: str = DEFAULT_RELAY_URL) -> None:
        """Register the dApp with the relay; required before pairing."""
        pass

    @abstractmethod
    async def pair(self) -> WCPairing:
        pass

    @abstractmethod
    async def connect(self, required_namespaces: Dict[str, Any], pairing_topic: str) -> WCSession:
        """Propose a session and wait for the wallet's answer."""
        pass

    @abstractmethod
    async def request(self, topic: str, chain_id: str, request: Dict[str, Any]) -> Any:
        pass

    @abstractmethod
    async def disconnect(self, topic: str, reason: str = "User disconnected") -> None:
        pass

    @abstractmethod
    def get_sessions(self) -> List[WCSession]:
        pass


class MockWCClient(WCClient):
    """
    Mock WalletConnect client for testing.

    Plays both the relay and the paired wallet, signing with a local key.
    """

    def __init__(self, signer: Ed25519Signer, approve: bool = True):
        self.signer = signer
        self.approve = approve
        self.project_id: Optional[str] = None
        self.metadata: Optional[WCMetadata] = None
        self.relay_url = DEFAULT_RELAY_URL
        self.proposals: List[Dict[str, Any]] = []
        self._pairings: Dict[str, WCPairing] = {}
        self._sessions: Dict[str, WCSession] = {}

    @property
    def initialized(self) -> bool:
        return self.project_id is not None

    async def init(self, project_id: str, metadata: WCMetadata, relay_url: str = DEFAULT_RELAY_URL) -> None:
        self.project_id = project_id
        self.metadata = metadata
        self.relay_url = relay_url

    async def pair(self) -> WCPairing:
        if not self.initialized:
            raise Exception("Client not initialized")
        topic = secrets.token_hex(32)
        uri = f"wc:{topic}@2?relay-protocol=irn&symKey={secrets.token_hex(32)}"
        pairing = WCPairing(topic=topic, uri=uri, expiry=int(time.time()) + PAIRING_TTL)
        self._pairings[topic] = pairing
        return pairing

    async def connect(self, required_namespaces: Dict[str, Any], pairing_topic: str) -> WCSession:
        if pairing_topic not in self._pairings:
            raise Exception("Unknown pairing")
        self.proposals.append({
            "pairingTopic": pairing_topic,
            "requiredNamespaces": required_namespaces,
            "proposer": {"metadata": self.metadata.to_dict() if self.metadata else {}},
            "relay": self.relay_url,
        })
        if not self.approve:
            raise Exception("User rejected connection")

        namespaces = {}
        for key, required in required_namespaces.items():
            chains = required.get("chains", [])
            namespaces[key] = {
                "chains": chains,
                "accounts": [f"{chain}:{self.signer.address}" for chain in chains],
                "methods": required.get("methods", []),
                "events": required.get("events", []),
            }

        session = WCSession(
            topic=secrets.token_hex(32),
            namespaces=namespaces,
            expiry=int(time.time()) + SESSION_TTL,
            relay=self.relay_url,
            peer_metadata=WCMetadata(name="Mock xPortal", description="", url=""),
        )
        self._sessions[session.topic] = session
        return session

    async def request(self, topic: str, chain_id: str, request: Dict[str, Any]) -> Any:
        session = self._sessions.get(topic)
        if session is None:
            raise Exception("Session not found")
        if session.is_expired:
            raise Exception("Session expired")
        if not self.approve:
            raise Exception("User rejected request")

        method = request.get("method")
        if method == MVX_SIGN_TRANSACTION:
            tx = transaction_from_dict(request["params"]["transaction"])
            return {"signature": self.signer.sign(bytes_for_signing(tx)).hex()}
        raise Exception(f"Method not supported: {method}")

    async def disconnect(self, topic: str, reason: str = "User disconnected") -> None:
        self._sessions.pop(topic, None)

    def get_sessions(self) -> List[WCSession]:
        return [s for s in self._sessions.values() if not s.is_expired]


# =============================================================================
# WalletConnect Adapter
# =============================================================================

class WalletConnectAdapter(WalletAdapter):
    """Remote-pairing adapter over WalletConnect v2."""

    def __init__(
        self,
        client: WCClient,
        project_id: str = "",
        chain_id: str = "D",
        metadata: Optional[Dict[str, Any]] = None,
        relay_url: str = DEFAULT_RELAY_URL,
        network: Optional[NetworkProvider] = None,
    ):
        """
        Args:
            client: Sign client (relay connection)
            project_id: WalletConnect Cloud project ID
            chain_id: MultiversX chain id ("D", "T", "1")
            metadata: dApp metadata shown in the wallet
            relay_url: Relay server URL
        """
        super().__init__(network)
        self._client = client
        self._project_id = project_id
        self._relay_url = relay_url
        self._chain_id = chain_id
        self._metadata = WCMetadata.from_dict(metadata or DEFAULT_DAPP_METADATA)
        self._client_ready = False
        self._pairing: Optional[WCPairing] = None
        self._session: Optional[WCSession] = None

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.WALLETCONNECT

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def relay_url(self) -> str:
        return self._relay_url

    @property
    def metadata(self) -> WCMetadata:
        return self._metadata

    @property
    def pairing_uri(self) -> Optional[str]:
        return self._pairing.uri if self._pairing else None

    @property
    def session(self) -> Optional[WCSession]:
        return self._session

    @property
    def chain(self) -> str:
        return f"{MVX_NAMESPACE}:{self._chain_id}"

    async def _ensure_client(self) -> None:
        if not self._client_ready:
            await self._client.init(self._project_id, self._metadata, relay_url=self._relay_url)
            self._client_ready = True

    async def get_pairing_uri(self) -> str:
        """Create a fresh pairing and return its URI for QR display."""
        await self._ensure_client()
        self._pairing = await self._client.pair()
        return self._pairing.uri

    async def login(self) -> bool:
        self._state = AdapterState.CONNECTING
        if self._pairing is None or self._pairing.is_expired:
            await self.get_pairing_uri()

        required = {
            MVX_NAMESPACE: {
                "chains": [self.chain],
                "methods": [MVX_SIGN_TRANSACTION, MVX_SIGN_TRANSACTIONS, MVX_SIGN_MESSAGE],
                "events": [],
            }
        }
        self._session = await self._client.connect(required, pairing_topic=self._pairing.topic)
        self._pairing = None

        accounts = self._session.get_accounts()
        if not accounts:
            self._state = AdapterState.ERROR
            return False
        self._set_connected(accounts[0])
        return True

    async def logout(self) -> None:
        if self._session is not None:
            await self._client.disconnect(self._session.topic)
        self._session = None
        self._pairing = None
        self._set_disconnected()

    async def resume(self, address: str) -> bool:
        await self._ensure_client()
        for session in self._client.get_sessions():
            if address in session.get_accounts():
                self._session = session
                self._set_connected(address)
                return True
        return False

    async def sign_transaction(self, tx: Transaction) -> Transaction:
        if self._session is None:
            raise TransactionError("No WalletConnect session")
        try:
            result = await self._client.request(
                topic=self._session.topic,
                chain_id=self.chain,
                request={"method": MVX_SIGN_TRANSACTION, "params": {"transaction": transaction_to_dict(tx)}},
            )
        except Exception as e:
            raise TransactionError(f"Wallet rejected transaction: {e}")
        signature = (result or {}).get("signature")
        if not signature:
            raise TransactionError("Wallet returned no signature")
        tx.signature = bytes.fromhex(signature)
        return tx
