# proofmind/session.py
"""
ProofMind: Wallet Session Manager

Owns the single active wallet adapter. connect() builds the adapter for the
requested kind, runs its login handshake and reads the balance; disconnect()
logs out and drops the handle. Only one adapter is active at a time:
connecting while a session exists disconnects the previous adapter first.

The manager does not persist anything itself. SessionStore is the durable
session record the embedding application keeps: written after every
successful connect, cleared after every disconnect, read once at startup and
handed to restore().

Usage:
    manager = WalletSessionManager(provider, {
        ProviderKind.EXTENSION: lambda: ExtensionAdapter(bridge),
    })
    wallet = await manager.connect("extension")
    store.save(wallet)
    ...
    await manager.disconnect()
    store.clear()
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any, Callable, Union

from .adapters import WalletAdapter
from .config import SESSION_STORAGE_KEY
from .errors import ConnectionError, NotConnectedError, ProofMindError, TransportError
from .models import WalletInfo, ProviderKind
from .transport import NetworkProvider


logger = logging.getLogger(__name__)

AdapterFactory = Callable[[], WalletAdapter]


# =============================================================================
# Session manager
# =============================================================================

class WalletSessionManager:
    """Single active wallet session."""

    def __init__(
        self,
        network: NetworkProvider,
        factories: Dict[ProviderKind, AdapterFactory],
    ):
        """
        Args:
            network: Provider used for balances and broadcasting
            factories: One adapter constructor per supported kind
        """
        self._network = network
        self._factories = dict(factories)
        self._adapter: Optional[WalletAdapter] = None
        self._wallet: Optional[WalletInfo] = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def adapter(self) -> Optional[WalletAdapter]:
        return self._adapter

    @property
    def wallet(self) -> Optional[WalletInfo]:
        return self._wallet

    @property
    def is_connected(self) -> bool:
        return self._adapter is not None

    @property
    def supported_kinds(self) -> list:
        return list(self._factories)

    def require_adapter(self) -> WalletAdapter:
        """
        Raises:
            NotConnectedError: If no session is active
        """
        if self._adapter is None:
            raise NotConnectedError("Wallet not connected")
        return self._adapter

    # =========================================================================
    # Connection
    # =========================================================================

    def _build_adapter(self, kind: Union[str, ProviderKind]) -> WalletAdapter:
        try:
            kind = ProviderKind.parse(kind)
        except ValueError:
            raise ConnectionError(f"Unsupported provider type: {kind}")
        factory = self._factories.get(kind)
        if factory is None:
            raise ConnectionError(f"Unsupported provider type: {kind.value}")
        adapter = factory()
        adapter.bind_network(self._network)
        return adapter

    async def connect(self, kind: Union[str, ProviderKind]) -> WalletInfo:
        """
        Log in with the adapter for ``kind``.

        Returns:
            WalletInfo with address and current balance

        Raises:
            ConnectionError: Unsupported kind, declined login, handshake
                failure or balance lookup failure
        """
        adapter = self._build_adapter(kind)

        if self._adapter is not None:
            logger.info("Replacing active %s session", self._adapter.kind.value)
            await self.disconnect()

        try:
            logged_in = await adapter.login()
        except ConnectionError:
            raise
        except Exception as e:
            logger.error("%s wallet login failed: %s", adapter.kind.value, e)
            raise ConnectionError(f"Failed to connect {adapter.kind.value} wallet: {e}")

        if not logged_in:
            raise ConnectionError(f"Failed to connect {adapter.kind.value} wallet: login declined")

        address = adapter.get_address()
        try:
            account = await self._network.get_account(address)
        except TransportError as e:
            await adapter.logout()
            raise ConnectionError(f"Failed to read account {address}: {e}")

        self._adapter = adapter
        self._wallet = WalletInfo(
            address=address,
            balance=account.balance,
            is_connected=True,
            provider=adapter.kind,
        )
        logger.info("Connected %s wallet %s", adapter.kind.value, address)
        return self._wallet

    async def disconnect(self) -> None:
        """Log out of the active adapter. No-op without a session."""
        adapter = self._adapter
        if adapter is None:
            return
        self._adapter = None
        self._wallet = None
        await adapter.logout()
        logger.info("Disconnected %s wallet", adapter.kind.value)

    async def restore(self, record: Optional[Union[Dict[str, Any], WalletInfo]]) -> Optional[WalletInfo]:
        """
        Rebuild a session from a durable record without prompting the user.

        Returns:
            WalletInfo, or None if the record is missing, unusable, or the
            backend cannot resume silently
        """
        if record is None:
            return None
        try:
            stored = record if isinstance(record, WalletInfo) else WalletInfo.from_record(record)
            adapter = self._build_adapter(stored.provider)
        except (KeyError, ValueError, TypeError, ConnectionError) as e:
            logger.warning("Ignoring unusable session record: %s", e)
            return None

        try:
            resumed = await adapter.resume(stored.address)
        except Exception as e:
            logger.warning("Could not resume %s session: %s", stored.provider.value, e)
            return None
        if not resumed:
            return None

        if self._adapter is not None:
            await self.disconnect()
        self._adapter = adapter
        self._wallet = WalletInfo(
            address=stored.address,
            balance=stored.balance,
            is_connected=True,
            provider=adapter.kind,
        )
        try:
            await self.refresh_balance()
        except ProofMindError as e:
            logger.warning("Balance refresh after restore failed: %s", e)
        logger.info("Restored %s wallet %s", adapter.kind.value, stored.address)
        return self._wallet

    async def refresh_balance(self) -> WalletInfo:
        """
        Raises:
            NotConnectedError: If no session is active
            TransportError: If the account cannot be read
        """
        if self._wallet is None:
            raise NotConnectedError("Wallet not connected")
        account = await self._network.get_account(self._wallet.address)
        self._wallet.balance = account.balance
        return self._wallet


# =============================================================================
# Durable session record
# =============================================================================

class SessionStore:
    """
    JSON file holding the serialized WalletInfo under a fixed key.

    File layout:
        {"mvx-proofmind-wallet": {"address": ..., "balance": ...,
                                  "isConnected": true, "provider": "extension"}}
    """

    def __init__(self, path: Union[str, Path], key: str = SESSION_STORAGE_KEY):
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Session file %s unreadable: %s", self._path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def load(self) -> Optional[Dict[str, Any]]:
        """Stored record, or None."""
        record = self._read_all().get(self._key)
        return record if isinstance(record, dict) else None

    def save(self, wallet: WalletInfo) -> None:
        data = self._read_all()
        data[self._key] = wallet.to_record()
        self._write_all(data)

    def clear(self) -> None:
        data = self._read_all()
        if self._key in data:
            del data[self._key]
            self._write_all(data)
