# proofmind/adapters/hardware.py
"""
ProofMind Adapters: Hardware Wallet (Ledger)

Signs on a hardware device running the MultiversX app. The device is reached
through DeviceBridge (USB/HID transport in production, MockLedgerDevice in
tests); the account is selected by its derivation index.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Dict

from ..errors import ConnectionError, TransactionError
from ..models import ProviderKind
from ..transport import NetworkProvider
from ..wire import Transaction, bytes_for_signing
from .base import WalletAdapter, AdapterState, Ed25519Signer


MULTIVERSX_APP_NAME = "MultiversX"


# =============================================================================
# Bridge
# =============================================================================

class DeviceBridge(ABC):
    """Hardware device transport."""

    @abstractmethod
    async def open(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def get_app_name(self) -> str:
        """Name of the app currently open on the device."""
        pass

    @abstractmethod
    async def get_address(self, account_index: int) -> str:
        pass

    @abstractmethod
    async def sign_transaction(self, payload: bytes, account_index: int) -> bytes:
        """Return the signature; raise if the user rejects on device."""
        pass


class MockLedgerDevice(DeviceBridge):
    """Device stand-in with one local key per account index."""

    def __init__(
        self,
        signers: Optional[Dict[int, Ed25519Signer]] = None,
        app_name: str = MULTIVERSX_APP_NAME,
        approve: bool = True,
    ):
        self.signers = signers or {0: Ed25519Signer()}
        self.app_name = app_name
        self.approve = approve
        self.is_open = False

    async def open(self) -> None:
        self.is_open = True

    async def close(self) -> None:
        self.is_open = False

    async def get_app_name(self) -> str:
        return self.app_name

    async def get_address(self, account_index: int) -> str:
        return self.signers[account_index].address

    async def sign_transaction(self, payload: bytes, account_index: int) -> bytes:
        if not self.is_open:
            raise Exception("Device disconnected")
        if not self.approve:
            raise Exception("Rejected by user on device")
        return self.signers[account_index].sign(payload)


# =============================================================================
# Adapter
# =============================================================================

class HardwareWalletAdapter(WalletAdapter):
    """Ledger-style hardware wallet adapter."""

    def __init__(
        self,
        device: DeviceBridge,
        account_index: int = 0,
        network: Optional[NetworkProvider] = None,
    ):
        super().__init__(network)
        self._device = device
        self._account_index = account_index

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.HARDWARE

    @property
    def account_index(self) -> int:
        return self._account_index

    async def _open_app(self) -> None:
        await self._device.open()
        app = await self._device.get_app_name()
        if app != MULTIVERSX_APP_NAME:
            await self._device.close()
            raise ConnectionError(f"Open the {MULTIVERSX_APP_NAME} app on the device (found {app!r})")

    async def login(self) -> bool:
        self._state = AdapterState.CONNECTING
        await self._open_app()
        address = await self._device.get_address(self._account_index)
        if not address:
            self._state = AdapterState.ERROR
            return False
        self._set_connected(address)
        return True

    async def logout(self) -> None:
        if self.is_logged_in:
            await self._device.close()
        self._set_disconnected()

    async def resume(self, address: str) -> bool:
        await self._open_app()
        if await self._device.get_address(self._account_index) != address:
            await self._device.close()
            return False
        self._set_connected(address)
        return True

    async def sign_transaction(self, tx: Transaction) -> Transaction:
        try:
            tx.signature = await self._device.sign_transaction(
                bytes_for_signing(tx), self._account_index
            )
        except Exception as e:
            raise TransactionError(f"Device rejected transaction: {e}")
        return tx
