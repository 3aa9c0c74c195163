# proofmind/config.py
"""
ProofMind: Configuration

Settings are read once at startup from the environment (prefix PROOFMIND_)
or a .env file. Network fields left unset fall back to the preset of the
selected network.

Usage:
    settings = Settings()                 # env / .env
    settings = Settings(network="mainnet", contract_address="erd1qqq...")
    config = settings.network_config()    # immutable NetworkConfig
"""

from __future__ import annotations

from typing import Optional, Dict, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import NetworkConfig


# =============================================================================
# Network presets
# =============================================================================

NETWORK_PRESETS: Dict[str, Dict[str, Any]] = {
    "devnet": {
        "chain_id": "D",
        "api_url": "https://devnet-gateway.multiversx.com",
        "explorer_url": "https://devnet-explorer.multiversx.com",
        "wallet_url": "https://devnet-wallet.multiversx.com",
    },
    "testnet": {
        "chain_id": "T",
        "api_url": "https://testnet-gateway.multiversx.com",
        "explorer_url": "https://testnet-explorer.multiversx.com",
        "wallet_url": "https://testnet-wallet.multiversx.com",
    },
    "mainnet": {
        "chain_id": "1",
        "api_url": "https://gateway.multiversx.com",
        "explorer_url": "https://explorer.multiversx.com",
        "wallet_url": "https://wallet.multiversx.com",
    },
}

DEFAULT_GAS_PRICE = 1_000_000_000
DEFAULT_GAS_LIMIT = 10_000_000

SESSION_STORAGE_KEY = "mvx-proofmind-wallet"

DEFAULT_RELAY_URL = "wss://relay.walletconnect.com"

DEFAULT_DAPP_METADATA: Dict[str, Any] = {
    "name": "MVX-ProofMind",
    "description": "AI-powered blockchain certification system",
    "url": "https://mvx-proofmind.vercel.app",
    "icons": ["https://mvx-proofmind.vercel.app/icon.png"],
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PROOFMIND_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    network: str = Field("devnet", description="devnet, testnet or mainnet")
    contract_address: str = Field("", description="ProofMind contract address (erd1...)")

    # Optional overrides of the network preset
    chain_id: Optional[str] = Field(None, description="Chain identifier")
    api_url: Optional[str] = Field(None, description="Proxy gateway base URL")
    explorer_url: Optional[str] = Field(None, description="Explorer base URL")
    wallet_url: Optional[str] = Field(None, description="Web wallet base URL")

    gas_price: int = Field(DEFAULT_GAS_PRICE, description="Gas price for transactions")
    gas_limit: int = Field(DEFAULT_GAS_LIMIT, description="Gas limit for contract calls")

    walletconnect_project_id: str = Field("", description="WalletConnect Cloud project id")
    walletconnect_relay_url: str = Field(DEFAULT_RELAY_URL, description="WalletConnect relay")
    dapp_name: str = Field(DEFAULT_DAPP_METADATA["name"], description="Name shown in the wallet")
    dapp_description: str = Field(DEFAULT_DAPP_METADATA["description"])
    dapp_url: str = Field(DEFAULT_DAPP_METADATA["url"])
    dapp_icon: str = Field(DEFAULT_DAPP_METADATA["icons"][0])

    session_file: str = Field(".proofmind-session.json", description="Durable session record")
    request_timeout: float = Field(30.0, description="HTTP timeout in seconds")
    tx_poll_interval: float = Field(2.0, description="Seconds between transaction status polls")
    tx_wait_timeout: float = Field(60.0, description="Seconds to wait for a transaction to execute")
    log_level: str = Field("INFO")

    @field_validator("network")
    @classmethod
    def _known_network(cls, value: str) -> str:
        value = value.lower()
        if value not in NETWORK_PRESETS:
            raise ValueError(f"Unknown network: {value}")
        return value

    @field_validator("gas_price", "gas_limit")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be positive")
        return value

    def dapp_metadata(self) -> Dict[str, Any]:
        """dApp metadata sent with WalletConnect session proposals."""
        return {
            "name": self.dapp_name,
            "description": self.dapp_description,
            "url": self.dapp_url,
            "icons": [self.dapp_icon] if self.dapp_icon else [],
        }

    def network_config(self) -> NetworkConfig:
        """Resolve the immutable network configuration."""
        preset = NETWORK_PRESETS[self.network]
        return NetworkConfig(
            chain_id=self.chain_id or preset["chain_id"],
            gas_price=self.gas_price,
            gas_limit=self.gas_limit,
            contract_address=self.contract_address,
            explorer_url=(self.explorer_url or preset["explorer_url"]).rstrip("/"),
            api_url=(self.api_url or preset["api_url"]).rstrip("/"),
            wallet_url=(self.wallet_url or preset["wallet_url"]).rstrip("/"),
        )
