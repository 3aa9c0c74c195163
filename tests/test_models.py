# tests/test_models.py
"""
ProofMind: data model, validation and settings tests.
"""

from __future__ import annotations

import dataclasses

import pytest
from pydantic import ValidationError as SettingsError

from proofmind.config import Settings, DEFAULT_DAPP_METADATA, DEFAULT_GAS_LIMIT, DEFAULT_GAS_PRICE, DEFAULT_RELAY_URL
from proofmind.errors import ValidationError
from proofmind.models import (
    Certificate,
    CreateCertificateRequest,
    DashboardStats,
    ProviderKind,
    TransactionStatus,
    UpdateCertificateRequest,
    VerificationStatus,
    WalletInfo,
)
from proofmind.validation import (
    merge_tags,
    validate_create_request,
    validate_metadata,
    validate_update_request,
)


# =============================================================================
# Enums
# =============================================================================

@pytest.mark.parametrize("raw, expected", [
    ("Verified", VerificationStatus.VERIFIED),
    ("Flagged", VerificationStatus.FLAGGED),
    (2, VerificationStatus.REJECTED),
    ("Unknown", VerificationStatus.PENDING),
    ("verified", VerificationStatus.PENDING),
    (None, VerificationStatus.PENDING),
    (17, VerificationStatus.PENDING),
])
def test_verification_status_parse(raw, expected):
    assert VerificationStatus.parse(raw) == expected


def test_provider_kind_aliases():
    assert ProviderKind.parse("remote-pair") == ProviderKind.WALLETCONNECT
    assert ProviderKind.parse("Extension") == ProviderKind.EXTENSION
    with pytest.raises(ValueError):
        ProviderKind.parse("carrier-pigeon")


def test_transaction_status_parse():
    assert TransactionStatus.parse("executed") == TransactionStatus.SUCCESS
    assert TransactionStatus.parse("received") == TransactionStatus.PENDING
    assert TransactionStatus.parse("fail") == TransactionStatus.FAIL
    assert TransactionStatus.parse(None) == TransactionStatus.UNKNOWN
    assert TransactionStatus.FAIL.is_final
    assert not TransactionStatus.PENDING.is_final


# =============================================================================
# Records
# =============================================================================

def test_certificate_is_frozen():
    cert = Certificate(proof_id="CERT-1", proof_text="some proof text")
    with pytest.raises(dataclasses.FrozenInstanceError):
        cert.verification_status = VerificationStatus.VERIFIED


def test_certificate_to_dict():
    cert = Certificate(proof_id="CERT-1", proof_text="text", category="EVENT", ai_tags=("a", "b"))
    data = cert.to_dict()
    assert data["ai_tags"] == ["a", "b"]
    assert data["verification_status"] == "Pending"
    assert cert.known_category is not None
    assert Certificate(category="SPORTS").known_category is None


def test_wallet_record_roundtrip():
    wallet = WalletInfo(address="erd1abc", balance="42", provider=ProviderKind.HARDWARE)
    record = wallet.to_record()
    assert record == {
        "address": "erd1abc",
        "balance": "42",
        "isConnected": True,
        "provider": "hardware",
    }
    assert WalletInfo.from_record(record) == wallet


@pytest.mark.parametrize("record", [
    {},
    {"address": "", "provider": "web"},
    {"address": "erd1abc"},
    {"address": "erd1abc", "provider": "fax"},
])
def test_wallet_record_unusable(record):
    with pytest.raises((KeyError, ValueError)):
        WalletInfo.from_record(record)


def test_dashboard_stats_dict():
    stats = DashboardStats(total_certificates=1, last_activity=1_717_200_000)
    data = stats.to_dict()
    assert data["totalCertificates"] == 1
    assert data["lastActivityDate"] == "2024-06-01"
    assert DashboardStats().to_dict()["lastActivityDate"] is None


# =============================================================================
# Validation
# =============================================================================

def valid_create(**overrides) -> CreateCertificateRequest:
    fields = dict(proof_text="Completed a course on Rust", proof_id="CERT-2024-001")
    fields.update(overrides)
    return CreateCertificateRequest(**fields)


def test_valid_create_request():
    validate_create_request(valid_create(metadata='{"a": 1}'))
    validate_create_request(valid_create(metadata=""))


@pytest.mark.parametrize("overrides, field", [
    ({"proof_text": "too short"}, "proof_text"),
    ({"proof_text": "x" * 1001}, "proof_text"),
    ({"proof_text": "          "}, "proof_text"),
    ({"proof_id": "ab"}, "proof_id"),
    ({"proof_id": "x" * 101}, "proof_id"),
    ({"metadata": "{not json"}, "metadata"),
])
def test_invalid_create_request(overrides, field):
    with pytest.raises(ValidationError) as info:
        validate_create_request(valid_create(**overrides))
    assert info.value.field == field


def test_length_bounds_inclusive():
    validate_create_request(valid_create(proof_text="x" * 10, proof_id="x" * 5))
    validate_create_request(valid_create(proof_text="x" * 1000, proof_id="x" * 100))


def test_length_counts_utf8_bytes():
    # two bytes per character
    with pytest.raises(ValidationError, match="between 10 and 1000 characters") as info:
        validate_create_request(valid_create(proof_text="é" * 600))
    assert info.value.field == "proof_text"

    validate_create_request(valid_create(proof_text="é" * 500))
    validate_create_request(valid_create(proof_text="é" * 5))
    with pytest.raises(ValidationError):
        validate_create_request(valid_create(proof_text="é" * 4))


def test_proof_id_counts_utf8_bytes():
    # three bytes per character
    validate_create_request(valid_create(proof_id="€" * 33))
    with pytest.raises(ValidationError) as info:
        validate_create_request(valid_create(proof_id="€" * 34))
    assert info.value.field == "proof_id"


def test_update_text_counts_utf8_bytes():
    with pytest.raises(ValidationError) as info:
        validate_update_request(UpdateCertificateRequest("CERT-2024-001", new_proof_text="ü" * 501))
    assert info.value.field == "new_proof_text"
    validate_update_request(UpdateCertificateRequest("CERT-2024-001", new_proof_text="ü" * 500))



def test_metadata_check():
    validate_metadata(None)
    validate_metadata("[]")
    with pytest.raises(ValidationError):
        validate_metadata("{'single': 'quotes'}")


def test_update_request_trailing_omissions_allowed():
    validate_update_request(UpdateCertificateRequest("CERT-2024-001"))
    validate_update_request(UpdateCertificateRequest("CERT-2024-001", new_proof_text="A revised proof text"))


def test_update_request_gap_rejected():
    request = UpdateCertificateRequest("CERT-2024-001", new_metadata="{}")
    with pytest.raises(ValidationError) as info:
        validate_update_request(request)
    assert info.value.field == "new_proof_text"


def test_update_request_checks_new_text():
    with pytest.raises(ValidationError):
        validate_update_request(UpdateCertificateRequest("CERT-2024-001", new_proof_text="short"))


def test_merge_tags():
    assert merge_tags(["education", " skills ", ""], ["skills", "rust"]) == ["education", "skills", "rust"]
    assert merge_tags(None) == []


# =============================================================================
# Settings
# =============================================================================

def test_settings_devnet_defaults():
    config = Settings(_env_file=None).network_config()
    assert config.chain_id == "D"
    assert config.api_url == "https://devnet-gateway.multiversx.com"
    assert config.explorer_url == "https://devnet-explorer.multiversx.com"
    assert config.wallet_url == "https://devnet-wallet.multiversx.com"
    assert config.gas_price == DEFAULT_GAS_PRICE == 1_000_000_000
    assert config.gas_limit == DEFAULT_GAS_LIMIT == 10_000_000


def test_settings_mainnet_with_overrides():
    config = Settings(
        _env_file=None,
        network="MAINNET",
        api_url="https://my-gateway.example/",
        gas_limit=20_000_000,
    ).network_config()
    assert config.chain_id == "1"
    assert config.api_url == "https://my-gateway.example"
    assert config.explorer_url == "https://explorer.multiversx.com"
    assert config.gas_limit == 20_000_000


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PROOFMIND_NETWORK", "testnet")
    monkeypatch.setenv("PROOFMIND_CONTRACT_ADDRESS", "erd1qqqcontract")
    settings = Settings(_env_file=None)
    assert settings.network == "testnet"
    assert settings.network_config().chain_id == "T"
    assert settings.network_config().contract_address == "erd1qqqcontract"


def test_settings_walletconnect_defaults():
    settings = Settings(_env_file=None)
    assert settings.walletconnect_relay_url == DEFAULT_RELAY_URL
    assert settings.dapp_metadata() == DEFAULT_DAPP_METADATA
    assert settings.tx_poll_interval == 2.0
    assert settings.tx_wait_timeout == 60.0


def test_settings_walletconnect_from_environment(monkeypatch):
    monkeypatch.setenv("PROOFMIND_WALLETCONNECT_PROJECT_ID", "abc123")
    monkeypatch.setenv("PROOFMIND_WALLETCONNECT_RELAY_URL", "wss://relay.example.org")
    monkeypatch.setenv("PROOFMIND_DAPP_NAME", "Certificates Desk")
    settings = Settings(_env_file=None)
    assert settings.walletconnect_project_id == "abc123"
    assert settings.walletconnect_relay_url == "wss://relay.example.org"
    assert settings.dapp_metadata()["name"] == "Certificates Desk"



def test_settings_rejects_unknown_network():
    with pytest.raises(SettingsError):
        Settings(_env_file=None, network="localnet")


def test_settings_rejects_non_positive_gas():
    with pytest.raises(SettingsError):
        Settings(_env_file=None, gas_limit=0)


def test_network_config_is_frozen():
    config = Settings(_env_file=None).network_config()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.chain_id = "1"
