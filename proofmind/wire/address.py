# proofmind/wire/address.py
"""
ProofMind Wire: Addresses

MultiversX accounts are 32-byte public keys rendered as bech32 strings with
the "erd" human-readable part. Parsing and rendering go through the SDK's
Address; these helpers only map its failures onto AddressError.
"""

from __future__ import annotations

from multiversx_sdk import Address

from ..errors import AddressError


ADDRESS_HRP = "erd"
PUBKEY_SIZE = 32


def parse_address(address: str) -> Address:
    """
    Parse an erd1... address.

    Raises:
        AddressError: If the address is malformed or not an "erd" address
    """
    if not isinstance(address, str) or not address:
        raise AddressError(f"Address must be a non-empty string, got {address!r}")
    try:
        parsed = Address.new_from_bech32(address)
    except Exception as e:
        raise AddressError(f"Invalid bech32 address {address!r}: {e}")
    if parsed.get_hrp() != ADDRESS_HRP:
        raise AddressError(f"Unexpected address prefix {parsed.get_hrp()!r} (expected {ADDRESS_HRP!r})")
    return parsed


def address_to_pubkey(address: str) -> bytes:
    """32-byte public key of an erd1... address (raises AddressError)."""
    return parse_address(address).get_public_key()


def pubkey_to_address(pubkey: bytes) -> str:
    """Encode a 32-byte public key as an erd1... address."""
    if len(pubkey) != PUBKEY_SIZE:
        raise AddressError(f"Public key must be {PUBKEY_SIZE} bytes, got {len(pubkey)}")
    return Address(bytes(pubkey), ADDRESS_HRP).to_bech32()


def is_valid_address(address: str) -> bool:
    try:
        parse_address(address)
    except AddressError:
        return False
    return True
