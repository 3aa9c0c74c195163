# proofmind/wire/transaction.py
"""
ProofMind Wire: Transactions

Transactions are the SDK's own Transaction objects. This module builds them
from the access layer's plain values (bech32 strings, call data text) and
wraps the TransactionComputer operations the wallets and the network need:

    bytes_for_signing(tx)   canonical bytes covered by the wallet signature
    transaction_hash(tx)    hex hash of a signed transaction
    transaction_to_dict(tx) gateway JSON body (POST /transaction/send)
"""

from __future__ import annotations

from typing import Dict, Any

from multiversx_sdk import Transaction, TransactionComputer

from .address import parse_address


TX_VERSION = 2

_computer = TransactionComputer()


def new_transaction(
    sender: str,
    receiver: str,
    gas_limit: int,
    gas_price: int,
    chain_id: str,
    data: str | bytes = b"",
    nonce: int = 0,
    value: int = 0,
    version: int = TX_VERSION,
) -> Transaction:
    """
    Unsigned transaction between two erd1... addresses.

    Raises:
        AddressError: If either address is malformed
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return Transaction(
        sender=parse_address(sender),
        receiver=parse_address(receiver),
        gas_limit=gas_limit,
        gas_price=gas_price,
        chain_id=chain_id,
        data=data,
        nonce=nonce,
        value=value,
        version=version,
    )


def bytes_for_signing(tx: Transaction) -> bytes:
    return _computer.compute_bytes_for_signing(tx)


def transaction_hash(tx: Transaction) -> str:
    return _computer.compute_transaction_hash(tx).hex()


def is_signed(tx: Transaction) -> bool:
    return bool(tx.signature)


def sender_of(tx: Transaction) -> str:
    return tx.sender.to_bech32()


def receiver_of(tx: Transaction) -> str:
    return tx.receiver.to_bech32()


def call_data(tx: Transaction) -> str:
    """Data field as text ("" when empty)."""
    return bytes(tx.data or b"").decode("utf-8", errors="replace")


def transaction_to_dict(tx: Transaction) -> Dict[str, Any]:
    return tx.to_dictionary()


def transaction_from_dict(body: Dict[str, Any]) -> Transaction:
    return Transaction.new_from_dictionary(body)
