# proofmind/wire/__init__.py
"""
ProofMind Wire Formats

Thin layer over the MultiversX SDK (multiversx_sdk):

Modules:
    address:     erd1... <-> 32-byte public key (Address)
    codec:       contract arguments (ABI values + Serializer), certificate decoding
    transaction: Transaction construction, signing bytes, hashes, gateway JSON

Usage:
    from proofmind.wire import build_call_data, text_value, decode_certificate

    data = build_call_data("certifyAction", [text_value("..."), ...])
    cert = decode_certificate(parse_certificate(raw_bytes))
"""

from .address import (
    ADDRESS_HRP,
    parse_address,
    address_to_pubkey,
    pubkey_to_address,
    is_valid_address,
)

from .codec import (
    CERTIFICATE_FIELDS,
    DecodeError,
    text_value,
    tags_value,
    address_value,
    encode_args,
    encode_u64,
    decode_u64,
    encode_buffer_list,
    decode_buffer_list,
    build_call_data,
    parse_call_data,
    parse_certificate,
    parse_certificate_list,
    encode_certificate,
    decode_certificate,
)

from .transaction import (
    Transaction,
    TX_VERSION,
    new_transaction,
    bytes_for_signing,
    transaction_hash,
    is_signed,
    sender_of,
    receiver_of,
    call_data,
    transaction_to_dict,
    transaction_from_dict,
)

__all__ = [
    "ADDRESS_HRP",
    "parse_address",
    "address_to_pubkey",
    "pubkey_to_address",
    "is_valid_address",
    "CERTIFICATE_FIELDS",
    "DecodeError",
    "text_value",
    "tags_value",
    "address_value",
    "encode_args",
    "encode_u64",
    "decode_u64",
    "encode_buffer_list",
    "decode_buffer_list",
    "build_call_data",
    "parse_call_data",
    "parse_certificate",
    "parse_certificate_list",
    "encode_certificate",
    "decode_certificate",
    "Transaction",
    "TX_VERSION",
    "new_transaction",
    "bytes_for_signing",
    "transaction_hash",
    "is_signed",
    "sender_of",
    "receiver_of",
    "call_data",
    "transaction_to_dict",
    "transaction_from_dict",
]
