# proofmind/wire/codec.py
"""
ProofMind Wire: Contract Codec

Arguments and results of the ProofMind contract, expressed with the
MultiversX SDK's ABI value types and serializer.

Call data:
    certifyAction@<hex arg>@<hex arg>...

CertificateData (nested, field order fixed by the contract):
    proof_text:      ManagedBuffer       StringValue
    timestamp:       u64                 U64Value
    proof_id:        ManagedBuffer       StringValue
    category:        ManagedBuffer       StringValue
    metadata:        ManagedBuffer       StringValue
    ai_tags:         ManagedVec<Buffer>  ListValue[StringValue]
    confidence_score:u32                 U32Value
    verification_status: enum            EnumValue (fieldless)
    created_by:      ManagedAddress      AddressValue

Decoding is split in two steps. parse_certificate_fields() decodes field by
field into a plain dict and stops at the first field the buffer cannot
satisfy; decode_certificate() turns any such dict into a Certificate,
defaulting every missing or malformed field. Neither step raises on bad input.
"""

from __future__ import annotations

import io
from typing import Optional, Dict, Any, List, Tuple, Iterable, Sequence

from multiversx_sdk.abi import (
    AddressValue,
    EnumValue,
    Field,
    ListValue,
    Serializer,
    StringValue,
    U32Value,
    U64Value,
)

from ..models import (
    Certificate,
    VerificationStatus,
    DEFAULT_METADATA,
)
from .address import pubkey_to_address, address_to_pubkey


# =============================================================================
# Constants
# =============================================================================

ARG_SEPARATOR = "@"

# Field order of CertificateData
CERTIFICATE_FIELDS = (
    "proof_text",
    "timestamp",
    "proof_id",
    "category",
    "metadata",
    "ai_tags",
    "confidence_score",
    "verification_status",
    "created_by",
)

# Discriminant -> name, in contract declaration order
STATUS_NAMES = tuple(s.value for s in VerificationStatus)
UNKNOWN_STATUS = "Unknown"

_serializer = Serializer(parts_separator=ARG_SEPARATOR)


class DecodeError(ValueError):
    """Malformed call data."""
    pass


# =============================================================================
# Argument values
# =============================================================================

def text_value(value: str) -> StringValue:
    return StringValue(value)


def tags_value(tags: Iterable[str]) -> ListValue:
    """ManagedVec<ManagedBuffer> argument."""
    return ListValue([StringValue(tag) for tag in tags], item_creator=StringValue)


def address_value(address: str) -> AddressValue:
    """ManagedAddress argument (raises AddressError)."""
    return AddressValue(address_to_pubkey(address))


def encode_args(values: Sequence[Any]) -> List[bytes]:
    """Top-level encoding of each typed value."""
    return _serializer.serialize_to_parts(list(values))


def encode_buffer_list(values: Iterable[str]) -> bytes:
    """Top-level ManagedVec<ManagedBuffer>: nested items back to back."""
    return encode_args([tags_value(values)])[0]


def decode_buffer_list(data: bytes) -> List[str]:
    """Inverse of encode_buffer_list. Stops at the first truncated item."""
    reader = io.BytesIO(data)
    items: List[str] = []
    while reader.tell() < len(data):
        item = StringValue()
        try:
            item.decode_nested(reader)
        except ValueError:
            break
        items.append(item.value)
    return items


def encode_u64(value: int) -> bytes:
    """Top-level unsigned integer: big-endian, minimal length."""
    if value < 0:
        raise ValueError("Unsigned value expected")
    return encode_args([U64Value(value)])[0]


def decode_u64(data: bytes) -> int:
    """Inverse of encode_u64. Empty input is zero."""
    value = U64Value()
    value.decode_top_level(data)
    return value.value


def build_call_data(function: str, values: Sequence[Any]) -> str:
    """
    Build the transaction data field for a contract call.

    Args:
        function: Endpoint name (e.g. "certifyAction")
        values: Typed argument values

    Returns:
        "function@hex@hex..."
    """
    return ARG_SEPARATOR.join([function] + [part.hex() for part in encode_args(values)])


def parse_call_data(data: str | bytes) -> Tuple[str, List[bytes]]:
    """
    Split contract call data back into function name and raw arguments.

    Raises:
        DecodeError: If an argument is not valid hex
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    function, *hex_args = data.split(ARG_SEPARATOR)
    try:
        return function, [bytes.fromhex(a) for a in hex_args]
    except ValueError as e:
        raise DecodeError(f"Malformed call argument: {e}")


# =============================================================================
# CertificateData
# =============================================================================

def _fieldless(discriminant: int) -> List[Field]:
    return []


def _certificate_values() -> List[Field]:
    return [
        Field("proof_text", StringValue()),
        Field("timestamp", U64Value()),
        Field("proof_id", StringValue()),
        Field("category", StringValue()),
        Field("metadata", StringValue()),
        Field("ai_tags", ListValue(item_creator=StringValue)),
        Field("confidence_score", U32Value()),
        Field("verification_status", EnumValue(fields_provider=_fieldless)),
        Field("created_by", AddressValue()),
    ]


def _status_name(discriminant: int) -> str:
    return STATUS_NAMES[discriminant] if discriminant < len(STATUS_NAMES) else UNKNOWN_STATUS


def _field_payload(value: Any) -> Any:
    if isinstance(value, ListValue):
        return [item.value for item in value.items]
    if isinstance(value, EnumValue):
        return _status_name(value.discriminant)
    if isinstance(value, AddressValue):
        raw = value.value
        return raw.to_bech32() if hasattr(raw, "to_bech32") else pubkey_to_address(bytes(raw))
    return value.value


def parse_certificate_fields(reader: io.BytesIO) -> Dict[str, Any]:
    """
    Read one CertificateData into a field bag.

    Fields are read in contract order; reading stops at the first field the
    buffer cannot satisfy, so a truncated record yields a partial bag.
    """
    bag: Dict[str, Any] = {}
    for field in _certificate_values():
        try:
            field.value.decode_nested(reader)
        except ValueError:
            break
        bag[field.name] = _field_payload(field.value)
    return bag


def parse_certificate(data: bytes) -> Dict[str, Any]:
    """Field bag of a top-encoded CertificateData (getProof result)."""
    return parse_certificate_fields(io.BytesIO(data))


def parse_certificate_list(data: bytes) -> List[Dict[str, Any]]:
    """
    Field bags of a top-encoded ManagedVec<CertificateData>.

    A trailing partial record is kept as a partial bag.
    """
    reader = io.BytesIO(data)
    bags: List[Dict[str, Any]] = []
    while reader.tell() < len(data):
        bag = parse_certificate_fields(reader)
        if not bag:
            break
        bags.append(bag)
        if len(bag) < len(CERTIFICATE_FIELDS):
            break
    return bags


def encode_certificate(bag: Dict[str, Any]) -> bytes:
    """Nested encoding of a CertificateData field bag (all fields required)."""
    status = VerificationStatus.parse(bag.get("verification_status"))
    values = [
        StringValue(bag["proof_text"]),
        U64Value(int(bag["timestamp"])),
        StringValue(bag["proof_id"]),
        StringValue(bag["category"]),
        StringValue(bag["metadata"]),
        tags_value(bag["ai_tags"]),
        U32Value(int(bag["confidence_score"])),
        EnumValue(discriminant=list(VerificationStatus).index(status)),
        address_value(bag["created_by"]),
    ]
    writer = io.BytesIO()
    for value in values:
        value.encode_nested(writer)
    return writer.getvalue()


# =============================================================================
# Field bag -> Certificate
# =============================================================================

def _as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, (bytes, bytearray)):
        return int.from_bytes(bytes(value), "big")
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


def _as_tags(value: Any) -> tuple:
    if value is None or isinstance(value, (str, bytes, bytearray)):
        return ()
    try:
        return tuple(_as_text(tag) for tag in value)
    except TypeError:
        return ()


def decode_certificate(bag: Optional[Dict[str, Any]]) -> Certificate:
    """
    Build a Certificate from a loosely-typed field bag.

    Total: missing fields decode to "" / 0 / "{}" / () and any status outside
    the four known values decodes to Pending.
    """
    bag = bag or {}
    metadata = _as_text(bag.get("metadata"))
    return Certificate(
        proof_id=_as_text(bag.get("proof_id")),
        proof_text=_as_text(bag.get("proof_text")),
        category=_as_text(bag.get("category")),
        metadata=metadata or DEFAULT_METADATA,
        ai_tags=_as_tags(bag.get("ai_tags")),
        timestamp=_as_int(bag.get("timestamp")),
        confidence_score=_as_int(bag.get("confidence_score")),
        verification_status=VerificationStatus.parse(bag.get("verification_status")),
        created_by=_as_text(bag.get("created_by")),
    )
