# proofmind/validation.py
"""
ProofMind: Request Validation

Shape checks performed before any transaction is built, so that requests the
contract would reject never cost a broadcast. The gateway itself does not
validate; CertificateStore runs these first.
"""

from __future__ import annotations

import json
from typing import Iterable, List, Optional

from .errors import ValidationError
from .models import CreateCertificateRequest, UpdateCertificateRequest


PROOF_TEXT_MIN = 10
PROOF_TEXT_MAX = 1000
PROOF_ID_MIN = 5
PROOF_ID_MAX = 100


def _check_length(value: Optional[str], name: str, low: int, high: int) -> None:
    if value is None or not value.strip():
        raise ValidationError(f"{name} is required", field=name)
    # the contract counts encoded bytes
    if not low <= len(value.encode("utf-8")) <= high:
        raise ValidationError(
            f"{name} must be between {low} and {high} characters", field=name
        )


def validate_metadata(metadata: Optional[str]) -> None:
    """Metadata must be empty or valid JSON."""
    if not metadata:
        return
    try:
        json.loads(metadata)
    except (TypeError, ValueError):
        raise ValidationError("Metadata must be valid JSON", field="metadata")


def merge_tags(tags: Optional[Iterable[str]], suggested: Optional[Iterable[str]] = None) -> List[str]:
    """
    Combine caller tags and suggested tags.

    Order is preserved (caller tags first), blanks are dropped and duplicates
    are suppressed.
    """
    merged: List[str] = []
    for tag in list(tags or []) + list(suggested or []):
        tag = tag.strip()
        if tag and tag not in merged:
            merged.append(tag)
    return merged


def validate_create_request(request: CreateCertificateRequest) -> None:
    """
    Raises:
        ValidationError: On the first failing field
    """
    _check_length(request.proof_text, "proof_text", PROOF_TEXT_MIN, PROOF_TEXT_MAX)
    _check_length(request.proof_id, "proof_id", PROOF_ID_MIN, PROOF_ID_MAX)
    validate_metadata(request.metadata)


def validate_update_request(request: UpdateCertificateRequest) -> None:
    """
    Raises:
        ValidationError: On the first failing field, or when an omitted field
            is followed by a provided one
    """
    _check_length(request.proof_id, "proof_id", PROOF_ID_MIN, PROOF_ID_MAX)
    if request.new_proof_text is not None:
        _check_length(request.new_proof_text, "new_proof_text", PROOF_TEXT_MIN, PROOF_TEXT_MAX)
    validate_metadata(request.new_metadata)
    check_update_gaps(request)


def check_update_gaps(request: UpdateCertificateRequest) -> None:
    """Optional contract arguments are positional: a slot cannot be skipped."""
    values = [
        ("new_proof_text", request.new_proof_text),
        ("new_category", request.new_category),
        ("new_metadata", request.new_metadata),
        ("new_ai_tags", request.new_ai_tags),
    ]
    missing = None
    for name, value in values:
        if value is None:
            missing = missing or name
        elif missing is not None:
            raise ValidationError(
                f"{name} given while {missing} is omitted; "
                f"optional arguments cannot skip a position",
                field=missing,
            )
