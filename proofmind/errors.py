# proofmind/errors.py
"""
ProofMind: Error Taxonomy

All errors raised by the access layer derive from ProofMindError so the
embedding application can catch the whole family in one place.

    ProofMindError
    ├── ConnectionError     wallet login failed / adapter unsupported
    ├── NotConnectedError   write attempted without an active session
    ├── ValidationError     request fails shape constraints (no network call made)
    ├── TransactionError    signing or broadcast rejected
    ├── TransportError      HTTP / proxy gateway failure
    │   └── QueryError      read-only contract query failed
    └── AddressError        malformed bech32 address

Note: ConnectionError shadows the builtin of the same name inside this
package. Import it explicitly (``from proofmind.errors import ConnectionError``).
"""

from __future__ import annotations

from typing import Any, Optional


class ProofMindError(Exception):
    """Base exception for the ProofMind access layer."""
    pass


class ConnectionError(ProofMindError):
    """Failed to connect to wallet."""
    pass


class NotConnectedError(ProofMindError):
    """Wallet not connected."""
    pass


class ValidationError(ProofMindError):
    """Caller-supplied data failed validation."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class TransactionError(ProofMindError):
    """Transaction signing or broadcast failed."""

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.tx_hash = tx_hash


class TransportError(ProofMindError):
    """Proxy gateway request failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.data = data


class QueryError(TransportError):
    """Read-only contract query failed."""
    pass


class AddressError(ProofMindError):
    """Invalid address format."""
    pass
