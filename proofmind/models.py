# proofmind/models.py
"""
ProofMind: Data Model

Certificate records as stored by the ProofMind contract, the request shapes
used to create/update them, and the wallet/network descriptors shared by the
rest of the access layer.

Chain-assigned fields (timestamp, confidence_score, verification_status) are
never set by the client: Certificate is frozen and is always rebuilt from a
contract response.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional, Dict, Any, List


# =============================================================================
# Enums
# =============================================================================

class Category(str, Enum):
    """Certificate categories known to the contract."""
    GENERAL = "GENERAL"
    EDUCATION = "EDUCATION"
    PROFESSIONAL = "PROFESSIONAL"
    EVENT = "EVENT"
    TIMESTAMP = "TIMESTAMP"
    ACHIEVEMENT = "ACHIEVEMENT"
    VERIFICATION = "VERIFICATION"


class VerificationStatus(str, Enum):
    """
    Verification state tracked by the contract.

    Declaration order matches the contract enum discriminants (0..3).
    """
    PENDING = "Pending"
    VERIFIED = "Verified"
    REJECTED = "Rejected"
    FLAGGED = "Flagged"

    @classmethod
    def parse(cls, value: Any) -> VerificationStatus:
        """Map a raw value to a status; anything unrecognised is PENDING."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            return members[value] if 0 <= value < len(members) else cls.PENDING
        if value is None:
            return cls.PENDING
        text = str(value)
        for member in cls:
            if member.value == text:
                return member
        return cls.PENDING


class ProviderKind(str, Enum):
    """Wallet connection backends."""
    WEB = "web"
    EXTENSION = "extension"
    WALLETCONNECT = "walletconnect"
    HARDWARE = "hardware"

    @classmethod
    def parse(cls, value: Any) -> ProviderKind:
        """Parse a kind name; ``remote-pair`` is an alias of walletconnect."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        if text in ("remote-pair", "remote_pair", "qr"):
            return cls.WALLETCONNECT
        return cls(text)


CERTIFICATE_CATEGORIES = tuple(c.value for c in Category)
VERIFICATION_STATUSES = tuple(s.value for s in VerificationStatus)

DEFAULT_CATEGORY = Category.GENERAL.value
DEFAULT_METADATA = "{}"


# =============================================================================
# Certificates
# =============================================================================

@dataclass(frozen=True)
class Certificate:
    """
    Certificate record read from the contract.

    Attributes:
        proof_id: Lookup key, unique per owner
        proof_text: Attested description
        category: Category name as stored on chain
        metadata: JSON string
        ai_tags: Ordered labels
        timestamp: Block timestamp at creation (seconds)
        confidence_score: Scorer-assigned confidence
        verification_status: Contract verification state
        created_by: Owner address (erd1...)
    """
    proof_id: str = ""
    proof_text: str = ""
    category: str = ""
    metadata: str = DEFAULT_METADATA
    ai_tags: tuple = ()
    timestamp: int = 0
    confidence_score: int = 0
    verification_status: VerificationStatus = VerificationStatus.PENDING
    created_by: str = ""

    @property
    def is_empty(self) -> bool:
        """The contract returns an empty record for unknown proof ids."""
        return not self.proof_text and not self.proof_id

    @property
    def known_category(self) -> Optional[Category]:
        try:
            return Category(self.category)
        except ValueError:
            return None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation."""
        return {
            "proof_id": self.proof_id,
            "proof_text": self.proof_text,
            "category": self.category,
            "metadata": self.metadata,
            "ai_tags": list(self.ai_tags),
            "timestamp": self.timestamp,
            "confidence_score": self.confidence_score,
            "verification_status": self.verification_status.value,
            "created_by": self.created_by,
        }


@dataclass
class CreateCertificateRequest:
    """Arguments of certifyAction."""
    proof_text: str
    proof_id: str
    category: Optional[str] = None
    metadata: Optional[str] = None
    ai_tags: Optional[List[str]] = None


@dataclass
class UpdateCertificateRequest:
    """Arguments of updateProof. None means leave unchanged."""
    proof_id: str
    new_proof_text: Optional[str] = None
    new_category: Optional[str] = None
    new_metadata: Optional[str] = None
    new_ai_tags: Optional[List[str]] = None


# =============================================================================
# Wallet / Network
# =============================================================================

@dataclass
class WalletInfo:
    """Connected wallet session as exposed to the application."""
    address: str
    balance: str = "0"
    is_connected: bool = True
    provider: ProviderKind = ProviderKind.EXTENSION

    def to_record(self) -> Dict[str, Any]:
        """Serialize for the durable session record."""
        return {
            "address": self.address,
            "balance": self.balance,
            "isConnected": self.is_connected,
            "provider": self.provider.value,
        }

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> WalletInfo:
        """
        Parse a durable session record.

        Raises:
            KeyError / ValueError: If the record is unusable
        """
        address = data["address"]
        if not isinstance(address, str) or not address:
            raise ValueError("Session record has no address")
        return cls(
            address=address,
            balance=str(data.get("balance", "0")),
            is_connected=bool(data.get("isConnected", True)),
            provider=ProviderKind.parse(data["provider"]),
        )


@dataclass(frozen=True)
class NetworkConfig:
    """Process-wide network parameters. Immutable after startup."""
    chain_id: str
    gas_price: int
    gas_limit: int
    contract_address: str
    explorer_url: str
    api_url: str
    wallet_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# =============================================================================
# Transactions
# =============================================================================

class TransactionStatus(str, Enum):
    """Transaction processing status reported by the gateway."""
    PENDING = "pending"
    SUCCESS = "success"
    FAIL = "fail"
    INVALID = "invalid"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> TransactionStatus:
        text = str(value or "").lower()
        if text in ("received", "partially-executed", "pending"):
            return cls.PENDING
        if text in ("success", "executed"):
            return cls.SUCCESS
        for member in cls:
            if member.value == text:
                return member
        return cls.UNKNOWN

    @property
    def is_final(self) -> bool:
        return self not in (TransactionStatus.PENDING, TransactionStatus.UNKNOWN)


# =============================================================================
# Dashboard aggregates
# =============================================================================

@dataclass
class CategoryStats:
    """Per-category share of an owner's certificates."""
    category: str
    count: int
    percentage: int


@dataclass
class DashboardStats:
    """Aggregate view of an owner's certificates."""
    total_certificates: int = 0
    verified_certificates: int = 0
    pending_certificates: int = 0
    categories_count: int = 0
    last_activity: Optional[int] = None
    categories: List[CategoryStats] = field(default_factory=list)

    @property
    def last_activity_date(self) -> Optional[str]:
        """Last activity as YYYY-MM-DD (UTC)."""
        if self.last_activity is None:
            return None
        return time.strftime("%Y-%m-%d", time.gmtime(self.last_activity))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalCertificates": self.total_certificates,
            "verifiedCertificates": self.verified_certificates,
            "pendingCertificates": self.pending_certificates,
            "categoriesCount": self.categories_count,
            "lastActivityDate": self.last_activity_date,
            "categories": [asdict(c) for c in self.categories],
        }
