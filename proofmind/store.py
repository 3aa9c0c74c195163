# proofmind/store.py
"""
ProofMind: Certificate Store

Client-side cache of the certificates owned by the connected address, plus
the dashboard aggregates computed from it.

create() and update() validate the request before anything reaches the
network, submit through the gateway, wait until the transaction is executed
and only then reload the cache.

Usage:
    store = CertificateStore(gateway, session)
    await store.refresh()
    tx_hash = await store.create(CreateCertificateRequest(...))
    stats = store.dashboard_stats()
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional, List

from .errors import ValidationError
from .gateway import ContractGateway, DEFAULT_POLL_INTERVAL, DEFAULT_WAIT_TIMEOUT
from .models import (
    Certificate,
    CategoryStats,
    CreateCertificateRequest,
    DashboardStats,
    UpdateCertificateRequest,
    VerificationStatus,
)
from .session import WalletSessionManager
from .validation import validate_create_request, validate_update_request


logger = logging.getLogger(__name__)

SORT_FIELDS = ("timestamp", "category", "confidence_score")
SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass
class CertificateFilter:
    """
    Search filters. Unset fields match everything.

    Dates are inclusive and compared against the UTC creation day.
    """
    category: Optional[str] = None
    verification_status: Optional[VerificationStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    search_text: Optional[str] = None

    def matches(self, cert: Certificate) -> bool:
        if self.category and cert.category != self.category:
            return False
        if self.verification_status is not None and cert.verification_status != self.verification_status:
            return False
        if self.date_from is not None or self.date_to is not None:
            day = datetime.fromtimestamp(cert.timestamp, tz=timezone.utc).date()
            if self.date_from is not None and day < self.date_from:
                return False
            if self.date_to is not None and day > self.date_to:
                return False
        if self.search_text:
            needle = self.search_text.lower()
            haystack = [cert.proof_text, cert.proof_id] + list(cert.ai_tags)
            if not any(needle in value.lower() for value in haystack):
                return False
        return True


def _percentage(count: int, total: int) -> int:
    # half-up, like the dashboard charts
    return int(math.floor(count * 100 / total + 0.5))


class CertificateStore:
    """Certificates of the connected wallet."""

    def __init__(
        self,
        gateway: ContractGateway,
        session: WalletSessionManager,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
    ):
        self._gateway = gateway
        self._session = session
        self._poll_interval = poll_interval
        self._wait_timeout = wait_timeout
        self._certificates: List[Certificate] = []

    @property
    def certificates(self) -> List[Certificate]:
        return list(self._certificates)

    # =========================================================================
    # Loading / mutations
    # =========================================================================

    async def refresh(self) -> List[Certificate]:
        """Reload from chain. Without a session the cache is emptied."""
        wallet = self._session.wallet
        if wallet is None:
            self._certificates = []
        else:
            self._certificates = await self._gateway.get_user_certificates(wallet.address)
            logger.debug("Loaded %d certificates for %s", len(self._certificates), wallet.address)
        return self.certificates

    async def _settle(self, tx_hash: str) -> None:
        await self._gateway.wait_for_transaction(
            tx_hash, interval=self._poll_interval, timeout=self._wait_timeout
        )
        await self.refresh()

    async def create(self, request: CreateCertificateRequest) -> str:
        """
        Validate, submit certifyAction, wait for execution and reload.

        Raises:
            ValidationError: Before any network call
            NotConnectedError: From the gateway
            TransactionError: If submission fails or the transaction fails on chain
        """
        validate_create_request(request)
        if self.find(request.proof_id) is not None:
            raise ValidationError(f"Proof ID {request.proof_id} already exists", field="proof_id")
        tx_hash = await self._gateway.create_certificate(request)
        await self._settle(tx_hash)
        return tx_hash

    async def update(self, request: UpdateCertificateRequest) -> str:
        validate_update_request(request)
        tx_hash = await self._gateway.update_certificate(request)
        await self._settle(tx_hash)
        return tx_hash

    # =========================================================================
    # Queries over the cache
    # =========================================================================

    def find(self, proof_id: str) -> Optional[Certificate]:
        for cert in self._certificates:
            if cert.proof_id == proof_id:
                return cert
        return None

    def filter(self, filters: Optional[CertificateFilter] = None, **criteria) -> List[Certificate]:
        """Certificates matching ``filters`` (or the same fields as keywords)."""
        filters = filters or CertificateFilter(**criteria)
        return [c for c in self._certificates if filters.matches(c)]

    def sorted_by(self, field: str = "timestamp", direction: str = SORT_DESC) -> List[Certificate]:
        if field not in SORT_FIELDS:
            raise ValueError(f"Cannot sort by {field!r}; expected one of {SORT_FIELDS}")
        if direction not in (SORT_ASC, SORT_DESC):
            raise ValueError(f"Unknown sort direction: {direction!r}")
        return sorted(
            self._certificates,
            key=lambda c: getattr(c, field),
            reverse=direction == SORT_DESC,
        )

    # =========================================================================
    # Dashboard
    # =========================================================================

    def category_breakdown(self) -> List[CategoryStats]:
        """Per-category counts in first-seen order."""
        total = len(self._certificates)
        counts = {}
        for cert in self._certificates:
            counts[cert.category] = counts.get(cert.category, 0) + 1
        return [
            CategoryStats(category=category, count=count, percentage=_percentage(count, total))
            for category, count in counts.items()
        ]

    def dashboard_stats(self) -> DashboardStats:
        certs = self._certificates
        breakdown = self.category_breakdown()
        return DashboardStats(
            total_certificates=len(certs),
            verified_certificates=sum(
                1 for c in certs if c.verification_status == VerificationStatus.VERIFIED
            ),
            pending_certificates=sum(
                1 for c in certs if c.verification_status == VerificationStatus.PENDING
            ),
            categories_count=len(breakdown),
            last_activity=max((c.timestamp for c in certs), default=None),
            categories=breakdown,
        )
