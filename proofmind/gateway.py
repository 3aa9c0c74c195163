# proofmind/gateway.py
"""
ProofMind: Contract Gateway

Typed operations over the ProofMind contract.

Writes build the contract call (``function@hex@hex...``), fill in nonce, gas
and chain from the account and NetworkConfig, and hand the transaction to
the active wallet adapter to sign and broadcast. They never validate: that
is CertificateStore's job.

Reads run vm-values queries and decode the binary results into Certificate
objects. Single-item and list reads degrade to None / [] on failure (the
failure is logged); the count queries propagate QueryError.

Usage:
    gateway = ContractGateway(config, provider, session)
    tx_hash = await gateway.create_certificate(
        CreateCertificateRequest(proof_text="...", proof_id="CERT-2024-001")
    )
    status = await gateway.wait_for_transaction(tx_hash)
    cert = await gateway.get_certificate(address, "CERT-2024-001")
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Optional, List, Any

from .errors import AddressError, TransactionError, TransportError
from .models import (
    Certificate,
    CreateCertificateRequest,
    UpdateCertificateRequest,
    NetworkConfig,
    TransactionStatus,
    DEFAULT_CATEGORY,
    DEFAULT_METADATA,
)
from .session import WalletSessionManager
from .transport import NetworkProvider, ContractQuery, ContractQueryResponse
from .validation import check_update_gaps
from .wire import (
    new_transaction,
    build_call_data,
    encode_args,
    text_value,
    tags_value,
    address_value,
    decode_u64,
    parse_certificate,
    parse_certificate_list,
    decode_certificate,
)


logger = logging.getLogger(__name__)

# Contract endpoints
FN_CERTIFY_ACTION = "certifyAction"
FN_UPDATE_PROOF = "updateProof"

# Contract views
FN_GET_PROOF = "getProof"
FN_GET_USER_PROOFS = "getUserProofs"
FN_GET_TOTAL_PROOFS = "getTotalProofs"
FN_GET_CATEGORY_STATS = "getCategoryStats"
FN_GET_AI_ANALYSIS = "getAiAnalysis"

DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_WAIT_TIMEOUT = 60.0

HTTP_NOT_FOUND = 404


class ContractGateway:
    """Reads and writes against the ProofMind contract."""

    def __init__(
        self,
        config: NetworkConfig,
        network: NetworkProvider,
        session: WalletSessionManager,
    ):
        self._config = config
        self._network = network
        self._session = session

    @property
    def config(self) -> NetworkConfig:
        """Copy of the network configuration."""
        return replace(self._config)

    # =========================================================================
    # Writes
    # =========================================================================

    async def _submit(self, function: str, args: List[Any]) -> str:
        adapter = self._session.require_adapter()
        sender = adapter.get_address()

        try:
            account = await self._network.get_account(sender)
        except TransportError as e:
            raise TransactionError(f"Could not read nonce for {sender}: {e}")

        try:
            tx = new_transaction(
                sender=sender,
                receiver=self._config.contract_address,
                gas_limit=self._config.gas_limit,
                gas_price=self._config.gas_price,
                chain_id=self._config.chain_id,
                data=build_call_data(function, args),
                nonce=account.nonce,
            )
        except AddressError as e:
            raise TransactionError(f"Cannot build {function} transaction: {e}")
        tx_hash = await adapter.sign_and_send_transaction(tx)
        logger.info("%s submitted: %s", function, tx_hash)
        return tx_hash

    async def create_certificate(self, request: CreateCertificateRequest) -> str:
        """
        Submit certifyAction.

        Returns:
            Transaction hash

        Raises:
            NotConnectedError: If no wallet session is active
            TransactionError: If signing or broadcast fails
        """
        args = [
            text_value(request.proof_text),
            text_value(request.proof_id),
            text_value(request.category or DEFAULT_CATEGORY),
            text_value(request.metadata or DEFAULT_METADATA),
            tags_value(request.ai_tags or []),
        ]
        return await self._submit(FN_CERTIFY_ACTION, args)

    async def update_certificate(self, request: UpdateCertificateRequest) -> str:
        """
        Submit updateProof. Trailing omitted fields are left off the call.

        Raises:
            ValidationError: If an omitted field is followed by a given one
            NotConnectedError: If no wallet session is active
            TransactionError: If signing or broadcast fails
        """
        check_update_gaps(request)

        optional = [
            None if request.new_proof_text is None else text_value(request.new_proof_text),
            None if request.new_category is None else text_value(request.new_category),
            None if request.new_metadata is None else text_value(request.new_metadata),
            None if request.new_ai_tags is None else tags_value(request.new_ai_tags),
        ]
        while optional and optional[-1] is None:
            optional.pop()

        args = [text_value(request.proof_id)] + optional
        return await self._submit(FN_UPDATE_PROOF, args)

    async def wait_for_transaction(
        self,
        tx_hash: str,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_WAIT_TIMEOUT,
    ) -> TransactionStatus:
        """
        Poll until the transaction is processed.

        A transaction the gateway does not know yet (404) counts as pending.

        Raises:
            TransactionError: If it failed, is invalid, timed out, or the
                status lookup itself failed
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while True:
            try:
                status = await self._network.get_transaction_status(tx_hash)
            except TransportError as e:
                if e.status_code != HTTP_NOT_FOUND:
                    raise TransactionError(f"Status lookup for {tx_hash} failed: {e}", tx_hash=tx_hash)
                logger.debug("%s not indexed yet", tx_hash)
                status = TransactionStatus.PENDING
            if status.is_final:
                break
            if loop.time() >= deadline:
                raise TransactionError(f"Timed out waiting for {tx_hash}", tx_hash=tx_hash)
            await asyncio.sleep(interval)

        if status != TransactionStatus.SUCCESS:
            raise TransactionError(f"Transaction {tx_hash} {status.value}", tx_hash=tx_hash)
        return status

    # =========================================================================
    # Reads
    # =========================================================================

    async def _query(self, function: str, args: Optional[List[bytes]] = None) -> ContractQueryResponse:
        return await self._network.query_contract(ContractQuery(
            contract=self._config.contract_address,
            function=function,
            args=args or [],
        ))

    async def get_certificate(self, address: str, proof_id: str) -> Optional[Certificate]:
        """Certificate, or None if it does not exist or the query failed."""
        try:
            response = await self._query(FN_GET_PROOF, encode_args([address_value(address), text_value(proof_id)]))
        except (TransportError, AddressError) as e:
            logger.error("Error fetching certificate %s: %s", proof_id, e)
            return None

        if not response.first:
            return None
        cert = decode_certificate(parse_certificate(response.first))
        return None if cert.is_empty else cert

    async def get_user_certificates(self, address: str) -> List[Certificate]:
        """All certificates owned by ``address``; [] on failure."""
        try:
            response = await self._query(FN_GET_USER_PROOFS, encode_args([address_value(address)]))
        except (TransportError, AddressError) as e:
            logger.error("Error fetching user certificates for %s: %s", address, e)
            return []

        # one result holding the whole vec, or one result per item
        bags = []
        for raw in response.return_data:
            bags.extend(parse_certificate_list(raw))
        return [decode_certificate(bag) for bag in bags]

    async def get_total_certificates(self) -> int:
        """
        Raises:
            QueryError: If the query fails
        """
        response = await self._query(FN_GET_TOTAL_PROOFS)
        return decode_u64(response.first)

    async def get_category_stats(self, category: str) -> int:
        """
        Raises:
            QueryError: If the query fails
        """
        response = await self._query(FN_GET_CATEGORY_STATS, encode_args([text_value(category)]))
        return decode_u64(response.first)

    async def get_ai_analysis(self, address: str, proof_id: str) -> str:
        """Scorer's analysis text; empty when none was recorded."""
        try:
            response = await self._query(FN_GET_AI_ANALYSIS, encode_args([address_value(address), text_value(proof_id)]))
        except (TransportError, AddressError) as e:
            logger.error("Error fetching AI analysis for %s: %s", proof_id, e)
            return ""
        return response.first.decode("utf-8", errors="replace")

    # =========================================================================
    # Explorer links
    # =========================================================================

    def explorer_transaction_url(self, tx_hash: str) -> str:
        return f"{self._config.explorer_url}/transactions/{tx_hash}"

    def explorer_account_url(self, address: str) -> str:
        return f"{self._config.explorer_url}/accounts/{address}"
