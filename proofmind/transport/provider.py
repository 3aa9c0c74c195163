# proofmind/transport/provider.py
"""
ProofMind Transport: Network Provider

Client of the MultiversX proxy gateway REST API:

    GET  /address/{bech32}            account nonce and balance
    POST /vm-values/query             read-only contract call
    POST /transaction/send            broadcast a signed transaction
    GET  /transaction/{hash}/status   processing status
    GET  /network/config              chain parameters

Every gateway reply is wrapped as {"data": ..., "error": "", "code": "successful"};
anything else becomes a TransportError carrying the gateway's message.

MockNetworkProvider implements the same interface in memory and executes
the ProofMind contract endpoints itself, so the full create/query cycle can
run without a network.

Usage:
    provider = ProxyNetworkProvider("https://devnet-gateway.multiversx.com")
    account = await provider.get_account("erd1...")
    response = await provider.query_contract(
        ContractQuery(contract="erd1qqq...", function="getTotalProofs")
    )
"""

from __future__ import annotations

import base64
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List, Callable, Tuple

from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from ..errors import TransportError, QueryError, AddressError
from ..models import TransactionStatus, DEFAULT_CATEGORY, DEFAULT_METADATA, VerificationStatus
from ..wire import (
    Transaction,
    address_to_pubkey,
    pubkey_to_address,
    bytes_for_signing,
    transaction_hash,
    transaction_to_dict,
    is_signed,
    sender_of,
    receiver_of,
    call_data,
    encode_u64,
    encode_certificate,
    decode_buffer_list,
    parse_call_data,
    DecodeError,
)
from .http import HTTPTransport, HTTPResponse, HttpxTransport


logger = logging.getLogger(__name__)

RETURN_CODE_OK = "ok"


# =============================================================================
# Types
# =============================================================================

@dataclass
class AccountOnNetwork:
    """Account state read from the gateway."""
    address: str
    nonce: int = 0
    balance: str = "0"


@dataclass
class ContractQuery:
    """Read-only contract call."""
    contract: str
    function: str
    args: List[bytes] = field(default_factory=list)
    caller: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "scAddress": self.contract,
            "funcName": self.function,
            "args": [a.hex() for a in self.args],
        }
        if self.caller:
            body["caller"] = self.caller
        return body


@dataclass
class ContractQueryResponse:
    """Decoded vm-values/query reply."""
    return_data: List[bytes] = field(default_factory=list)
    return_code: str = RETURN_CODE_OK
    return_message: str = ""

    @property
    def is_success(self) -> bool:
        return self.return_code == RETURN_CODE_OK

    @property
    def first(self) -> bytes:
        """First return value, empty when there is none."""
        return self.return_data[0] if self.return_data else b""


# =============================================================================
# Network Provider (Abstract)
# =============================================================================

class NetworkProvider(ABC):
    """Operations the access layer needs from the network."""

    @abstractmethod
    async def get_account(self, address: str) -> AccountOnNetwork:
        pass

    @abstractmethod
    async def query_contract(self, query: ContractQuery) -> ContractQueryResponse:
        """
        Raises:
            QueryError: On transport failure or a non-ok return code
        """
        pass

    @abstractmethod
    async def send_transaction(self, tx: Transaction) -> str:
        """Broadcast a signed transaction and return its hash."""
        pass

    @abstractmethod
    async def get_transaction_status(self, tx_hash: str) -> TransactionStatus:
        pass

    async def get_network_config(self) -> Dict[str, Any]:
        return {}

    async def aclose(self) -> None:
        pass


# =============================================================================
# Proxy gateway client
# =============================================================================

class ProxyNetworkProvider(NetworkProvider):
    """MultiversX proxy gateway over HTTP."""

    def __init__(
        self,
        url: str,
        transport: Optional[HTTPTransport] = None,
        timeout: float = 30.0,
    ):
        """
        Args:
            url: Gateway base URL
            transport: HTTP transport (httpx if None)
            timeout: HTTP timeout for the default transport
        """
        self._url = url.rstrip("/")
        self._transport = transport or HttpxTransport(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    def _unwrap(self, response: HTTPResponse, what: str) -> Any:
        try:
            payload = response.json()
        except ValueError:
            raise TransportError(
                f"{what}: invalid JSON from gateway", status_code=response.status_code
            )
        if not isinstance(payload, dict):
            raise TransportError(f"{what}: unexpected reply", status_code=response.status_code)
        error = payload.get("error") or ""
        code = payload.get("code", "successful")
        if not response.ok or error or code != "successful":
            raise TransportError(
                f"{what}: {error or code or response.status_code}",
                status_code=response.status_code,
                data=payload,
            )
        return payload.get("data") or {}

    async def _get(self, path: str, what: str) -> Any:
        logger.debug("GET %s%s", self._url, path)
        response = await self._transport.get(self._url + path)
        return self._unwrap(response, what)

    async def _post(self, path: str, body: Dict[str, Any], what: str) -> Any:
        logger.debug("POST %s%s", self._url, path)
        response = await self._transport.post(
            self._url + path,
            json.dumps(body).encode("utf-8"),
            {"Content-Type": "application/json"},
        )
        return self._unwrap(response, what)

    async def get_account(self, address: str) -> AccountOnNetwork:
        data = await self._get(f"/address/{address}", "get account")
        account = data.get("account") or {}
        try:
            nonce = int(account.get("nonce", 0) or 0)
            balance = str(int(account.get("balance", "0") or 0))
        except (TypeError, ValueError):
            raise TransportError(f"get account: malformed account data for {address}", data=data)
        return AccountOnNetwork(address=account.get("address", address), nonce=nonce, balance=balance)

    async def query_contract(self, query: ContractQuery) -> ContractQueryResponse:
        try:
            data = await self._post("/vm-values/query", query.to_dict(), f"query {query.function}")
        except TransportError as e:
            raise QueryError(str(e), status_code=e.status_code, data=e.data)

        # vm-values replies nest the VM output one level deeper
        output = data.get("data") or {}
        try:
            return_data = [base64.b64decode(item or "") for item in (output.get("returnData") or [])]
        except ValueError as e:
            raise QueryError(f"query {query.function}: malformed returnData: {e}")

        response = ContractQueryResponse(
            return_data=return_data,
            return_code=output.get("returnCode", RETURN_CODE_OK),
            return_message=output.get("returnMessage", ""),
        )
        if not response.is_success:
            raise QueryError(
                f"query {query.function}: {response.return_code}: {response.return_message}",
                data=output,
            )
        return response

    async def send_transaction(self, tx: Transaction) -> str:
        data = await self._post("/transaction/send", transaction_to_dict(tx), "send transaction")
        tx_hash = data.get("txHash")
        if not tx_hash:
            raise TransportError("send transaction: gateway returned no txHash", data=data)
        return tx_hash

    async def get_transaction_status(self, tx_hash: str) -> TransactionStatus:
        data = await self._get(f"/transaction/{tx_hash}/status", "transaction status")
        return TransactionStatus.parse(data.get("status"))

    async def get_network_config(self) -> Dict[str, Any]:
        data = await self._get("/network/config", "network config")
        return data.get("config") or {}

    async def aclose(self) -> None:
        await self._transport.aclose()


# =============================================================================
# Mock provider (in-memory chain running the ProofMind contract)
# =============================================================================

@dataclass
class _MockAccount:
    nonce: int = 0
    balance: int = 0


class MockNetworkProvider(NetworkProvider):
    """
    In-memory network for testing.

    Verifies Ed25519 signatures and nonces, executes certifyAction and
    updateProof with the contract's own rules, and answers the contract views
    with binary-encoded results.

    By default a transaction executes as soon as it is broadcast. With
    ``execute_on_poll`` it stays pending, and unknown to the status endpoint
    for ``unindexed_polls`` lookups, until its status is polled, the way a
    real gateway reports a transaction that is still in the mempool.
    """

    def __init__(
        self,
        contract_address: str,
        clock: Callable[[], float] = time.time,
        verify_signatures: bool = True,
        execute_on_poll: bool = False,
        unindexed_polls: int = 0,
    ):
        self.contract_address = contract_address
        self._clock = clock
        self._verify_signatures = verify_signatures
        self._execute_on_poll = execute_on_poll
        self._unindexed_polls = unindexed_polls
        self._pending: Dict[str, Transaction] = {}
        self._misses: Dict[str, int] = {}
        self.status_polls = 0

        self._accounts: Dict[str, _MockAccount] = {}
        self._proofs: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self._proof_ids: Dict[str, List[str]] = {}
        self._category_stats: Dict[str, int] = {}
        self._ai_analysis: Dict[Tuple[str, str], str] = {}
        self._total = 0

        self.sent: List[Transaction] = []
        self.queries: List[ContractQuery] = []
        self.tx_status: Dict[str, TransactionStatus] = {}
        self.tx_errors: Dict[str, str] = {}

        self._query_error: Optional[Exception] = None
        self._send_error: Optional[Exception] = None

    # -------------------------------------------------------------------------
    # Test controls
    # -------------------------------------------------------------------------

    def fund(self, address: str, balance: int) -> None:
        """Create or top up an account."""
        self._accounts.setdefault(address, _MockAccount()).balance += balance

    def fail_queries(self, error: Optional[Exception] = None) -> None:
        """Make every query raise ``error`` (None restores)."""
        self._query_error = error

    def fail_sends(self, error: Optional[Exception] = None) -> None:
        """Make every broadcast raise ``error`` (None restores)."""
        self._send_error = error

    def set_verification(
        self,
        owner: str,
        proof_id: str,
        status: VerificationStatus,
        confidence_score: int,
        analysis: str = "",
    ) -> None:
        """Apply what the contract owner's aiVerify endpoint would."""
        bag = self._proofs[(owner, proof_id)]
        bag["verification_status"] = status.value
        bag["confidence_score"] = confidence_score
        self._ai_analysis[(owner, proof_id)] = analysis

    # -------------------------------------------------------------------------
    # NetworkProvider
    # -------------------------------------------------------------------------

    async def get_account(self, address: str) -> AccountOnNetwork:
        try:
            address_to_pubkey(address)
        except AddressError as e:
            raise TransportError(f"get account: {e}", status_code=400)
        account = self._accounts.get(address, _MockAccount())
        return AccountOnNetwork(address=address, nonce=account.nonce, balance=str(account.balance))

    async def send_transaction(self, tx: Transaction) -> str:
        if self._send_error is not None:
            raise self._send_error
        if not is_signed(tx):
            raise TransportError("send transaction: missing signature", status_code=400)
        sender = sender_of(tx)
        if self._verify_signatures:
            try:
                VerifyKey(address_to_pubkey(sender)).verify(bytes_for_signing(tx), bytes(tx.signature))
            except (BadSignatureError, ValueError, AddressError):
                raise TransportError("send transaction: invalid signature", status_code=400)

        account = self._accounts.setdefault(sender, _MockAccount())
        if tx.nonce < account.nonce:
            raise TransportError(
                f"send transaction: lowerNonceInTransaction ({tx.nonce} < {account.nonce})",
                status_code=400,
            )
        if tx.chain_id == "":
            raise TransportError("send transaction: invalid chain ID", status_code=400)

        account.nonce = tx.nonce + 1
        tx_hash = transaction_hash(tx)
        self.sent.append(tx)

        if self._execute_on_poll:
            self._pending[tx_hash] = tx
            self.tx_status[tx_hash] = TransactionStatus.PENDING
        else:
            self._settle(tx_hash, tx)
        return tx_hash

    def _settle(self, tx_hash: str, tx: Transaction) -> None:
        error = self._execute(tx)
        if error:
            self.tx_status[tx_hash] = TransactionStatus.FAIL
            self.tx_errors[tx_hash] = error
        else:
            self.tx_status[tx_hash] = TransactionStatus.SUCCESS

    async def get_transaction_status(self, tx_hash: str) -> TransactionStatus:
        self.status_polls += 1
        if tx_hash in self._pending:
            misses = self._misses.get(tx_hash, 0)
            if misses < self._unindexed_polls:
                self._misses[tx_hash] = misses + 1
                raise TransportError("transaction status: transaction not found", status_code=404)
            self._settle(tx_hash, self._pending.pop(tx_hash))
        if tx_hash not in self.tx_status:
            raise TransportError("transaction status: transaction not found", status_code=404)
        return self.tx_status[tx_hash]

    async def get_network_config(self) -> Dict[str, Any]:
        return {"erd_min_gas_price": 1_000_000_000}

    async def query_contract(self, query: ContractQuery) -> ContractQueryResponse:
        self.queries.append(query)
        if self._query_error is not None:
            raise self._query_error
        if query.contract != self.contract_address:
            raise QueryError(f"query {query.function}: unknown contract {query.contract}")

        handler = self._views.get(query.function)
        if handler is None:
            return ContractQueryResponse(
                return_code="function not found",
                return_message=f"invalid function (not found): {query.function}",
            )
        try:
            return ContractQueryResponse(return_data=handler(self, *query.args))
        except (TypeError, DecodeError, AddressError) as e:
            raise QueryError(f"query {query.function}: wrong arguments: {e}")

    # -------------------------------------------------------------------------
    # Contract views
    # -------------------------------------------------------------------------

    def _view_get_proof(self, user: bytes, proof_id: bytes) -> List[bytes]:
        bag = self._proofs.get((pubkey_to_address(user), proof_id.decode()))
        return [encode_certificate(bag) if bag else b""]

    def _view_get_user_proofs(self, user: bytes) -> List[bytes]:
        owner = pubkey_to_address(user)
        encoded = [
            encode_certificate(self._proofs[(owner, pid)])
            for pid in self._proof_ids.get(owner, [])
        ]
        return [b"".join(encoded)]

    def _view_get_total_proofs(self) -> List[bytes]:
        return [encode_u64(self._total)]

    def _view_get_category_stats(self, category: bytes) -> List[bytes]:
        return [encode_u64(self._category_stats.get(category.decode(), 0))]

    def _view_get_ai_analysis(self, user: bytes, proof_id: bytes) -> List[bytes]:
        key = (pubkey_to_address(user), proof_id.decode())
        return [self._ai_analysis.get(key, "").encode()]

    _views = {
        "getProof": _view_get_proof,
        "getUserProofs": _view_get_user_proofs,
        "getTotalProofs": _view_get_total_proofs,
        "getCategoryStats": _view_get_category_stats,
        "getAiAnalysis": _view_get_ai_analysis,
    }

    # -------------------------------------------------------------------------
    # Contract endpoints
    # -------------------------------------------------------------------------

    def _execute(self, tx: Transaction) -> Optional[str]:
        """Run the call carried by ``tx``; return an error message on failure."""
        if receiver_of(tx) != self.contract_address or not tx.data:
            return None
        try:
            function, args = parse_call_data(call_data(tx))
        except DecodeError as e:
            return str(e)
        if function == "certifyAction":
            return self._certify_action(sender_of(tx), args)
        if function == "updateProof":
            return self._update_proof(sender_of(tx), args)
        return f"invalid function (not found): {function}"

    def _certify_action(self, caller: str, args: List[bytes]) -> Optional[str]:
        if len(args) < 2:
            return "wrong number of arguments"
        proof_text, proof_id = args[0].decode(), args[1].decode()
        category = args[2].decode() if len(args) > 2 else DEFAULT_CATEGORY
        metadata = args[3].decode() if len(args) > 3 else DEFAULT_METADATA
        tags = decode_buffer_list(args[4]) if len(args) > 4 else []

        if not 10 <= len(args[0]) <= 1000:
            return "Proof text must be between 10 and 1000 characters"
        if not 5 <= len(args[1]) <= 100:
            return "Proof ID must be between 5 and 100 characters"
        if (caller, proof_id) in self._proofs:
            return "Proof ID already exists for this user"

        self._proofs[(caller, proof_id)] = {
            "proof_text": proof_text,
            "timestamp": int(self._clock()),
            "proof_id": proof_id,
            "category": category,
            "metadata": metadata,
            "ai_tags": tags,
            "confidence_score": 100,
            "verification_status": VerificationStatus.PENDING.value,
            "created_by": caller,
        }
        self._proof_ids.setdefault(caller, []).append(proof_id)
        self._total += 1
        self._category_stats[category] = self._category_stats.get(category, 0) + 1
        return None

    def _update_proof(self, caller: str, args: List[bytes]) -> Optional[str]:
        if not args:
            return "wrong number of arguments"
        bag = self._proofs.get((caller, args[0].decode()))
        if bag is None:
            return "Certificate not found"
        if len(args) > 1:
            bag["proof_text"] = args[1].decode()
        if len(args) > 2:
            bag["category"] = args[2].decode()
        if len(args) > 3:
            bag["metadata"] = args[3].decode()
        if len(args) > 4:
            bag["ai_tags"] = decode_buffer_list(args[4])
        return None
