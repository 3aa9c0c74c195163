# proofmind/transport/http.py
"""
ProofMind Transport: HTTP

Thin async HTTP layer under the proxy gateway client. The default transport
uses httpx; MockHTTPTransport records requests and replays queued responses
for tests.

The transport never retries and imposes no timeout of its own beyond the
httpx client timeout it is constructed with.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

import httpx

from ..errors import TransportError


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class HTTPResponse:
    """Raw HTTP response."""
    status_code: int
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8")) if self.body else None


# =============================================================================
# HTTP Transport (Abstract)
# =============================================================================

class HTTPTransport(ABC):
    """Abstract HTTP transport for gateway calls."""

    @abstractmethod
    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """Send GET request."""
        pass

    @abstractmethod
    async def post(self, url: str, data: bytes, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        """Send POST request."""
        pass

    async def aclose(self) -> None:
        """Release connections."""
        pass


class HttpxTransport(HTTPTransport):
    """httpx-backed transport sharing one AsyncClient."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, client: Optional[httpx.AsyncClient] = None):
        self._timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        try:
            response = await self._get_client().get(url, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}")
        return HTTPResponse(status_code=response.status_code, body=response.content)

    async def post(self, url: str, data: bytes, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        try:
            response = await self._get_client().post(url, content=data, headers=headers)
        except httpx.HTTPError as e:
            raise TransportError(f"POST {url} failed: {e}")
        return HTTPResponse(status_code=response.status_code, body=response.content)

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class MockHTTPTransport(HTTPTransport):
    """Mock HTTP transport for testing."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self._response_queue: List[HTTPResponse] = []
        self._error: Optional[Exception] = None

    def queue_response(self, payload: Any, status_code: int = 200) -> None:
        """Queue a JSON payload (or raw bytes) to return."""
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        self._response_queue.append(HTTPResponse(status_code=status_code, body=body))

    def fail_with(self, error: Optional[Exception]) -> None:
        """Raise ``error`` from every subsequent request (None to stop)."""
        self._error = error

    def _record(self, method: str, url: str, data: Optional[bytes], headers: Optional[Dict[str, str]]) -> HTTPResponse:
        self.requests.append({
            "method": method,
            "url": url,
            "data": data,
            "headers": headers or {},
        })
        if self._error is not None:
            raise self._error
        if self._response_queue:
            return self._response_queue.pop(0)
        return HTTPResponse(
            status_code=200,
            body=json.dumps({"data": {}, "error": "", "code": "successful"}).encode(),
        )

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        return self._record("GET", url, None, headers)

    async def post(self, url: str, data: bytes, headers: Optional[Dict[str, str]] = None) -> HTTPResponse:
        return self._record("POST", url, data, headers)
