# proofmind/transport/__init__.py
"""
ProofMind Transport Layer

Network access for the Contract Gateway and the Wallet Session Manager.

Modules:
    http:     HTTPTransport (httpx) and MockHTTPTransport
    provider: NetworkProvider interface, ProxyNetworkProvider (gateway REST
              API) and MockNetworkProvider (in-memory chain)

Usage:
    from proofmind.transport import ProxyNetworkProvider, ContractQuery

    provider = ProxyNetworkProvider("https://devnet-gateway.multiversx.com")
    account = await provider.get_account(address)
"""

from .http import (
    HTTPTransport,
    HTTPResponse,
    HttpxTransport,
    MockHTTPTransport,
)

from .provider import (
    NetworkProvider,
    ProxyNetworkProvider,
    MockNetworkProvider,
    AccountOnNetwork,
    ContractQuery,
    ContractQueryResponse,
)

__all__ = [
    "HTTPTransport",
    "HTTPResponse",
    "HttpxTransport",
    "MockHTTPTransport",
    "NetworkProvider",
    "ProxyNetworkProvider",
    "MockNetworkProvider",
    "AccountOnNetwork",
    "ContractQuery",
    "ContractQueryResponse",
]
