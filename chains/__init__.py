"""
chains/ - Blockchain interaction layer.

Modules:
- providers: JSON-RPC provider over HTTP
- networks: Network id to name resolution
- client: Typed async operations and receipt polling
- context: Configure-once access to a shared client
"""

from chains.providers import (
    HttpProvider,
    RPCStats,
    resolve_provider,
    resolve_url,
)
from chains.networks import get_network_name
from chains.client import ChainClient
from chains.context import (
    ChainContext,
    close_client,
    get_client,
    initialize,
)

__all__ = [
    # Providers
    "HttpProvider",
    "RPCStats",
    "resolve_provider",
    "resolve_url",
    # Networks
    "get_network_name",
    # Client
    "ChainClient",
    # Context
    "ChainContext",
    "close_client",
    "get_client",
    "initialize",
]
