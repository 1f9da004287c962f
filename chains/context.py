"""
chains/context.py - Configure-once access to a shared ChainClient.

The client itself takes its provider by injection; this module only
keeps a default instance around for code that wants one global entry
point.
"""

from typing import Any

from core.constants import DEFAULT_POLL_INTERVAL_MS, DEFAULT_RPC_TIMEOUT_SECONDS, ErrorCode
from core.exceptions import ConfigurationError
from core.logging import get_logger
from chains.client import ChainClient

logger = get_logger(__name__)


class ChainContext:
    """
    Holder for one ChainClient.

    Re-initializing replaces the client (last writer wins).
    """

    def __init__(self):
        self._client: ChainClient | None = None

    def initialize(
        self,
        provider_or_url: Any,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS,
    ) -> ChainClient:
        """
        Bind a provider (or URL) and return the new client.

        The replaced client is not closed; await ``close()`` before
        re-initializing to release its connections.
        """
        self._client = ChainClient(
            provider_or_url,
            poll_interval_ms=poll_interval_ms,
            timeout_seconds=timeout_seconds,
        )
        logger.debug(
            "Chain context initialized",
            extra={"context": {"provider": repr(self._client.provider)}},
        )
        return self._client

    @property
    def is_initialized(self) -> bool:
        return self._client is not None and self._client.is_initialized

    def get_client(self) -> ChainClient:
        if self._client is None:
            raise ConfigurationError(
                "Chain context must be initialized with a provider",
                code=ErrorCode.NOT_INITIALIZED,
            )
        return self._client

    async def close(self) -> None:
        """Close the client's provider and forget it."""
        if self._client is not None:
            await self._client.close()
            self._client = None


# Global context instance
_context = ChainContext()


def initialize(
    provider_or_url: Any,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS,
) -> ChainClient:
    """Initialize the global context."""
    return _context.initialize(provider_or_url, poll_interval_ms, timeout_seconds)


def get_client() -> ChainClient:
    """Get the client from the global context."""
    return _context.get_client()


async def close_client() -> None:
    """Close the client in the global context."""
    await _context.close()
