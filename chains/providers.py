"""
chains/providers.py - JSON-RPC provider over HTTP.

Provides:
- JSON-RPC 2.0 envelopes with incrementing request ids
- Request timeout handling
- Connection pooling
- Latency tracking
"""

import os
import re
import time
from dataclasses import dataclass
from typing import Any

import httpx
from dotenv import load_dotenv

from core.constants import DEFAULT_RPC_TIMEOUT_SECONDS, ErrorCode
from core.exceptions import InfraError, RemoteError
from core.logging import get_logger

logger = get_logger(__name__)

# Load environment variables
load_dotenv()

_ENV_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None
    last_success_ts: int | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


def resolve_url(url: str) -> str:
    """Replace ${VAR} placeholders in a URL with environment values."""
    return _ENV_PLACEHOLDER.sub(lambda m: os.getenv(m.group(1), ""), url)


class HttpProvider:
    """
    JSON-RPC provider for a single HTTP endpoint.

    Any object with an ``async request(method, params)`` coroutine can
    stand in for this class wherever a provider is expected.
    """

    def __init__(
        self,
        url: str,
        timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = resolve_url(url)
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0
        self.stats = RPCStats(url=self.url)

    def __repr__(self) -> str:
        return f"HttpProvider(url={self.url!r})"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=10),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _next_request_id(self) -> int:
        """Generate next request ID."""
        self._request_id += 1
        return self._request_id

    def _record_failure(self, error: str) -> None:
        self.stats.failed_requests += 1
        self.stats.last_error = error

    async def request(
        self,
        method: str,
        params: list | None = None,
    ) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            The ``result`` member of the response, unchanged

        Raises:
            RemoteError: If the node answers with an error object
            InfraError: If the request times out or the transport fails
        """
        client = await self._get_client()
        self.stats.total_requests += 1

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": self._next_request_id(),
        }

        start_ms = int(time.time() * 1000)

        try:
            resp = await client.post(self.url, json=payload)
            latency_ms = int(time.time() * 1000) - start_ms

        except httpx.TimeoutException as e:
            latency_ms = int(time.time() * 1000) - start_ms
            self._record_failure(f"Timeout after {latency_ms}ms")
            logger.debug(
                f"RPC timeout for {method}",
                extra={"context": {"url": self.url, "latency_ms": latency_ms}},
            )
            raise InfraError(
                code=ErrorCode.INFRA_RPC_TIMEOUT,
                message=f"RPC request {method} timed out after {latency_ms}ms",
                details={"url": self.url, "method": method},
            ) from e

        except httpx.HTTPError as e:
            self._record_failure(str(e))
            logger.debug(
                f"RPC transport failure for {method}: {e}",
                extra={"context": {"url": self.url}},
            )
            raise InfraError(
                code=ErrorCode.INFRA_RPC_ERROR,
                message=f"RPC request {method} failed: {e}",
                details={"url": self.url, "method": method},
            ) from e

        try:
            body = resp.json()
        except ValueError as e:
            self._record_failure(f"Invalid JSON (HTTP {resp.status_code})")
            raise InfraError(
                code=ErrorCode.INFRA_BAD_RESPONSE,
                message=f"RPC request {method} returned invalid JSON",
                details={"url": self.url, "method": method, "status_code": resp.status_code},
            ) from e

        if not isinstance(body, dict):
            self._record_failure("Malformed response")
            raise InfraError(
                code=ErrorCode.INFRA_BAD_RESPONSE,
                message=f"RPC request {method} returned a malformed response",
                details={"url": self.url, "method": method},
            )

        if "error" in body:
            error = body["error"]
            if isinstance(error, dict):
                error_msg = error.get("message", str(error))
                rpc_code = error.get("code")
                data = error.get("data")
            else:
                error_msg, rpc_code, data = str(error), None, None
            self._record_failure(error_msg)
            logger.debug(
                f"RPC error for {method}: {error_msg}",
                extra={"context": {"url": self.url, "rpc_code": rpc_code}},
            )
            raise RemoteError(
                error_msg,
                rpc_code=rpc_code,
                data=data,
                details={"url": self.url, "method": method},
            )

        self.stats.successful_requests += 1
        self.stats.total_latency_ms += latency_ms
        self.stats.last_success_ts = int(time.time() * 1000)

        return body.get("result")

    def get_stats_summary(self) -> dict:
        """Get statistics summary for the endpoint."""
        s = self.stats
        return {
            "url": s.url,
            "total_requests": s.total_requests,
            "success_rate": round(s.success_rate, 3),
            "avg_latency_ms": s.avg_latency_ms,
            "last_error": s.last_error,
        }


def resolve_provider(provider_or_url: Any, timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS) -> Any:
    """
    Turn an initialization argument into a provider.

    Strings are treated as HTTP endpoints; anything else is used as-is.
    No connectivity check is made.
    """
    if isinstance(provider_or_url, str):
        return HttpProvider(provider_or_url, timeout_seconds=timeout_seconds)
    return provider_or_url
