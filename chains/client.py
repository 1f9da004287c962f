"""
chains/client.py - Typed async facade over a JSON-RPC provider.

Provides:
- Account, balance, code and storage lookups
- Block and transaction queries
- Network name resolution
- Receipt polling with timeout
"""

import asyncio
from decimal import Decimal
from typing import Any

from core.constants import (
    BLOCK_TAGS,
    DEFAULT_BLOCK_TAG,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_RPC_TIMEOUT_SECONDS,
    EMPTY_CODE_LENGTH,
    ErrorCode,
    ReceiptState,
    TEST_RPC_NODE_MARKER,
)
from core.exceptions import (
    ConfigurationError,
    RemoteError,
    TransactionFailedError,
    TransactionTimeoutError,
)
from core.logging import get_logger, log_receipt
from core.time import is_timed_out, now_ms
from chains.networks import get_network_name, is_mainnet_name
from chains.providers import resolve_provider

logger = get_logger(__name__)

_BLOCK_HASH_LENGTH = 66  # 0x + 32 bytes


def _to_quantity(value: int | str) -> str:
    """Encode an int as a JSON-RPC quantity; strings pass through."""
    if isinstance(value, int):
        return hex(value)
    return value


def _parse_status(status: int | str | None) -> int | None:
    """
    Receipt status as an int.

    None for pre-Byzantium receipts and for statuses that are not a hex
    number (such as "0x"); only a status that parses to 0 is a failure.
    """
    if status is None:
        return None
    try:
        if isinstance(status, str):
            return int(status, 16)
        return int(status)
    except (TypeError, ValueError):
        return None


class ChainClient:
    """
    Async accessors for an Ethereum node.

    The provider is injected through the constructor or ``initialize``;
    every operation raises ConfigurationError until one is set.
    """

    def __init__(
        self,
        provider: Any = None,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS,
    ):
        self.poll_interval_ms = poll_interval_ms
        self.timeout_seconds = timeout_seconds
        self._provider: Any = None
        if provider is not None:
            self.initialize(provider)

    def initialize(self, provider_or_url: Any) -> None:
        """
        Store a provider, wrapping URL strings as HTTP providers.

        A previously bound provider is dropped without being closed; the
        caller owns it and should await ``close()`` first if it holds
        connections.
        """
        self._provider = resolve_provider(provider_or_url, self.timeout_seconds)

    @property
    def is_initialized(self) -> bool:
        return self._provider is not None

    @property
    def provider(self) -> Any:
        """The bound provider; raises ConfigurationError if none was set."""
        if self._provider is None:
            raise ConfigurationError(
                "ChainClient must be initialized with a provider",
                code=ErrorCode.NOT_INITIALIZED,
            )
        return self._provider

    async def close(self) -> None:
        """Release the provider's connections, if it holds any."""
        close = getattr(self._provider, "close", None)
        if close is not None:
            await close()

    async def _request(self, method: str, *params: Any) -> Any:
        return await self.provider.request(method, list(params))

    # -------------------------------------------------------------------------
    # Accounts and state
    # -------------------------------------------------------------------------

    async def accounts(self) -> list[str]:
        return await self._request("eth_accounts")

    async def default_account(self) -> str | None:
        accounts = await self.accounts()
        return accounts[0] if accounts else None

    async def get_balance(self, address: str, block: int | str = DEFAULT_BLOCK_TAG) -> Decimal:
        """Balance in wei as a Decimal."""
        result = await self._request("eth_getBalance", address, _to_quantity(block))
        return Decimal(int(result, 16))

    async def get_code(self, address: str, block: int | str = DEFAULT_BLOCK_TAG) -> str:
        return await self._request("eth_getCode", address, _to_quantity(block))

    async def has_bytecode(self, address: str) -> bool:
        """True if the address holds contract code."""
        code = await self.get_code(address)
        return len(code) > EMPTY_CODE_LENGTH

    async def get_storage_at(
        self,
        address: str,
        position: int | str,
        block: int | str = DEFAULT_BLOCK_TAG,
    ) -> str:
        return await self._request(
            "eth_getStorageAt", address, _to_quantity(position), _to_quantity(block)
        )

    async def estimate_gas(self, params: dict) -> int:
        result = await self._request("eth_estimateGas", params)
        return int(result, 16)

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    async def get_block(self, block: int | str, full_transactions: bool = False) -> dict | None:
        """
        Fetch a block by number, tag or hash.

        Args:
            block: Block number, one of "latest"/"earliest"/"pending",
                a hex quantity, or a 32-byte block hash
            full_transactions: Return full transaction objects instead of hashes

        Returns:
            The block record as returned by the node, or None
        """
        if isinstance(block, str) and block not in BLOCK_TAGS and len(block) == _BLOCK_HASH_LENGTH:
            return await self._request("eth_getBlockByHash", block, full_transactions)
        return await self._request("eth_getBlockByNumber", _to_quantity(block), full_transactions)

    async def get_latest_block(self) -> dict:
        return await self.get_block(DEFAULT_BLOCK_TAG)

    async def get_latest_block_number(self) -> int:
        result = await self._request("eth_blockNumber")
        return int(result, 16)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def send_transaction(self, params: dict) -> str:
        return await self._request("eth_sendTransaction", params)

    async def get_transaction(self, tx_hash: str) -> dict | None:
        return await self._request("eth_getTransactionByHash", tx_hash)

    async def get_transaction_receipt(self, tx_hash: str) -> dict | None:
        return await self._request("eth_getTransactionReceipt", tx_hash)

    async def _try_getting_receipt(self, tx_hash: str) -> dict | None:
        try:
            return await self.get_transaction_receipt(tx_hash)
        except RemoteError as e:
            if e.is_unknown_transaction:
                return None
            raise

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    async def wait_for_receipt(self, tx_hash: str, timeout_ms: int = 0) -> dict:
        """
        Poll for a transaction receipt until it is mined.

        Args:
            tx_hash: Transaction hash
            timeout_ms: Give up after this many milliseconds; 0 or less waits forever

        Returns:
            The receipt, once its status is non-zero

        Raises:
            TransactionFailedError: Receipt status is 0
            TransactionTimeoutError: No receipt within timeout_ms
            RemoteError: Any node error other than "unknown transaction"
        """
        start_ms = now_ms()
        polls = 0

        while True:
            polls += 1
            receipt = await self._try_getting_receipt(tx_hash)

            if receipt:
                status = _parse_status(receipt.get("status"))
                if status == 0:
                    log_receipt(
                        logger, tx_hash, ReceiptState.FAILED.value,
                        polls, now_ms() - start_ms,
                    )
                    raise TransactionFailedError(tx_hash, receipt)
                log_receipt(
                    logger, tx_hash, ReceiptState.CONFIRMED.value,
                    polls, now_ms() - start_ms,
                    block_number=receipt.get("blockNumber"),
                )
                return receipt

            logger.debug(
                f"Receipt for {tx_hash} not available yet",
                extra={"context": {
                    "tx_hash": tx_hash,
                    "state": ReceiptState.POLLING.value,
                    "polls": polls,
                }},
            )
            await self._sleep(self.poll_interval_ms / 1000)

            if is_timed_out(start_ms, timeout_ms, now_ms()):
                logger.warning(
                    f"Gave up waiting for receipt of {tx_hash}",
                    extra={"context": {
                        "tx_hash": tx_hash,
                        "state": ReceiptState.TIMED_OUT.value,
                        "polls": polls,
                        "timeout_ms": timeout_ms,
                    }},
                )
                raise TransactionTimeoutError(tx_hash, timeout_ms)

    # -------------------------------------------------------------------------
    # Network and node
    # -------------------------------------------------------------------------

    async def get_network(self) -> str:
        return await self._request("net_version")

    async def get_network_name(self) -> str:
        network_id = await self.get_network()
        return get_network_name(network_id)

    async def is_mainnet(self) -> bool:
        return is_mainnet_name(await self.get_network_name())

    async def get_node(self) -> str:
        return await self._request("web3_clientVersion")

    async def is_test_rpc_node(self) -> bool:
        node_version = await self.get_node()
        return TEST_RPC_NODE_MARKER in node_version
