"""
Constants for ethgate.

Contains enums, network tables and polling defaults.
"""

from enum import Enum
from typing import Final

# =============================================================================
# NETWORKS
# =============================================================================

# Known chain ids (EIP-155). Anything else resolves to "dev-<id>".
NETWORKS: Final[dict[int, str]] = {
    1: "mainnet",
    2: "morden",
    3: "ropsten",
    4: "rinkeby",
    42: "kovan",
}

MAINNET_NETWORK_NAME: Final[str] = "mainnet"
DEV_NETWORK_PREFIX: Final[str] = "dev-"

# Marker in web3_clientVersion reported by local test nodes
TEST_RPC_NODE_MARKER: Final[str] = "TestRPC"

# eth_getCode returns "0x" for accounts without code
EMPTY_CODE_LENGTH: Final[int] = 2

# =============================================================================
# RPC / POLLING DEFAULTS
# =============================================================================

DEFAULT_BLOCK_TAG: Final[str] = "latest"
BLOCK_TAGS: Final[frozenset[str]] = frozenset(["latest", "earliest", "pending"])

DEFAULT_RPC_TIMEOUT_SECONDS = 10
DEFAULT_POLL_INTERVAL_MS = 1000
DEFAULT_RECEIPT_TIMEOUT_MS = 0  # 0 = wait forever

# Error message fragment nodes return for transactions they have not seen yet
UNKNOWN_TRANSACTION_MARKER: Final[str] = "unknown transaction"


class ErrorCode(str, Enum):
    """Error codes carried by every ethgate exception."""
    # Configuration
    CONFIG_ERROR = "CONFIG_ERROR"
    NOT_INITIALIZED = "NOT_INITIALIZED"

    # Infrastructure errors
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    INFRA_RPC_TIMEOUT = "INFRA_RPC_TIMEOUT"
    INFRA_BAD_RESPONSE = "INFRA_BAD_RESPONSE"

    # Transactions
    TX_FAILED = "TX_FAILED"
    TX_TIMEOUT = "TX_TIMEOUT"

    UNKNOWN = "UNKNOWN"


class ReceiptState(str, Enum):
    """Terminal and intermediate states of the receipt waiter."""
    POLLING = "POLLING"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
