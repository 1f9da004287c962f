"""
Typed exceptions for ethgate.

Every error carries an ErrorCode, a message and a details dict.
RPC errors from the node are kept verbatim in the message.
"""

from typing import Any, Optional

from core.constants import ErrorCode, UNKNOWN_TRANSACTION_MARKER


class EthGateError(Exception):
    """Base exception for ethgate."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.UNKNOWN,
        message: str = "",
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(EthGateError):
    """Client used before a provider was set, or config is invalid."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None,
        code: ErrorCode = ErrorCode.CONFIG_ERROR,
    ):
        super().__init__(code, message, details)


class InfraError(EthGateError):
    """Infrastructure-related errors (transport, timeouts, malformed responses)."""
    pass


class RemoteError(InfraError):
    """
    The node answered with a JSON-RPC error object.

    The node's message is kept unchanged so callers can classify it.
    """

    def __init__(
        self,
        message: str,
        rpc_code: Optional[int] = None,
        data: Any = None,
        details: Optional[dict] = None,
    ):
        super().__init__(ErrorCode.INFRA_RPC_ERROR, message, details)
        self.rpc_code = rpc_code
        self.data = data

    @property
    def is_unknown_transaction(self) -> bool:
        return UNKNOWN_TRANSACTION_MARKER in self.message


class TransactionError(EthGateError):
    """Base for transaction outcome errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        tx_hash: str,
        details: Optional[dict] = None,
    ):
        super().__init__(code, message, {"tx_hash": tx_hash, **(details or {})})
        self.tx_hash = tx_hash


class TransactionFailedError(TransactionError):
    """Receipt came back with status 0."""

    def __init__(self, tx_hash: str, receipt: Optional[dict] = None):
        super().__init__(
            ErrorCode.TX_FAILED,
            f"Transaction: {tx_hash} exited with an error (status 0).",
            tx_hash,
        )
        self.receipt = receipt


class TransactionTimeoutError(TransactionError):
    """No receipt within the caller's timeout."""

    def __init__(self, tx_hash: str, timeout_ms: int):
        super().__init__(
            ErrorCode.TX_TIMEOUT,
            f"Transaction {tx_hash} wasn't processed in {timeout_ms / 1000:g} seconds!",
            tx_hash,
            {"timeout_ms": timeout_ms},
        )
        self.timeout_ms = timeout_ms
