"""
core - Core utilities for ethgate.

This package contains:
- constants.py: Enums, network table and polling defaults
- exceptions.py: Typed exceptions with error codes
- time.py: Millisecond clock helpers
- logging.py: Structured JSON logging
"""

from core.constants import (
    NETWORKS,
    ErrorCode,
    ReceiptState,
)
from core.exceptions import (
    ConfigurationError,
    EthGateError,
    InfraError,
    RemoteError,
    TransactionError,
    TransactionFailedError,
    TransactionTimeoutError,
)
from core.logging import get_logger, setup_logging

__all__ = [
    # Constants
    "NETWORKS",
    "ErrorCode",
    "ReceiptState",
    # Exceptions
    "ConfigurationError",
    "EthGateError",
    "InfraError",
    "RemoteError",
    "TransactionError",
    "TransactionFailedError",
    "TransactionTimeoutError",
    # Logging
    "get_logger",
    "setup_logging",
]
