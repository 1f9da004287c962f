"""
Configuration loading utilities for ethgate.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from core.constants import (
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_RECEIPT_TIMEOUT_MS,
    DEFAULT_RPC_TIMEOUT_SECONDS,
)
from core.exceptions import ConfigurationError


CONFIG_DIR = Path(__file__).parent
DEFAULT_CONFIG_FILE = CONFIG_DIR / "ethgate.yaml"

RPC_URL_ENV = "ETHGATE_RPC_URL"


@dataclass
class ClientConfig:
    """Connection and polling settings for a ChainClient."""

    rpc_url: Optional[str] = None
    timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    receipt_timeout_ms: int = DEFAULT_RECEIPT_TIMEOUT_MS

    def validate(self) -> None:
        """Raise ConfigurationError on out-of-range values."""
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                "timeout_seconds must be positive",
                details={"timeout_seconds": self.timeout_seconds},
            )
        if self.poll_interval_ms <= 0:
            raise ConfigurationError(
                "poll_interval_ms must be positive",
                details={"poll_interval_ms": self.poll_interval_ms},
            )
        if self.receipt_timeout_ms < 0:
            raise ConfigurationError(
                "receipt_timeout_ms must not be negative",
                details={"receipt_timeout_ms": self.receipt_timeout_ms},
            )


def load_yaml(path: Path) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: File path

    Returns:
        Parsed YAML as dict
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file must contain a mapping: {path}",
            details={"path": str(path)},
        )
    return data


def load_client_config(config_path: Path | None = None) -> ClientConfig:
    """
    Load client configuration.

    Values come from the YAML file (default: config/ethgate.yaml), then
    ETHGATE_RPC_URL from the environment or a .env file overrides rpc_url.
    A missing file means built-in defaults.

    Args:
        config_path: Path to a YAML config file

    Returns:
        Validated ClientConfig
    """
    load_dotenv()

    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    data = load_yaml(config_path) if config_path.exists() else {}
    client_data = data.get("client", {}) or {}

    try:
        config = ClientConfig(
            rpc_url=client_data.get("rpc_url"),
            timeout_seconds=float(client_data.get("timeout_seconds", DEFAULT_RPC_TIMEOUT_SECONDS)),
            poll_interval_ms=int(client_data.get("poll_interval_ms", DEFAULT_POLL_INTERVAL_MS)),
            receipt_timeout_ms=int(client_data.get("receipt_timeout_ms", DEFAULT_RECEIPT_TIMEOUT_MS)),
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Invalid value in {config_path}: {e}",
            details={"path": str(config_path)},
        ) from e

    env_url = os.getenv(RPC_URL_ENV)
    if env_url:
        config.rpc_url = env_url

    config.validate()
    return config
