"""
Pytest configuration and fixtures for ethgate tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


class FakeClock:
    """Millisecond clock advanced by the fake sleep."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.start_ms = start_ms
        self.current_ms = start_ms

    def now_ms(self) -> int:
        return self.current_ms

    async def sleep(self, seconds: float) -> None:
        self.current_ms += int(seconds * 1000)

    @property
    def elapsed_ms(self) -> int:
        return self.current_ms - self.start_ms


@pytest.fixture
def mock_provider():
    """Create mock JSON-RPC provider."""
    provider = MagicMock()
    provider.request = AsyncMock()
    provider.close = AsyncMock()
    return provider


@pytest.fixture
def fake_clock():
    return FakeClock()
