"""
tests/unit/test_receipt_polling.py - ChainClient.wait_for_receipt() state machine.

Sleeps are replaced by a fake clock so polling is instant and
elapsed time is exact.
"""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from chains.client import ChainClient
from core.constants import ErrorCode
from core.exceptions import (
    InfraError,
    RemoteError,
    TransactionFailedError,
    TransactionTimeoutError,
)

TX_HASH = "0x" + "12" * 32
RECEIPT_OK = {"transactionHash": TX_HASH, "status": "0x1", "blockNumber": "0x10"}
RECEIPT_FAILED = {"transactionHash": TX_HASH, "status": "0x0", "blockNumber": "0x10"}


@pytest.fixture
def client(mock_provider):
    return ChainClient(mock_provider, poll_interval_ms=1000)


@pytest.fixture
def sleep(client, fake_clock):
    """Patch the client's sleep and clock; yields the sleep mock."""
    sleep_mock = AsyncMock(side_effect=fake_clock.sleep)
    with patch.object(client, "_sleep", sleep_mock), \
            patch("chains.client.now_ms", side_effect=fake_clock.now_ms):
        yield sleep_mock


class TestConfirmed:
    """Receipts with non-zero status resolve."""

    @pytest.mark.asyncio
    async def test_immediate_receipt(self, client, mock_provider, sleep):
        mock_provider.request.return_value = RECEIPT_OK

        receipt = await client.wait_for_receipt(TX_HASH, 10_000)

        assert receipt == RECEIPT_OK
        sleep.assert_not_awaited()
        mock_provider.request.assert_awaited_once_with("eth_getTransactionReceipt", [TX_HASH])

    @pytest.mark.asyncio
    async def test_two_nulls_then_receipt(self, client, mock_provider, sleep):
        """null, null, receipt resolves after exactly two polling delays."""
        mock_provider.request.side_effect = [None, None, RECEIPT_OK]

        receipt = await client.wait_for_receipt(TX_HASH, 10_000)

        assert receipt is RECEIPT_OK
        assert sleep.await_count == 2
        assert mock_provider.request.await_count == 3

    @pytest.mark.asyncio
    async def test_sleeps_poll_interval(self, mock_provider, fake_clock):
        client = ChainClient(mock_provider, poll_interval_ms=250)
        mock_provider.request.side_effect = [None, RECEIPT_OK]
        sleep_mock = AsyncMock(side_effect=fake_clock.sleep)

        with patch.object(client, "_sleep", sleep_mock), \
                patch("chains.client.now_ms", side_effect=fake_clock.now_ms):
            await client.wait_for_receipt(TX_HASH, 10_000)

        sleep_mock.assert_awaited_once_with(0.25)

    @pytest.mark.asyncio
    async def test_unknown_transaction_counts_as_not_mined(self, client, mock_provider, sleep):
        mock_provider.request.side_effect = [
            RemoteError("unknown transaction"),
            None,
            RECEIPT_OK,
        ]

        receipt = await client.wait_for_receipt(TX_HASH, 10_000)

        assert receipt is RECEIPT_OK
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["0x1", "0x01", "0x2"])
    async def test_any_non_zero_status(self, client, mock_provider, sleep, status):
        receipt = {**RECEIPT_OK, "status": status}
        mock_provider.request.return_value = receipt
        assert await client.wait_for_receipt(TX_HASH, 1000) == receipt

    @pytest.mark.asyncio
    async def test_integer_status(self, client, mock_provider, sleep):
        receipt = {**RECEIPT_OK, "status": 1}
        mock_provider.request.return_value = receipt
        assert await client.wait_for_receipt(TX_HASH, 1000) == receipt

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["0x", "", "zz", "not-hex"])
    async def test_unparseable_status_is_confirmed(self, client, mock_provider, sleep, status):
        """Only a status that parses to 0 fails; anything unparseable is returned."""
        receipt = {**RECEIPT_OK, "status": status}
        mock_provider.request.return_value = receipt

        assert await client.wait_for_receipt(TX_HASH, 1000) == receipt
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_receipt_without_status(self, client, mock_provider, sleep):
        """Pre-Byzantium receipts have no status field and are returned."""
        receipt = {"transactionHash": TX_HASH, "root": "0x" + "00" * 32}
        mock_provider.request.return_value = receipt
        assert await client.wait_for_receipt(TX_HASH, 1000) == receipt


class TestFailed:
    """Status 0 and non-retryable errors."""

    @pytest.mark.asyncio
    async def test_status_zero_fails_without_polling(self, client, mock_provider, sleep):
        mock_provider.request.return_value = RECEIPT_FAILED

        with pytest.raises(TransactionFailedError) as exc_info:
            await client.wait_for_receipt(TX_HASH, 10_000)

        assert TX_HASH in str(exc_info.value)
        assert exc_info.value.code == ErrorCode.TX_FAILED
        assert exc_info.value.receipt == RECEIPT_FAILED
        sleep.assert_not_awaited()
        assert mock_provider.request.await_count == 1

    @pytest.mark.asyncio
    async def test_status_zero_after_polling(self, client, mock_provider, sleep):
        mock_provider.request.side_effect = [None, RECEIPT_FAILED]

        with pytest.raises(TransactionFailedError):
            await client.wait_for_receipt(TX_HASH, 10_000)

        assert sleep.await_count == 1

    @pytest.mark.asyncio
    async def test_other_remote_error_propagates(self, client, mock_provider, sleep):
        error = RemoteError("rate limited", rpc_code=-32005)
        mock_provider.request.side_effect = [None, error, RECEIPT_OK]

        with pytest.raises(RemoteError) as exc_info:
            await client.wait_for_receipt(TX_HASH, 10_000)

        assert exc_info.value is error
        assert sleep.await_count == 1
        assert mock_provider.request.await_count == 2

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, client, mock_provider, sleep):
        mock_provider.request.side_effect = InfraError(
            ErrorCode.INFRA_RPC_TIMEOUT, "unknown transaction timed out"
        )

        with pytest.raises(InfraError):
            await client.wait_for_receipt(TX_HASH, 10_000)

        sleep.assert_not_awaited()


class TestTimedOut:
    """Timeout handling."""

    @pytest.mark.asyncio
    async def test_times_out_after_duration_not_before(
        self, client, mock_provider, sleep, fake_clock
    ):
        """Only once elapsed time exceeds the timeout."""
        mock_provider.request.side_effect = RemoteError("unknown transaction")

        with pytest.raises(TransactionTimeoutError) as exc_info:
            await client.wait_for_receipt(TX_HASH, 3000)

        # 1000, 2000 and 3000ms elapsed are still within the timeout
        assert sleep.await_count == 4
        assert fake_clock.elapsed_ms == 4000
        assert mock_provider.request.await_count == 4
        assert exc_info.value.code == ErrorCode.TX_TIMEOUT
        assert exc_info.value.timeout_ms == 3000

    @pytest.mark.asyncio
    async def test_timeout_message_names_hash_and_seconds(self, client, mock_provider, sleep):
        mock_provider.request.return_value = None

        with pytest.raises(TransactionTimeoutError) as exc_info:
            await client.wait_for_receipt(TX_HASH, 2000)

        assert exc_info.value.message == f"Transaction {TX_HASH} wasn't processed in 2 seconds!"

    @pytest.mark.asyncio
    async def test_elapsed_time_is_cumulative(self, client, mock_provider, fake_clock):
        """Slow receipt lookups count towards the timeout."""

        async def slow_lookup(method, params):
            fake_clock.current_ms += 1500
            return None

        mock_provider.request.side_effect = slow_lookup
        sleep_mock = AsyncMock(side_effect=fake_clock.sleep)

        with patch.object(client, "_sleep", sleep_mock), \
                patch("chains.client.now_ms", side_effect=fake_clock.now_ms):
            with pytest.raises(TransactionTimeoutError):
                await client.wait_for_receipt(TX_HASH, 4000)

        # 2500ms after the first tick, 5000ms after the second
        assert sleep_mock.await_count == 2

    @pytest.mark.asyncio
    async def test_zero_timeout_polls_indefinitely(self, client, mock_provider, sleep, fake_clock):
        """Five failed polls with timeout 0 raise nothing."""
        mock_provider.request.side_effect = [None] * 5 + [RECEIPT_OK]

        receipt = await client.wait_for_receipt(TX_HASH, 0)

        assert receipt is RECEIPT_OK
        assert sleep.await_count == 5

    @pytest.mark.asyncio
    async def test_negative_timeout_polls_indefinitely(self, mock_provider, fake_clock):
        client = ChainClient(mock_provider, poll_interval_ms=3_600_000)
        mock_provider.request.side_effect = [RemoteError("unknown transaction")] * 5 + [RECEIPT_OK]
        sleep_mock = AsyncMock(side_effect=fake_clock.sleep)

        with patch.object(client, "_sleep", sleep_mock), \
                patch("chains.client.now_ms", side_effect=fake_clock.now_ms):
            receipt = await client.wait_for_receipt(TX_HASH, -1)

        assert receipt is RECEIPT_OK
        assert fake_clock.elapsed_ms == 5 * 3_600_000

    @pytest.mark.asyncio
    async def test_default_timeout_is_forever(self, client, mock_provider, sleep):
        mock_provider.request.side_effect = [None] * 5 + [RECEIPT_OK]
        assert await client.wait_for_receipt(TX_HASH) is RECEIPT_OK


class TestIndependentLoops:

    @pytest.mark.asyncio
    async def test_each_call_has_its_own_start_time(self, client, mock_provider, sleep, fake_clock):
        mock_provider.request.side_effect = [None, None, RECEIPT_OK]
        await client.wait_for_receipt(TX_HASH, 2500)

        # Clock is already 2000ms in; a fresh call still gets its full budget
        mock_provider.request.side_effect = [None, None, RECEIPT_OK]
        assert await client.wait_for_receipt(TX_HASH, 2500) is RECEIPT_OK
        assert fake_clock.elapsed_ms == 4000


class TestLogging:

    @pytest.mark.asyncio
    async def test_polls_logged_with_polling_state(self, client, mock_provider, sleep, caplog):
        mock_provider.request.side_effect = [None, RECEIPT_OK]

        with caplog.at_level(logging.DEBUG, logger="chains.client"):
            await client.wait_for_receipt(TX_HASH, 10_000)

        states = [r.context["state"] for r in caplog.records if hasattr(r, "context")]
        assert states == ["POLLING", "CONFIRMED"]
