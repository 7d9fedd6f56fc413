"""
Unit tests for portfolio stores and trade ledgers.
"""

import json
import threading
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from perpsim.core.enums import PositionSide, Symbol, TradeType, TradingMode
from perpsim.core.exceptions.simulation import (
    ConcurrentModificationError,
    PortfolioStoreError,
    TradeLedgerError,
)
from perpsim.core.models.portfolio import Portfolio
from perpsim.core.models.position import Position
from perpsim.core.models.trade import TradeRecord
from perpsim.infrastructure.persistence import (
    InMemoryPortfolioStore,
    InMemoryTradeLedger,
    JsonFilePortfolioStore,
    JsonLinesTradeLedger,
)
from perpsim.infrastructure.persistence import portfolio_store


def _open_record(symbol: Symbol, minutes: int = 0) -> TradeRecord:
    return TradeRecord(
        TradeType.OPEN,
        symbol,
        PositionSide.LONG,
        entry_price=100.0,
        notional=1000.0,
        leverage=10.0,
        timestamp=datetime(2025, 1, 1, tzinfo=UTC) + timedelta(minutes=minutes),
    )


class TestPortfolioStores:
    """Tests shared by both portfolio store implementations."""

    @pytest.fixture(params=["memory", "json"])
    def store(self, request, tmp_path: Path):
        """Create each store implementation."""
        if request.param == "memory":
            return InMemoryPortfolioStore()
        return JsonFilePortfolioStore(tmp_path / "state")

    def test_should_return_none_for_missing_document(self, store) -> None:
        """Test a mode with no document."""
        assert store.get(TradingMode.PAPER) is None

    def test_should_bump_version_on_every_write(self, store) -> None:
        """Test version numbering starts at 1 and increments."""
        first = store.set(Portfolio.initial(), expected_version=0)
        second = store.set(first, expected_version=first.version)

        assert first.version == 1
        assert second.version == 2
        assert store.get(TradingMode.PAPER) == second

    def test_should_reject_stale_expected_version(self, store) -> None:
        """Test optimistic concurrency check."""
        store.set(Portfolio.initial(), expected_version=0)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            store.set(Portfolio.initial(), expected_version=0)

        assert exc_info.value.actual == 1

    def test_should_skip_check_without_expected_version(self, store) -> None:
        """Test unconditional writes such as resets."""
        store.set(Portfolio.initial(), expected_version=0)

        stored = store.set(Portfolio.initial(5000.0))

        assert stored.version == 2
        assert stored.available_cash == 5000.0

    def test_should_keep_modes_separate(self, store) -> None:
        """Test paper and live documents are independent."""
        store.set(Portfolio.initial(1000.0, TradingMode.LIVE))

        assert store.get(TradingMode.PAPER) is None
        assert store.get(TradingMode.LIVE).available_cash == 1000.0


class TestJsonFilePortfolioStore:
    """Tests specific to the JSON file store."""

    def test_should_write_readable_document(self, tmp_path: Path) -> None:
        """Test the on-disk document layout."""
        store = JsonFilePortfolioStore(tmp_path)
        position = Position.open(Symbol.BTC, PositionSide.SHORT, 100000.0, 1000.0, 10.0)
        store.set(
            Portfolio(account_value=10000.0, available_cash=9900.0, positions={Symbol.BTC: position})
        )

        document = json.loads((tmp_path / "paper_portfolio.json").read_text())

        assert document["version"] == 1
        assert document["positions"][0]["side"] == "SHORT"
        assert list(tmp_path.glob("*.tmp")) == []

    def test_should_raise_store_error_for_corrupt_file(self, tmp_path: Path) -> None:
        """Test unreadable documents surface as PortfolioStoreError."""
        (tmp_path / "paper_portfolio.json").write_text("{not json")

        with pytest.raises(PortfolioStoreError, match="Failed to read"):
            JsonFilePortfolioStore(tmp_path).get(TradingMode.PAPER)

    def test_should_raise_store_error_for_invalid_document(self, tmp_path: Path) -> None:
        """Test documents violating model invariants are rejected."""
        (tmp_path / "paper_portfolio.json").write_text(
            json.dumps({"account_value": 1, "available_cash": -5})
        )

        with pytest.raises(PortfolioStoreError, match="invalid"):
            JsonFilePortfolioStore(tmp_path).get(TradingMode.PAPER)

    def test_should_detect_write_from_another_store_instance(self, tmp_path: Path) -> None:
        """Test two stores sharing a directory cannot both win with the same version."""
        # Arrange
        first = JsonFilePortfolioStore(tmp_path)
        second = JsonFilePortfolioStore(tmp_path)
        first.set(Portfolio.initial())

        # Act
        second.set(Portfolio.initial(7000.0), expected_version=1)

        # Assert
        with pytest.raises(ConcurrentModificationError) as exc_info:
            first.set(Portfolio.initial(5000.0), expected_version=1)
        assert exc_info.value.actual == 2
        assert first.get(TradingMode.PAPER).available_cash == 7000.0
        assert (tmp_path / ".paper_portfolio.json.lock").exists()

    def test_should_hold_writers_across_instances_until_replace(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a second writer waits out the first one's check-then-replace window."""
        # Arrange
        first = JsonFilePortfolioStore(tmp_path)
        second = JsonFilePortfolioStore(tmp_path)
        first.set(Portfolio.initial())
        errors: list[ConcurrentModificationError] = []

        def write_second() -> None:
            try:
                second.set(Portfolio.initial(7000.0), expected_version=1)
            except ConcurrentModificationError as e:
                errors.append(e)

        writer = threading.Thread(target=write_second)
        check_version = portfolio_store._check_version

        def check_while_second_writes(mode, expected, current):
            version = check_version(mode, expected, current)
            if not writer.is_alive() and not errors and current.available_cash == 10000.0:
                writer.start()
                writer.join(timeout=0.2)
                assert writer.is_alive()
            return version

        monkeypatch.setattr(portfolio_store, "_check_version", check_while_second_writes)

        # Act
        first.set(Portfolio.initial(5000.0), expected_version=1)
        writer.join(timeout=5)

        # Assert
        assert not writer.is_alive()
        assert len(errors) == 1
        assert errors[0].actual == 2
        assert first.get(TradingMode.PAPER).available_cash == 5000.0


class TestTradeLedgers:
    """Tests shared by both ledger implementations."""

    @pytest.fixture(params=["memory", "jsonl"])
    def ledger(self, request, tmp_path: Path):
        """Create each ledger implementation."""
        if request.param == "memory":
            return InMemoryTradeLedger()
        return JsonLinesTradeLedger(tmp_path)

    def test_should_return_recent_records_newest_first(self, ledger) -> None:
        """Test ordering and limit."""
        ledger.append_many(
            TradingMode.PAPER,
            [_open_record(Symbol.BTC, 0), _open_record(Symbol.ETH, 1), _open_record(Symbol.SOL, 2)],
        )

        records = ledger.recent(TradingMode.PAPER, 2)

        assert [r.symbol for r in records] == [Symbol.SOL, Symbol.ETH]
        assert records[0] == _open_record(Symbol.SOL, 2)

    def test_should_return_empty_history(self, ledger) -> None:
        """Test modes without records and non-positive limits."""
        assert ledger.recent(TradingMode.LIVE, 10) == []

        ledger.append(TradingMode.PAPER, _open_record(Symbol.BTC))
        assert ledger.recent(TradingMode.PAPER, 0) == []


class TestJsonLinesTradeLedger:
    """Tests specific to the JSON lines ledger."""

    def test_should_skip_unreadable_lines(self, tmp_path: Path) -> None:
        """Test a corrupt line does not hide the rest of the history."""
        ledger = JsonLinesTradeLedger(tmp_path)
        ledger.append(TradingMode.PAPER, _open_record(Symbol.BTC))
        with open(tmp_path / "paper_trades.jsonl", "a", encoding="utf-8") as f:
            f.write("garbage\n")

        assert [r.symbol for r in ledger.recent(TradingMode.PAPER, 10)] == [Symbol.BTC]

    def test_should_raise_ledger_error_when_unwritable(self, tmp_path: Path) -> None:
        """Test write failures surface as TradeLedgerError."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")

        with pytest.raises(TradeLedgerError):
            JsonLinesTradeLedger(blocker).append(TradingMode.PAPER, _open_record(Symbol.BTC))
