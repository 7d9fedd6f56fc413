"""
Integration tests for simulation cycles over file-backed state.
"""

import json
from pathlib import Path
from unittest.mock import Mock

import pytest

from perpsim.core.config import SimulationSettings
from perpsim.core.enums import PositionSide, Symbol, TradeType, TradingMode
from perpsim.core.models.market import MarketSnapshot
from perpsim.infrastructure.factory import create_engine
from perpsim.infrastructure.market import BinancePriceSource


class TestSimulationCycleIntegration:
    """Full cycles through an engine built by the factory."""

    @pytest.fixture
    def settings(self, tmp_path: Path) -> SimulationSettings:
        """Settings with state in a temporary directory and no notifications."""
        return SimulationSettings(
            initial_balance=10000.0, state_dir=tmp_path, notifications_enabled=False
        )

    def test_should_persist_state_across_engines(
        self, settings: SimulationSettings, tmp_path: Path
    ) -> None:
        """Test a multi-cycle session survives an engine restart."""
        # Arrange
        engine = create_engine(settings)
        market = {"BTC": {"price": 100000.0}, "ETH": {"price": 4000.0}}

        # Act
        engine.execute_simulated_trade(
            [
                {"coin": "BTC", "side": "LONG", "notional": 2000, "leverage": 10},
                {"coin": "ETH", "side": "SHORT", "notional": 1000, "leverage": 5},
            ],
            market,
        )
        restarted = create_engine(settings)
        result = restarted.execute_simulated_trade(
            {"BTC": {"side": "SHORT", "notional": 1000, "leverage": 10}},
            {"BTC": {"price": 105000.0}, "ETH": {"price": 4000.0}},
        )

        # Assert
        assert [t.type for t in result.trades] == [TradeType.CLOSE, TradeType.OPEN]
        assert result.total_pnl == 100.0

        portfolio = restarted.get_portfolio()
        assert portfolio.version == 3
        assert portfolio.positions[Symbol.BTC].side == PositionSide.SHORT
        assert portfolio.positions[Symbol.ETH].side == PositionSide.SHORT
        # 10000 - 200 - 200 + 200 + 100 - 100
        assert portfolio.available_cash == pytest.approx(9800.0)

        history = restarted.trade_history(10)
        assert len(history) == 4
        assert history[0].type == TradeType.OPEN and history[0].side == PositionSide.SHORT

        document = json.loads((tmp_path / "paper_portfolio.json").read_text())
        assert document["version"] == 3
        assert len((tmp_path / "paper_trades.jsonl").read_text().splitlines()) == 4

    def test_should_close_on_take_profit_and_refresh(self, settings: SimulationSettings) -> None:
        """Test exits triggered by a later cycle's prices."""
        engine = create_engine(settings)
        engine.execute_simulated_trade(
            {"SOL": {"side": "LONG", "notional": 1500, "leverage": 5, "profit_target": 200}},
            {"SOL": 150.0},
        )

        marked = engine.refresh_prices({"SOL": 180.0})
        assert marked.positions[Symbol.SOL].unrealized_pnl == pytest.approx(300.0)

        result = engine.execute_simulated_trade({}, {"SOL": 201.0})

        assert result.trades[0].type == TradeType.CLOSE
        assert result.trades[0].pnl == pytest.approx(510.0)
        assert engine.get_portfolio().positions == {}
        assert engine.get_portfolio().available_cash == pytest.approx(10510.0)

    def test_should_reset_and_keep_history(self, settings: SimulationSettings) -> None:
        """Test reset replaces the document but not the ledger."""
        engine = create_engine(settings)
        engine.execute_simulated_trade({"XRP": {"side": "LONG", "notional": 100}}, {"XRP": 2.5})

        portfolio = engine.reset_portfolio(500.0)

        assert portfolio.available_cash == 500.0
        assert portfolio.positions == {}
        assert len(engine.trade_history()) == 1

    def test_should_use_price_source_when_market_data_omitted(
        self, settings: SimulationSettings
    ) -> None:
        """Test the Binance source is wired in and consulted."""
        engine = create_engine(settings)
        assert isinstance(engine.price_source, BinancePriceSource)
        engine.price_source = Mock(spec=BinancePriceSource)
        engine.price_source.snapshot.return_value = MarketSnapshot.from_prices({Symbol.BNB: 600.0})

        result = engine.execute_simulated_trade({"BNB": {"side": "LONG", "notional": 600}})

        assert result.trades[0].entry_price == 600.0
        assert engine.mode == TradingMode.PAPER
