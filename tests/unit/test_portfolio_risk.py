"""
Unit tests for PortfolioRisk class.
Testing stop-loss / profit-target detection and position closure.
"""

import pytest

from perpsim.core.enums import PositionSide, Symbol, TradeType
from perpsim.core.exceptions.simulation import PositionNotFoundError
from perpsim.core.models.market import MarketSnapshot
from perpsim.core.models.portfolio_core import PortfolioCore
from perpsim.core.models.portfolio_risk import (
    PortfolioRisk,
    profit_target_reason,
    stop_loss_reason,
)
from perpsim.core.models.position import Position


def _position(symbol: Symbol = Symbol.BTC, side: PositionSide = PositionSide.LONG, **kwargs) -> Position:
    values = dict(
        symbol=symbol,
        side=side,
        entry_price=100000.0,
        notional=1000.0,
        leverage=10.0,
        margin_used=100.0,
    )
    values.update(kwargs)
    return Position(**values)


class TestExitConditions:
    """Test detection of crossed trigger levels."""

    def test_should_detect_stop_loss_on_long(self) -> None:
        """Test LONG stop triggers when price drops to or below it."""
        core = PortfolioCore(
            available_cash=9900.0, positions={Symbol.BTC: _position(stop_loss=95000.0)}
        )

        exits = PortfolioRisk(core).check_exit_conditions(MarketSnapshot.from_prices({"BTC": 94000.0}))

        assert len(exits) == 1
        assert exits[0].price == 94000.0
        assert "Stop loss hit" in exits[0].reason

    def test_should_detect_profit_target_on_short(self) -> None:
        """Test SHORT target triggers when price falls to or below it."""
        core = PortfolioCore(
            available_cash=9900.0,
            positions={Symbol.BTC: _position(side=PositionSide.SHORT, profit_target=90000.0)},
        )

        exits = PortfolioRisk(core).check_exit_conditions(MarketSnapshot.from_prices({"BTC": 89000.0}))

        assert [e.reason for e in exits] == [profit_target_reason(90000.0)]

    def test_should_prefer_stop_loss_when_both_trigger(self) -> None:
        """Test stop-loss precedence for a pathological LONG with both levels crossed."""
        position = _position(stop_loss=101000.0, profit_target=99000.0)
        core = PortfolioCore(available_cash=9900.0, positions={Symbol.BTC: position})

        exits = PortfolioRisk(core).check_exit_conditions(
            MarketSnapshot.from_prices({"BTC": 100000.0})
        )

        assert [e.reason for e in exits] == [stop_loss_reason(101000.0)]

    def test_should_skip_positions_without_price(self) -> None:
        """Test unpriced positions are never closed."""
        core = PortfolioCore(
            available_cash=9900.0, positions={Symbol.BTC: _position(stop_loss=95000.0)}
        )

        exits = PortfolioRisk(core).check_exit_conditions(MarketSnapshot.from_prices({"ETH": 1.0}))

        assert exits == []

    def test_should_format_reasons(self) -> None:
        """Test reason text for large and sub-dollar levels."""
        assert stop_loss_reason(95000.0) == "Stop loss hit at $95,000.00"
        assert profit_target_reason(0.1234567) == "Profit target hit at $0.123457"


class TestClosePosition:
    """Test realizing a position."""

    def test_should_auto_close_on_stop_loss(self) -> None:
        """Test evaluate_exits releases margin + pnl and records the reason."""
        # Arrange
        core = PortfolioCore(
            available_cash=9900.0, positions={Symbol.BTC: _position(stop_loss=95000.0)}
        )

        # Act
        records = PortfolioRisk(core).evaluate_exits(MarketSnapshot.from_prices({"BTC": 94000.0}))

        # Assert
        assert len(records) == 1
        record = records[0]
        assert record.type == TradeType.CLOSE
        assert record.exit_price == 94000.0
        assert record.pnl == -60.0
        assert record.reason == "Stop loss hit at $95,000.00"
        assert core.positions == {}
        assert core.available_cash == pytest.approx(9940.0)
        assert core.realized_pnl == -60.0
        assert core.trades == records

    def test_should_realize_full_loss_on_gapped_stop(self) -> None:
        """Test a stop filled far past its level realizes the whole loss."""
        # Arrange: stop at 95000, price gaps to 80000
        core = PortfolioCore(
            available_cash=9900.0, positions={Symbol.BTC: _position(stop_loss=95000.0)}
        )

        # Act
        records = PortfolioRisk(core).evaluate_exits(MarketSnapshot.from_prices({"BTC": 80000.0}))

        # Assert
        assert records[0].pnl == -200.0
        assert core.realized_pnl == -200.0
        assert core.available_cash == pytest.approx(9800.0)

    def test_should_floor_cash_at_zero_when_loss_exceeds_cash_and_margin(self) -> None:
        """Test the recorded loss stays whole while cash does not go negative."""
        core = PortfolioCore(available_cash=0.0, positions={Symbol.BTC: _position()})

        record = PortfolioRisk(core).close_position_at_price(Symbol.BTC, 50000.0)

        assert record.pnl == -500.0
        assert core.realized_pnl == -500.0
        assert core.available_cash == 0.0

    def test_should_raise_when_position_missing(self) -> None:
        """Test closing a symbol with no open position."""
        core = PortfolioCore(available_cash=10000.0)

        with pytest.raises(PositionNotFoundError):
            PortfolioRisk(core).close_position_at_price(Symbol.ETH, 4000.0)
