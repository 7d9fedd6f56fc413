"""
Portfolio risk management.

This module handles stop-loss / profit-target detection and position closure
following the Single Responsibility Principle for risk management.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from loguru import logger

from perpsim.core.enums import Symbol
from perpsim.core.models.market import MarketSnapshot
from perpsim.core.models.position import Position
from perpsim.core.models.trade import TradeRecord

from .portfolio_helpers import PortfolioValidator, TradeRecorder

if TYPE_CHECKING:
    from .portfolio_core import PortfolioCore


@dataclass(frozen=True)
class ExitSignal:
    """A position whose trigger level was crossed, with the price and reason."""

    position: Position
    price: float
    reason: str


def stop_loss_reason(level: float) -> str:
    """Ledger reason for a stop-loss exit."""
    return f"Stop loss hit at ${_format_level(level)}"


def profit_target_reason(level: float) -> str:
    """Ledger reason for a profit-target exit."""
    return f"Profit target hit at ${_format_level(level)}"


def _format_level(level: float) -> str:
    return f"{level:,.2f}" if level >= 1 else f"{level:.6g}"


class PortfolioRisk:
    """Portfolio risk management.

    Evaluates exit conditions against current prices and realizes closures.
    """

    def __init__(self, portfolio_core: "PortfolioCore") -> None:
        """Initialize with portfolio core state.

        Args:
            portfolio_core: The working state to manage risks for
        """
        self.core = portfolio_core

    def check_exit_conditions(self, market: MarketSnapshot) -> list[ExitSignal]:
        """Find positions whose stop-loss or profit-target has been crossed.

        The stop-loss is evaluated first; a profit target is only considered
        when the stop did not trigger. Positions without a price are skipped.

        Args:
            market: Current market prices

        Returns:
            Exit signals in position-book order
        """
        exits = []

        for symbol, position in self.core.positions.items():
            price = market.price(symbol)
            if price is None:
                logger.debug(f"No price for {symbol}, skipping exit checks")
                continue

            if position.stop_loss_hit(price):
                exits.append(ExitSignal(position, price, stop_loss_reason(position.stop_loss)))  # type: ignore[arg-type]
            elif position.profit_target_hit(price):
                exits.append(
                    ExitSignal(position, price, profit_target_reason(position.profit_target))  # type: ignore[arg-type]
                )

        return exits

    def evaluate_exits(self, market: MarketSnapshot) -> list[TradeRecord]:
        """Close every position whose trigger level has been crossed.

        Args:
            market: Current market prices

        Returns:
            The CLOSE records produced, one per closed position
        """
        records = []
        for exit_signal in self.check_exit_conditions(market):
            records.append(
                self.close_position_at_price(
                    exit_signal.position.symbol, exit_signal.price, exit_signal.reason
                )
            )
        return records

    def close_position_at_price(
        self, symbol: Symbol, close_price: float, reason: str | None = None
    ) -> TradeRecord:
        """Close a position at a specific price.

        Releases margin_used + realized PnL back to available cash, removes
        the position and records a CLOSE trade. The full PnL is realized; if
        the loss is larger than available cash plus margin, cash is floored
        at 0 instead of going negative.

        Args:
            symbol: Symbol to close
            close_price: Price at which to close
            reason: Why the position was closed (None for signal-driven closes)

        Returns:
            The CLOSE trade record

        Raises:
            PositionNotFoundError: If position doesn't exist
        """
        PortfolioValidator.validate_position_exists(symbol, self.core.positions)

        position = self.core.remove_position(symbol)
        realized_pnl = position.pnl_at(close_price)

        released = position.margin_used + realized_pnl
        if self.core.available_cash + released < 0:
            logger.warning(
                f"{symbol} {position.side} loss {realized_pnl:.2f} exceeds available cash "
                f"plus margin, flooring cash at 0"
            )
            self.core.available_cash = 0.0
        else:
            self.core.available_cash += released
        self.core.realized_pnl += realized_pnl

        if reason:
            logger.info(
                f"Closed {symbol} {position.side} position: {reason}, PnL: ${realized_pnl:.2f}"
            )
        else:
            logger.info(f"Closed {symbol} {position.side} position at {close_price}, PnL: ${realized_pnl:.2f}")

        return self.core.record(
            TradeRecorder.close_record(position, close_price, realized_pnl, reason)
        )
