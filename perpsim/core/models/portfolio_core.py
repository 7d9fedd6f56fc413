"""
Portfolio core state management.

This module holds the mutable working state of one simulation cycle,
following the Single Responsibility Principle for state management.
"""

from dataclasses import dataclass, field

from perpsim.core.constants import DEFAULT_LEVERAGE
from perpsim.core.enums import Symbol
from perpsim.core.models.market import MarketSnapshot
from perpsim.core.models.portfolio import Portfolio
from perpsim.core.models.position import Position
from perpsim.core.models.trade import TradeRecord

from .portfolio_helpers import PortfolioValidator


@dataclass
class PortfolioCore:
    """Working state of a portfolio during a cycle.

    Handles available cash, the position book and the trade records produced
    so far. Only the exit and admission components mutate it; the metrics
    component derives the next Portfolio snapshot from it.

    Thread Safety:
        Not thread-safe. A PortfolioCore lives for exactly one cycle and the
        engine serializes cycles.
    """

    available_cash: float
    positions: dict[Symbol, Position] = field(default_factory=dict)
    trades: list[TradeRecord] = field(default_factory=list)
    realized_pnl: float = 0.0
    default_leverage: float = DEFAULT_LEVERAGE

    @classmethod
    def from_portfolio(
        cls, portfolio: Portfolio, default_leverage: float = DEFAULT_LEVERAGE
    ) -> "PortfolioCore":
        """Load a snapshot into a fresh working state (the snapshot is not modified)."""
        return cls(
            available_cash=portfolio.available_cash,
            positions=dict(portfolio.positions),
            default_leverage=default_leverage,
        )

    def used_margin(self) -> float:
        """Calculate total margin used by open positions."""
        return sum((position.margin_used for position in self.positions.values()), 0.0)

    def unrealized_pnl(self, market: MarketSnapshot) -> float:
        """Calculate total unrealized PnL of positions that have a price."""
        total_pnl = 0.0
        for symbol, position in self.positions.items():
            price = market.price(symbol)
            if price is not None:
                total_pnl += position.pnl_at(price)
        return total_pnl

    def add_position(self, position: Position) -> None:
        """Add a new position and commit its margin.

        Args:
            position: Position to add

        Raises:
            ValidationError: If a position already exists for the symbol
            InsufficientFundsError: If margin exceeds available cash
        """
        PortfolioValidator.validate_position_for_add(position, self.positions)
        PortfolioValidator.validate_margin_requirement(
            position.margin_used, self.available_cash, f"opening {position.side} {position.symbol}"
        )

        self.positions[position.symbol] = position
        self.available_cash -= position.margin_used

    def remove_position(self, symbol: Symbol) -> Position:
        """Remove and return a position (no cash movement).

        Raises:
            PositionNotFoundError: If position not found
        """
        PortfolioValidator.validate_position_exists(symbol, self.positions)
        return self.positions.pop(symbol)

    def record(self, trade: TradeRecord) -> TradeRecord:
        """Append a trade record produced during this cycle."""
        self.trades.append(trade)
        return trade
