"""
Portfolio metrics and calculations.

This module derives account value and the next Portfolio snapshot,
following the Single Responsibility Principle for valuation.
"""

from dataclasses import replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from perpsim.core.models.market import MarketSnapshot
from perpsim.core.models.portfolio import Portfolio
from perpsim.core.types.financial import round_amount

if TYPE_CHECKING:
    from .portfolio_core import PortfolioCore


class PortfolioMetrics:
    """Portfolio metrics and calculations.

    The only writer of account_value: admission and exit logic touch cash and
    positions, and this component derives everything else from them.
    """

    def __init__(self, portfolio_core: "PortfolioCore") -> None:
        """Initialize with portfolio core state.

        Args:
            portfolio_core: The working state to calculate metrics for
        """
        self.core = portfolio_core

    def calculate_account_value(self, market: MarketSnapshot) -> float:
        """Account value = available cash + margin in use + unrealized PnL.

        Positions without a price contribute their margin but no PnL.

        Args:
            market: Current market prices

        Returns:
            Account value
        """
        return round_amount(
            self.core.available_cash + self.core.used_margin() + self.core.unrealized_pnl(market)
        )

    def build_snapshot(
        self,
        previous: Portfolio,
        market: MarketSnapshot,
        timestamp: datetime | None = None,
    ) -> Portfolio:
        """Derive the next portfolio snapshot from the working state.

        total_return is the change in account value relative to previous.

        Args:
            previous: Snapshot the cycle started from
            market: Current market prices
            timestamp: Snapshot time (default now)

        Returns:
            New Portfolio snapshot (version unchanged; the store bumps it)
        """
        timestamp = timestamp or datetime.now(UTC)
        account_value = self.calculate_account_value(market)

        positions = {}
        for symbol, position in self.core.positions.items():
            price = market.price(symbol)
            if price is None:
                # Unpriced positions carry no mark, matching account_value
                positions[symbol] = replace(position, current_price=None, unrealized_pnl=None)
            else:
                positions[symbol] = position.marked(price, timestamp)

        return replace(
            previous,
            account_value=account_value,
            available_cash=round_amount(self.core.available_cash),
            total_return=round_amount(account_value - previous.account_value),
            positions=positions,
            last_updated=timestamp,
        )

    @staticmethod
    def mark_to_market(portfolio: Portfolio, market: MarketSnapshot) -> Portfolio:
        """Refresh unrealized PnL and account value without admitting trades.

        Positions without a price keep their previous mark. total_return is
        left as recorded by the last trading cycle.

        Args:
            portfolio: Current snapshot
            market: Current market prices

        Returns:
            New Portfolio snapshot with marked positions
        """
        now = datetime.now(UTC)
        positions = {}
        for symbol, position in portfolio.positions.items():
            price = market.price(symbol)
            positions[symbol] = position.marked(price, now) if price is not None else position

        unrealized = sum(
            (position.unrealized_pnl or 0.0 for position in positions.values()), 0.0
        )
        margin_used = sum((position.margin_used for position in positions.values()), 0.0)

        return replace(
            portfolio,
            account_value=round_amount(portfolio.available_cash + margin_used + unrealized),
            positions=positions,
            last_updated=now,
        )
