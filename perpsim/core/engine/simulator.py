"""
Paper-trading simulation engine.

Wraps the pure cycle with persistence: load the portfolio for the configured
trading mode, run the cycle, append ledger records, write the snapshot, and
send notifications. Cycles for one engine are serialized by a lock. Writes
from another engine or process fail on the snapshot version, which the file
store checks and replaces under a lock on the state directory.
"""

import threading
from dataclasses import replace
from typing import Any

from loguru import logger

from perpsim.core.config import SimulationSettings
from perpsim.core.constants import (
    DEFAULT_TRADE_HISTORY_LIMIT,
    MAX_INITIAL_BALANCE,
    MAX_TRADE_HISTORY_LIMIT,
    MIN_INITIAL_BALANCE,
)
from perpsim.core.exceptions.simulation import ValidationError
from perpsim.core.interfaces.market import IPriceSource
from perpsim.core.interfaces.notifier import ITradeNotifier, NullNotifier
from perpsim.core.interfaces.store import IPortfolioStore, ITradeLedger
from perpsim.core.models.market import MarketSnapshot
from perpsim.core.models.portfolio import Portfolio
from perpsim.core.models.trade import TradeRecord
from perpsim.core.utils.decorators import log_operation

from .cycle import SimulationResult, run_cycle, value_positions
from .messages import format_trade_message


class SimulationEngine:
    """Applies LLM trading signals to a simulated perpetuals portfolio."""

    def __init__(
        self,
        store: IPortfolioStore,
        ledger: ITradeLedger,
        notifier: ITradeNotifier | None = None,
        settings: SimulationSettings | None = None,
        price_source: IPriceSource | None = None,
    ):
        self.settings = settings or SimulationSettings()
        self.mode = self.settings.trading_mode
        self.store = store
        self.ledger = ledger
        self.notifier = notifier or NullNotifier()
        self.price_source = price_source
        self._lock = threading.RLock()

    def _load_or_initialize(self) -> Portfolio:
        portfolio = self.store.get(self.mode)
        if portfolio is not None:
            return portfolio

        logger.info(
            f"No {self.mode} portfolio found, initializing with "
            f"${self.settings.initial_balance:,.2f}"
        )
        return self.store.set(
            Portfolio.initial(self.settings.initial_balance, self.mode), expected_version=0
        )

    def _resolve_market(self, market_data: Any) -> MarketSnapshot:
        if market_data is None:
            if self.price_source is None:
                raise ValidationError("market_data is required when no price source is configured")
            market = self.price_source.snapshot(self.settings.tradable_symbols)
        else:
            market = MarketSnapshot.from_payload(market_data)

        logger.debug(f"Market prices: {market.prices()}")
        return market

    def _notify(self, trades: list[TradeRecord]) -> None:
        if not self.settings.notifications_enabled:
            return

        for trade in trades:
            if not trade.type.is_notifiable:
                continue
            try:
                self.notifier.notify(format_trade_message(trade, self.mode))
            except Exception as e:
                logger.warning(f"Trade notification failed for {trade.symbol}: {e}")

    @log_operation
    def get_portfolio(self) -> Portfolio:
        """Return the current portfolio, creating the initial one if absent."""
        with self._lock:
            return self._load_or_initialize()

    @log_operation
    def execute_simulated_trade(self, signal: Any, market_data: Any = None) -> SimulationResult:
        """Run one simulation cycle and persist its outcome.

        Exit conditions are evaluated before the signal, so a position whose
        stop loss or profit target is crossed closes even when the signal
        says HOLD. Ledger records are appended before the snapshot is
        written; the snapshot write is the last durable effect.

        Args:
            signal: Per-asset decisions, list or mapping shaped
            market_data: Market payload; fetched from the price source if None

        Returns:
            SimulationResult with the stored snapshot

        Raises:
            TradeLedgerError: If records could not be appended (portfolio unchanged)
            ConcurrentModificationError: If the portfolio changed during the cycle
            PortfolioStoreError: If the snapshot could not be written
        """
        market = self._resolve_market(market_data)

        with self._lock:
            portfolio = self._load_or_initialize()
            result = run_cycle(portfolio, signal, market, self.settings.default_leverage)

            if result.trades:
                self.ledger.append_many(self.mode, result.trades)

            stored = self.store.set(result.portfolio, expected_version=portfolio.version)
            result = replace(result, portfolio=stored)

        for symbol, reason in result.skipped.items():
            logger.info(f"{symbol}: {reason}")
        logger.info(
            f"Cycle produced {len(result.trades)} trade(s), realized PnL ${result.total_pnl:.2f}, "
            f"account value ${stored.account_value:,.2f}"
        )

        self._notify(result.trades)
        return result

    @log_operation
    def value_positions(self, portfolio: Portfolio, market_data: Any) -> Portfolio:
        """Mark portfolio to market without persisting anything."""
        return value_positions(portfolio, self._resolve_market(market_data))

    @log_operation
    def refresh_prices(self, market_data: Any = None) -> Portfolio:
        """Mark the stored portfolio to market and persist the new marks.

        Returns:
            The stored snapshot (unchanged if there are no open positions)
        """
        market = self._resolve_market(market_data)

        with self._lock:
            portfolio = self._load_or_initialize()
            if not portfolio.positions:
                return portfolio
            return self.store.set(
                value_positions(portfolio, market), expected_version=portfolio.version
            )

    @log_operation
    def reset_portfolio(self, initial_balance: float | None = None) -> Portfolio:
        """Replace the portfolio with an empty one. The ledger is kept.

        Args:
            initial_balance: Starting balance (default from settings)

        Raises:
            ValidationError: If initial_balance is out of range
        """
        balance = self.settings.initial_balance if initial_balance is None else initial_balance
        if not MIN_INITIAL_BALANCE <= balance <= MAX_INITIAL_BALANCE:
            raise ValidationError(f"Invalid initial balance: {balance}")

        with self._lock:
            stored = self.store.set(Portfolio.initial(balance, self.mode), expected_version=None)

        logger.info(f"{self.mode} portfolio reset to ${balance:,.2f}")
        return stored

    @log_operation
    def trade_history(self, limit: int = DEFAULT_TRADE_HISTORY_LIMIT) -> list[TradeRecord]:
        """Return up to limit ledger records, newest first."""
        if limit < 1:
            raise ValidationError(f"limit must be positive, got {limit}")
        return self.ledger.recent(self.mode, min(limit, MAX_TRADE_HISTORY_LIMIT))

    @log_operation
    def status(self) -> dict[str, Any]:
        """Summarize the engine configuration and current portfolio."""
        portfolio = self.get_portfolio()
        return {
            "trading_mode": self.mode.value,
            "is_test_mode": self.mode.is_simulated,
            "initial_balance": portfolio.initial_balance,
            "default_leverage": self.settings.default_leverage,
            "open_positions": len(portfolio.positions),
            "portfolio": portfolio.to_dict(),
        }
