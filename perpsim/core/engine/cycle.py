"""
One simulation cycle as a pure function.

exit evaluation -> signal normalization -> admission -> recomputation.
Nothing here touches storage; SimulationEngine wraps it with persistence.
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from perpsim.core.constants import DEFAULT_LEVERAGE
from perpsim.core.enums import Symbol
from perpsim.core.models.market import MarketSnapshot
from perpsim.core.models.portfolio import Portfolio
from perpsim.core.models.portfolio_core import PortfolioCore
from perpsim.core.models.portfolio_metrics import PortfolioMetrics
from perpsim.core.models.portfolio_risk import PortfolioRisk
from perpsim.core.models.portfolio_trading import AdmissionResult, PortfolioTrading
from perpsim.core.models.trade import TradeRecord
from perpsim.core.types.financial import round_amount

from .signal_interpreter import normalize_signal


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one cycle.

    Attributes:
        trades: Records produced, in the order they happened
        portfolio: The next portfolio snapshot
        total_pnl: PnL realized by closes during the cycle
        skipped: Reason per symbol whose intent was not (fully) applied
        admissions: Per-intent admission outcomes
    """

    trades: list[TradeRecord]
    portfolio: Portfolio
    total_pnl: float = 0.0
    skipped: dict[Symbol, str] = field(default_factory=dict)
    admissions: list[AdmissionResult] = field(default_factory=list)

    @property
    def executed(self) -> bool:
        """Check if the cycle produced any trade."""
        return bool(self.trades)

    def to_dict(self) -> dict[str, Any]:
        """Convert result to a JSON-serializable dictionary."""
        return {
            "executed": self.executed,
            "trades": [trade.to_dict() for trade in self.trades],
            "portfolio": self.portfolio.to_dict(),
            "total_pnl": self.total_pnl,
            "skipped": {symbol.value: reason for symbol, reason in self.skipped.items()},
        }


def run_cycle(
    portfolio: Portfolio,
    signal: Any,
    market_data: Any,
    default_leverage: float = DEFAULT_LEVERAGE,
) -> SimulationResult:
    """Apply a signal to a portfolio snapshot at current prices.

    Args:
        portfolio: Snapshot to start from (not modified)
        signal: Raw signal (list or mapping of per-asset decisions)
        market_data: Raw market payload or MarketSnapshot
        default_leverage: Leverage for decisions that omit it

    Returns:
        SimulationResult with the next snapshot and the trades produced
    """
    market = MarketSnapshot.from_payload(market_data)
    core = PortfolioCore.from_portfolio(portfolio, default_leverage)

    exits = PortfolioRisk(core).evaluate_exits(market)
    if exits:
        logger.info(f"{len(exits)} position(s) closed by stop loss / profit target")

    intents = normalize_signal(signal)
    logger.debug(f"Normalized {len(intents)} intent(s): {', '.join(intents) or 'none'}")

    admissions = PortfolioTrading(core).apply_intents(intents, market)
    snapshot = PortfolioMetrics(core).build_snapshot(portfolio, market)

    # Every result that carries a reason was not (fully) applied
    skipped = {result.symbol: result.reason for result in admissions if result.reason is not None}
    applied = sum(1 for result in admissions if result.decision.mutated)
    logger.debug(f"Applied {applied}/{len(admissions)} intent(s)")

    return SimulationResult(
        trades=list(core.trades),
        portfolio=snapshot,
        total_pnl=round_amount(core.realized_pnl),
        skipped=skipped,
        admissions=admissions,
    )


def value_positions(portfolio: Portfolio, market_data: Any) -> Portfolio:
    """Mark a portfolio to market without admitting any trade.

    Args:
        portfolio: Current snapshot
        market_data: Raw market payload or MarketSnapshot

    Returns:
        Snapshot with refreshed position marks and account value
    """
    return PortfolioMetrics.mark_to_market(portfolio, MarketSnapshot.from_payload(market_data))
