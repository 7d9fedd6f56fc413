"""
Portfolio trading operations.

This module handles order admission and position mutation (open, resize,
flip) following the Single Responsibility Principle for trading logic.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from perpsim.core.enums import PositionSide, Symbol
from perpsim.core.exceptions.simulation import InsufficientFundsError
from perpsim.core.models.intent import TradeIntent
from perpsim.core.models.market import MarketSnapshot
from perpsim.core.models.position import Position

from .portfolio_helpers import PortfolioValidator, PositionManager, TradeRecorder

if TYPE_CHECKING:
    from .portfolio_core import PortfolioCore


class AdmissionDecision(StrEnum):
    """What the admission step did with one intent."""

    OPENED = "opened"
    RESIZED = "resized"
    FLIPPED = "flipped"
    HELD = "held"
    SKIPPED = "skipped"  # No price this cycle
    REJECTED = "rejected"  # Insufficient cash
    CLOSED = "closed"  # Flip closed the old side but could not reopen

    @property
    def mutated(self) -> bool:
        """Check if the decision changed the portfolio."""
        return self in [self.OPENED, self.RESIZED, self.FLIPPED, self.CLOSED]


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of admitting one intent."""

    symbol: Symbol
    decision: AdmissionDecision
    reason: str | None = None


class PortfolioTrading:
    """Portfolio trading operations.

    Applies trade intents to the working state. Every branch checks
    affordability before committing cash, so available cash never goes
    negative here.
    """

    def __init__(self, portfolio_core: "PortfolioCore") -> None:
        """Initialize with portfolio core state.

        Args:
            portfolio_core: The working state to execute intents against
        """
        self.core = portfolio_core

    def apply_intents(
        self, intents: Mapping[Symbol, TradeIntent], market: MarketSnapshot
    ) -> list[AdmissionResult]:
        """Apply intents sequentially in whitelist order.

        Later intents see the cash and positions left by earlier ones.

        Args:
            intents: Normalized intents keyed by symbol
            market: Current market prices

        Returns:
            One AdmissionResult per intent processed
        """
        results = []
        for symbol in Symbol.tradable():
            intent = intents.get(symbol)
            if intent is None:
                continue
            results.append(self.apply_intent(intent, market.price(symbol)))
        return results

    def apply_intent(self, intent: TradeIntent, price: float | None) -> AdmissionResult:
        """Decide and apply one of: no-op, open, resize, flip or reject.

        Args:
            intent: Normalized trade intent
            price: Current price for the intent's symbol, None if unavailable

        Returns:
            AdmissionResult describing what happened
        """
        symbol = intent.symbol
        side = intent.side.to_position_side()

        if side is None:
            return AdmissionResult(symbol, AdmissionDecision.HELD)

        if price is None:
            logger.warning(f"No market price found for {symbol}")
            return AdmissionResult(symbol, AdmissionDecision.SKIPPED, "no market price")

        leverage = intent.effective_leverage(self.core.default_leverage)
        margin_required = intent.margin_required(self.core.default_leverage)

        try:
            PortfolioValidator.validate_margin_requirement(
                margin_required, self.core.available_cash, f"{side} {symbol} trade"
            )

            existing = self.core.positions.get(symbol)
            if existing is None:
                self._open_position(intent, side, price, leverage)
                return AdmissionResult(symbol, AdmissionDecision.OPENED)

            if existing.side != side:
                return self._flip_position(existing, intent, side, price, leverage)

            self._resize_position(existing, intent, price, leverage)
            return AdmissionResult(symbol, AdmissionDecision.RESIZED)

        except InsufficientFundsError as e:
            logger.warning(f"Rejected {symbol} intent: {e}")
            return AdmissionResult(symbol, AdmissionDecision.REJECTED, f"insufficient margin: {e}")

    def _open_position(
        self, intent: TradeIntent, side: PositionSide, price: float, leverage: float
    ) -> Position:
        """Open new position and record trade."""
        position = PositionManager.create_position(intent, side, price, leverage)
        self.core.add_position(position)
        self.core.record(TradeRecorder.open_record(position))

        logger.info(
            f"Opened {position.symbol} {side} position: notional ${position.notional:.2f} "
            f"at {price} ({leverage:g}x, margin ${position.margin_used:.2f})"
        )
        return position

    def _flip_position(
        self,
        existing: Position,
        intent: TradeIntent,
        side: PositionSide,
        price: float,
        leverage: float,
    ) -> AdmissionResult:
        """Close the opposing position, then open a fresh one with the same intent.

        A loss larger than margin_used takes cash away on the close, so the
        reopen is checked again against the cash left after it. If it no
        longer fits, the close stands and the intent ends as CLOSED.
        """
        from .portfolio_risk import PortfolioRisk

        PortfolioRisk(self.core).close_position_at_price(existing.symbol, price)

        margin_required = intent.margin_required(self.core.default_leverage)
        try:
            PortfolioValidator.validate_margin_requirement(
                margin_required, self.core.available_cash, f"reopening {side} {existing.symbol}"
            )
        except InsufficientFundsError as e:
            logger.warning(f"Closed {existing.symbol} but could not reopen {side}: {e}")
            return AdmissionResult(
                existing.symbol,
                AdmissionDecision.CLOSED,
                f"closed, insufficient margin to reopen: {e}",
            )

        self._open_position(intent, side, price, leverage)
        return AdmissionResult(existing.symbol, AdmissionDecision.FLIPPED)

    def _resize_position(
        self, existing: Position, intent: TradeIntent, price: float, leverage: float
    ) -> Position:
        """Resize a same-side position in place and record an UPDATE."""
        new_margin = intent.margin_required(self.core.default_leverage)
        margin_diff = new_margin - existing.margin_used

        if margin_diff > 0:
            PortfolioValidator.validate_margin_requirement(
                margin_diff, self.core.available_cash, f"increasing {existing.symbol} position"
            )

        resized = PositionManager.resize_position(existing, intent, price, leverage)
        self.core.available_cash -= margin_diff
        self.core.positions[existing.symbol] = resized
        self.core.record(TradeRecorder.update_record(resized))

        logger.info(
            f"Resized {existing.symbol} {existing.side} position: notional "
            f"${existing.notional:.2f} -> ${resized.notional:.2f}, margin change ${margin_diff:.2f}"
        )
        return resized
