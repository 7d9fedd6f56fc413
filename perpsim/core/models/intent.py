"""
Trade intent domain model.

A TradeIntent is the canonical, validated form of one asset's decision in a
signal. It lives for a single cycle and is never persisted.
"""

from dataclasses import dataclass

from perpsim.core.constants import DEFAULT_LEVERAGE
from perpsim.core.enums import SignalSide, Symbol
from perpsim.core.exceptions.simulation import ValidationError
from perpsim.core.types.financial import calculate_margin_needed


@dataclass(frozen=True)
class TradeIntent:
    """Canonical per-symbol trade decision."""

    symbol: Symbol
    side: SignalSide
    notional: float = 0.0
    leverage: float | None = None
    profit_target: float | None = None
    stop_loss: float | None = None

    def __post_init__(self) -> None:
        """Validate intent data after initialization."""
        if not self.side.is_hold and self.notional <= 0:
            raise ValidationError(
                f"{self.side} intent for {self.symbol} needs a positive notional, got {self.notional}"
            )
        if self.leverage is not None and self.leverage < 0:
            raise ValidationError(f"Leverage must be non-negative, got {self.leverage}")

    @classmethod
    def hold(cls, symbol: Symbol) -> "TradeIntent":
        """Factory method for a no-op intent."""
        return cls(symbol=symbol, side=SignalSide.HOLD)

    def effective_leverage(self, default: float = DEFAULT_LEVERAGE) -> float:
        """Leverage to apply; a missing or zero leverage falls back to default."""
        return self.leverage or default

    def margin_required(self, default_leverage: float = DEFAULT_LEVERAGE) -> float:
        """Margin the intent commits (notional / leverage)."""
        return calculate_margin_needed(self.notional, self.effective_leverage(default_leverage))
