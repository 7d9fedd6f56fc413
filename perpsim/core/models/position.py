"""
Position domain model and position valuation.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any

from perpsim.core.enums import PositionSide, Symbol
from perpsim.core.exceptions.simulation import ValidationError
from perpsim.core.types.financial import (
    ZERO,
    calculate_margin_needed,
    calculate_pnl,
    calculate_quantity,
    round_amount,
)
from perpsim.core.utils.validation import validate_optional_level


def unrealized_pnl(position: "Position", current_price: float) -> float:
    """Calculate the unrealized PnL of a position at a price.

    LONG: (current - entry) * notional / entry.
    SHORT: (entry - current) * notional / entry.

    Args:
        position: Open position
        current_price: Current market price (caller guarantees > 0)

    Returns:
        Unrealized PnL as float

    Raises:
        ValueError: If the position side is neither LONG nor SHORT
    """
    return calculate_pnl(
        entry_price=position.entry_price,
        exit_price=current_price,
        notional=position.notional,
        side=position.side,
    )


@dataclass
class Position:
    """An open perpetuals position in the simulated portfolio.

    There is at most one Position per symbol. margin_used is the capital
    committed from available cash (notional / leverage).
    """

    symbol: Symbol
    side: PositionSide
    entry_price: float
    notional: float
    leverage: float
    margin_used: float
    profit_target: float | None = None
    stop_loss: float | None = None
    quantity: float = ZERO
    opened_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_updated: datetime = field(default_factory=lambda: datetime.now(UTC))
    current_price: float | None = None
    unrealized_pnl: float | None = None

    def __post_init__(self) -> None:
        """Validate and normalize position data after initialization."""
        if not isinstance(self.side, PositionSide):
            try:
                self.side = PositionSide(str(self.side).upper())
            except ValueError as e:
                raise ValidationError(f"Invalid position side: {self.side}") from e

        if self.entry_price <= ZERO:
            raise ValidationError(f"Entry price must be positive, got {self.entry_price}")
        if self.notional <= ZERO:
            raise ValidationError(f"Notional must be positive, got {self.notional}")
        if self.leverage <= ZERO:
            raise ValidationError(f"Leverage must be positive, got {self.leverage}")
        if self.margin_used < ZERO:
            raise ValidationError(f"Margin used must be non-negative, got {self.margin_used}")

        self.profit_target = validate_optional_level(self.profit_target, "profit_target")
        self.stop_loss = validate_optional_level(self.stop_loss, "stop_loss")

        if self.quantity <= ZERO:
            self.quantity = calculate_quantity(self.notional, self.entry_price)

    def pnl_at(self, current_price: float) -> float:
        """Unrealized PnL at the given price (see module-level unrealized_pnl)."""
        return unrealized_pnl(self, current_price)

    def stop_loss_hit(self, price: float) -> bool:
        """Check whether price has crossed the stop-loss level."""
        if self.stop_loss is None:
            return False
        if self.side.is_long:
            return price <= self.stop_loss
        return price >= self.stop_loss

    def profit_target_hit(self, price: float) -> bool:
        """Check whether price has crossed the profit-target level."""
        if self.profit_target is None:
            return False
        if self.side.is_long:
            return price >= self.profit_target
        return price <= self.profit_target

    def marked(self, current_price: float, timestamp: datetime | None = None) -> "Position":
        """Return a copy carrying the mark-to-market price and PnL."""
        return replace(
            self,
            current_price=current_price,
            unrealized_pnl=self.pnl_at(current_price),
            last_updated=timestamp or datetime.now(UTC),
        )

    @classmethod
    def open(
        cls,
        symbol: Symbol,
        side: PositionSide,
        price: float,
        notional: float,
        leverage: float,
        profit_target: float | None = None,
        stop_loss: float | None = None,
        timestamp: datetime | None = None,
    ) -> "Position":
        """Factory method for a freshly opened position filled at price.

        Args:
            symbol: Trading symbol
            side: LONG or SHORT
            price: Fill price, becomes the entry price
            notional: USD exposure
            leverage: Leverage multiplier
            profit_target: Optional take-profit trigger
            stop_loss: Optional stop-loss trigger
            timestamp: Open time (default now)

        Returns:
            New Position instance
        """
        if timestamp is None:
            timestamp = datetime.now(UTC)

        return cls(
            symbol=symbol,
            side=side,
            entry_price=price,
            notional=notional,
            leverage=leverage,
            margin_used=calculate_margin_needed(notional, leverage),
            profit_target=profit_target,
            stop_loss=stop_loss,
            quantity=calculate_quantity(notional, price),
            opened_at=timestamp,
            last_updated=timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert position to a JSON-serializable dictionary."""
        return {
            "symbol": self.symbol.value,
            "side": self.side.value,
            "entry_price": self.entry_price,
            "quantity": round_amount(self.quantity),
            "notional": self.notional,
            "leverage": self.leverage,
            "margin_used": self.margin_used,
            "profit_target": self.profit_target,
            "stop_loss": self.stop_loss,
            "opened_at": self.opened_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "current_price": self.current_price,
            "unrealized_pnl": self.unrealized_pnl,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Position":
        """Rebuild a position from its stored dictionary form.

        Raises:
            ValidationError: If the document is missing fields or holds an
                unknown symbol or side
        """
        try:
            symbol = Symbol.from_string(data["symbol"])
            return cls(
                symbol=symbol,
                side=data["side"],
                entry_price=float(data["entry_price"]),
                notional=float(data["notional"]),
                leverage=float(data["leverage"]),
                margin_used=float(data["margin_used"]),
                profit_target=_optional_float(data.get("profit_target")),
                stop_loss=_optional_float(data.get("stop_loss")),
                quantity=float(data.get("quantity") or ZERO),
                opened_at=_parse_timestamp(data.get("opened_at")),
                last_updated=_parse_timestamp(data.get("last_updated")),
                current_price=_optional_float(data.get("current_price")),
                unrealized_pnl=_optional_float(data.get("unrealized_pnl")),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid stored position {data!r}: {e}") from e


def _optional_float(value: Any) -> float | None:
    return None if value is None else float(value)


def _parse_timestamp(value: Any) -> datetime:
    if value is None:
        return datetime.now(UTC)
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
