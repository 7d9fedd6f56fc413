"""
Trade ledger record domain model.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from perpsim.core.enums import PositionSide, Symbol, TradeType
from perpsim.core.exceptions.simulation import ValidationError


@dataclass(frozen=True)
class TradeRecord:
    """An immutable entry in the trade ledger.

    OPEN records carry entry_price/notional/leverage, CLOSE records carry
    entry_price/exit_price/pnl and, for stop-loss or profit-target exits, a
    reason. UPDATE records describe the resized position.
    """

    type: TradeType
    symbol: Symbol
    side: PositionSide
    entry_price: float | None = None
    exit_price: float | None = None
    pnl: float | None = None
    reason: str | None = None
    notional: float | None = None
    leverage: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if self.type == TradeType.CLOSE:
            if self.exit_price is None or self.exit_price <= 0:
                raise ValidationError(f"Close record needs a positive exit price, got {self.exit_price}")
            if self.pnl is None:
                raise ValidationError("Close record needs a realized pnl")
        elif self.pnl is not None:
            raise ValidationError(f"Only CLOSE records carry pnl, got {self.type} with pnl")

        if self.entry_price is not None and self.entry_price <= 0:
            raise ValidationError(f"Entry price must be positive, got {self.entry_price}")
        if self.notional is not None and self.notional <= 0:
            raise ValidationError(f"Notional must be positive, got {self.notional}")
        if self.leverage is not None and self.leverage <= 0:
            raise ValidationError(f"Leverage must be positive, got {self.leverage}")

    @property
    def is_stop_out(self) -> bool:
        """Check if the record is an automatic stop-loss or profit-target exit."""
        return self.type == TradeType.CLOSE and self.reason is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert record to a JSON-serializable dictionary, omitting unset fields."""
        data: dict[str, Any] = {
            "type": self.type.value,
            "symbol": self.symbol.value,
            "side": self.side.value,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "pnl": self.pnl,
            "reason": self.reason,
            "notional": self.notional,
            "leverage": self.leverage,
            "timestamp": self.timestamp.isoformat(),
        }
        return {key: value for key, value in data.items() if value is not None}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TradeRecord":
        """Rebuild a record from its stored dictionary form."""
        try:
            return cls(
                type=TradeType(data["type"]),
                symbol=Symbol.from_string(data["symbol"]),
                side=PositionSide(data["side"]),
                entry_price=data.get("entry_price"),
                exit_price=data.get("exit_price"),
                pnl=data.get("pnl"),
                reason=data.get("reason"),
                notional=data.get("notional"),
                leverage=data.get("leverage"),
                timestamp=datetime.fromisoformat(data["timestamp"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid stored trade record {data!r}: {e}") from e
