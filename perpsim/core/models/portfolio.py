"""
Portfolio snapshot model.

A Portfolio is the single persisted document per trading mode. Cycles never
mutate a Portfolio in place: they load it into a PortfolioCore working state,
apply exits and intents, and derive a fresh Portfolio from the result.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from perpsim.core.constants import DEFAULT_INITIAL_BALANCE
from perpsim.core.enums import Symbol, TradingMode
from perpsim.core.exceptions.simulation import ValidationError
from perpsim.core.models.position import Position
from perpsim.core.utils.validation import validate_non_negative, validate_positive


@dataclass(frozen=True)
class Portfolio:
    """Persisted portfolio state for one trading mode.

    Attributes:
        account_value: available_cash + margin in use + unrealized PnL
        available_cash: uncommitted capital, never negative
        total_return: change in account_value over the last cycle
        positions: open positions keyed by symbol
        initial_balance: balance the portfolio was created or last reset with
        trading_mode: which document this is
        version: optimistic-concurrency token, bumped by every store write
    """

    account_value: float
    available_cash: float
    total_return: float = 0.0
    positions: Mapping[Symbol, Position] = field(default_factory=dict)
    last_updated: datetime = field(default_factory=lambda: datetime.now(UTC))
    initial_balance: float = DEFAULT_INITIAL_BALANCE
    trading_mode: TradingMode = TradingMode.PAPER
    version: int = 0

    def __post_init__(self) -> None:
        """Validate snapshot invariants."""
        validate_non_negative(self.available_cash, "available_cash")
        validate_positive(self.initial_balance, "initial_balance")
        for symbol, position in self.positions.items():
            if position.symbol != symbol:
                raise ValidationError(
                    f"Position keyed by {symbol} belongs to {position.symbol}"
                )

    @classmethod
    def initial(
        cls,
        initial_balance: float = DEFAULT_INITIAL_BALANCE,
        trading_mode: TradingMode = TradingMode.PAPER,
    ) -> "Portfolio":
        """Create a fresh portfolio with all capital available and no positions."""
        validate_positive(initial_balance, "initial_balance")
        return cls(
            account_value=initial_balance,
            available_cash=initial_balance,
            total_return=0.0,
            positions={},
            initial_balance=initial_balance,
            trading_mode=trading_mode,
        )

    @property
    def margin_used(self) -> float:
        """Total margin committed to open positions."""
        return sum((position.margin_used for position in self.positions.values()), 0.0)

    @property
    def net_profit(self) -> float:
        """Cumulative profit since the portfolio was created or reset."""
        return self.account_value - self.initial_balance

    def to_dict(self) -> dict[str, Any]:
        """Convert portfolio to a JSON-serializable document."""
        return {
            "account_value": self.account_value,
            "available_cash": self.available_cash,
            "total_return": self.total_return,
            "net_profit": self.net_profit,
            "initial_balance": self.initial_balance,
            "trading_mode": self.trading_mode.value,
            "positions": [position.to_dict() for position in self.positions.values()],
            "last_updated": self.last_updated.isoformat(),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Portfolio":
        """Rebuild a portfolio from its stored document.

        Positions may be stored as a list or as a mapping keyed by symbol.

        Raises:
            ValidationError: If the document is malformed or holds two
                positions for the same symbol
        """
        raw_positions = data.get("positions") or []
        if isinstance(raw_positions, Mapping):
            raw_positions = list(raw_positions.values())

        positions: dict[Symbol, Position] = {}
        for raw in raw_positions:
            position = Position.from_dict(raw)
            if position.symbol in positions:
                raise ValidationError(f"Duplicate stored position for {position.symbol}")
            positions[position.symbol] = position

        try:
            last_updated = data.get("last_updated")
            return cls(
                account_value=float(data["account_value"]),
                available_cash=float(data["available_cash"]),
                total_return=float(data.get("total_return") or 0.0),
                positions=positions,
                last_updated=(
                    datetime.fromisoformat(last_updated) if last_updated else datetime.now(UTC)
                ),
                initial_balance=float(data.get("initial_balance") or DEFAULT_INITIAL_BALANCE),
                trading_mode=TradingMode(data.get("trading_mode") or TradingMode.PAPER),
                version=int(data.get("version") or 0),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid stored portfolio: {e}") from e
