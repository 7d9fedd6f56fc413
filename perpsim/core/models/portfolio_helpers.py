"""Helper methods for portfolio components to reduce complexity."""

from dataclasses import replace
from datetime import UTC, datetime

from perpsim.core.enums import PositionSide, Symbol, TradeType
from perpsim.core.exceptions.simulation import (
    InsufficientFundsError,
    PositionNotFoundError,
    ValidationError,
)
from perpsim.core.models.intent import TradeIntent
from perpsim.core.models.position import Position
from perpsim.core.models.trade import TradeRecord
from perpsim.core.types.financial import (
    average_entry_price,
    calculate_margin_needed,
    calculate_quantity,
)


class PortfolioValidator:
    """Centralized validation helper for portfolio operations.

    Consolidates the checks shared by portfolio_core.py, portfolio_trading.py
    and portfolio_risk.py.
    """

    @staticmethod
    def validate_position_for_add(position: Position, positions: dict[Symbol, Position]) -> None:
        """Validate position before adding it to the book.

        Raises:
            ValidationError: If position is invalid or the symbol is taken
        """
        if not isinstance(position, Position):
            raise ValidationError("Position must be a valid Position instance")

        if not isinstance(position.symbol, Symbol):
            raise ValidationError("Position symbol must be a valid Symbol enum")

        if position.symbol in positions:
            raise ValidationError(f"Position already open for symbol: {position.symbol}")

    @staticmethod
    def validate_position_exists(symbol: Symbol, positions: dict[Symbol, Position]) -> None:
        """Validate that position exists for the given symbol.

        Raises:
            PositionNotFoundError: If position not found
        """
        if symbol not in positions:
            raise PositionNotFoundError(str(symbol))

    @staticmethod
    def validate_margin_requirement(
        margin_needed: float, available_cash: float, operation: str
    ) -> None:
        """Validate sufficient cash is available to commit margin.

        Args:
            margin_needed: Required margin amount
            available_cash: Available cash
            operation: Description of operation for error context

        Raises:
            InsufficientFundsError: If insufficient funds
        """
        if margin_needed > available_cash:
            raise InsufficientFundsError(
                required=float(margin_needed),
                available=float(available_cash),
                operation=operation,
            )


class TradeRecorder:
    """Builds ledger records for position lifecycle events."""

    @staticmethod
    def open_record(position: Position) -> TradeRecord:
        """Create an OPEN record."""
        return TradeRecord(
            type=TradeType.OPEN,
            symbol=position.symbol,
            side=position.side,
            entry_price=position.entry_price,
            notional=position.notional,
            leverage=position.leverage,
            timestamp=position.opened_at,
        )

    @staticmethod
    def close_record(
        position: Position, exit_price: float, pnl: float, reason: str | None = None
    ) -> TradeRecord:
        """Create a CLOSE record."""
        return TradeRecord(
            type=TradeType.CLOSE,
            symbol=position.symbol,
            side=position.side,
            entry_price=position.entry_price,
            exit_price=exit_price,
            pnl=pnl,
            reason=reason,
            timestamp=datetime.now(UTC),
        )

    @staticmethod
    def update_record(position: Position) -> TradeRecord:
        """Create an UPDATE record describing the resized position."""
        return TradeRecord(
            type=TradeType.UPDATE,
            symbol=position.symbol,
            side=position.side,
            entry_price=position.entry_price,
            notional=position.notional,
            leverage=position.leverage,
            timestamp=position.last_updated,
        )


class PositionManager:
    """Manages position lifecycle."""

    @staticmethod
    def create_position(intent: TradeIntent, side: PositionSide, price: float, leverage: float) -> Position:
        """Create a new position filled at price."""
        return Position.open(
            symbol=intent.symbol,
            side=side,
            price=price,
            notional=intent.notional,
            leverage=leverage,
            profit_target=intent.profit_target,
            stop_loss=intent.stop_loss,
        )

    @staticmethod
    def resize_position(
        position: Position, intent: TradeIntent, price: float, leverage: float
    ) -> Position:
        """Return the position resized to the intent's notional and leverage.

        Trigger levels are replaced by the intent's (including unsetting them),
        and the entry price becomes the two-point average of the old entry and
        the current price.
        """
        entry_price = average_entry_price(position.entry_price, price)
        return replace(
            position,
            entry_price=entry_price,
            notional=intent.notional,
            quantity=calculate_quantity(intent.notional, entry_price),
            leverage=leverage,
            margin_used=calculate_margin_needed(intent.notional, leverage),
            profit_target=intent.profit_target,
            stop_loss=intent.stop_loss,
            last_updated=datetime.now(UTC),
            current_price=None,
            unrealized_pnl=None,
        )
