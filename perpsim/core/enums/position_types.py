"""
Position, signal and trade record type enumerations.

This module defines the allowed position sides, the decisions a signal may
carry, and the kinds of records written to the trade ledger.
"""

from enum import StrEnum


class PositionSide(StrEnum):
    """
    Allowed position sides.

    Defines whether a position is long or short.
    """

    LONG = "LONG"
    SHORT = "SHORT"

    @property
    def is_long(self) -> bool:
        """Check if position side is long."""
        return self == self.LONG

    @property
    def is_short(self) -> bool:
        """Check if position side is short."""
        return self == self.SHORT

    def opposite(self) -> "PositionSide":
        """Get the opposite position side."""
        return self.SHORT if self.is_long else self.LONG  # type: ignore[return-value]


class SignalSide(StrEnum):
    """
    Allowed per-asset decisions in a trading signal.

    LONG and SHORT request exposure in that direction; HOLD leaves the
    portfolio untouched for the asset.
    """

    LONG = "LONG"
    SHORT = "SHORT"
    HOLD = "HOLD"

    @property
    def is_hold(self) -> bool:
        """Check if the decision is a no-op."""
        return self == self.HOLD

    def to_position_side(self) -> PositionSide | None:
        """Get the position side this decision opens (None for HOLD)."""
        if self == self.LONG:
            return PositionSide.LONG
        elif self == self.SHORT:
            return PositionSide.SHORT
        return None


class TradeType(StrEnum):
    """
    Kinds of trade ledger records.

    OPEN and CLOSE bracket a position's life; UPDATE records an in-place resize.
    """

    OPEN = "OPEN"
    CLOSE = "CLOSE"
    UPDATE = "UPDATE"

    @property
    def is_notifiable(self) -> bool:
        """Check if the record should be pushed to the notification channel."""
        return self in [self.OPEN, self.CLOSE]
