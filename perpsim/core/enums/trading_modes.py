"""
Trading mode enumerations.

This module defines the portfolio documents the system maintains.
"""

from enum import StrEnum


class TradingMode(StrEnum):
    """
    Allowed trading modes.

    Each mode owns exactly one portfolio document.
    """

    PAPER = "paper"  # Simulated fills against live prices
    LIVE = "live"  # Mirrors a real exchange account

    @property
    def is_simulated(self) -> bool:
        """Check if trades in this mode are simulated."""
        return self == self.PAPER

    @property
    def notification_prefix(self) -> str:
        """Prefix used for human-readable trade notifications."""
        return "TEST MODE: " if self.is_simulated else ""

    @classmethod
    def from_flag(cls, test_mode: bool) -> "TradingMode":
        """
        Map the legacy boolean test-mode flag to a trading mode.

        Args:
            test_mode: True when paper trading is enabled

        Returns:
            PAPER when test_mode is set, LIVE otherwise
        """
        return cls.PAPER if test_mode else cls.LIVE
