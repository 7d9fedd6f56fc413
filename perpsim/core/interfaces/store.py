"""
Persistence interfaces.

The engine depends only on these; storage technology lives in
perpsim.infrastructure.persistence.
"""

from abc import ABC, abstractmethod

from perpsim.core.enums import TradingMode
from perpsim.core.models.portfolio import Portfolio
from perpsim.core.models.trade import TradeRecord


class IPortfolioStore(ABC):
    """Abstract interface for the single portfolio document per trading mode."""

    @abstractmethod
    def get(self, mode: TradingMode) -> Portfolio | None:
        """Load the current portfolio for mode, or None if none exists.

        Raises:
            PortfolioStoreError: If the store is unavailable
        """
        pass

    @abstractmethod
    def set(self, portfolio: Portfolio, expected_version: int | None = None) -> Portfolio:
        """Replace the portfolio document for portfolio.trading_mode.

        Args:
            portfolio: New snapshot (whole-document replace)
            expected_version: Version read at the start of the cycle; None
                skips the optimistic check (used by resets)

        Returns:
            The stored snapshot carrying its new version

        Raises:
            ConcurrentModificationError: If the stored version differs
            PortfolioStoreError: If the store is unavailable
        """
        pass


class ITradeLedger(ABC):
    """Abstract interface for the append-only trade ledger."""

    @abstractmethod
    def append(self, mode: TradingMode, record: TradeRecord) -> None:
        """Append one immutable record.

        Raises:
            TradeLedgerError: If the record could not be written
        """
        pass

    @abstractmethod
    def recent(self, mode: TradingMode, limit: int) -> list[TradeRecord]:
        """Return up to limit records, newest first."""
        pass

    def append_many(self, mode: TradingMode, records: list[TradeRecord]) -> None:
        """Append records in order."""
        for record in records:
            self.append(mode, record)
