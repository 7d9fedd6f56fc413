"""
Market data interfaces.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from perpsim.core.enums import Symbol
from perpsim.core.models.market import MarketSnapshot


class IPriceSource(ABC):
    """Abstract interface for live market prices."""

    @abstractmethod
    def snapshot(self, symbols: Iterable[Symbol] | None = None) -> MarketSnapshot:
        """Fetch current tickers.

        Symbols that cannot be priced are left out of the snapshot rather
        than raising.

        Args:
            symbols: Symbols to fetch (default: every tradable symbol)

        Returns:
            MarketSnapshot with the symbols that could be priced
        """
        pass
