"""
Persistence infrastructure.

Portfolio stores and trade ledgers behind the core store interfaces.
"""

from .portfolio_store import InMemoryPortfolioStore, JsonFilePortfolioStore
from .trade_ledger import InMemoryTradeLedger, JsonLinesTradeLedger

__all__ = [
    "InMemoryPortfolioStore",
    "InMemoryTradeLedger",
    "JsonFilePortfolioStore",
    "JsonLinesTradeLedger",
]
