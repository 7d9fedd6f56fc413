"""
Market data infrastructure.
"""

from .binance_price_source import BinancePriceSource

__all__ = ["BinancePriceSource"]
