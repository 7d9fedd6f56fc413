"""
Trading symbol enumerations.

This module defines the whitelist of perpetuals the simulator will trade.
"""

from enum import StrEnum


class Symbol(StrEnum):
    """
    Allowed trading symbols.

    Values are the bare base-asset tickers used as keys in signals, market
    data and the portfolio document. Declaration order is the order in which
    trade intents are admitted within a cycle.
    """

    BTC = "BTC"
    ETH = "ETH"
    SOL = "SOL"
    XRP = "XRP"
    DOGE = "DOGE"
    BNB = "BNB"

    @property
    def binance_pair(self) -> str:
        """Binance USDT pair for this asset (e.g., "BTCUSDT")."""
        return f"{self.value}USDT"

    @classmethod
    def tradable(cls) -> list["Symbol"]:
        """Return the tradable symbols in admission order."""
        return list(cls)

    @classmethod
    def from_string(cls, value: str) -> "Symbol":
        """
        Convert string to Symbol enum, with case-insensitive matching.

        Accepts the bare ticker ("btc"), the Binance pair ("BTCUSDT") and the
        perpetual form ("BTC-PERP").

        Args:
            value: String representation of symbol

        Returns:
            Corresponding Symbol enum value

        Raises:
            ValueError: If symbol is not supported
        """
        value_upper = str(value).strip().upper()
        if value_upper.endswith("-PERP"):
            value_upper = value_upper[: -len("-PERP")]
        if value_upper.endswith("USDT") and value_upper != "USDT":
            value_upper = value_upper[: -len("USDT")]

        for symbol in cls.tradable():
            if symbol.value == value_upper:
                return symbol

        raise ValueError(
            f"Unsupported symbol: {value}. "
            f"Supported symbols: {', '.join([s.value for s in cls.tradable()])}"
        )
