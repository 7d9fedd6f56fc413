"""
Market data snapshot model.

The engine only needs "price of symbol, or nothing". Upstream market payloads
come in several shapes; MarketSnapshot resolves them once so the rest of the
core never looks at raw dictionaries.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from perpsim.core.enums import Symbol
from perpsim.core.utils.validation import coerce_price


@dataclass(frozen=True)
class Ticker:
    """Current price and 24h statistics for one asset."""

    price: float
    volume_24h: float | None = None
    change_24h: float | None = None
    high_24h: float | None = None
    low_24h: float | None = None


@dataclass(frozen=True)
class MarketSnapshot:
    """Immutable mapping from symbol to ticker."""

    tickers: Mapping[Symbol, Ticker] = field(default_factory=dict)

    def price(self, symbol: Symbol) -> float | None:
        """Return the current price of symbol, or None when unavailable."""
        ticker = self.tickers.get(symbol)
        return ticker.price if ticker else None

    def prices(self) -> dict[Symbol, float]:
        """Return all known prices."""
        return {symbol: ticker.price for symbol, ticker in self.tickers.items()}

    def __contains__(self, symbol: object) -> bool:
        return symbol in self.tickers

    def __len__(self) -> int:
        return len(self.tickers)

    @classmethod
    def from_prices(cls, prices: Mapping[Symbol | str, float]) -> "MarketSnapshot":
        """Build a snapshot from a bare symbol -> price mapping."""
        return cls.from_payload(dict(prices))

    @classmethod
    def from_payload(cls, payload: Any) -> "MarketSnapshot":
        """Resolve a loosely-shaped market data payload.

        Supported shapes, checked per symbol in priority order:

        - `{"binance": {"BTC": {"price": ...}}}`
        - `{"BTC": {"price": ...}}` or `{"BTC": 100000}`
        - `{"coinmarketcap": {"BTC": {"quote": {"USD": {"price": ...}}}}}`

        Symbols with no usable price are left out; a missing or malformed
        payload yields an empty snapshot.

        Args:
            payload: Market data as received from the caller

        Returns:
            MarketSnapshot with every symbol that has a positive price
        """
        if isinstance(payload, MarketSnapshot):
            return payload
        if not isinstance(payload, Mapping):
            return cls()

        normalized = _upper_keys(payload)
        binance = _upper_keys(payload.get("binance"))
        coinmarketcap = _upper_keys(payload.get("coinmarketcap"))

        tickers: dict[Symbol, Ticker] = {}
        for symbol in Symbol.tradable():
            ticker = (
                _ticker_from_entry(binance.get(symbol.value))
                or _ticker_from_entry(normalized.get(symbol.value))
                or _ticker_from_cmc(coinmarketcap.get(symbol.value))
            )
            if ticker is not None:
                tickers[symbol] = ticker

        return cls(tickers=tickers)


def _upper_keys(mapping: Any) -> dict[str, Any]:
    if not isinstance(mapping, Mapping):
        return {}
    return {str(key).upper(): value for key, value in mapping.items()}


def _ticker_from_entry(entry: Any) -> Ticker | None:
    if entry is None:
        return None
    if not isinstance(entry, Mapping):
        price = coerce_price(entry)
        return Ticker(price=price) if price is not None else None

    price = coerce_price(entry.get("price"))
    if price is None:
        return None
    return Ticker(
        price=price,
        volume_24h=_stat(entry, "volume24h", "volume_24h"),
        change_24h=_stat(entry, "change24h", "change_24h"),
        high_24h=_stat(entry, "high24h", "high_24h"),
        low_24h=_stat(entry, "low24h", "low_24h"),
    )


def _ticker_from_cmc(entry: Any) -> Ticker | None:
    if not isinstance(entry, Mapping):
        return None
    usd = entry.get("quote", {}).get("USD", {}) if isinstance(entry.get("quote"), Mapping) else {}
    if not isinstance(usd, Mapping):
        return None
    price = coerce_price(usd.get("price"))
    if price is None:
        return None
    return Ticker(
        price=price,
        volume_24h=_stat(usd, "volume_24h"),
        change_24h=_stat(usd, "percent_change_24h"),
    )


def _stat(entry: Mapping[str, Any], *keys: str) -> float | None:
    for key in keys:
        value = entry.get(key)
        if value is None:
            continue
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
    return None
