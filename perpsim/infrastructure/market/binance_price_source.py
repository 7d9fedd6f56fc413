"""
Binance spot ticker price source.

Fetches 24h ticker statistics per symbol from the public REST API and keeps
them in a short-lived cache so repeated cycles do not hammer the endpoint.
"""

from collections.abc import Iterable
from threading import RLock
from typing import Any

import requests
from cachetools import TTLCache
from loguru import logger

from perpsim.core.constants import BINANCE_BASE_URL, HTTP_TIMEOUT_SECONDS, PRICE_CACHE_TTL_SECONDS
from perpsim.core.enums import Symbol
from perpsim.core.exceptions.simulation import MarketDataError
from perpsim.core.interfaces.market import IPriceSource
from perpsim.core.models.market import MarketSnapshot, Ticker
from perpsim.core.utils.validation import coerce_price


class BinancePriceSource(IPriceSource):
    """Price source backed by GET /api/v3/ticker/24hr."""

    TICKER_PATH = "/api/v3/ticker/24hr"

    def __init__(
        self,
        base_url: str = BINANCE_BASE_URL,
        cache_ttl: float = PRICE_CACHE_TTL_SECONDS,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})

        self._cache: TTLCache[Symbol, Ticker] = TTLCache(
            maxsize=len(Symbol.tradable()) * 2, ttl=max(cache_ttl, 0.001)
        )
        self._cache_lock = RLock()

    def fetch_ticker(self, symbol: Symbol) -> Ticker:
        """Fetch one symbol's ticker, using the cache when fresh.

        Raises:
            MarketDataError: If the request fails or the response has no usable price
        """
        with self._cache_lock:
            cached = self._cache.get(symbol)
        if cached is not None:
            return cached

        url = f"{self.base_url}{self.TICKER_PATH}"
        try:
            response = self.session.get(
                url, params={"symbol": symbol.binance_pair}, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            raise MarketDataError(f"Failed to fetch {symbol.binance_pair} ticker: {e}") from e

        ticker = self._parse_ticker(symbol, data)
        with self._cache_lock:
            self._cache[symbol] = ticker
        return ticker

    @staticmethod
    def _parse_ticker(symbol: Symbol, data: Any) -> Ticker:
        if not isinstance(data, dict):
            raise MarketDataError(f"Unexpected {symbol.binance_pair} ticker response")

        price = coerce_price(data.get("lastPrice"))
        if price is None:
            raise MarketDataError(f"No usable last price for {symbol.binance_pair}")

        def stat(key: str) -> float | None:
            try:
                return float(data[key])
            except (KeyError, TypeError, ValueError):
                return None

        return Ticker(
            price=price,
            volume_24h=stat("quoteVolume"),
            change_24h=stat("priceChangePercent"),
            high_24h=stat("highPrice"),
            low_24h=stat("lowPrice"),
        )

    def snapshot(self, symbols: Iterable[Symbol] | None = None) -> MarketSnapshot:
        wanted = list(symbols) if symbols is not None else Symbol.tradable()
        tickers: dict[Symbol, Ticker] = {}

        for symbol in wanted:
            try:
                tickers[symbol] = self.fetch_ticker(symbol)
            except MarketDataError as e:
                logger.warning(f"Skipping {symbol}: {e}")

        logger.debug(f"Fetched {len(tickers)}/{len(wanted)} Binance tickers")
        return MarketSnapshot(tickers=tickers)

    def clear_cache(self) -> None:
        """Drop all cached tickers."""
        with self._cache_lock:
            self._cache.clear()
