from __future__ import annotations

import asyncio
from typing import Any, Iterable

from binance.client import Client
from binance.exceptions import BinanceAPIException
from loguru import logger

from providers.base import PriceProvider, as_price


class BinanceTickerProvider(PriceProvider):
    """Last-trade ticker prices from Binance spot.

    Token addresses are not exchange symbols, so each tracked address needs an
    entry in ``symbol_map`` (address -> e.g. ``BONKUSDT``). Unmapped addresses
    price at zero.
    """

    name = "binance"
    supports_batch = True

    def __init__(self, symbol_map: dict[str, str] | None = None, client: Any | None = None) -> None:
        self.symbol_map = symbol_map or {}
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = Client("", "")
        return self._client

    async def get_price(self, token_address: str) -> float:
        symbol = self.symbol_map.get(token_address)
        if not symbol:
            logger.warning("No Binance symbol mapped for {}", token_address)
            return 0.0
        try:
            ticker = await asyncio.to_thread(self.client.get_symbol_ticker, symbol=symbol)
        except BinanceAPIException as exc:
            raise RuntimeError(f"Binance ticker failed for {symbol}: {exc.message}") from exc
        return as_price(ticker.get("price"))

    async def get_prices(self, token_addresses: Iterable[str]) -> dict[str, float]:
        addresses = list(token_addresses)
        if not addresses:
            return {}
        try:
            tickers = await asyncio.to_thread(self.client.get_all_tickers)
        except BinanceAPIException as exc:
            raise RuntimeError(f"Binance tickers failed: {exc.message}") from exc
        by_symbol = {t["symbol"]: t["price"] for t in tickers}
        return {a: as_price(by_symbol.get(self.symbol_map.get(a, ""))) for a in addresses}
