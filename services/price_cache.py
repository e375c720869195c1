from __future__ import annotations

import time
from typing import Callable, Iterable

from loguru import logger

from engine.models import PriceEntry
from providers.base import PriceProvider


DEFAULT_TTL_MS = 30_000


def _now_ms() -> int:
    return int(time.time() * 1000)


class PriceCache:
    """Per-token price memo in front of a pluggable provider.

    A price of 0.0 means "unknown": provider failures degrade to zero for the
    affected token instead of raising, and are not cached so the next read
    tries again. Stale entries are refetched on read, never evicted.
    """

    def __init__(
        self,
        provider: PriceProvider,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] = _now_ms,
        manual_prices: dict[str, float] | None = None,
    ) -> None:
        self.provider = provider
        self.ttl_ms = ttl_ms
        self.clock = clock
        self.manual_prices = manual_prices if manual_prices is not None else {}
        self._entries: dict[str, PriceEntry] = {}

    def set_provider(self, provider: PriceProvider) -> None:
        logger.info("Price provider switched {} -> {}", self.provider.name, provider.name)
        self.provider = provider

    def _fresh(self, address: str, now: int) -> PriceEntry | None:
        entry = self._entries.get(address)
        if entry and now - entry.fetched_at < self.ttl_ms:
            return entry
        return None

    def _store(self, address: str, price: float) -> float:
        self._entries[address] = PriceEntry(price=price, fetched_at=self.clock())
        return price

    async def get_price(self, token_address: str) -> float:
        entry = self._fresh(token_address, self.clock())
        if entry:
            return entry.price
        try:
            price = await self.provider.get_price(token_address)
        except Exception as exc:
            logger.warning("{} price lookup failed for {}: {}", self.provider.name, token_address, exc)
            return 0.0
        return self._store(token_address, price)

    async def get_batch_prices(self, token_addresses: Iterable[str]) -> dict[str, float]:
        addresses = list(dict.fromkeys(token_addresses))
        now = self.clock()
        prices: dict[str, float] = {}
        missing: list[str] = []
        for address in addresses:
            entry = self._fresh(address, now)
            if entry:
                prices[address] = entry.price
            else:
                missing.append(address)
        if not missing:
            return prices

        if self.provider.supports_batch:
            try:
                fetched = await self.provider.get_prices(missing)
            except Exception as exc:
                logger.warning("{} batch price lookup failed: {}", self.provider.name, exc)
                fetched = None
            for address in missing:
                if fetched is None:
                    prices[address] = 0.0
                else:
                    prices[address] = self._store(address, fetched.get(address, 0.0))
        else:
            for address in missing:
                prices[address] = await self.get_price(address)
        return prices

    def set_manual_price(self, token_address: str, price: float) -> None:
        self.manual_prices[token_address] = price
        self._store(token_address, price)

    def clear(self) -> None:
        self._entries.clear()

    def status(self) -> dict[str, dict[str, float | int | bool]]:
        now = self.clock()
        status = {}
        for address, entry in self._entries.items():
            age = now - entry.fetched_at
            status[address] = {"price": entry.price, "age": age, "fresh": age < self.ttl_ms}
        return status
