from __future__ import annotations

from typing import Iterable

import httpx

from providers.base import HttpPriceProvider, as_price


class JupiterProvider(HttpPriceProvider):
    name = "jupiter"
    supports_batch = True
    BASE = "https://price.jup.ag/v4"

    def __init__(self, base_url: str = BASE, client: httpx.AsyncClient | None = None, timeout: float | None = 10.0) -> None:
        super().__init__(base_url, client=client, timeout=timeout)

    async def get_price(self, token_address: str) -> float:
        prices = await self.get_prices([token_address])
        return prices[token_address]

    async def get_prices(self, token_addresses: Iterable[str]) -> dict[str, float]:
        addresses = list(token_addresses)
        if not addresses:
            return {}
        payload = await self._get_json("price", params={"ids": ",".join(addresses)})
        data = payload.get("data") or {}
        prices = {}
        for address in addresses:
            entry = data.get(address) or {}
            prices[address] = as_price(entry.get("price"))
        return prices
