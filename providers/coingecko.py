from __future__ import annotations

import httpx

from providers.base import HttpPriceProvider, as_price


class CoinGeckoProvider(HttpPriceProvider):
    """CoinGecko simple price API.

    Contract lookups are limited for Solana tokens without a Pro key. The same
    client also serves the native coin quote shown first in the ticker.
    """

    name = "coingecko"
    BASE = "https://api.coingecko.com/api/v3"

    def __init__(
        self,
        api_key: str = "",
        platform: str = "solana",
        base_url: str = BASE,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = 10.0,
    ) -> None:
        super().__init__(base_url, client=client, timeout=timeout)
        self.api_key = api_key
        self.platform = platform

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"x-cg-pro-api-key": self.api_key}

    async def get_price(self, token_address: str) -> float:
        payload = await self._get_json(
            f"simple/token_price/{self.platform}",
            params={"contract_addresses": token_address, "vs_currencies": "usd"},
            headers=self._headers(),
        )
        entry = payload.get(token_address) or payload.get(token_address.lower()) or {}
        return as_price(entry.get("usd"))

    async def get_native_price(self, coin_id: str = "solana") -> float:
        payload = await self._get_json(
            "simple/price",
            params={"ids": coin_id, "vs_currencies": "usd"},
            headers=self._headers(),
        )
        return as_price((payload.get(coin_id) or {}).get("usd"))
