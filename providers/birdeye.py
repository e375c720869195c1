from __future__ import annotations

import httpx
from loguru import logger

from providers.base import HttpPriceProvider, as_price


class BirdeyeProvider(HttpPriceProvider):
    name = "birdeye"
    BASE = "https://public-api.birdeye.so"

    def __init__(
        self,
        api_key: str = "",
        base_url: str = BASE,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = 10.0,
    ) -> None:
        super().__init__(base_url, client=client, timeout=timeout)
        self.api_key = api_key

    async def get_price(self, token_address: str) -> float:
        if not self.api_key:
            logger.warning("Birdeye API key not set")
            return 0.0
        payload = await self._get_json(
            "public/price",
            params={"address": token_address},
            headers={"X-API-KEY": self.api_key},
        )
        data = payload.get("data") or {}
        return as_price(data.get("value"))
