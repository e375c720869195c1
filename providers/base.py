from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, Iterable

import httpx


class PriceProvider(ABC):
    name: str = "base"
    supports_batch: bool = False

    @abstractmethod
    async def get_price(self, token_address: str) -> float:
        raise NotImplementedError

    async def get_prices(self, token_addresses: Iterable[str]) -> dict[str, float]:
        prices: dict[str, float] = {}
        for address in token_addresses:
            prices[address] = await self.get_price(address)
        return prices

    async def aclose(self) -> None:
        return None


class HttpPriceProvider(PriceProvider):
    """Provider backed by a JSON HTTP API.

    A shared ``httpx.AsyncClient`` may be injected; otherwise a short-lived
    client is opened per request.
    """

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None, timeout: float | None = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get_json(self, path: str, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        if self._client is not None:
            resp = await self._client.get(url, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(url, params=params, headers=headers)
        resp.raise_for_status()
        return resp.json()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()


def as_price(value: Any) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    return price if math.isfinite(price) and price > 0 else 0.0
