from __future__ import annotations

from providers.base import PriceProvider


class ManualPriceProvider(PriceProvider):
    """Serves prices an operator entered by hand; unknown tokens price at zero."""

    name = "manual"
    supports_batch = False

    def __init__(self, book: dict[str, float] | None = None) -> None:
        self.book = book if book is not None else {}

    async def get_price(self, token_address: str) -> float:
        return self.book.get(token_address, 0.0)
