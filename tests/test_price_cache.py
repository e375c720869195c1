import asyncio

from providers.base import PriceProvider
from providers.manual import ManualPriceProvider
from services.price_cache import PriceCache


class FakeClock:
    def __init__(self, now: int = 0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


class CountingProvider(PriceProvider):
    name = "counting"

    def __init__(self, prices: dict[str, float], supports_batch: bool = False) -> None:
        self.prices = prices
        self.supports_batch = supports_batch
        self.single_calls: list[str] = []
        self.batch_calls: list[list[str]] = []

    async def get_price(self, token_address: str) -> float:
        self.single_calls.append(token_address)
        return self.prices.get(token_address, 0.0)

    async def get_prices(self, token_addresses):
        addresses = list(token_addresses)
        self.batch_calls.append(addresses)
        return {a: self.prices[a] for a in addresses if a in self.prices}


class FailingProvider(PriceProvider):
    name = "failing"
    supports_batch = True

    async def get_price(self, token_address: str) -> float:
        raise RuntimeError("boom")

    async def get_prices(self, token_addresses):
        raise RuntimeError("boom")


def test_cache_hit_within_ttl_and_refetch_after():
    clock = FakeClock(0)
    provider = CountingProvider({"a": 2.0})
    cache = PriceCache(provider, ttl_ms=30000, clock=clock)

    assert asyncio.run(cache.get_price("a")) == 2.0
    clock.now = 15000
    provider.prices["a"] = 3.0
    assert asyncio.run(cache.get_price("a")) == 2.0
    assert provider.single_calls == ["a"]

    clock.now = 31000
    assert asyncio.run(cache.get_price("a")) == 3.0
    assert provider.single_calls == ["a", "a"]


def test_manual_price_overrides_fresh_entry():
    clock = FakeClock(0)
    provider = CountingProvider({"a": 2.0})
    cache = PriceCache(provider, clock=clock)
    asyncio.run(cache.get_price("a"))

    cache.set_manual_price("a", 9.5)
    assert asyncio.run(cache.get_price("a")) == 9.5
    assert provider.single_calls == ["a"]


def test_manual_provider_reads_price_book_after_expiry():
    clock = FakeClock(0)
    book: dict[str, float] = {}
    cache = PriceCache(ManualPriceProvider(book), clock=clock, manual_prices=book)
    cache.set_manual_price("a", 0.0123)
    clock.now = 60000
    assert asyncio.run(cache.get_price("a")) == 0.0123
    assert asyncio.run(cache.get_price("unknown")) == 0.0


def test_batch_uses_single_round_trip_for_misses():
    clock = FakeClock(0)
    provider = CountingProvider({"a": 1.0, "b": 2.0}, supports_batch=True)
    cache = PriceCache(provider, clock=clock)
    cache.set_manual_price("c", 5.0)

    prices = asyncio.run(cache.get_batch_prices(["a", "b", "c", "d"]))
    assert prices == {"a": 1.0, "b": 2.0, "c": 5.0, "d": 0.0}
    assert provider.batch_calls == [["a", "b", "d"]]
    assert provider.single_calls == []


def test_batch_falls_back_to_single_lookups():
    provider = CountingProvider({"a": 1.0, "b": 2.0})
    cache = PriceCache(provider, clock=FakeClock(0))
    prices = asyncio.run(cache.get_batch_prices(["a", "b"]))
    assert prices == {"a": 1.0, "b": 2.0}
    assert provider.single_calls == ["a", "b"]


def test_provider_failure_yields_zero_and_is_not_cached():
    cache = PriceCache(FailingProvider(), clock=FakeClock(0))
    assert asyncio.run(cache.get_price("a")) == 0.0
    assert asyncio.run(cache.get_batch_prices(["a", "b"])) == {"a": 0.0, "b": 0.0}
    assert cache.status() == {}


def test_switching_provider_keeps_entries():
    clock = FakeClock(0)
    first = CountingProvider({"a": 1.0})
    second = CountingProvider({"a": 7.0})
    cache = PriceCache(first, clock=clock)
    asyncio.run(cache.get_price("a"))

    cache.set_provider(second)
    assert asyncio.run(cache.get_price("a")) == 1.0
    assert second.single_calls == []

    clock.now = 30000
    assert asyncio.run(cache.get_price("a")) == 7.0


def test_status_and_clear():
    clock = FakeClock(1000)
    cache = PriceCache(CountingProvider({}), ttl_ms=30000, clock=clock)
    cache.set_manual_price("a", 1.5)
    clock.now = 41000
    assert cache.status() == {"a": {"price": 1.5, "age": 40000, "fresh": False}}
    cache.clear()
    assert cache.status() == {}
