from __future__ import annotations

from providers.base import PriceProvider
from providers.binance_ticker import BinanceTickerProvider
from providers.birdeye import BirdeyeProvider
from providers.coingecko import CoinGeckoProvider
from providers.jupiter import JupiterProvider
from providers.manual import ManualPriceProvider
from services.config_service import RuntimeConfig


def build_provider(name: str, config: RuntimeConfig, manual_prices: dict[str, float] | None = None) -> PriceProvider:
    timeout = config.http_timeout_s
    if name == "jupiter":
        return JupiterProvider(timeout=timeout)
    if name == "birdeye":
        return BirdeyeProvider(config.birdeye_api_key, timeout=timeout)
    if name == "coingecko":
        return CoinGeckoProvider(config.coingecko_api_key, platform=config.coingecko_platform, timeout=timeout)
    if name == "binance":
        return BinanceTickerProvider(config.symbol_map)
    if name == "manual":
        return ManualPriceProvider(manual_prices)
    raise ValueError(f"Unknown price provider: {name}")


def build_native_feed(config: RuntimeConfig) -> CoinGeckoProvider:
    return CoinGeckoProvider(config.coingecko_api_key, platform=config.coingecko_platform, timeout=config.http_timeout_s)
