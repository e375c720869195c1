from __future__ import annotations

import json
from typing import Any

from cryptography.fernet import Fernet
from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from data.store import BaseStore
from services.crypto import open_secret, seal_secret


PROVIDER_NAMES = ("jupiter", "birdeye", "coingecko", "binance", "manual")
KEYED_PROVIDERS = ("birdeye", "coingecko")


class DashboardSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    TELEGRAM_BOT_TOKEN: str = ""
    ADMIN_TELEGRAM_IDS: str = ""
    ALLOW_ALL_USERS: bool = True
    DASHBOARD_CHAT_ID: str = ""
    PRICE_PROVIDER: str = "jupiter"
    BIRDEYE_API_KEY: str = ""
    COINGECKO_API_KEY: str = ""
    COINGECKO_PLATFORM: str = "solana"
    NATIVE_COIN_ID: str = "solana"
    NATIVE_SYMBOL: str = "SOL"
    SYMBOL_MAP: str = "{}"
    PRICE_CACHE_TTL_MS: int = 30000
    PRICE_HTTP_TIMEOUT_S: float = 10.0
    REFRESH_INTERVAL_S: int = 30
    # snapshots replace the trade list, so positions opened before the newest
    # LIVE_QUERY_LIMIT trades drop out once the first live snapshot lands
    LIVE_UPDATES: bool = True
    LIVE_QUERY_LIMIT: int = 50
    LIVE_POLL_INTERVAL_S: float = 2.0
    RECENT_TRADES_LIMIT: int = 20
    TX_EXPLORER_URL: str = "https://solscan.io/tx/{tx_hash}"
    DATABASE_PATH: str = "./trades.db"
    DATABASE_URL: str = ""
    CREDENTIAL_ENCRYPTION_KEY: str = ""
    LOG_LEVEL: str = "INFO"


class RuntimeConfig(BaseModel):
    price_provider: str
    birdeye_api_key: str
    coingecko_api_key: str
    coingecko_platform: str
    native_coin_id: str
    native_symbol: str
    symbol_map: dict[str, str]
    cache_ttl_ms: int
    http_timeout_s: float
    refresh_interval_s: int = Field(gt=0)
    live_updates: bool
    live_query_limit: int
    live_poll_interval_s: float = Field(gt=0)
    recent_trades_limit: int
    tx_explorer_url: str


class ConfigService:
    """Environment settings with overrides persisted in the store.

    Overrides written through ``update`` (e.g. the active price provider) win
    over the environment on the next ``load``.
    """

    def __init__(self, store: BaseStore, base: DashboardSettings, fernet: Fernet | None = None) -> None:
        self.store = store
        self.base = base
        self.fernet = fernet

    def load(self) -> RuntimeConfig:
        def _get(key: str, default: Any) -> Any:
            return self.store.get_setting(key, default)

        symbol_map_raw = _get("SYMBOL_MAP", self.base.SYMBOL_MAP)
        try:
            symbol_map = json.loads(symbol_map_raw) if isinstance(symbol_map_raw, str) else symbol_map_raw
        except json.JSONDecodeError:
            logger.warning("SYMBOL_MAP is not valid JSON, ignoring it")
            symbol_map = {}
        return RuntimeConfig(
            price_provider=_get("PRICE_PROVIDER", self.base.PRICE_PROVIDER),
            birdeye_api_key=self.api_key("birdeye"),
            coingecko_api_key=self.api_key("coingecko"),
            coingecko_platform=_get("COINGECKO_PLATFORM", self.base.COINGECKO_PLATFORM),
            native_coin_id=_get("NATIVE_COIN_ID", self.base.NATIVE_COIN_ID),
            native_symbol=_get("NATIVE_SYMBOL", self.base.NATIVE_SYMBOL),
            symbol_map=symbol_map,
            cache_ttl_ms=int(_get("PRICE_CACHE_TTL_MS", self.base.PRICE_CACHE_TTL_MS)),
            http_timeout_s=float(_get("PRICE_HTTP_TIMEOUT_S", self.base.PRICE_HTTP_TIMEOUT_S)),
            refresh_interval_s=int(_get("REFRESH_INTERVAL_S", self.base.REFRESH_INTERVAL_S)),
            live_updates=bool(_get("LIVE_UPDATES", self.base.LIVE_UPDATES)),
            live_query_limit=int(_get("LIVE_QUERY_LIMIT", self.base.LIVE_QUERY_LIMIT)),
            live_poll_interval_s=float(_get("LIVE_POLL_INTERVAL_S", self.base.LIVE_POLL_INTERVAL_S)),
            recent_trades_limit=int(_get("RECENT_TRADES_LIMIT", self.base.RECENT_TRADES_LIMIT)),
            tx_explorer_url=_get("TX_EXPLORER_URL", self.base.TX_EXPLORER_URL),
        )

    def update(self, key: str, value: Any) -> None:
        if key == "PRICE_PROVIDER" and value not in PROVIDER_NAMES:
            raise ValueError(f"Unknown price provider: {value}")
        self.store.set_setting(key, value)

    def api_key(self, provider: str) -> str:
        blob = self.store.get_credentials(provider)
        if blob:
            return open_secret(self.fernet, blob)
        return getattr(self.base, f"{provider.upper()}_API_KEY", "")

    def set_api_key(self, provider: str, api_key: str) -> None:
        if provider not in KEYED_PROVIDERS:
            raise ValueError(f"Provider {provider} does not take an API key")
        self.store.set_credentials(provider, seal_secret(self.fernet, api_key))
