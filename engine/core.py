from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from data.store import BaseStore
from data.watcher import TradeWatcher
from engine.models import Trade
from engine.state import DashboardState, now_ms
from engine.view import DashboardView, build_view, format_elapsed
from providers.coingecko import CoinGeckoProvider
from providers.factory import build_native_feed
from services.config_service import RuntimeConfig
from services.price_cache import PriceCache
from services.scheduler import wait_next_tick


RenderFn = Callable[[DashboardView], Optional[Awaitable[None]]]
TickFn = Callable[[str], Optional[Awaitable[None]]]


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result


class DashboardController:
    """Owns the dashboard state and every path that changes it.

    Three independent triggers feed the same render: explicit loads, the
    periodic price refresh and the live trade subscription. They are not
    coordinated; each render is built from whatever the state holds at that
    moment.
    """

    def __init__(
        self,
        store: BaseStore,
        price_cache: PriceCache,
        config: RuntimeConfig,
        native_feed: CoinGeckoProvider | None = None,
        render: RenderFn | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.price_cache = price_cache
        self.config = config
        self.native_feed = native_feed
        self.render_fn = render
        self.clock = clock
        self.state = DashboardState(session_start=clock())
        self.watcher: TradeWatcher | None = None
        self._running = False

    def view(self) -> DashboardView:
        return build_view(
            self.state,
            self.clock(),
            recent_limit=self.config.recent_trades_limit,
            explorer_url=self.config.tx_explorer_url,
            native_symbol=self.config.native_symbol,
        )

    async def render(self) -> DashboardView:
        self.state.last_update = self.clock()
        view = self.view()
        if self.render_fn:
            try:
                await _maybe_await(self.render_fn(view))
            except Exception as exc:
                logger.exception("Render failed: {}", exc)
        return view

    async def load(self) -> bool:
        try:
            records = await asyncio.to_thread(self.store.list_trades)
            trades = [Trade.from_record(r) for r in records]
        except Exception as exc:
            logger.exception("Error loading trades: {}", exc)
            self.state.last_error = str(exc)
            return False
        self.state.replace_trades(trades)
        self.state.last_error = None
        logger.debug("Loaded {} trades, {} open positions", len(trades), len(self.state.positions))
        await self.render()
        return True

    async def submit_trade(self, trade: Trade) -> Trade:
        """Insert a trade and reload; store errors propagate to the caller."""
        trade_id = await asyncio.to_thread(self.store.add_trade, trade.to_record())
        logger.info("Trade added {}: {} {} {} @ {}", trade_id, trade.side, trade.amount, trade.symbol, trade.price_per_token)
        await self.load()
        return Trade.from_record({**trade.to_record(), "id": trade_id})

    async def apply_snapshot(self, records: list[dict[str, Any]]) -> None:
        try:
            trades = [Trade.from_record(r) for r in records]
        except (KeyError, TypeError, ValueError) as exc:
            logger.exception("Malformed trade snapshot: {}", exc)
            return
        self.state.replace_trades(trades)
        await self.render()

    async def refresh_prices(self) -> None:
        addresses = self.state.held_addresses()
        if addresses:
            prices = await self.price_cache.get_batch_prices(addresses)
            self.state.prices.update(prices)
        if self.native_feed:
            try:
                self.state.native_price = await self.native_feed.get_native_price(self.config.native_coin_id)
            except Exception as exc:
                logger.warning("Error fetching {} price: {}", self.config.native_symbol, exc)
                self.state.native_price = 0.0
        await self.render()

    async def refresh(self) -> None:
        await self.load()
        await self.refresh_prices()

    async def reconfigure(self, config: RuntimeConfig) -> None:
        """Adopt reloaded settings; the native feed is rebuilt when its CoinGecko settings change."""
        previous = self.config
        self.config = config
        if not isinstance(self.native_feed, CoinGeckoProvider):
            return
        feed_settings = ("coingecko_api_key", "coingecko_platform", "http_timeout_s")
        if all(getattr(previous, f) == getattr(config, f) for f in feed_settings):
            return
        await self.native_feed.aclose()
        self.native_feed = build_native_feed(config)
        logger.info("Native price feed rebuilt with new CoinGecko settings")

    async def start_live_updates(self) -> None:
        if self.watcher is None:
            self.watcher = TradeWatcher(
                self.store,
                self.apply_snapshot,
                limit=self.config.live_query_limit,
                poll_interval=self.config.live_poll_interval_s,
            )
        await self.watcher.start()

    async def run_forever(self) -> None:
        self._running = True
        await self.load()
        if self.config.live_updates:
            await self.start_live_updates()
        while self._running:
            await self.refresh_prices()
            await wait_next_tick(self.config.refresh_interval_s)

    async def run_clock(self, on_tick: TickFn) -> None:
        """Report the session clock every second.

        Independent of data refresh. The bot wires it to a trace log line;
        pushing it to Telegram every second would hit rate limits.
        """
        self._running = True
        while self._running:
            elapsed = format_elapsed(self.clock() - self.state.session_start)
            try:
                await _maybe_await(on_tick(elapsed))
            except Exception as exc:
                logger.exception("Clock update failed: {}", exc)
            await asyncio.sleep(1)

    async def stop(self) -> None:
        self._running = False
        if self.watcher:
            await self.watcher.stop()
