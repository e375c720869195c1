from __future__ import annotations

import asyncio
import contextlib
import sys

from aiogram import Bot, Dispatcher
from loguru import logger

from bot import messages
from bot.middleware import AccessMiddleware, ThrottleMiddleware
from bot.routers import build_router
from data.store import create_store
from engine.core import DashboardController
from providers.factory import build_native_feed, build_provider
from services.config_service import ConfigService, DashboardSettings
from services.crypto import build_fernet
from services.price_cache import PriceCache
from services.publisher import DashboardPublisher


def _log_task_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception():
        logger.opt(exception=task.exception()).error("Background task {} stopped", task.get_name())


async def main() -> None:
    settings = DashboardSettings()
    logger.remove()
    logger.add(sys.stderr, level=settings.LOG_LEVEL)

    store = create_store(settings.DATABASE_URL, settings.DATABASE_PATH)
    config_service = ConfigService(store, settings, build_fernet(settings.CREDENTIAL_ENCRYPTION_KEY))
    config = config_service.load()

    manual_prices: dict[str, float] = {}
    provider = build_provider(config.price_provider, config, manual_prices)
    price_cache = PriceCache(provider, ttl_ms=config.cache_ttl_ms, manual_prices=manual_prices)

    publisher = DashboardPublisher(settings.DASHBOARD_CHAT_ID, messages.dashboard_text) if settings.DASHBOARD_CHAT_ID else None
    controller = DashboardController(
        store,
        price_cache,
        config,
        native_feed=build_native_feed(config),
        render=publisher.publish if publisher else None,
    )

    bot = Bot(token=settings.TELEGRAM_BOT_TOKEN)
    dp = Dispatcher()
    dp.message.middleware(AccessMiddleware(settings))
    dp.callback_query.middleware(AccessMiddleware(settings))
    dp.callback_query.middleware(ThrottleMiddleware())
    dp.include_router(build_router(controller, config_service, price_cache))

    if publisher:
        await publisher.start(bot)
    logger.info("Dashboard starting with {} prices", provider.name)
    refresh_task = asyncio.create_task(controller.run_forever())
    clock_task = asyncio.create_task(controller.run_clock(lambda elapsed: logger.trace("Session {}", elapsed)))
    for task in (refresh_task, clock_task):
        task.add_done_callback(_log_task_failure)
    try:
        await dp.start_polling(bot)
    finally:
        await controller.stop()
        for task in (refresh_task, clock_task):
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if publisher:
            await publisher.stop()
        await price_cache.provider.aclose()
        logger.info("Dashboard stopped")


if __name__ == "__main__":
    asyncio.run(main())
