from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import CallbackQuery, Message
from loguru import logger

from bot import keyboards, messages
from bot.forms import FIELD_PROMPTS, TradeForm, parse_price, parse_trade_form
from engine.core import DashboardController
from providers.factory import build_provider
from services.config_service import ConfigService
from services.price_cache import PriceCache


def build_router(
    controller: DashboardController,
    config_service: ConfigService,
    price_cache: PriceCache,
) -> Router:
    router = Router()
    pending_trades: dict[int, TradeForm] = {}

    async def submit(message: Message, form: TradeForm) -> None:
        try:
            trade = parse_trade_form(form, controller.clock())
        except ValueError as exc:
            await message.answer(f"Invalid trade: {exc}")
            return
        try:
            saved = await controller.submit_trade(trade)
        except Exception as exc:
            logger.exception("Error adding trade: {}", exc)
            await message.answer(f"Error adding trade: {exc}")
            return
        await message.answer(messages.trade_saved_text(saved), reply_markup=keyboards.main_menu())

    async def switch_provider(name: str) -> None:
        config_service.update("PRICE_PROVIDER", name)
        config = config_service.load()
        price_cache.set_provider(build_provider(name, config, price_cache.manual_prices))
        await controller.reconfigure(config)

    @router.message(CommandStart())
    async def start_cmd(message: Message) -> None:
        await message.answer(messages.main_menu_text(), reply_markup=keyboards.main_menu())

    @router.callback_query(lambda c: c.data == "main_menu")
    async def main_menu_cb(query: CallbackQuery) -> None:
        await query.message.edit_text(messages.main_menu_text(), reply_markup=keyboards.main_menu())

    @router.message(Command("dashboard"))
    async def dashboard_cmd(message: Message) -> None:
        await message.answer(messages.dashboard_text(controller.view()))

    @router.callback_query(lambda c: c.data == "dashboard")
    async def dashboard_cb(query: CallbackQuery) -> None:
        await query.message.answer(messages.dashboard_text(controller.view()))
        await query.answer()

    @router.message(Command("positions"))
    async def positions_cmd(message: Message) -> None:
        await message.answer(messages.positions_text(controller.view()))

    @router.callback_query(lambda c: c.data == "positions")
    async def positions_cb(query: CallbackQuery) -> None:
        await query.message.answer(messages.positions_text(controller.view()))
        await query.answer()

    @router.message(Command("trades"))
    async def trades_cmd(message: Message) -> None:
        await message.answer(messages.transactions_text(controller.view()))

    @router.callback_query(lambda c: c.data == "trades")
    async def trades_cb(query: CallbackQuery) -> None:
        await query.message.answer(messages.transactions_text(controller.view()))
        await query.answer()

    @router.message(Command("ticker"))
    async def ticker_cmd(message: Message) -> None:
        await message.answer(messages.ticker_text(controller.view()))

    @router.message(Command("refresh"))
    async def refresh_cmd(message: Message) -> None:
        await controller.refresh()
        await message.answer(messages.dashboard_text(controller.view()))

    @router.callback_query(lambda c: c.data == "refresh")
    async def refresh_cb(query: CallbackQuery) -> None:
        await controller.refresh()
        await query.message.answer(messages.dashboard_text(controller.view()))
        await query.answer("Refreshed")

    @router.message(Command("trade"))
    async def trade_cmd(message: Message, command: CommandObject) -> None:
        args = (command.args or "").split()
        if len(args) >= 5:
            form = TradeForm(*args[:6])
            await submit(message, form)
            return
        pending_trades[message.from_user.id] = TradeForm()
        await message.answer(FIELD_PROMPTS["side"], reply_markup=keyboards.side_menu())

    @router.callback_query(lambda c: c.data == "add_trade")
    async def add_trade_cb(query: CallbackQuery) -> None:
        pending_trades[query.from_user.id] = TradeForm()
        await query.message.answer(FIELD_PROMPTS["side"], reply_markup=keyboards.side_menu())
        await query.answer()

    @router.callback_query(lambda c: c.data.startswith("side:"))
    async def side_cb(query: CallbackQuery) -> None:
        form = pending_trades.get(query.from_user.id)
        if not form:
            await query.answer("No trade in progress")
            return
        form.side = query.data.split(":", 1)[1]
        await query.message.answer(FIELD_PROMPTS[form.next_field()])
        await query.answer()

    @router.callback_query(lambda c: c.data == "cancel_trade")
    async def cancel_trade_cb(query: CallbackQuery) -> None:
        pending_trades.pop(query.from_user.id, None)
        await query.message.edit_text("Trade cancelled.", reply_markup=keyboards.main_menu())

    @router.callback_query(lambda c: c.data == "provider_menu")
    async def provider_menu_cb(query: CallbackQuery) -> None:
        await query.message.edit_text(
            "Select price provider",
            reply_markup=keyboards.provider_menu(price_cache.provider.name),
        )

    @router.callback_query(lambda c: c.data.startswith("provider:"))
    async def provider_set_cb(query: CallbackQuery) -> None:
        name = query.data.split(":", 1)[1]
        try:
            await switch_provider(name)
        except ValueError as exc:
            await query.answer(str(exc), show_alert=True)
            return
        await query.message.edit_text(f"Price provider set to {name}", reply_markup=keyboards.main_menu())

    @router.message(Command("provider"))
    async def provider_cmd(message: Message, command: CommandObject) -> None:
        name = (command.args or "").strip().lower()
        if not name:
            await message.answer(f"Active provider: {price_cache.provider.name}\n" + messages.usage_text("provider", "NAME"))
            return
        try:
            await switch_provider(name)
        except ValueError as exc:
            await message.answer(str(exc))
            return
        await message.answer(f"Price provider set to {name}")

    @router.message(Command("setprice"))
    async def setprice_cmd(message: Message, command: CommandObject) -> None:
        args = (command.args or "").split()
        if len(args) != 2:
            await message.answer(messages.usage_text("setprice", "TOKEN_ADDRESS PRICE"))
            return
        address, raw_price = args
        try:
            price = parse_price(raw_price)
        except ValueError as exc:
            await message.answer(str(exc))
            return
        price_cache.set_manual_price(address, price)
        await controller.refresh_prices()
        await message.answer(f"Price for {address} set to {price}")

    @router.message(Command("cache"))
    async def cache_cmd(message: Message) -> None:
        await message.answer(messages.cache_status_text(price_cache.status(), price_cache.provider.name))

    @router.message(Command("clearcache"))
    async def clearcache_cmd(message: Message) -> None:
        price_cache.clear()
        await message.answer("Price cache cleared.")

    @router.message(Command("apikey"))
    async def apikey_cmd(message: Message, command: CommandObject) -> None:
        args = (command.args or "").split()
        try:
            await message.delete()
        except Exception as exc:
            logger.warning("Could not delete API key message: {}", exc)
        if len(args) != 2:
            await message.answer(messages.usage_text("apikey", "PROVIDER KEY"))
            return
        provider, key = args[0].lower(), args[1]
        try:
            config_service.set_api_key(provider, key)
        except ValueError as exc:
            await message.answer(str(exc))
            return
        if price_cache.provider.name == provider:
            await switch_provider(provider)
        else:
            await controller.reconfigure(config_service.load())
        await message.answer(f"{provider} API key saved.")

    @router.message()
    async def catch_all(message: Message) -> None:
        form = pending_trades.get(message.from_user.id)
        if not form or not message.text:
            return
        field = form.next_field()
        value = message.text.strip()
        if field == "side" and value.upper() not in ("BUY", "SELL"):
            await message.answer(FIELD_PROMPTS["side"], reply_markup=keyboards.side_menu())
            return
        setattr(form, field, value)
        next_field = form.next_field()
        if next_field:
            await message.answer(FIELD_PROMPTS[next_field])
            return
        pending_trades.pop(message.from_user.id, None)
        await submit(message, form)

    return router
