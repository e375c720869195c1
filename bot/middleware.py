from __future__ import annotations

import time
from typing import Callable, Awaitable

from aiogram import BaseMiddleware
from aiogram.types import Message, CallbackQuery

from bot import messages
from services.config_service import DashboardSettings


ADMIN_COMMANDS = {"trade", "provider", "setprice", "clearcache", "apikey"}
ADMIN_CALLBACK_PREFIXES = ("add_trade", "side:", "cancel_trade", "provider")


def _is_admin(user_id: int, settings: DashboardSettings) -> bool:
    ids = {int(x.strip()) for x in settings.ADMIN_TELEGRAM_IDS.split(",") if x.strip()}
    return user_id in ids


def _is_viewer(user_id: int, settings: DashboardSettings) -> bool:
    if settings.ALLOW_ALL_USERS:
        return True
    return _is_admin(user_id, settings)


def _command_name(text: str | None) -> str | None:
    if not text or not text.startswith("/"):
        return None
    return text[1:].split(maxsplit=1)[0].split("@", 1)[0].lower()


def requires_admin(event) -> bool:
    if isinstance(event, Message):
        return _command_name(event.text) in ADMIN_COMMANDS
    if isinstance(event, CallbackQuery):
        return (event.data or "").startswith(ADMIN_CALLBACK_PREFIXES)
    return False


class AccessMiddleware(BaseMiddleware):
    """Read-only views for viewers, anything that writes for admins only.

    Plain messages pass through: they only ever answer a form the admin
    opened, and the router ignores users without an open form.
    """

    def __init__(self, settings: DashboardSettings) -> None:
        self.settings = settings

    async def __call__(self, handler: Callable, event, data) -> Awaitable:
        user = None
        if isinstance(event, Message):
            user = event.from_user
        elif isinstance(event, CallbackQuery):
            user = event.from_user
        if user:
            allowed = _is_admin(user.id, self.settings) if requires_admin(event) else _is_viewer(user.id, self.settings)
            if not allowed:
                if isinstance(event, Message):
                    await event.answer(messages.access_denied_text())
                elif isinstance(event, CallbackQuery):
                    await event.answer(messages.access_denied_text(), show_alert=True)
                return
        return await handler(event, data)


class ThrottleMiddleware(BaseMiddleware):
    def __init__(self, cooldown: float = 1.0) -> None:
        self.cooldown = cooldown
        self._last: dict[int, float] = {}

    async def __call__(self, handler: Callable, event, data) -> Awaitable:
        user_id = None
        if isinstance(event, Message):
            user_id = event.from_user.id
        elif isinstance(event, CallbackQuery):
            user_id = event.from_user.id
        if user_id:
            now = time.time()
            last = self._last.get(user_id, 0)
            if now - last < self.cooldown:
                if isinstance(event, CallbackQuery):
                    await event.answer("Slow down.")
                return
            self._last[user_id] = now
        return await handler(event, data)
