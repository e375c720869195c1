from __future__ import annotations

import asyncio
from typing import Callable, Optional

from loguru import logger

from engine.view import DashboardView


class DashboardPublisher:
    """Keeps a single dashboard message current in one chat.

    Renders are queued; the worker only sends the newest one, editing the
    message it sent first.
    """

    def __init__(self, chat_id: str, format_view: Callable[[DashboardView], str]) -> None:
        self.chat_id = chat_id
        self.format_view = format_view
        self.queue: asyncio.Queue[str] = asyncio.Queue()
        self.message_id: int | None = None
        self._last_text: str | None = None
        self._task: Optional[asyncio.Task] = None

    async def start(self, bot) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run(bot))

    async def _run(self, bot) -> None:
        while True:
            text = await self.queue.get()
            while not self.queue.empty():
                self.queue.task_done()
                text = self.queue.get_nowait()
            try:
                await self._deliver(bot, text)
            except Exception as exc:
                logger.exception("Failed to publish dashboard: {}", exc)
            finally:
                self.queue.task_done()

    async def _deliver(self, bot, text: str) -> None:
        if text == self._last_text:
            return
        if self.message_id is None:
            message = await bot.send_message(self.chat_id, text)
            self.message_id = message.message_id
        else:
            await bot.edit_message_text(text, chat_id=self.chat_id, message_id=self.message_id)
        self._last_text = text

    async def publish(self, view: DashboardView) -> None:
        await self.queue.put(self.format_view(view))

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            self._task = None
