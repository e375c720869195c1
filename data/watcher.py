from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from data.store import BaseStore


SnapshotCallback = Callable[[list[dict[str, Any]]], Optional[Awaitable[None]]]


class TradeWatcher:
    """Live subscription over the newest ``limit`` trades.

    Polls the bounded descending query and hands the whole snapshot to the
    callback whenever the set of trade ids differs from the last one seen.
    """

    def __init__(self, store: BaseStore, callback: SnapshotCallback, limit: int = 50, poll_interval: float = 2.0) -> None:
        self.store = store
        self.callback = callback
        self.limit = limit
        self.poll_interval = poll_interval
        self._last_ids: tuple[str, ...] | None = None
        self._task: Optional[asyncio.Task] = None

    async def start(self) -> None:
        if self._task and not self._task.done():
            return
        self._task = asyncio.create_task(self._run())

    async def _run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.poll_interval)

    async def poll_once(self) -> bool:
        try:
            records = await asyncio.to_thread(self.store.list_trades, self.limit)
        except Exception as exc:
            logger.exception("Trade subscription poll failed: {}", exc)
            return False
        ids = tuple(r["id"] for r in records)
        if ids == self._last_ids:
            return False
        self._last_ids = ids
        result = self.callback(records)
        if inspect.isawaitable(result):
            await result
        return True

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
