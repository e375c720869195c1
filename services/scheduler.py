from __future__ import annotations

import asyncio
import time


def seconds_until_next_tick(interval_s: float, now: float) -> float:
    if interval_s <= 0:
        raise ValueError(f"Unsupported interval: {interval_s}")
    next_tick = ((now // interval_s) + 1) * interval_s
    return max(0.0, next_tick - now)


async def wait_next_tick(interval_s: float) -> None:
    await asyncio.sleep(seconds_until_next_tick(interval_s, time.time()))
