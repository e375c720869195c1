from __future__ import annotations

import time
from dataclasses import dataclass, field

from engine.ledger import compute_positions
from engine.models import Position, Trade


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class DashboardState:
    session_start: int = field(default_factory=now_ms)
    trades: list[Trade] = field(default_factory=list)
    positions: dict[str, Position] = field(default_factory=dict)
    prices: dict[str, float] = field(default_factory=dict)
    native_price: float = 0.0
    last_update: int | None = None
    last_error: str | None = None

    def replace_trades(self, trades: list[Trade]) -> None:
        self.trades = trades
        self.positions = compute_positions(self.chronological())

    def chronological(self) -> list[Trade]:
        # trades are held newest first, the ledger wants arrival order
        return list(reversed(self.trades))

    def held_addresses(self) -> list[str]:
        seen: list[str] = []
        for pos in self.positions.values():
            if pos.token_address and pos.token_address not in seen:
                seen.append(pos.token_address)
        return seen
