from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from engine.ledger import compute_completed_trades, trades_since, volume, win_rate
from engine.models import Position
from engine.state import DashboardState


DAY_MS = 86_400_000
DEFAULT_EXPLORER_URL = "https://solscan.io/tx/{tx_hash}"


@dataclass
class PositionRow:
    symbol: str
    amount: float
    current_price: float
    live_value: float
    pnl: float
    pnl_percent: float


@dataclass
class TransactionRow:
    time: str
    side: str
    amount: float
    symbol: str
    value: float
    tx_url: str


@dataclass
class DashboardView:
    portfolio_value: float
    win_rate: float
    completed_trades: int
    trades_24h: int
    volume_24h: float
    total_trades: int
    active_positions: int
    elapsed: str
    last_update: str
    ticker: str
    positions: list[PositionRow] = field(default_factory=list)
    transactions: list[TransactionRow] = field(default_factory=list)


def format_number(num: float) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.2f}M"
    if num >= 1_000:
        return f"{num / 1_000:.2f}K"
    return f"{num:.2f}"


def format_elapsed(elapsed_ms: int) -> str:
    elapsed_ms = max(0, elapsed_ms)
    hours = elapsed_ms // 3_600_000
    minutes = (elapsed_ms % 3_600_000) // 60_000
    seconds = (elapsed_ms % 60_000) // 1000
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def current_price(pos: Position, prices: dict[str, float]) -> float:
    # zero means no live price; fall back to the cost basis
    return prices.get(pos.token_address) or pos.avg_buy_price


def position_row(pos: Position, prices: dict[str, float]) -> PositionRow:
    price = current_price(pos, prices)
    live_value = pos.amount * price
    pnl = live_value - pos.total_cost
    pnl_percent = pnl / pos.total_cost * 100.0 if pos.total_cost else 0.0
    return PositionRow(
        symbol=pos.symbol,
        amount=pos.amount,
        current_price=price,
        live_value=live_value,
        pnl=pnl,
        pnl_percent=pnl_percent,
    )


def build_ticker(state: DashboardState, native_symbol: str = "SOL") -> str:
    native = state.native_price
    items = [f"{native_symbol}/USD ${native:.2f} {'▲' if native > 0 else '▼'}"]
    for pos in state.positions.values():
        price = current_price(pos, state.prices)
        change = (price - pos.avg_buy_price) / pos.avg_buy_price * 100.0 if pos.avg_buy_price else 0.0
        sign = "+" if change >= 0 else ""
        items.append(f"{pos.symbol}/USD ${price:.6f} {sign}{change:.2f}%")
    return " | ".join(items)


def _format_time(ts_ms: int, fmt: str, tz: tzinfo | None) -> str:
    return datetime.fromtimestamp(ts_ms / 1000, tz).strftime(fmt)


def build_view(
    state: DashboardState,
    now_ms: int,
    recent_limit: int = 20,
    explorer_url: str = DEFAULT_EXPLORER_URL,
    native_symbol: str = "SOL",
    tz: tzinfo | None = None,
) -> DashboardView:
    """Render the whole dashboard from the current state.

    Pure with respect to ``state``: calling it twice on the same state yields
    the same view, so back-to-back renders from independent triggers are safe.
    """
    rows = [position_row(pos, state.prices) for pos in state.positions.values()]
    completed = compute_completed_trades(state.chronological())
    recent_day = trades_since(state.trades, now_ms - DAY_MS)

    transactions = [
        TransactionRow(
            time=_format_time(t.timestamp, "%b %d, %H:%M", tz),
            side=t.side,
            amount=t.amount,
            symbol=t.symbol,
            value=t.value,
            tx_url=explorer_url.format(tx_hash=t.tx_hash),
        )
        for t in state.trades[:recent_limit]
    ]

    last_update = _format_time(state.last_update, "%H:%M:%S", tz) if state.last_update else "n/a"
    return DashboardView(
        portfolio_value=sum(r.live_value for r in rows),
        win_rate=win_rate(completed),
        completed_trades=len(completed),
        trades_24h=len(recent_day),
        volume_24h=volume(recent_day),
        total_trades=len(state.trades),
        active_positions=len(state.positions),
        elapsed=format_elapsed(now_ms - state.session_start),
        last_update=last_update,
        ticker=build_ticker(state, native_symbol),
        positions=rows,
        transactions=transactions,
    )
