from __future__ import annotations

from typing import Iterable

from engine.models import CompletedTrade, Position, Trade


def _safe_div(num: float, denom: float) -> float:
    return num / denom if denom else 0.0


def compute_positions(trades: Iterable[Trade]) -> dict[str, Position]:
    """Net holdings per symbol, in trade arrival order.

    The average buy price is only recomputed while the amount is positive, so a
    symbol that dips to zero keeps its last average until the next BUY.
    """
    positions: dict[str, Position] = {}
    for t in trades:
        pos = positions.get(t.symbol)
        if pos is None:
            pos = Position(symbol=t.symbol, token_address=t.token_address)
            positions[t.symbol] = pos
        if t.side == "BUY":
            pos.amount += t.amount
            pos.total_cost += t.value
        elif t.side == "SELL":
            pos.amount -= t.amount
            pos.total_cost -= t.value
        if pos.amount > 0:
            pos.avg_buy_price = _safe_div(pos.total_cost, pos.amount)
    return {symbol: pos for symbol, pos in positions.items() if pos.amount > 0}


def compute_completed_trades(trades: Iterable[Trade]) -> list[CompletedTrade]:
    """Realized profit per SELL against the average cost held at the time.

    SELLs seen with nothing held are skipped; there is no short accounting.
    """
    by_symbol: dict[str, list[Trade]] = {}
    for t in trades:
        by_symbol.setdefault(t.symbol, []).append(t)

    completed: list[CompletedTrade] = []
    for symbol_trades in by_symbol.values():
        holding = 0.0
        total_cost = 0.0
        for t in symbol_trades:
            if t.side == "BUY":
                holding += t.amount
                total_cost += t.value
            elif t.side == "SELL" and holding > 0:
                avg_price = _safe_div(total_cost, holding)
                profit = (t.price_per_token - avg_price) * t.amount
                completed.append(CompletedTrade(trade=t, profit=profit))
                holding -= t.amount
                total_cost -= avg_price * t.amount
    return completed


def win_rate(completed: list[CompletedTrade]) -> float:
    if not completed:
        return 0.0
    wins = sum(1 for c in completed if c.profit > 0)
    return wins / len(completed) * 100.0


def trades_since(trades: Iterable[Trade], since_ms: int) -> list[Trade]:
    return [t for t in trades if t.timestamp > since_ms]


def volume(trades: Iterable[Trade]) -> float:
    return sum(t.value for t in trades)
