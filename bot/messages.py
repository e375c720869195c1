from __future__ import annotations

from engine.models import Trade
from engine.view import DashboardView, format_number


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _signed_money(value: float) -> str:
    return f"{'+' if value >= 0 else '-'}${abs(value):,.2f}"


def main_menu_text() -> str:
    return "Trade Dashboard"


def stats_text(view: DashboardView) -> str:
    return (
        f"Portfolio: {_money(view.portfolio_value)}\n"
        f"Win rate: {view.win_rate:.0f}% ({view.completed_trades} Total Trades)\n"
        f"24h volume: {_money(view.volume_24h)} ({view.trades_24h} Trades Today)\n"
        f"Trades: {view.total_trades} | Active positions: {view.active_positions}\n"
        f"Session: {view.elapsed} | Updated: {view.last_update}"
    )


def positions_text(view: DashboardView) -> str:
    if not view.positions:
        return "No active positions"
    lines = [f"{len(view.positions)} Holdings"]
    for row in view.positions:
        lines.append(
            f"{row.symbol}  {format_number(row.amount)}  {_money(row.live_value)}  "
            f"{_signed_money(row.pnl)} ({row.pnl_percent:.2f}%)"
        )
    return "\n".join(lines)


def transactions_text(view: DashboardView) -> str:
    if not view.transactions:
        return "No transactions yet"
    lines = [f"{view.total_trades} Total"]
    for row in view.transactions:
        lines.append(
            f"{row.time}  {row.side}  {format_number(row.amount)} {row.symbol}  {_money(row.value)}  {row.tx_url}"
        )
    return "\n".join(lines)


def ticker_text(view: DashboardView) -> str:
    return view.ticker


def dashboard_text(view: DashboardView) -> str:
    return "\n\n".join([view.ticker, stats_text(view), positions_text(view)])


def cache_status_text(status: dict[str, dict], provider: str) -> str:
    if not status:
        return f"Provider: {provider}\nCache empty"
    lines = [f"Provider: {provider}"]
    for address, entry in status.items():
        lines.append(
            f"{address}: {entry['price']} ({entry['age'] / 1000:.0f}s, {'fresh' if entry['fresh'] else 'stale'})"
        )
    return "\n".join(lines)


def trade_saved_text(trade: Trade) -> str:
    return f"Trade added: {trade.side} {format_number(trade.amount)} {trade.symbol} @ {trade.price_per_token} ({_money(trade.value)})"


def access_denied_text() -> str:
    return "Access denied. This action is admin-only."


def usage_text(command: str, args: str) -> str:
    return f"Usage: /{command} {args}"
