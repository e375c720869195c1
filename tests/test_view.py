from datetime import timezone

import pytest

from engine.models import Trade
from engine.state import DashboardState
from engine.view import DAY_MS, build_view, format_elapsed, format_number


NOW = 1_700_000_000_000


def _trade(side, amount, price, ts, symbol="BONK"):
    return Trade(
        id=str(ts),
        side=side,
        symbol=symbol,
        token_address=f"{symbol.lower()}-mint",
        amount=amount,
        price_per_token=price,
        tx_hash=f"hash{ts}",
        value=amount * price,
        timestamp=ts,
    )


def _state(trades, prices=None) -> DashboardState:
    state = DashboardState(session_start=NOW - 65_000)
    state.replace_trades(sorted(trades, key=lambda t: t.timestamp, reverse=True))
    state.prices = prices or {}
    return state


def test_format_number():
    assert format_number(12.345) == "12.35"
    assert format_number(1500) == "1.50K"
    assert format_number(2_500_000) == "2.50M"


def test_format_elapsed():
    assert format_elapsed(0) == "00:00:00"
    assert format_elapsed(3_723_000) == "01:02:03"


def test_missing_price_falls_back_to_average_cost():
    state = _state([_trade("BUY", 100, 0.5, NOW - 1000)], prices={"bonk-mint": 0.0})
    view = build_view(state, NOW, tz=timezone.utc)
    row = view.positions[0]
    assert row.current_price == pytest.approx(0.5)
    assert row.live_value == pytest.approx(50.0)
    assert row.pnl == pytest.approx(0.0)
    assert view.portfolio_value == pytest.approx(50.0)


def test_live_price_pnl_and_ticker():
    state = _state([_trade("BUY", 100, 0.5, NOW - 1000)], prices={"bonk-mint": 0.75})
    state.native_price = 140.0
    view = build_view(state, NOW, tz=timezone.utc)
    row = view.positions[0]
    assert row.pnl == pytest.approx(25.0)
    assert row.pnl_percent == pytest.approx(50.0)
    assert view.ticker == "SOL/USD $140.00 ▲ | BONK/USD $0.750000 +50.00%"


def test_ticker_without_native_price():
    view = build_view(_state([]), NOW, tz=timezone.utc)
    assert view.ticker == "SOL/USD $0.00 ▼"
    assert view.positions == []
    assert view.win_rate == 0.0


def test_24h_stats_and_recent_transactions():
    trades = [
        _trade("BUY", 10, 1.0, NOW - DAY_MS - 1),
        _trade("BUY", 10, 2.0, NOW - 5000),
        _trade("SELL", 5, 4.0, NOW - 1000),
    ]
    view = build_view(_state(trades), NOW, recent_limit=2, tz=timezone.utc)
    assert view.trades_24h == 2
    assert view.volume_24h == pytest.approx(20.0 + 20.0)
    assert view.total_trades == 3
    assert view.active_positions == 1
    assert view.completed_trades == 1
    assert view.elapsed == "00:01:05"
    assert [r.side for r in view.transactions] == ["SELL", "BUY"]
    assert view.transactions[0].tx_url == f"https://solscan.io/tx/hash{NOW - 1000}"
    assert view.transactions[0].time == "Nov 14, 22:13"


def test_render_is_idempotent():
    state = _state([_trade("BUY", 10, 1.0, NOW - 1000)], prices={"bonk-mint": 1.2})
    assert build_view(state, NOW, tz=timezone.utc) == build_view(state, NOW, tz=timezone.utc)
