import asyncio

from data.store import SQLiteStore
from data.watcher import TradeWatcher


def _record(ts, side="BUY", symbol="BONK", amount=10.0, price=1.0):
    return {
        "type": side,
        "symbol": symbol,
        "tokenAddress": f"{symbol.lower()}-mint",
        "amount": amount,
        "pricePerToken": price,
        "txHash": f"tx{ts}",
        "value": amount * price,
        "timestamp": ts,
    }


def test_trades_listed_newest_first(tmp_path):
    store = SQLiteStore(str(tmp_path / "t.db"))
    first = store.add_trade(_record(1000))
    second = store.add_trade(_record(3000, side="SELL"))
    store.add_trade(_record(2000, symbol="WIF"))

    trades = store.list_trades()
    assert [t["timestamp"] for t in trades] == [3000, 2000, 1000]
    assert trades[0]["id"] == second
    assert trades[-1]["id"] == first
    assert trades[0]["type"] == "SELL"
    assert trades[1]["tokenAddress"] == "wif-mint"
    assert [t["timestamp"] for t in store.list_trades(limit=2)] == [3000, 2000]


def test_settings_and_credentials(tmp_path):
    store = SQLiteStore(str(tmp_path / "s.db"))
    assert store.get_setting("PRICE_PROVIDER", "jupiter") == "jupiter"
    store.set_setting("PRICE_PROVIDER", "birdeye")
    store.set_setting("PRICE_PROVIDER", "coingecko")
    assert store.get_setting("PRICE_PROVIDER") == "coingecko"

    assert store.get_credentials("birdeye") is None
    store.set_credentials("birdeye", "blob-1")
    store.set_credentials("birdeye", "blob-2")
    assert store.get_credentials("birdeye") == "blob-2"


def test_watcher_fires_only_on_change(tmp_path):
    store = SQLiteStore(str(tmp_path / "w.db"))
    snapshots = []
    watcher = TradeWatcher(store, snapshots.append, limit=2)

    async def scenario():
        store.add_trade(_record(1000))
        assert await watcher.poll_once()
        assert not await watcher.poll_once()
        store.add_trade(_record(2000))
        store.add_trade(_record(3000))
        assert await watcher.poll_once()

    asyncio.run(scenario())
    assert len(snapshots) == 2
    assert [r["timestamp"] for r in snapshots[-1]] == [3000, 2000]
