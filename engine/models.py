from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal


Side = Literal["BUY", "SELL"]


@dataclass(frozen=True)
class Trade:
    id: str | None
    side: Side
    symbol: str
    token_address: str
    amount: float
    price_per_token: float
    tx_hash: str
    value: float
    timestamp: int

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Trade":
        """Build a trade from a flat store record."""
        record_id = record.get("id")
        return cls(
            id=str(record_id) if record_id is not None else None,
            side=str(record["type"]).upper(),
            symbol=record["symbol"],
            token_address=record.get("tokenAddress") or "",
            amount=float(record["amount"]),
            price_per_token=float(record.get("pricePerToken") or 0.0),
            tx_hash=record.get("txHash") or "",
            value=float(record.get("value") or 0.0),
            timestamp=int(record["timestamp"]),
        )

    def to_record(self) -> dict[str, Any]:
        return {
            "type": self.side,
            "symbol": self.symbol,
            "tokenAddress": self.token_address,
            "amount": self.amount,
            "pricePerToken": self.price_per_token,
            "txHash": self.tx_hash,
            "value": self.value,
            "timestamp": self.timestamp,
        }


@dataclass
class Position:
    symbol: str
    token_address: str
    amount: float = 0.0
    total_cost: float = 0.0
    avg_buy_price: float = 0.0


@dataclass(frozen=True)
class CompletedTrade:
    trade: Trade
    profit: float


@dataclass
class PriceEntry:
    price: float
    fetched_at: int
