from __future__ import annotations

import math
import re
from dataclasses import dataclass

from engine.models import Trade


_THOUSANDS = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$")

FORM_FIELDS = ("side", "symbol", "token_address", "amount", "price", "tx_hash")

FIELD_PROMPTS = {
    "side": "Side? Send BUY or SELL.",
    "symbol": "Token symbol?",
    "token_address": "Token address?",
    "amount": "Amount (tokens)?",
    "price": "Price per token (USD)?",
    "tx_hash": "Transaction hash?",
}


@dataclass
class TradeForm:
    side: str = ""
    symbol: str = ""
    token_address: str = ""
    amount: str = ""
    price: str = ""
    tx_hash: str = ""

    def next_field(self) -> str | None:
        for name in FORM_FIELDS:
            if not getattr(self, name):
                return name
        return None


def _parse_number(raw: str, label: str) -> float:
    text = str(raw).strip()
    if "," in text:
        # commas only as thousands separators
        if not _THOUSANDS.match(text):
            raise ValueError(f"{label} must be a number, got {raw!r}")
        text = text.replace(",", "")
    try:
        value = float(text)
    except ValueError:
        raise ValueError(f"{label} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise ValueError(f"{label} must be a finite number")
    return value


def parse_price(raw: str) -> float:
    price = _parse_number(raw, "Price")
    if price < 0:
        raise ValueError("Price cannot be negative")
    return price


def parse_trade_form(form: TradeForm, now_ms: int) -> Trade:
    """Validate raw form input and build the trade to insert.

    ``value`` is derived here as amount x price, at submission time.
    """
    side = form.side.strip().upper()
    if side not in ("BUY", "SELL"):
        raise ValueError("Side must be BUY or SELL")
    symbol = form.symbol.strip().upper()
    if not symbol:
        raise ValueError("Symbol is required")
    token_address = form.token_address.strip()
    if not token_address:
        raise ValueError("Token address is required")
    amount = _parse_number(form.amount, "Amount")
    if amount <= 0:
        raise ValueError("Amount must be positive")
    price = parse_price(form.price)
    return Trade(
        id=None,
        side=side,
        symbol=symbol,
        token_address=token_address,
        amount=amount,
        price_per_token=price,
        tx_hash=form.tx_hash.strip(),
        value=amount * price,
        timestamp=now_ms,
    )
