import pytest

from bot.forms import TradeForm, parse_price, parse_trade_form


def test_form_builds_trade_with_value():
    form = TradeForm("buy", "bonk", " bonk-mint ", "1,000", "0.00002", "5xyz")
    trade = parse_trade_form(form, now_ms=123)
    assert trade.side == "BUY"
    assert trade.symbol == "BONK"
    assert trade.token_address == "bonk-mint"
    assert trade.amount == 1000
    assert trade.value == pytest.approx(0.02)
    assert trade.timestamp == 123
    assert trade.id is None


@pytest.mark.parametrize(
    "amount, price",
    [("abc", "1"), ("0", "1"), ("-5", "1"), ("nan", "1"), ("10", "inf"), ("10", "-1"), ("10", ""), ("0,5", "2"), ("10", "1,2,3")],
)
def test_form_rejects_malformed_numbers(amount, price):
    with pytest.raises(ValueError):
        parse_trade_form(TradeForm("SELL", "WIF", "wif-mint", amount, price, "tx"), now_ms=0)


def test_form_rejects_unknown_side():
    with pytest.raises(ValueError):
        parse_trade_form(TradeForm("HOLD", "WIF", "wif-mint", "1", "1", "tx"), now_ms=0)


def test_next_field_walks_form_in_order():
    form = TradeForm()
    assert form.next_field() == "side"
    form.side = "BUY"
    form.symbol = "WIF"
    assert form.next_field() == "token_address"


def test_parse_price():
    assert parse_price("0.0123") == 0.0123
    assert parse_price("0") == 0.0
    with pytest.raises(ValueError):
        parse_price("twelve")


def test_thousands_separators_only():
    assert parse_price("12,345.5") == 12345.5
    for raw in ("0,5", "1,2,3", "12,34", "1,0000"):
        with pytest.raises(ValueError):
            parse_price(raw)
