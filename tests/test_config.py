import pytest
from pydantic import ValidationError

from data.store import SQLiteStore
from services.config_service import ConfigService, DashboardSettings
from services.crypto import build_fernet


KEY = "0123456789abcdef0123456789abcdef"


def test_store_overrides_environment(tmp_path):
    store = SQLiteStore(str(tmp_path / "cfg.db"))
    service = ConfigService(store, DashboardSettings(PRICE_PROVIDER="jupiter", SYMBOL_MAP='{"mint": "BONKUSDT"}'))
    assert service.load().price_provider == "jupiter"
    assert service.load().symbol_map == {"mint": "BONKUSDT"}

    service.update("PRICE_PROVIDER", "birdeye")
    assert service.load().price_provider == "birdeye"


def test_unknown_provider_rejected(tmp_path):
    service = ConfigService(SQLiteStore(str(tmp_path / "u.db")), DashboardSettings())
    with pytest.raises(ValueError):
        service.update("PRICE_PROVIDER", "nope")


def test_api_key_sealed_in_store(tmp_path):
    store = SQLiteStore(str(tmp_path / "k.db"))
    service = ConfigService(store, DashboardSettings(BIRDEYE_API_KEY="from-env"), build_fernet(KEY))
    assert service.load().birdeye_api_key == "from-env"

    service.set_api_key("birdeye", "runtime-key")
    assert store.get_credentials("birdeye") != "runtime-key"
    assert service.load().birdeye_api_key == "runtime-key"

    with pytest.raises(ValueError):
        service.set_api_key("jupiter", "x")


def test_bad_symbol_map_ignored(tmp_path):
    service = ConfigService(SQLiteStore(str(tmp_path / "m.db")), DashboardSettings(SYMBOL_MAP="{not json"))
    assert service.load().symbol_map == {}


def test_refresh_interval_must_be_positive(tmp_path):
    store = SQLiteStore(str(tmp_path / "i.db"))
    service = ConfigService(store, DashboardSettings(REFRESH_INTERVAL_S=0))
    with pytest.raises(ValidationError):
        service.load()
