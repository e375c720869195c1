from bot.middleware import _command_name, _is_admin, _is_viewer
from services.config_service import DashboardSettings


def test_admin_guard_allows_admin():
    settings = DashboardSettings(ADMIN_TELEGRAM_IDS="123,456")
    assert _is_admin(123, settings)


def test_admin_guard_blocks_non_admin():
    settings = DashboardSettings(ADMIN_TELEGRAM_IDS="123,456")
    assert not _is_admin(999, settings)


def test_viewers_need_admin_when_closed():
    settings = DashboardSettings(ADMIN_TELEGRAM_IDS="123", ALLOW_ALL_USERS=False)
    assert _is_viewer(123, settings)
    assert not _is_viewer(999, settings)


def test_command_name_parsing():
    assert _command_name("/trade BUY BONK") == "trade"
    assert _command_name("/SetPrice@dash_bot mint 1") == "setprice"
    assert _command_name("hello") is None
