from __future__ import annotations

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from services.config_service import PROVIDER_NAMES


def main_menu() -> InlineKeyboardMarkup:
    buttons = [
        [InlineKeyboardButton(text="📊 Dashboard", callback_data="dashboard")],
        [InlineKeyboardButton(text="💼 Positions", callback_data="positions")],
        [InlineKeyboardButton(text="🧾 Transactions", callback_data="trades")],
        [InlineKeyboardButton(text="🔄 Refresh", callback_data="refresh")],
        [InlineKeyboardButton(text="➕ Add Trade", callback_data="add_trade")],
        [InlineKeyboardButton(text="⚙️ Price Provider", callback_data="provider_menu")],
    ]
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def side_menu() -> InlineKeyboardMarkup:
    buttons = [
        [
            InlineKeyboardButton(text="BUY", callback_data="side:BUY"),
            InlineKeyboardButton(text="SELL", callback_data="side:SELL"),
        ],
        [InlineKeyboardButton(text="Cancel", callback_data="cancel_trade")],
    ]
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def provider_menu(active: str) -> InlineKeyboardMarkup:
    buttons = [
        [InlineKeyboardButton(text=f"{'● ' if name == active else ''}{name}", callback_data=f"provider:{name}")]
        for name in PROVIDER_NAMES
    ]
    buttons.append([InlineKeyboardButton(text="Back", callback_data="main_menu")])
    return InlineKeyboardMarkup(inline_keyboard=buttons)
