"""Telegram bot package."""

from telegram_bot.bot import NewsChatBot

from telegram_bot.formatters import ResponseFormatter
from telegram_bot.keyboards import get_suggestions_keyboard, get_help_keyboard

__all__ = [
    "NewsChatBot",
    "ResponseFormatter",
    "get_suggestions_keyboard",
    "get_help_keyboard",
]
