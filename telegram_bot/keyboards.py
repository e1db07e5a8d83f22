"""Telegram inline keyboards."""

from typing import Sequence

from telegram import InlineKeyboardButton, InlineKeyboardMarkup


# Example questions offered under the help message
EXAMPLES = {
    "example_news": "今天有什么科技新闻？",
    "example_analysis": "分析一下AI领域的最新动态",
    "example_business": "给我分析一下商业新闻",
}


def get_suggestions_keyboard(questions: Sequence[str]) -> InlineKeyboardMarkup:
    """One button per suggested question, referenced by position."""
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(f"💡 {question}", callback_data=f"suggest_{index}")]
        for index, question in enumerate(questions)
    ])


def get_error_keyboard() -> InlineKeyboardMarkup:
    """Get keyboard for error messages."""
    return InlineKeyboardMarkup([
        [InlineKeyboardButton("📚 帮助", callback_data="help")],
    ])


def get_help_keyboard() -> InlineKeyboardMarkup:
    """Get keyboard for help message."""
    return InlineKeyboardMarkup([
        [
            InlineKeyboardButton("📰 新闻示例", callback_data="example_news"),
            InlineKeyboardButton("🔍 分析示例", callback_data="example_analysis"),
        ],
        [
            InlineKeyboardButton("📊 商业分析示例", callback_data="example_business"),
        ],
    ])
