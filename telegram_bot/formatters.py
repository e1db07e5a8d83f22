"""Response formatters for Telegram messages with HTML formatting."""

import json
from html import escape
from typing import Any, List, Optional

from telegram.constants import MessageLimit

from config.settings import Settings
from news_service.schemas import Importance, NewsArticle, Sentiment
from orchestrator.session import ChatTurn, ConnectivityState
from utils.helpers import format_time_ago, truncate_text


SENTIMENT_EMOJI = {
    Sentiment.POSITIVE: "🟢",
    Sentiment.NEGATIVE: "🔴",
    Sentiment.NEUTRAL: "⚪",
}

IMPORTANCE_LABELS = {
    Importance.HIGH: "🔥 高",
    Importance.MEDIUM: "⭐ 中",
    Importance.LOW: "· 低",
}

# Article lists longer than this are rendered as compact cards
COMPACT_THRESHOLD = 3


class ResponseFormatter:
    """Formats chat turns and service status for Telegram with HTML."""

    MAX_LENGTH = MessageLimit.MAX_TEXT_LENGTH

    @staticmethod
    def format_article(article: NewsArticle, compact: bool = False) -> str:
        """Format a single article card."""
        emoji = SENTIMENT_EMOJI.get(article.sentiment, "⚪")
        title = escape(article.title)
        if article.url:
            title = f'<a href="{escape(article.url, quote=True)}">{title}</a>'

        summary = article.ai_summary or article.summary
        summary = escape(truncate_text(summary, 120 if compact else 300))

        meta = [escape(article.source)] if article.source else []
        time_ago = format_time_ago(article.published_at)
        if time_ago:
            meta.append(escape(time_ago))

        lines = [f"{emoji} <b>{title}</b>"]
        if summary:
            lines.append(summary)
        if compact:
            lines.append(f"<i>{' • '.join(meta)}</i>")
            return "\n".join(lines)

        tags = []
        if article.category:
            tags.append(f"🏷 {escape(article.category)}")
        tags.append(IMPORTANCE_LABELS.get(article.importance, article.importance.value))
        tags.extend(meta)
        lines.append(f"<i>{' | '.join(tags)}</i>")

        if article.keywords:
            lines.append("🔑 " + escape("、".join(article.keywords[:5])))
        if article.analysis_confidence is not None:
            lines.append(f"🎯 置信度：{escape(str(article.analysis_confidence))}")

        return "\n".join(lines)

    @classmethod
    def format_reply(cls, content: str, articles: Optional[List[NewsArticle]] = None) -> str:
        """
        Format reply text followed by its article cards.

        Cards that would push the message past Telegram's limit are dropped
        and counted in a trailing note.
        """
        text = escape(truncate_text(content, cls.MAX_LENGTH - 200))
        if not articles:
            return text

        compact = len(articles) > COMPACT_THRESHOLD
        parts = [text]
        used = len(text)
        for index, article in enumerate(articles):
            card = cls.format_article(article, compact=compact)
            if used + len(card) + 2 > cls.MAX_LENGTH - 100:
                parts.append(f"<i>… 另有 {len(articles) - index} 条新闻未显示</i>")
                break
            parts.append(card)
            used += len(card) + 2

        return "\n\n".join(parts)

    @classmethod
    def format_turn(cls, turn: ChatTurn) -> str:
        return cls.format_reply(turn.content, turn.articles)

    @classmethod
    def format_streaming(cls, partial: str) -> str:
        """Format a reply that is still being streamed."""
        return escape(truncate_text(partial, cls.MAX_LENGTH - 10)) + " ▌"

    @staticmethod
    def format_status(connectivity: ConnectivityState, settings: Settings) -> str:
        """Format connectivity and service metadata."""
        state = "🟢 已连接" if connectivity.connected else "🔴 连接断开"
        checked = (
            connectivity.last_checked.strftime("%H:%M:%S")
            if connectivity.last_checked else "尚未检查"
        )

        text = f"""📡 <b>新闻服务状态</b>

<b>状态:</b> {state}
<b>服务地址:</b> <code>{escape(settings.NEWS_API_BASE_URL)}</code>
<b>传输方式:</b> {escape(settings.CHAT_TRANSPORT)}
<b>最近检查:</b> {checked}"""

        if connectivity.api_docs is not None:
            text += "\n\n<b>API 信息:</b>\n" + ResponseFormatter.format_api_docs(connectivity.api_docs)
        return text

    @staticmethod
    def format_api_docs(docs: Any) -> str:
        """Render the docs payload read-only; only top-level scalars are listed."""
        if isinstance(docs, dict):
            lines = [
                f"• {escape(str(key))}: {escape(str(value))}"
                for key, value in docs.items()
                if isinstance(value, (str, int, float, bool))
            ]
            if lines:
                return "\n".join(lines[:10])
        dumped = json.dumps(docs, ensure_ascii=False, default=str)
        return f"<code>{escape(truncate_text(dumped, 500))}</code>"

    @staticmethod
    def format_offline() -> str:
        return "⚠️ <b>新闻服务暂时无法连接</b>\n\n连接恢复后即可继续提问，可使用 <code>/status</code> 查看状态。"

    @staticmethod
    def format_error(message: str) -> str:
        """Format error message."""
        return f"""❌ <b>出错了</b>

{escape(message)}

使用 <code>/help</code> 查看可用功能。"""
