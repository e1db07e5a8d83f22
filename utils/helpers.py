"""Helper utility functions."""

import uuid
from datetime import datetime
from typing import Optional
import pytz


DEFAULT_TIMEZONE = "Asia/Shanghai"


def get_local_time(timezone: str = DEFAULT_TIMEZONE) -> datetime:
    """Get current time in the given timezone."""
    return datetime.now(pytz.timezone(timezone))


def new_message_id() -> str:
    """Short unique id for a chat turn."""
    return uuid.uuid4().hex[:12]


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp as sent by the news service.

    Examples:
        '2025-07-01T08:30:00Z' -> 2025-07-01 08:30:00+00:00
        '2025-07-01T08:30:00' -> 2025-07-01 08:30:00+00:00 (naive values are UTC)
        'yesterday' -> None
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = pytz.utc.localize(parsed)
    return parsed


def format_time_ago(published_at: str, now: Optional[datetime] = None) -> str:
    """Relative publication time in Chinese, e.g. '5 分钟前'."""
    published = parse_timestamp(published_at)
    if published is None:
        return published_at or ""

    now = now or datetime.now(pytz.utc)
    seconds = int((now - published).total_seconds())

    if seconds < 60:
        return "刚刚"
    if seconds < 3600:
        return f"{seconds // 60} 分钟前"
    if seconds < 86400:
        return f"{seconds // 3600} 小时前"
    if seconds < 86400 * 30:
        return f"{seconds // 86400} 天前"
    return published.strftime("%Y-%m-%d")


def truncate_text(text: str, max_length: int = 100) -> str:
    """Truncate text to max length with ellipsis."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."
