from .logger import setup_logger, logger
from .helpers import (
    get_local_time,
    new_message_id,
    parse_timestamp,
    format_time_ago,
    truncate_text,
)

__all__ = [
    "setup_logger",
    "logger",
    "get_local_time",
    "new_message_id",
    "parse_timestamp",
    "format_time_ago",
    "truncate_text",
]
