from .client import NewsServiceClient
from .exceptions import (
    RemoteUnavailable,
    RemoteTimeout,
    TransportFailure,
    RemoteError,
    MalformedResponse,
)
from .schemas import (
    Sentiment,
    Importance,
    NewsArticle,
    NewsInsights,
    NewsPayload,
    NewsResponse,
    HealthStatus,
    AgentToolCall,
    AgentResult,
    StreamChunk,
)

__all__ = [
    "NewsServiceClient",
    "RemoteUnavailable",
    "RemoteTimeout",
    "TransportFailure",
    "RemoteError",
    "MalformedResponse",
    "Sentiment",
    "Importance",
    "NewsArticle",
    "NewsInsights",
    "NewsPayload",
    "NewsResponse",
    "HealthStatus",
    "AgentToolCall",
    "AgentResult",
    "StreamChunk",
]
