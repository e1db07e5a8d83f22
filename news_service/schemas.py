"""Data schemas for the news summarization service using Pydantic."""

from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Union


class Sentiment(str, Enum):
    """Article sentiment labels assigned by the service."""
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class Importance(str, Enum):
    """Article importance labels assigned by the service."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class NewsArticle(BaseModel):
    """A summarized news article, read-only once received."""
    title: str
    summary: str = ""
    category: str = ""
    sentiment: Sentiment = Sentiment.NEUTRAL
    source: str = ""
    url: str = ""
    published_at: str = Field(default="", alias="publishedAt")
    keywords: List[str] = []
    importance: Importance = Importance.LOW
    ai_summary: Optional[str] = Field(default=None, alias="aiSummary")
    # Opaque passthrough, the service does not pin down its range or units
    analysis_confidence: Optional[Union[str, float]] = Field(default=None, alias="analysisConfidence")

    class Config:
        populate_by_name = True
        frozen = True


class NewsInsights(BaseModel):
    """Aggregate statistics computed by the service for a batch of articles."""
    categories_found: List[str] = Field(default_factory=list, alias="categoriesFound")
    sentiment_breakdown: Dict[str, int] = Field(default_factory=dict, alias="sentimentBreakdown")
    high_importance_news: int = Field(default=0, alias="highImportanceNews")
    average_confidence: Optional[Union[float, str]] = Field(default=None, alias="averageConfidence")

    class Config:
        populate_by_name = True


class NewsPayload(BaseModel):
    """The `data` member of a news response envelope."""
    summaries: List[NewsArticle] = []
    total_articles: int = Field(default=0, alias="totalArticles")
    timestamp: str = ""
    sources: List[str] = []
    insights: Optional[NewsInsights] = None
    ai_insights: Optional[str] = Field(default=None, alias="aiInsights")

    class Config:
        populate_by_name = True


class NewsResponse(BaseModel):
    """Envelope returned by /api/news and /api/summarize."""
    success: bool = True
    data: NewsPayload
    error: Optional[str] = None


class HealthStatus(BaseModel):
    """Response of GET /health."""
    status: str
    timestamp: str = ""


class AgentToolCall(BaseModel):
    """A tool invocation reported by the news agent."""
    tool_name: str = Field(alias="toolName")
    result: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True

    def articles(self) -> List[NewsArticle]:
        """Articles carried in the tool result, if any."""
        if not self.result:
            return []
        raw = self.result.get("articles") or []
        return [NewsArticle.model_validate(item) for item in raw]


class AgentResult(BaseModel):
    """Response of a non-streaming agent call."""
    text: Optional[str] = None
    content: Optional[str] = None
    tool_calls: List[AgentToolCall] = Field(default_factory=list, alias="toolCalls")

    class Config:
        populate_by_name = True

    @property
    def reply_text(self) -> Optional[str]:
        return self.text or self.content


class StreamChunk(BaseModel):
    """A single increment of an agent stream."""
    type: str
    content: str = ""
    tool_name: Optional[str] = Field(default=None, alias="toolName")
    result: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True

    def as_tool_call(self) -> Optional[AgentToolCall]:
        if self.type != "tool-call" or not self.tool_name:
            return None
        return AgentToolCall(toolName=self.tool_name, result=self.result)
