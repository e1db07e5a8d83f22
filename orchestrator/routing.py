"""Routing module mapping intents to remote operations."""

from typing import Dict, Optional
from enum import Enum
from pydantic import BaseModel

from orchestrator.intent_classifier import IntentDescriptor, IntentKind, SummaryLength


class RemoteAction(str, Enum):
    """What the orchestrator does for an intent."""
    GREETING = "greeting"  # Canned reply, no remote call
    HELP = "help"  # Canned capability summary, no remote call
    QUICK_NEWS = "quick_news"  # GET /api/news
    DETAILED_ANALYSIS = "detailed_analysis"  # POST /api/summarize
    KEYWORD_SEARCH = "keyword_search"  # GET /api/news with keywords as the filter


class RouteInfo(BaseModel):
    """Information about selected route."""
    action: RemoteAction
    default_articles: int = 0
    description: str

    @property
    def calls_remote(self) -> bool:
        return self.action not in (RemoteAction.GREETING, RemoteAction.HELP)


class NewsRequest(BaseModel):
    """Parameters of a single news or analysis call."""
    category: str = ""
    max_articles: int
    summary_length: Optional[SummaryLength] = None
    focus_areas: list[str] = []


class Router:
    """Routes intents to remote operations."""

    ROUTE_CONFIG: Dict[IntentKind, RouteInfo] = {
        IntentKind.GREETING: RouteInfo(
            action=RemoteAction.GREETING,
            description="Canned greeting",
        ),
        IntentKind.HELP: RouteInfo(
            action=RemoteAction.HELP,
            description="Canned capability summary",
        ),
        IntentKind.NEWS_REQUEST: RouteInfo(
            action=RemoteAction.QUICK_NEWS,
            default_articles=5,
            description="Quick news summaries",
        ),
        IntentKind.DETAILED_ANALYSIS: RouteInfo(
            action=RemoteAction.DETAILED_ANALYSIS,
            default_articles=8,
            description="Detailed analysis with insights",
        ),
        IntentKind.GENERAL: RouteInfo(
            action=RemoteAction.KEYWORD_SEARCH,
            default_articles=3,
            description="Keyword search fallback",
        ),
    }

    @classmethod
    def get_route(cls, intent: IntentDescriptor) -> RouteInfo:
        """
        Get routing information for an intent.

        Args:
            intent: Classified user intent

        Returns:
            RouteInfo with action details
        """
        return cls.ROUTE_CONFIG.get(intent.kind, cls.ROUTE_CONFIG[IntentKind.GENERAL])

    @classmethod
    def build_request(cls, intent: IntentDescriptor) -> Optional[NewsRequest]:
        """Build the remote call parameters for an intent, None for canned replies."""
        route = cls.get_route(intent)

        if route.action == RemoteAction.QUICK_NEWS:
            return NewsRequest(
                category=intent.category_tag,
                max_articles=intent.article_count or route.default_articles,
            )

        if route.action == RemoteAction.DETAILED_ANALYSIS:
            return NewsRequest(
                category=intent.category_tag,
                max_articles=intent.article_count or route.default_articles,
                summary_length=intent.summary_length or SummaryLength.MEDIUM,
                focus_areas=list(intent.focus_areas),
            )

        if route.action == RemoteAction.KEYWORD_SEARCH:
            # The article count on a general message is never honoured
            return NewsRequest(
                category=" ".join(intent.keywords),
                max_articles=route.default_articles,
            )

        return None

    @classmethod
    def get_progress_message(cls, intent: IntentDescriptor) -> str:
        """Get initial progress message based on route."""
        route = cls.get_route(intent)

        messages = {
            RemoteAction.QUICK_NEWS: "⏳ 正在获取最新新闻...",
            RemoteAction.DETAILED_ANALYSIS: "🔍 正在生成分析报告，请稍候...",
            RemoteAction.KEYWORD_SEARCH: "⏳ 正在搜索相关新闻...",
        }

        return messages.get(route.action, "⏳ 正在处理...")

    @classmethod
    def agent_context(cls, intent: IntentDescriptor) -> dict:
        """Context block sent along with a message to the news agent."""
        return {
            "intent": intent.kind.value,
            "category": intent.category_tag,
            "maxArticles": intent.article_count or cls.ROUTE_CONFIG[IntentKind.NEWS_REQUEST].default_articles,
            "focusAreas": list(intent.focus_areas),
        }
