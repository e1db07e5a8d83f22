"""Chat orchestration: intent -> remote call -> reply and suggestions."""

from typing import AsyncIterator, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ValidationError

from config.settings import Settings
from news_service.client import NewsServiceClient
from news_service.exceptions import MalformedResponse, RemoteUnavailable
from news_service.schemas import AgentToolCall, NewsArticle
from orchestrator.intent_classifier import IntentClassifier, IntentDescriptor
from orchestrator.routing import RemoteAction, RouteInfo, Router
from orchestrator import responses


class ChatReply(BaseModel):
    """Result of one chat exchange."""
    reply_text: str
    articles: Optional[List[NewsArticle]] = None
    suggested_questions: List[str]
    intent: Optional[IntentDescriptor] = None
    failed: bool = False


class StreamingReply(BaseModel):
    """
    One element of a streamed reply.

    Elements with done=False carry a text increment. The single done=True
    element closes the stream and carries the complete text.
    """
    content: str
    done: bool = False
    articles: Optional[List[NewsArticle]] = None
    suggested_questions: List[str] = []
    failed: bool = False


class NewsChatOrchestrator:
    """Turns a user message into a chat reply backed by the news service."""

    def __init__(
        self,
        client: NewsServiceClient,
        settings: Settings,
        classifier: Optional[IntentClassifier] = None,
    ):
        self.client = client
        self.classifier = classifier or IntentClassifier()
        self.transport = settings.CHAT_TRANSPORT
        self.news_tool = settings.NEWS_TOOL_NAME

    async def chat_with_news(self, message: str) -> ChatReply:
        """
        Answer a chat message.

        Remote failures of any kind come back as the fallback reply with the
        fixed fallback questions; this method does not raise them.
        """
        intent = self.classifier.classify(message)
        route = Router.get_route(intent)
        logger.debug(f"Chat request classified as {intent.kind.value}: {message!r}")

        try:
            if not route.calls_remote:
                reply_text, articles = self._canned(route), None
            elif self.transport == "rest":
                reply_text, articles = await self._dispatch(intent, route)
            else:
                reply_text, articles = await self._ask_agent(message, intent)
        except RemoteUnavailable as e:
            logger.error(f"Chat with news failed ({e.__class__.__name__}): {e}")
            return ChatReply(
                reply_text=responses.FALLBACK_REPLY,
                suggested_questions=responses.fallback_questions(),
                intent=intent,
                failed=True,
            )

        return ChatReply(
            reply_text=reply_text,
            articles=articles,
            suggested_questions=responses.generate_suggested_questions(intent, articles or []),
            intent=intent,
        )

    async def chat_with_news_stream(self, message: str) -> AsyncIterator[StreamingReply]:
        """
        Answer a chat message through the agent stream.

        Yields text increments, then exactly one done=True element. A failure
        ends the stream with the fallback reply instead of raising.
        """
        intent = self.classifier.classify(message)
        route = Router.get_route(intent)

        if not route.calls_remote:
            yield StreamingReply(
                content=self._canned(route),
                done=True,
                suggested_questions=responses.generate_suggested_questions(intent, []),
            )
            return

        parts: List[str] = []
        articles: List[NewsArticle] = []
        stream = self.client.stream_agent(message, Router.agent_context(intent))
        try:
            async for chunk in stream:
                if chunk.type == "text":
                    if chunk.content:
                        parts.append(chunk.content)
                        yield StreamingReply(content=chunk.content)
                    continue

                call = chunk.as_tool_call()
                if call is not None and call.tool_name == self.news_tool:
                    found = self._tool_articles("stream_agent", call)
                    if found:
                        articles = found
        except RemoteUnavailable as e:
            logger.error(f"Stream chat failed ({e.__class__.__name__}): {e}")
            yield StreamingReply(
                content=responses.FALLBACK_REPLY,
                done=True,
                suggested_questions=responses.fallback_questions(),
                failed=True,
            )
            return
        finally:
            await stream.aclose()

        yield StreamingReply(
            content="".join(parts),
            done=True,
            articles=articles or None,
            suggested_questions=responses.generate_suggested_questions(intent, articles),
        )

    def _canned(self, route: RouteInfo) -> str:
        if route.action == RemoteAction.GREETING:
            return responses.GREETING_REPLY
        return responses.HELP_REPLY

    async def _dispatch(
        self, intent: IntentDescriptor, route: RouteInfo
    ) -> Tuple[str, List[NewsArticle]]:
        request = Router.build_request(intent)

        if route.action == RemoteAction.DETAILED_ANALYSIS:
            response = await self.client.get_detailed_analysis(
                category=request.category,
                max_articles=request.max_articles,
                summary_length=request.summary_length.value,
                focus_areas=request.focus_areas,
            )
            return responses.build_analysis_reply(intent, response.data), response.data.summaries

        response = await self.client.get_quick_news(
            category=request.category,
            max_articles=request.max_articles,
        )
        if route.action == RemoteAction.KEYWORD_SEARCH:
            return responses.GENERAL_REPLY, response.data.summaries
        return responses.build_news_reply(intent, response.data), response.data.summaries

    async def _ask_agent(
        self, message: str, intent: IntentDescriptor
    ) -> Tuple[str, List[NewsArticle]]:
        result = await self.client.run_agent(message, Router.agent_context(intent))

        articles: List[NewsArticle] = []
        for call in result.tool_calls:
            if call.tool_name == self.news_tool:
                articles = self._tool_articles("run_agent", call)
                if articles:
                    break

        return result.reply_text or responses.EMPTY_AGENT_REPLY, articles

    @staticmethod
    def _tool_articles(operation: str, call: AgentToolCall) -> List[NewsArticle]:
        try:
            return call.articles()
        except ValidationError as e:
            raise MalformedResponse(operation, f"bad articles in {call.tool_name} result") from e
