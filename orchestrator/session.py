"""Conversation session: append-only chat turns and the busy/connected gates."""

from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, List, Optional, Tuple

from loguru import logger
from pydantic import BaseModel

from news_service.schemas import NewsArticle
from orchestrator.news_chat import ChatReply, NewsChatOrchestrator, StreamingReply
from orchestrator import responses
from utils.helpers import DEFAULT_TIMEZONE, get_local_time, new_message_id


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatTurn(BaseModel):
    """A single message in the conversation, immutable once created."""
    id: str
    role: ChatRole
    content: str
    created_at: datetime
    articles: Optional[List[NewsArticle]] = None

    class Config:
        frozen = True


class ConnectivityState:
    """Connectivity flag shared between the health monitor and chat sessions."""

    def __init__(self):
        self.connected = True
        self.last_checked: Optional[datetime] = None
        self.api_docs: Optional[Any] = None


class ChatSession:
    """
    One conversation with the news assistant.

    Only one submission is in flight at a time; a submit while busy (or while
    the service is known to be unreachable) does nothing and returns None.
    History lives in process memory only.
    """

    def __init__(
        self,
        orchestrator: NewsChatOrchestrator,
        connectivity: Optional[ConnectivityState] = None,
        timezone: str = DEFAULT_TIMEZONE,
    ):
        self.orchestrator = orchestrator
        self.connectivity = connectivity or ConnectivityState()
        self.timezone = timezone
        self.busy = False
        self._turns: List[ChatTurn] = []
        self.suggested_questions: List[str] = []
        self._start()

    @property
    def turns(self) -> Tuple[ChatTurn, ...]:
        return tuple(self._turns)

    @property
    def can_submit(self) -> bool:
        return not self.busy and self.connectivity.connected

    def reset(self) -> bool:
        """Start the conversation over. Refused while a submission is in flight."""
        if self.busy:
            return False
        self._turns = []
        self._start()
        return True

    async def submit(self, text: str) -> Optional[ChatTurn]:
        """
        Send a user message and append the assistant's reply.

        Returns:
            The assistant turn, or None when nothing was submitted
        """
        content = (text or "").strip()
        if not content or not self.can_submit:
            logger.debug(f"Submit ignored (busy={self.busy}, connected={self.connectivity.connected})")
            return None

        self.busy = True
        try:
            self._append(ChatRole.USER, content)
            try:
                reply = await self.orchestrator.chat_with_news(content)
            except Exception as e:
                logger.exception(f"Unexpected chat failure: {e}")
                reply = ChatReply(
                    reply_text=responses.FALLBACK_REPLY,
                    suggested_questions=responses.fallback_questions(),
                    failed=True,
                )

            turn = self._append(ChatRole.ASSISTANT, reply.reply_text, reply.articles)
            if reply.suggested_questions:
                self.suggested_questions = list(reply.suggested_questions)
            return turn
        finally:
            self.busy = False

    async def submit_stream(self, text: str) -> AsyncIterator[StreamingReply]:
        """
        Streaming counterpart of submit().

        Yields the orchestrator's increments unchanged; the assistant turn is
        appended when the final element arrives. Yields nothing when the
        submission is refused.
        """
        content = (text or "").strip()
        if not content or not self.can_submit:
            logger.debug(f"Stream submit ignored (busy={self.busy}, connected={self.connectivity.connected})")
            return

        self.busy = True
        try:
            self._append(ChatRole.USER, content)
            async for element in self.orchestrator.chat_with_news_stream(content):
                if element.done:
                    self._append(ChatRole.ASSISTANT, element.content, element.articles)
                    if element.suggested_questions:
                        self.suggested_questions = list(element.suggested_questions)
                yield element
        finally:
            self.busy = False

    def _start(self):
        self.suggested_questions = list(responses.INITIAL_QUESTIONS)
        self._append(ChatRole.ASSISTANT, responses.WELCOME_REPLY)

    def _append(
        self,
        role: ChatRole,
        content: str,
        articles: Optional[List[NewsArticle]] = None,
    ) -> ChatTurn:
        turn = ChatTurn(
            id=new_message_id(),
            role=role,
            content=content,
            created_at=get_local_time(self.timezone),
            articles=list(articles) if articles else None,
        )
        self._turns.append(turn)
        return turn
