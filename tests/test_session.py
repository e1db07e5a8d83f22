"""Tests for chat sessions."""

import asyncio

import pytest

from news_service.exceptions import TransportFailure
from orchestrator.news_chat import ChatReply, NewsChatOrchestrator, StreamingReply
from orchestrator.responses import FALLBACK_QUESTIONS, FALLBACK_REPLY, INITIAL_QUESTIONS, WELCOME_REPLY
from orchestrator.session import ChatRole, ChatSession, ConnectivityState

from conftest import FakeNewsClient, make_settings


class BlockingOrchestrator:
    """Orchestrator whose replies wait until the test releases them."""

    def __init__(self):
        self.release = asyncio.Event()
        self.messages = []

    async def chat_with_news(self, message):
        self.messages.append(message)
        await self.release.wait()
        return ChatReply(reply_text=f"reply to {message}", suggested_questions=["a", "b", "c"])

    async def chat_with_news_stream(self, message):
        self.messages.append(message)
        yield StreamingReply(content="部分")
        await self.release.wait()
        yield StreamingReply(content="部分", done=True, suggested_questions=["x"])


class BrokenOrchestrator:
    async def chat_with_news(self, message):
        raise RuntimeError("unexpected")


@pytest.fixture
def session(fake_client):
    return ChatSession(NewsChatOrchestrator(fake_client, make_settings()))


class TestChatSession:

    def test_starts_with_welcome_turn(self, session):
        assert len(session.turns) == 1
        welcome = session.turns[0]
        assert welcome.role == ChatRole.ASSISTANT
        assert welcome.content == WELCOME_REPLY
        assert session.suggested_questions == INITIAL_QUESTIONS
        assert session.can_submit

    @pytest.mark.asyncio
    async def test_submit_appends_user_and_assistant_turns(self, session):
        turn = await session.submit("  今天有什么科技新闻？ ")

        assert [t.role for t in session.turns] == [ChatRole.ASSISTANT, ChatRole.USER, ChatRole.ASSISTANT]
        assert session.turns[1].content == "今天有什么科技新闻？"
        assert turn is session.turns[-1]
        assert len(turn.articles) == 3
        assert not session.busy

    @pytest.mark.asyncio
    async def test_history_is_append_only(self, session):
        await session.submit("今天的新闻")
        before = session.turns
        await session.submit("分析一下")

        assert session.turns[:len(before)] == before
        assert len({t.id for t in session.turns}) == len(session.turns)
        with pytest.raises(Exception):
            session.turns[0].content = "changed"

    @pytest.mark.asyncio
    async def test_blank_text_is_ignored(self, session):
        assert await session.submit("   ") is None
        assert len(session.turns) == 1

    @pytest.mark.asyncio
    async def test_submit_while_busy_is_a_no_op(self):
        orchestrator = BlockingOrchestrator()
        session = ChatSession(orchestrator)

        first = asyncio.create_task(session.submit("第一条"))
        await asyncio.sleep(0)
        assert session.busy
        assert not session.can_submit

        assert await session.submit("第二条") is None

        orchestrator.release.set()
        turn = await first

        assert orchestrator.messages == ["第一条"]
        assert turn.content == "reply to 第一条"
        assert [t.content for t in session.turns[1:]] == ["第一条", "reply to 第一条"]
        assert session.suggested_questions == ["a", "b", "c"]
        assert not session.busy

    @pytest.mark.asyncio
    async def test_disconnected_session_refuses(self, fake_client):
        connectivity = ConnectivityState()
        connectivity.connected = False
        session = ChatSession(NewsChatOrchestrator(fake_client, make_settings()), connectivity)

        assert await session.submit("今天的新闻") is None
        assert fake_client.calls == []
        assert len(session.turns) == 1

    @pytest.mark.asyncio
    async def test_unexpected_failure_becomes_fallback_turn(self):
        session = ChatSession(BrokenOrchestrator())

        turn = await session.submit("今天的新闻")

        assert turn.content == FALLBACK_REPLY
        assert session.suggested_questions == FALLBACK_QUESTIONS
        assert not session.busy

    @pytest.mark.asyncio
    async def test_remote_failure_becomes_fallback_turn(self):
        client = FakeNewsClient(error=TransportFailure("get_quick_news", "connection refused"))
        session = ChatSession(NewsChatOrchestrator(client, make_settings()))

        turn = await session.submit("今天的新闻")

        assert turn.content == FALLBACK_REPLY
        assert turn.articles is None
        assert session.suggested_questions == FALLBACK_QUESTIONS

    @pytest.mark.asyncio
    async def test_reset(self, session):
        await session.submit("今天的新闻")
        assert session.reset()
        assert len(session.turns) == 1
        assert session.suggested_questions == INITIAL_QUESTIONS

    @pytest.mark.asyncio
    async def test_reset_refused_while_busy(self):
        orchestrator = BlockingOrchestrator()
        session = ChatSession(orchestrator)

        task = asyncio.create_task(session.submit("第一条"))
        await asyncio.sleep(0)
        assert not session.reset()

        orchestrator.release.set()
        await task
        assert len(session.turns) == 3


class TestStreamingSession:

    @pytest.mark.asyncio
    async def test_stream_appends_final_turn(self):
        orchestrator = BlockingOrchestrator()
        session = ChatSession(orchestrator)
        orchestrator.release.set()

        elements = [e async for e in session.submit_stream("今天的新闻")]

        assert [e.done for e in elements] == [False, True]
        assert session.turns[-1].role == ChatRole.ASSISTANT
        assert session.turns[-1].content == "部分"
        assert session.suggested_questions == ["x"]
        assert not session.busy

    @pytest.mark.asyncio
    async def test_stream_busy_gate(self):
        orchestrator = BlockingOrchestrator()
        session = ChatSession(orchestrator)

        stream = session.submit_stream("第一条")
        first = await stream.__anext__()
        assert not first.done
        assert session.busy

        assert [e async for e in session.submit_stream("第二条")] == []
        assert await session.submit("第三条") is None

        orchestrator.release.set()
        rest = [e async for e in stream]
        assert rest[-1].done
        assert orchestrator.messages == ["第一条"]
        assert not session.busy
