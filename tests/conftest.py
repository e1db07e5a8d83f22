"""Test configuration and fixtures."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.settings import Settings
from news_service.client import NewsServiceClient
from news_service.schemas import AgentResult, HealthStatus, NewsResponse, StreamChunk


def make_settings(**overrides) -> Settings:
    """Settings isolated from the environment's .env file."""
    values = {
        "NEWS_API_BASE_URL": "http://news.test",
        "REQUEST_TIMEOUT": 5.0,
        "CHAT_TRANSPORT": "rest",
        "TELEGRAM_BOT_TOKEN": "123:test",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


SAMPLE_ARTICLES: List[Dict[str, Any]] = [
    {
        "title": "OpenAI releases a new reasoning model",
        "summary": "The model focuses on multi-step reasoning tasks.",
        "category": "Technology",
        "sentiment": "Positive",
        "source": "TechCrunch",
        "url": "https://example.com/news/1",
        "publishedAt": "2025-07-01T08:30:00Z",
        "keywords": ["ai", "model"],
        "importance": "High",
        "aiSummary": "新模型专注于多步推理。",
        "analysisConfidence": "92%",
    },
    {
        "title": "Chip exports face new restrictions",
        "summary": "New rules limit exports of advanced chips.",
        "category": "Business",
        "sentiment": "Negative",
        "source": "Reuters",
        "url": "https://example.com/news/2",
        "publishedAt": "2025-07-01T06:00:00Z",
        "keywords": ["chips", "export"],
        "importance": "Medium",
    },
    {
        "title": "Open-source robotics toolkit hits 1.0",
        "summary": "The toolkit stabilises its public API.",
        "category": "Technology",
        "sentiment": "Neutral",
        "source": "The Verge",
        "url": "https://example.com/news/3",
        "publishedAt": "2025-06-30T22:15:00Z",
        "keywords": ["robotics"],
        "importance": "Low",
    },
]

SAMPLE_INSIGHTS: Dict[str, Any] = {
    "categoriesFound": ["Technology", "Business"],
    "sentimentBreakdown": {"Positive": 3, "Negative": 1},
    "highImportanceNews": 2,
    "averageConfidence": 0.87,
}


def news_envelope(
    articles: Optional[List[Dict[str, Any]]] = None,
    insights: Optional[Dict[str, Any]] = None,
    ai_insights: Optional[str] = None,
) -> Dict[str, Any]:
    """Raw JSON envelope as returned by /api/news and /api/summarize."""
    articles = SAMPLE_ARTICLES if articles is None else articles
    data: Dict[str, Any] = {
        "summaries": articles,
        "totalArticles": len(articles),
        "timestamp": "2025-07-01T09:00:00Z",
        "sources": sorted({a["source"] for a in articles}),
    }
    if insights is not None:
        data["insights"] = insights
    if ai_insights is not None:
        data["aiInsights"] = ai_insights
    return {"success": True, "data": data}


class FakeNewsClient:
    """In-memory stand-in for NewsServiceClient that records every call."""

    def __init__(
        self,
        news: Optional[Dict[str, Any]] = None,
        analysis: Optional[Dict[str, Any]] = None,
        agent: Optional[Dict[str, Any]] = None,
        stream: Optional[List[Any]] = None,
        error: Optional[Exception] = None,
    ):
        self.news = NewsResponse.model_validate(news or news_envelope())
        self.analysis = NewsResponse.model_validate(analysis or news_envelope(insights=SAMPLE_INSIGHTS))
        self.agent = AgentResult.model_validate(agent or {"text": "agent reply"})
        self.stream = stream or []
        self.error = error
        self.calls: List[tuple] = []
        self.stream_closed = False

    async def check_health(self) -> HealthStatus:
        self.calls.append(("check_health", {}))
        if self.error:
            raise self.error
        return HealthStatus(status="ok", timestamp="2025-07-01T09:00:00Z")

    async def get_api_docs(self) -> Any:
        self.calls.append(("get_api_docs", {}))
        return {"version": "1.0.0", "model": "test-model", "platform": "workers"}

    async def get_quick_news(self, category: str = "", max_articles: int = 5) -> NewsResponse:
        self.calls.append(("get_quick_news", {"category": category, "max_articles": max_articles}))
        if self.error:
            raise self.error
        return self.news

    async def get_detailed_analysis(self, category="", max_articles=10, summary_length="medium", focus_areas=None):
        self.calls.append(("get_detailed_analysis", {
            "category": category,
            "max_articles": max_articles,
            "summary_length": summary_length,
            "focus_areas": focus_areas,
        }))
        if self.error:
            raise self.error
        return self.analysis

    async def run_agent(self, message: str, context: Dict[str, Any]) -> AgentResult:
        self.calls.append(("run_agent", {"message": message, "context": context}))
        if self.error:
            raise self.error
        return self.agent

    async def stream_agent(self, message: str, context: Dict[str, Any]):
        self.calls.append(("stream_agent", {"message": message, "context": context}))
        try:
            for item in self.stream:
                if isinstance(item, Exception):
                    raise item
                yield StreamChunk.model_validate(item)
        finally:
            self.stream_closed = True

    def called(self, name: str) -> List[Dict[str, Any]]:
        return [kwargs for call_name, kwargs in self.calls if call_name == name]


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def fake_client():
    return FakeNewsClient()


@pytest.fixture
def sample_articles():
    return [dict(article) for article in SAMPLE_ARTICLES]


def _build_service_app() -> web.Application:
    """Local stand-in for the summarization service; behaviour set via app['mode']."""
    app = web.Application()
    app["mode"] = "ok"
    app["requests"] = []

    async def misbehave(request: web.Request) -> Optional[web.StreamResponse]:
        mode = request.app["mode"]
        if mode == "slow":
            await asyncio.sleep(2)
        elif mode == "error":
            return web.json_response({"error": "boom"}, status=503)
        elif mode == "bad_json":
            return web.Response(text="<html>not json</html>", content_type="text/html")
        elif mode == "bad_encoding":
            return web.Response(
                body=b'{"type": "text", "success": true, "content": "\xff"}\n',
                content_type="application/json",
                charset="utf-8",
            )
        elif mode == "bad_shape":
            return web.json_response({"success": True, "data": {"summaries": "nope"}})
        elif mode == "unsuccessful":
            return web.json_response({"success": False, "data": {}, "error": "quota exceeded"})
        return None

    async def health(request):
        return (await misbehave(request)) or web.json_response(
            {"status": "ok", "timestamp": "2025-07-01T09:00:00Z"}
        )

    async def news(request):
        request.app["requests"].append(("news", dict(request.query)))
        failure = await misbehave(request)
        if failure is not None:
            return failure
        count = int(request.query.get("maxArticles", "5"))
        return web.json_response(news_envelope(SAMPLE_ARTICLES[:count]))

    async def summarize(request):
        body = await request.json()
        request.app["requests"].append(("summarize", body))
        failure = await misbehave(request)
        if failure is not None:
            return failure
        return web.json_response(news_envelope(insights=SAMPLE_INSIGHTS, ai_insights="AI 投资持续升温。"))

    async def docs(request):
        return web.json_response({"version": "1.0.0", "model": "test-model", "platform": "workers"})

    async def generate(request):
        body = await request.json()
        request.app["requests"].append(("generate", body))
        failure = await misbehave(request)
        if failure is not None:
            return failure
        return web.json_response({
            "text": "这是今天的科技新闻。",
            "toolCalls": [{"toolName": "fetchNewsFromRss", "result": {"articles": SAMPLE_ARTICLES[:2]}}],
        })

    async def stream(request):
        body = await request.json()
        request.app["requests"].append(("stream", body))
        failure = await misbehave(request)
        if failure is not None:
            return failure
        response = web.StreamResponse(headers={"Content-Type": "application/x-ndjson"})
        await response.prepare(request)
        lines = [
            {"type": "text", "content": "今天"},
            {"type": "tool-call", "toolName": "fetchNewsFromRss", "result": {"articles": SAMPLE_ARTICLES[:1]}},
            {"type": "text", "content": "的新闻"},
        ]
        for line in lines:
            await response.write((json.dumps(line, ensure_ascii=False) + "\n").encode("utf-8"))
        await response.write(b"data: [DONE]\n")
        await response.write_eof()
        return response

    app.router.add_get("/health", health)
    app.router.add_get("/api/news", news)
    app.router.add_post("/api/summarize", summarize)
    app.router.add_get("/api/docs", docs)
    app.router.add_post("/api/agents/newsSummarizer/generate", generate)
    app.router.add_post("/api/agents/newsSummarizer/stream", stream)
    return app


@pytest_asyncio.fixture
async def news_server():
    """A running local news service."""
    server = TestServer(_build_service_app())
    await server.start_server()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def service_client(news_server):
    """A real NewsServiceClient pointed at the local service with a short timeout."""
    client = NewsServiceClient(make_settings(
        NEWS_API_BASE_URL=str(news_server.make_url("")),
        REQUEST_TIMEOUT=0.3,
    ))
    yield client
    await client.close()
