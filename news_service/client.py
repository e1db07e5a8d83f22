"""HTTP client for the news summarization service."""

import asyncio
import json
from typing import Any, AsyncIterator, Dict, List, Optional, Type, TypeVar

import aiohttp
from loguru import logger
from pydantic import BaseModel, ValidationError

from config.settings import Settings
from .exceptions import (
    RemoteUnavailable,
    RemoteTimeout,
    TransportFailure,
    RemoteError,
    MalformedResponse,
)
from .schemas import AgentResult, HealthStatus, NewsResponse, StreamChunk


T = TypeVar("T", bound=BaseModel)


class NewsServiceClient:
    """
    Async client for the summarization service.

    Every call is bounded by the configured timeout. A call that runs over is
    cancelled, which releases the underlying connection, and surfaces as
    RemoteTimeout. Nothing is retried.
    """

    def __init__(self, settings: Settings, session: Optional[aiohttp.ClientSession] = None):
        self.base_url = settings.NEWS_API_BASE_URL.rstrip("/")
        self.timeout = settings.REQUEST_TIMEOUT
        self.agent_id = settings.AGENT_ID
        self.debug = settings.DEBUG
        self.session = session

        if self.debug:
            logger.debug(f"NewsServiceClient initialized with base_url: {self.base_url}")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
        return self.session

    async def close(self):
        """Close the session."""
        if self.session and not self.session.closed:
            await self.session.close()

    async def check_health(self) -> HealthStatus:
        """GET /health."""
        payload = await self._request_json("check_health", "GET", "/health")
        return self._parse("check_health", HealthStatus, payload)

    async def get_quick_news(self, category: str = "", max_articles: int = 5) -> NewsResponse:
        """
        Fetch quick news summaries.

        Args:
            category: Category tag or free-text filter, empty for no filter
            max_articles: Maximum number of articles to return

        Returns:
            Parsed news envelope
        """
        params = {"maxArticles": str(max_articles)}
        if category:
            params["category"] = category

        payload = await self._request_json("get_quick_news", "GET", "/api/news", params=params)
        return self._parse_news("get_quick_news", payload)

    async def get_detailed_analysis(
        self,
        category: str = "",
        max_articles: int = 10,
        summary_length: str = "medium",
        focus_areas: Optional[List[str]] = None,
    ) -> NewsResponse:
        """
        Request a detailed analysis with server-side insights.

        Args:
            category: Category tag, empty for all categories
            max_articles: Maximum number of articles to analyze
            summary_length: One of short, medium, long
            focus_areas: Keywords steering the analysis

        Returns:
            Parsed news envelope, normally with `insights` populated
        """
        body = {
            "category": category,
            "maxArticles": max_articles,
            "summaryLength": summary_length,
            "focusAreas": list(focus_areas or []),
        }
        payload = await self._request_json("get_detailed_analysis", "POST", "/api/summarize", json_body=body)
        return self._parse_news("get_detailed_analysis", payload)

    async def get_api_docs(self) -> Any:
        """GET /api/docs. The payload is display-only metadata."""
        return await self._request_json("get_api_docs", "GET", "/api/docs")

    async def run_agent(self, message: str, context: Dict[str, Any]) -> AgentResult:
        """Send one user message to the news agent and wait for the full result."""
        body = self._agent_body(message, context)
        payload = await self._request_json(
            "run_agent", "POST", f"/api/agents/{self.agent_id}/generate", json_body=body
        )
        return self._parse("run_agent", AgentResult, payload)

    async def stream_agent(self, message: str, context: Dict[str, Any]) -> AsyncIterator[StreamChunk]:
        """
        Stream the news agent's answer as typed increments.

        The body is newline-delimited JSON. A stall longer than the configured
        timeout raises RemoteTimeout. Closing the iterator early releases the
        response.
        """
        operation = "stream_agent"
        url = f"{self.base_url}/api/agents/{self.agent_id}/stream"
        body = self._agent_body(message, context)
        timeout = aiohttp.ClientTimeout(total=None, sock_connect=self.timeout, sock_read=self.timeout)
        log = logger.bind(operation=operation)

        if self.debug:
            log.debug(f"POST {url} (stream) body={body}")

        session = await self._get_session()
        try:
            async with session.post(url, json=body, timeout=timeout) as response:
                if not 200 <= response.status < 300:
                    raise RemoteError(operation, response.status, response.reason or "")

                async for raw_line in response.content:
                    chunk = self._parse_stream_line(operation, raw_line)
                    if chunk is not None:
                        yield chunk
        except RemoteUnavailable as e:
            log.error(f"Failed: {e}")
            raise
        except asyncio.TimeoutError:
            log.warning(f"Stalled for more than {self.timeout:g}s ({url})")
            raise RemoteTimeout(operation, self.timeout) from None
        except aiohttp.ClientError as e:
            log.error(f"Transport failure: {e!r}")
            raise TransportFailure(operation, str(e) or e.__class__.__name__) from e

    def _agent_body(self, message: str, context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "messages": [{"role": "user", "content": message}],
            "context": context,
        }

    async def _request_json(
        self,
        operation: str,
        method: str,
        path: str,
        params: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Perform one bounded request and return the decoded JSON body."""
        url = f"{self.base_url}{path}"
        log = logger.bind(operation=operation)
        if self.debug:
            log.debug(f"{method} {url} params={params} body={json_body}")

        try:
            payload = await asyncio.wait_for(
                self._send(operation, method, url, params, json_body),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            log.warning(f"Timed out after {self.timeout:g}s ({url})")
            raise RemoteTimeout(operation, self.timeout) from None
        except RemoteUnavailable as e:
            log.error(f"Failed: {e}")
            raise

        if self.debug:
            log.debug(f"Result: {payload}")
        return payload

    async def _send(
        self,
        operation: str,
        method: str,
        url: str,
        params: Optional[Dict[str, str]],
        json_body: Optional[Dict[str, Any]],
    ) -> Any:
        session = await self._get_session()
        try:
            async with session.request(method, url, params=params, json=json_body) as response:
                if not 200 <= response.status < 300:
                    raise RemoteError(operation, response.status, response.reason or "")
                body = await response.read()
        except asyncio.TimeoutError:
            raise
        except aiohttp.ClientError as e:
            raise TransportFailure(operation, str(e) or e.__class__.__name__) from e

        try:
            return json.loads(body.decode("utf-8"))
        except ValueError as e:
            # UnicodeDecodeError included
            raise MalformedResponse(operation, f"invalid JSON: {e}") from e

    def _parse(self, operation: str, model: Type[T], payload: Any) -> T:
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            logger.bind(operation=operation).error(f"Returned an unexpected payload: {e.error_count()} errors")
            raise MalformedResponse(operation, str(e)) from e

    def _parse_news(self, operation: str, payload: Any) -> NewsResponse:
        response = self._parse(operation, NewsResponse, payload)
        if not response.success:
            logger.bind(operation=operation).error(f"Reported failure: {response.error}")
            raise RemoteError(operation, None, response.error or "success=false")
        return response

    def _parse_stream_line(self, operation: str, raw_line: bytes) -> Optional[StreamChunk]:
        try:
            line = raw_line.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise MalformedResponse(operation, f"invalid stream line encoding: {e}") from e
        if line.startswith("data:"):
            line = line[len("data:"):].strip()
        if not line or line == "[DONE]":
            return None

        try:
            data = json.loads(line)
        except ValueError as e:
            raise MalformedResponse(operation, f"invalid stream line: {line[:80]}") from e
        if not isinstance(data, dict):
            raise MalformedResponse(operation, f"unexpected stream element: {line[:80]}")

        try:
            return StreamChunk.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(operation, str(e)) from e
