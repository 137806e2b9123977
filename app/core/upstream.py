"""Streaming HTTP client for the Notion inference endpoint."""

import logging
from typing import AsyncIterator, Dict, Optional

import httpx

from app.core.config import Settings
from app.core.errors import UpstreamAPIError, UpstreamConnectionError
from app.schemas.notion import NotionRequestBody

logger = logging.getLogger(__name__)

NOTION_ORIGIN = "https://www.notion.so"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/136.0.0.0 Safari/537.36"
)
ERROR_EXCERPT_BYTES = 500


def build_headers(settings: Settings) -> Dict[str, str]:
    headers = {
        "accept": "application/x-ndjson",
        "accept-language": "en-US,en;q=0.9",
        "content-type": "application/json",
        "notion-audit-log-platform": "web",
        "notion-client-version": settings.notion_client_version,
        "origin": NOTION_ORIGIN,
        "referer": NOTION_ORIGIN,
        "user-agent": USER_AGENT,
        "cookie": settings.notion_cookie,
        "x-notion-space-id": settings.notion_space_id,
    }
    if settings.notion_active_user:
        headers["x-notion-active-user-header"] = settings.notion_active_user
    return headers


def build_timeout(settings: Settings) -> httpx.Timeout:
    return httpx.Timeout(
        connect=settings.connect_timeout,
        read=settings.read_timeout,    # max silence between two upstream chunks
        write=settings.write_timeout,
        pool=settings.pool_timeout,
    )


class NotionClient:
    """One upstream call: open a streamed POST, hand out its bytes, close it.

    A client is created per request and never reused.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self._client = httpx.AsyncClient(timeout=build_timeout(settings), transport=transport)
        self._response: Optional[httpx.Response] = None
        self._closed = False

    async def open_stream(self, body: NotionRequestBody) -> httpx.Response:
        request = self._client.build_request(
            "POST",
            self.settings.notion_api_url,
            json=body.to_wire(),
            headers=build_headers(self.settings),
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.RequestError as e:
            logger.error(f"Connection to Notion API failed: {e!r}")
            await self.aclose()
            raise UpstreamConnectionError(f"Error connecting to Notion API: {e}") from e

        self._response = response
        if not response.is_success:
            excerpt = await self._read_excerpt(response)
            logger.error(f"Notion API returned {response.status_code}: {excerpt}")
            await self.aclose()
            raise UpstreamAPIError(
                f"Notion API error: HTTP {response.status_code}",
                status_code=response.status_code,
                body=excerpt,
            )

        logger.info(f"Notion API stream opened (trace {body.trace_id})")
        return response

    async def _read_excerpt(self, response: httpx.Response) -> str:
        data = b""
        try:
            async for chunk in response.aiter_bytes():
                data += chunk
                if len(data) >= ERROR_EXCERPT_BYTES:
                    break
        except (httpx.HTTPError, httpx.StreamError):
            pass
        return data[:ERROR_EXCERPT_BYTES].decode("utf-8", errors="replace")

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        if self._response is None:
            raise RuntimeError("open_stream() must be called first")
        return self._response.aiter_bytes()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            if self._response is not None:
                await self._response.aclose()
        finally:
            await self._client.aclose()
