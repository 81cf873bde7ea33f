"""
HTTP adapter for the Scraper-Manager service.

Contract:
  GET  /messages  -> {"messages": [{timestamp, type, container_id, ...}, ...]}
                     always the full history, no paging
  POST /spawn     -> {"container_id": "..."}  (older builds: {"message": "..."})
                     errors: non-2xx, body is usually a JSON object
"""

import logging

import httpx

from scraper_console.adapters.manager.base import (
    MalformedFeedError,
    ManagerError,
    ScraperManagerAdapter,
)

logger = logging.getLogger(__name__)


def _response_body(resp: httpx.Response):
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return resp.text


class HttpManager(ScraperManagerAdapter):
    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 10.0,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def _request(self, method: str, path: str) -> httpx.Response:
        try:
            resp = await self._client.request(method, path)
        except httpx.HTTPError as e:
            # str() of some httpx errors is empty (e.g. bare timeouts)
            raise ManagerError(str(e) or type(e).__name__) from e
        if resp.is_error:
            raise ManagerError(
                f"Request failed with status code {resp.status_code}",
                status_code=resp.status_code,
                response_body=_response_body(resp),
            )
        return resp

    async def fetch_messages(self) -> list:
        resp = await self._request("GET", "/messages")
        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedFeedError("GET /messages returned non-JSON body") from e
        if not isinstance(data, dict):
            raise MalformedFeedError(f"GET /messages returned {type(data).__name__}, expected object")
        messages = data.get("messages") or []
        if not isinstance(messages, list):
            raise MalformedFeedError("GET /messages: 'messages' is not a list")
        return messages

    async def spawn(self) -> dict:
        logger.debug("POST %s/spawn", self.base_url)
        resp = await self._request("POST", "/spawn")
        body = _response_body(resp)
        return body if isinstance(body, dict) else {}

    async def get_status(self) -> dict:
        messages = await self.fetch_messages()
        return {"ok": True, "messages": len(messages)}

    async def aclose(self):
        await self._client.aclose()
