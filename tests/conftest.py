"""Shared fakes for the console tests."""

from __future__ import annotations

import asyncio
from typing import Any, Coroutine, TypeVar

import pytest

from scraper_console.adapters.manager.base import ManagerError, ScraperManagerAdapter
from scraper_console.services.status_store import StatusStore

T = TypeVar("T")


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run an async coroutine synchronously for testing."""
    return asyncio.run(coro)


class FakeManager(ScraperManagerAdapter):
    """Scriptable Scraper-Manager.

    feed: the list GET /messages returns (mutate it between ticks).
    fetch_error: raised by the next fetches while set.
    hold_fetch: when set, fetches wait on `release` before answering.
    spawn_script: per-call results for POST /spawn, a dict or an exception.
    """

    def __init__(self, feed: list | None = None, spawn_script: list | None = None):
        self.base_url = "http://fake-manager"
        self.feed = list(feed or [])
        self.fetch_error: Exception | None = None
        self.hold_fetch = False
        self.release: asyncio.Event | None = None
        self.fetch_calls = 0
        self.spawn_script = list(spawn_script or [])
        self.spawn_calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def fetch_messages(self) -> list:
        self.fetch_calls += 1
        if self.hold_fetch:
            if self.release is None:
                self.release = asyncio.Event()
            await self.release.wait()
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.feed)

    async def spawn(self) -> dict:
        self.spawn_calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            result = self.spawn_script[self.spawn_calls - 1] if self.spawn_script else {"container_id": f"c{self.spawn_calls}"}
            if isinstance(result, Exception):
                raise result
            return result
        finally:
            self.in_flight -= 1

    async def get_status(self) -> dict:
        if self.fetch_error is not None:
            raise self.fetch_error
        return {"ok": True}

    async def aclose(self):
        self.closed = True


def hello(i: int) -> dict:
    return {"timestamp": f"T{i}", "type": "hello", "container_id": f"c{i}", "message": f"hi {i}"}


def complete(i: int, result: Any = None) -> dict:
    return {"timestamp": f"T{i}", "type": "complete", "container_id": f"c{i}",
            "status": "ok", "result": result if result is not None else {"n": i}}


def server_error(body: Any = None) -> ManagerError:
    return ManagerError("Request failed with status code 500", status_code=500, response_body=body)


@pytest.fixture()
def status() -> StatusStore:
    return StatusStore()


@pytest.fixture()
def manager() -> FakeManager:
    return FakeManager()
