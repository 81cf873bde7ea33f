import asyncio
import random
import uuid
from datetime import datetime, timezone

from scraper_console.adapters.manager.base import ScraperManagerAdapter

# Simulated scraper timings, keep these short for local runs
_SPAWN_S = 0.2      # container start
_RUN_S = 2.0        # hello -> complete


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MockManager(ScraperManagerAdapter):
    """In-process Scraper-Manager: spawned containers say hello, then complete."""

    def __init__(self, spawn_s: float = _SPAWN_S, run_s: float = _RUN_S):
        self.base_url = "mock://scraper-manager"
        self.spawn_s = spawn_s
        self.run_s = run_s
        self.messages: list[dict] = []
        self._runs: set[asyncio.Task] = set()

    async def fetch_messages(self) -> list:
        return list(self.messages)

    async def spawn(self) -> dict:
        await asyncio.sleep(self.spawn_s)
        cid = uuid.uuid4().hex[:12]
        self.messages.append({
            "timestamp": _now(),
            "type": "hello",
            "container_id": cid,
            "message": "Hello from scraper!",
        })
        if self.run_s <= 0:
            self._complete(cid)
        else:
            task = asyncio.create_task(self._finish_later(cid))
            self._runs.add(task)
            task.add_done_callback(self._runs.discard)
        return {"container_id": cid}

    async def _finish_later(self, cid: str):
        await asyncio.sleep(self.run_s)
        self._complete(cid)

    def _complete(self, cid: str):
        self.messages.append({
            "timestamp": _now(),
            "type": "complete",
            "container_id": cid,
            "status": "success",
            "result": {"items_scraped": random.randint(1, 100), "container_id": cid},
        })

    async def get_status(self) -> dict:
        return {"ok": True, "messages": len(self.messages)}

    async def aclose(self):
        for task in list(self._runs):
            task.cancel()
