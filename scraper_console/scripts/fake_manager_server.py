"""
Fake Scraper-Manager for running the console without real containers.

Serves GET /messages and POST /spawn on port 8000. Each spawn appends a
"hello" event right away and a "complete" event a few seconds later.
FAIL_EVERY=N makes every Nth spawn answer 500 with a JSON error body.

Usage:
    python -m scraper_console.scripts.fake_manager_server
    FAIL_EVERY=3 python -m scraper_console.scripts.fake_manager_server
"""

import asyncio
import os
import random
import uuid
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

FAIL_EVERY = int(os.getenv("FAIL_EVERY", "0"))
RUN_S = float(os.getenv("RUN_S", "3"))

app = FastAPI(title="fake-scraper-manager")
messages: list[dict] = []
spawn_calls = 0


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _run_scraper(cid: str):
    await asyncio.sleep(RUN_S)
    messages.append({
        "timestamp": _now(),
        "type": "complete",
        "container_id": cid,
        "status": "success",
        "result": {"items_scraped": random.randint(1, 100), "pages": random.randint(1, 10)},
    })
    print(f"[manager] {cid} complete")


@app.get("/messages")
async def get_messages():
    return {"messages": messages}


@app.post("/spawn")
async def spawn():
    global spawn_calls
    spawn_calls += 1
    if FAIL_EVERY and spawn_calls % FAIL_EVERY == 0:
        print(f"[manager] spawn #{spawn_calls} failing on purpose")
        return JSONResponse(status_code=500, content={"detail": "docker daemon unavailable"})

    cid = uuid.uuid4().hex[:12]
    messages.append({
        "timestamp": _now(),
        "type": "hello",
        "container_id": cid,
        "message": "Hello from scraper!",
    })
    print(f"[manager] spawned {cid}")
    asyncio.create_task(_run_scraper(cid))
    return {"container_id": cid}


if __name__ == "__main__":
    print("Fake Scraper-Manager starting on http://localhost:8000")
    uvicorn.run(app, host="0.0.0.0", port=8000)
