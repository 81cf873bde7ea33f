import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from scraper_console.adapters.manager.base import ManagerError
from scraper_console.orchestrator.contracts import BatchResult
from scraper_console.orchestrator.spawner import SpawnOrchestrator
from scraper_console.orchestrator.synchronizer import EventSynchronizer
from scraper_console.services.config import Settings
from scraper_console.services.models import (
    ConsoleResponse, SpawnOutcomeOut, SpawnRequest, SpawnResponse,
)
from scraper_console.services.status_store import StatusStore

logger = logging.getLogger(__name__)


def build_manager(settings: Settings):
    if settings.manager_adapter == "mock":
        from scraper_console.adapters.manager.mock_manager import MockManager
        return MockManager()
    if settings.manager_adapter != "http":
        raise ValueError(f"unknown MANAGER_ADAPTER {settings.manager_adapter!r} (expected http or mock)")
    from scraper_console.adapters.manager.http_manager import HttpManager
    return HttpManager(settings.manager_url, timeout=settings.manager_timeout_s)


def _to_response(rr: BatchResult) -> SpawnResponse:
    return SpawnResponse(
        ok=rr.ok,
        requested=rr.requested,
        succeeded=rr.succeeded,
        failed=rr.failed,
        duration_ms=rr.duration_ms,
        error_code=rr.error_code,
        outcomes=[
            SpawnOutcomeOut(ok=o.ok, container_id=o.container_id, message=o.message, error=o.error)
            for o in rr.outcomes
        ],
    )


def create_app(settings: Settings | None = None, manager=None) -> FastAPI:
    settings = settings or Settings.from_env()
    manager = manager or build_manager(settings)

    status = StatusStore(capacity=settings.log_capacity)
    sync = EventSynchronizer(
        manager, status,
        poll_interval_ms=settings.poll_interval_ms,
        shrink_policy=settings.shrink_policy,
    )
    spawner = SpawnOrchestrator(manager, status, max_batch=settings.spawn_max_batch)
    spawn_tasks: set[asyncio.Task] = set()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        status.log(f"Connected to backend at {manager.base_url or settings.manager_url}")
        status.log(f"Polling for messages every {settings.poll_interval_ms}ms")
        logger.info("console up: backend=%s poll=%dms", settings.manager_url, settings.poll_interval_ms)
        sync.start()
        yield
        await sync.stop()
        status.close()
        # spawn requests are not cancelled; let them finish against the closed store
        if spawn_tasks:
            await asyncio.wait(set(spawn_tasks), timeout=settings.manager_timeout_s)
        await manager.aclose()
        logger.info("console down")

    app = FastAPI(title="scraper-console", lifespan=lifespan)
    app.state.settings = settings
    app.state.status = status
    app.state.sync = sync
    app.state.spawner = spawner
    app.state.manager = manager

    @app.get("/console", response_model=ConsoleResponse)
    def get_console():
        return ConsoleResponse(
            loading=status.busy,
            logs=status.logs,
            cursor=sync.cursor,
            backend_url=settings.manager_url,
            poll_interval_ms=settings.poll_interval_ms,
        )

    @app.post("/spawn", response_model=SpawnResponse)
    async def spawn(req: SpawnRequest | None = None):
        req = req or SpawnRequest()
        if req.wait:
            return _to_response(await spawner.spawn_many(req.count))

        # reserve before scheduling so a second click sees BUSY, not "queued"
        rejected = spawner.reserve(req.count)
        if rejected:
            return _to_response(rejected)
        task = asyncio.create_task(spawner.run_reserved(req.count))
        spawn_tasks.add(task)
        task.add_done_callback(spawn_tasks.discard)
        return SpawnResponse(ok=True, queued=True, requested=req.count)

    @app.get("/health")
    async def health():
        checks = {"api": True, "adapter": type(manager).__name__, "backend_url": settings.manager_url}
        try:
            await manager.get_status()
            checks["manager_reachable"] = True
        except ManagerError as e:
            checks["manager_reachable"] = False
            checks["manager_error"] = str(e)
        checks["sync_running"] = sync.running
        checks["all_ok"] = checks["manager_reachable"] and checks["api"]
        return checks

    return app
