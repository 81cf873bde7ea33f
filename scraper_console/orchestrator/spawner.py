import json
import logging
import time

from scraper_console.adapters.manager.base import ManagerError
from scraper_console.orchestrator import errors
from scraper_console.orchestrator.contracts import BatchResult, SpawnOutcome

logger = logging.getLogger(__name__)


class SpawnOrchestrator:
    def __init__(self, manager, status_store, max_batch: int = 50):
        self.manager = manager
        self.status = status_store
        self.max_batch = max_batch

    async def spawn_one(self) -> BatchResult:
        """Spawn a single scraper instance (the plain "Spawn Scraper" button)."""
        return await self.spawn_many(1)

    async def spawn_many(self, count: int) -> BatchResult:
        """
        Spawn `count` instances strictly one after another.

        Each request is fully handled (success or failure lines logged) before
        the next is issued. A failed request never stops the batch. The loading
        flag is raised once for the whole batch.
        """
        rejected = self.reserve(count)
        if rejected:
            return rejected
        return await self.run_reserved(count)

    def reserve(self, count: int) -> BatchResult | None:
        """Raise the loading flag for a batch, or return why it can't start."""
        if self.status.closed:
            return BatchResult(ok=False, requested=count, error_code=errors.ERR_CLOSED)
        if count < 1 or count > self.max_batch:
            return BatchResult(ok=False, requested=count, error_code=errors.ERR_INVALID_COUNT)
        if self.status.busy:
            return BatchResult(ok=False, requested=count, error_code=errors.ERR_BUSY)
        self.status.set_busy(True)
        return None

    async def run_reserved(self, count: int) -> BatchResult:
        """Run a batch whose loading flag was raised by reserve()."""
        t0 = time.time()
        outcomes: list[SpawnOutcome] = []
        try:
            if count > 1:
                self.status.log(f"Spawning {count} scraper instances sequentially...")
            for _ in range(count):
                outcomes.append(await self._attempt())

            succeeded = sum(1 for o in outcomes if o.ok)
            if count > 1:
                self.status.log(f"Batch complete: {succeeded}/{count} scraper instances started")
            return BatchResult(
                ok=succeeded == count, requested=count,
                succeeded=succeeded, failed=count - succeeded,
                duration_ms=int((time.time() - t0) * 1000),
                outcomes=outcomes,
            )
        finally:
            self.status.set_busy(False)

    async def _attempt(self) -> SpawnOutcome:
        # Never raises: every failure becomes console lines and a failed outcome
        self.status.log("Requesting new scraper instance...")
        try:
            data = await self.manager.spawn()
        except ManagerError as e:
            self.status.log(f"Error: {e}")
            if e.response_body is not None:
                self.status.log(f"Server responded with: {json.dumps(e.response_body, default=str)}")
            return SpawnOutcome(ok=False, error=str(e), response_body=e.response_body)
        except Exception as e:
            logger.exception("unexpected spawn failure")
            self.status.log("An unknown error occurred")
            return SpawnOutcome(ok=False, error=f"{type(e).__name__}: {e}")

        cid = data.get("container_id")
        message = data.get("message")
        if cid:
            self.status.log(f"Container ID: {cid}")
        elif message:
            # older Scraper-Manager builds only answer with a message
            self.status.log(str(message))
        self.status.log("Scraper instance started successfully!")
        return SpawnOutcome(ok=True, container_id=cid, message=message)
