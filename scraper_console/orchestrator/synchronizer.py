"""
Event synchronizer: mirrors the Scraper-Manager message feed into the console.

Every poll period the full feed is fetched (GET /messages always returns the
whole history). Only the suffix past the cursor is formatted and appended to
the console log, then the cursor moves to the feed length. A tick either
commits all of its lines and the new cursor, or nothing.

Ticks never overlap: if the previous fetch is still outstanding when the
timer fires, that period is skipped instead of issuing a second fetch.
"""

import asyncio
import logging
from typing import Literal

from scraper_console.orchestrator.events import format_raw_events

logger = logging.getLogger(__name__)

ShrinkPolicy = Literal["warn", "reset"]
SHRINK_POLICIES = ("warn", "reset")


class EventSynchronizer:
    def __init__(self, manager, status_store, poll_interval_ms: int = 1000,
                 shrink_policy: ShrinkPolicy = "warn"):
        if poll_interval_ms <= 0:
            raise ValueError(f"poll interval must be positive, got {poll_interval_ms}ms")
        if shrink_policy not in SHRINK_POLICIES:
            raise ValueError(f"unknown shrink policy {shrink_policy!r}")
        self.manager = manager
        self.status = status_store
        self.poll_interval_ms = poll_interval_ms
        self.shrink_policy = shrink_policy

        self._cursor = 0
        self._ticking = False
        self._stopped = False
        self._failures = 0
        self._shrunk_to: int | None = None
        self._loop_task: asyncio.Task | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def tick(self) -> int:
        """Poll once. Returns how many new feed events were consumed."""
        if self._stopped:
            return 0
        if self._ticking:
            logger.debug("poll skipped: previous fetch still in flight")
            return 0

        self._ticking = True
        try:
            try:
                feed = await self.manager.fetch_messages()
            except Exception as e:
                self._fetch_failed(e)
                return 0

            # stop() may have run while we were waiting on the network
            if self._stopped:
                return 0
            if self._failures:
                logger.info("message feed reachable again after %d failed polls", self._failures)
                self._failures = 0

            return self._commit(feed)
        finally:
            self._ticking = False

    def _commit(self, feed: list) -> int:
        n = len(feed)
        start = self._cursor

        if n < start:
            if self.shrink_policy == "reset":
                self.status.log(f"Message feed shrank from {start} to {n} events; replaying from the start")
                logger.warning("message feed shrank from %d to %d, resetting cursor", start, n)
                start = 0
            else:
                if self._shrunk_to != n:
                    self._shrunk_to = n
                    self.status.log(f"Message feed shrank from {start} to {n} events; waiting for new events")
                    logger.warning("message feed shrank from %d to %d, keeping cursor", start, n)
                return 0

        self._shrunk_to = None
        if n <= start:
            # only differs from the old cursor after a reset onto an empty feed
            self._cursor = start
            return 0

        lines = format_raw_events(feed[start:n])
        self.status.log_many(lines)
        self._cursor = n
        return n - start

    def _fetch_failed(self, e: Exception):
        self._failures += 1
        if self._failures == 1:
            logger.warning("error polling for messages: %s", e)
        else:
            logger.debug("error polling for messages (%d in a row): %s", self._failures, e)

    # --- periodic loop ---

    def start(self):
        if self.running:
            return
        self._stopped = False
        self._loop_task = asyncio.create_task(self._run())

    async def _run(self):
        period = self.poll_interval_ms / 1000
        loop = asyncio.get_running_loop()
        next_at = loop.time() + period
        while not self._stopped:
            await asyncio.sleep(max(0.0, next_at - loop.time()))
            next_at += period
            if self._inflight is not None and not self._inflight.done():
                logger.debug("poll period elapsed with fetch in flight, skipping")
                continue
            self._inflight = asyncio.create_task(self.tick())
            self._inflight.add_done_callback(_log_tick_crash)

    async def stop(self):
        self._stopped = True
        for task in (self._loop_task, self._inflight):
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._loop_task = None
        self._inflight = None


def _log_tick_crash(task: asyncio.Task):
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("poll tick crashed: %r", exc)
