import asyncio

from conftest import FakeManager, run_async, server_error
from scraper_console.adapters.manager.base import ManagerError
from scraper_console.orchestrator import errors
from scraper_console.orchestrator.spawner import SpawnOrchestrator


def test_spawn_one_with_container_id(status):
    mgr = FakeManager(spawn_script=[{"container_id": "abc123"}])
    rr = run_async(SpawnOrchestrator(mgr, status).spawn_one())

    assert rr.ok and rr.succeeded == 1 and rr.failed == 0
    assert rr.outcomes[0].container_id == "abc123"
    assert status.logs == [
        "Requesting new scraper instance...",
        "Container ID: abc123",
        "Scraper instance started successfully!",
    ]
    assert status.busy is False


def test_spawn_one_with_legacy_message(status):
    mgr = FakeManager(spawn_script=[{"message": "Scraper started"}])
    run_async(SpawnOrchestrator(mgr, status).spawn_one())
    assert status.logs[1:] == ["Scraper started", "Scraper instance started successfully!"]


def test_spawn_one_with_empty_body(status):
    mgr = FakeManager(spawn_script=[{}])
    rr = run_async(SpawnOrchestrator(mgr, status).spawn_one())
    assert rr.ok
    assert status.logs == ["Requesting new scraper instance...", "Scraper instance started successfully!"]


def test_spawn_failure_with_server_body(status):
    mgr = FakeManager(spawn_script=[server_error({"detail": "no capacity"})])
    rr = run_async(SpawnOrchestrator(mgr, status).spawn_one())

    assert not rr.ok and rr.failed == 1
    assert rr.error_code is None
    assert status.logs == [
        "Requesting new scraper instance...",
        "Error: Request failed with status code 500",
        'Server responded with: {"detail": "no capacity"}',
    ]
    assert status.busy is False


def test_spawn_failure_without_response(status):
    mgr = FakeManager(spawn_script=[ManagerError("All connection attempts failed")])
    run_async(SpawnOrchestrator(mgr, status).spawn_one())
    assert status.logs[1:] == ["Error: All connection attempts failed"]


def test_unexpected_exception_does_not_escape(status):
    mgr = FakeManager(spawn_script=[RuntimeError("boom")])
    rr = run_async(SpawnOrchestrator(mgr, status).spawn_one())
    assert not rr.ok
    assert "RuntimeError" in rr.outcomes[0].error
    assert status.logs[1:] == ["An unknown error occurred"]


def test_batch_runs_every_call_in_order_despite_failures(status):
    script = [{"container_id": f"ok{i}"} for i in range(1, 6)] + [server_error({"call": i}) for i in range(6, 11)]
    mgr = FakeManager(spawn_script=script)
    rr = run_async(SpawnOrchestrator(mgr, status).spawn_many(10))

    assert mgr.spawn_calls == 10
    assert mgr.max_in_flight == 1
    assert (rr.requested, rr.succeeded, rr.failed, rr.ok) == (10, 5, 5, False)

    logs = status.logs
    assert logs[0] == "Spawning 10 scraper instances sequentially..."
    assert logs[-1] == "Batch complete: 5/10 scraper instances started"
    assert logs.count("Requesting new scraper instance...") == 10
    ids = [line for line in logs if line.startswith("Container ID: ")]
    assert ids == [f"Container ID: ok{i}" for i in range(1, 6)]
    bodies = [line for line in logs if line.startswith("Server responded with: ")]
    assert bodies == [f'Server responded with: {{"call": {i}}}' for i in range(6, 11)]
    # every success line comes before the first failure line
    assert logs.index("Container ID: ok5") < logs.index("Error: Request failed with status code 500")
    assert status.busy is False


def test_loading_flag_held_for_whole_batch(status):
    mgr = FakeManager()
    spawner = SpawnOrchestrator(mgr, status)
    seen = []

    async def scenario():
        task = asyncio.create_task(spawner.spawn_many(3))
        await asyncio.sleep(0)
        while not task.done():
            seen.append(status.busy)
            await asyncio.sleep(0)
        return await task

    rr = run_async(scenario())
    assert rr.ok
    assert seen and all(seen)
    assert status.busy is False


def test_busy_rejects_second_sequence(status):
    mgr = FakeManager()
    spawner = SpawnOrchestrator(mgr, status)

    async def scenario():
        first = asyncio.create_task(spawner.spawn_many(2))
        await asyncio.sleep(0)
        second = await spawner.spawn_one()
        return await first, second

    first, second = run_async(scenario())
    assert first.ok
    assert second.error_code == errors.ERR_BUSY
    assert mgr.spawn_calls == 2


def test_invalid_counts_rejected(status, manager):
    spawner = SpawnOrchestrator(manager, status, max_batch=5)
    assert run_async(spawner.spawn_many(0)).error_code == errors.ERR_INVALID_COUNT
    assert run_async(spawner.spawn_many(6)).error_code == errors.ERR_INVALID_COUNT
    assert manager.spawn_calls == 0
    assert status.logs == []


def test_closed_store_runs_calls_but_writes_nothing(status):
    mgr = FakeManager()
    spawner = SpawnOrchestrator(mgr, status)

    async def scenario():
        task = asyncio.create_task(spawner.spawn_many(3))
        await asyncio.sleep(0)
        status.close()
        return await task

    rr = run_async(scenario())
    assert mgr.spawn_calls == 3
    assert rr.succeeded == 3
    assert status.logs == ["Spawning 3 scraper instances sequentially...", "Requesting new scraper instance..."]
    assert run_async(spawner.spawn_one()).error_code == errors.ERR_CLOSED
