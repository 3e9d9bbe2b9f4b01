"""CPU worker pool tests."""

import asyncio
import threading
import time

import pytest

from accounts.shared.core.exceptions import TaskDispatchFailure
from accounts.shared.core.workers import CpuWorkerPool


async def test_run_returns_result():
    async with CpuWorkerPool(max_workers=1, max_pending=1) as pool:
        assert await pool.run(sum, [1, 2, 3]) == 6


async def test_run_passes_keyword_arguments():
    async with CpuWorkerPool(max_workers=1, max_pending=1) as pool:
        assert await pool.run(int, "ff", base=16) == 255


async def test_job_exception_propagates():
    def boom():
        raise KeyError("boom")

    async with CpuWorkerPool(max_workers=1, max_pending=1) as pool:
        with pytest.raises(KeyError):
            await pool.run(boom)


async def test_jobs_run_off_the_event_loop():
    """Test the loop keeps serving coroutines while a job blocks its worker."""
    release = threading.Event()
    loop_thread = threading.get_ident()

    def blocking_job():
        assert threading.get_ident() != loop_thread
        return release.wait(timeout=5)

    async with CpuWorkerPool(max_workers=1, max_pending=1) as pool:
        job = asyncio.ensure_future(pool.run(blocking_job))
        # The loop is free: this sleep completes while the job is still blocked
        await asyncio.sleep(0.01)
        assert not job.done()
        release.set()
        assert await job is True


async def test_admission_is_bounded():
    """Test no more than max_pending jobs are in flight at once."""
    lock = threading.Lock()
    state = {"running": 0, "peak": 0}

    def tracked_job():
        with lock:
            state["running"] += 1
            state["peak"] = max(state["peak"], state["running"])
        time.sleep(0.02)
        with lock:
            state["running"] -= 1

    async with CpuWorkerPool(max_workers=2, max_pending=2) as pool:
        await asyncio.gather(*[pool.run(tracked_job) for _ in range(6)])

    assert state["peak"] <= 2


async def test_run_after_shutdown():
    pool = CpuWorkerPool(max_workers=1, max_pending=1)
    pool.shutdown()

    assert pool.is_closed
    with pytest.raises(TaskDispatchFailure) as exc_info:
        await pool.run(sum, [1])

    assert exc_info.value.details["task"] == "sum"


async def test_queued_job_dropped_at_shutdown():
    """Test a job still waiting for a worker fails with TaskDispatchFailure on shutdown."""
    release = threading.Event()
    pool = CpuWorkerPool(max_workers=1, max_pending=4)

    running = asyncio.ensure_future(pool.run(release.wait, 5))
    queued = asyncio.ensure_future(pool.run(sum, [1, 2]))
    await asyncio.sleep(0.01)

    pool.shutdown(wait=False)
    release.set()

    with pytest.raises(TaskDispatchFailure):
        await queued
    assert await running is True


async def test_caller_cancellation_is_not_dispatch_failure():
    release = threading.Event()

    async with CpuWorkerPool(max_workers=1, max_pending=1) as pool:
        job = asyncio.ensure_future(pool.run(release.wait, 5))
        await asyncio.sleep(0.01)
        job.cancel()
        with pytest.raises(asyncio.CancelledError):
            await job
        release.set()


async def test_slot_held_until_abandoned_job_finishes():
    """Test a cancelled caller does not free its slot while the job still runs."""
    release = threading.Event()

    async with CpuWorkerPool(max_workers=1, max_pending=1) as pool:
        abandoned = asyncio.ensure_future(pool.run(release.wait, 5))
        await asyncio.sleep(0.01)
        abandoned.cancel()
        with pytest.raises(asyncio.CancelledError):
            await abandoned

        follower = asyncio.ensure_future(pool.run(sum, [1, 2]))
        await asyncio.sleep(0.05)
        assert pool.in_flight == 1
        assert not follower.done()

        release.set()
        assert await follower == 3

    assert pool.in_flight == 0


def test_shutdown_is_idempotent():
    pool = CpuWorkerPool()
    pool.shutdown()
    pool.shutdown()

    assert pool.is_closed


@pytest.mark.parametrize("max_workers, max_pending", [(0, 1), (4, 2)])
def test_invalid_sizing(max_workers, max_pending):
    with pytest.raises(ValueError):
        CpuWorkerPool(max_workers=max_workers, max_pending=max_pending)
