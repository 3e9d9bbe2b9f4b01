# 📄 File: accounts/shared/core/workers.py
#
# 🧭 Purpose (Layman Explanation):
# A small team of background helpers that do the slow number-crunching (like password
# hashing) so the part of the app answering requests never has to stop and wait.
#
# 🧪 Purpose (Technical Summary):
# Bounded thread pool dedicated to CPU-bound work. Callers await a future while the
# event loop keeps serving other coroutines; admission is capped by a semaphore and
# dispatch failures surface as TaskDispatchFailure.
#
# 🔗 Dependencies:
# - concurrent.futures.ThreadPoolExecutor
# - asyncio (wrap_future, Semaphore)
# - accounts.shared.core.exceptions (TaskDispatchFailure)
#
# 🔄 Connected Modules / Calls From:
# - accounts.shared.core.security (password hashing and verification)

import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

from .exceptions import TaskDispatchFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CpuWorkerPool:
    """
    Executor for CPU-bound callables with backpressure.

    At most ``max_pending`` jobs are admitted at once; further callers
    suspend until a slot frees up. Jobs run on ``max_workers`` threads,
    which is effective for work that releases the GIL (argon2 does).
    """

    def __init__(
        self,
        max_workers: int = 4,
        max_pending: int = 64,
        thread_name_prefix: str = "cpu_worker"
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if max_pending < max_workers:
            raise ValueError("max_pending must be at least max_workers")

        self.max_workers = max_workers
        self.max_pending = max_pending
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix
        )
        self._slots: Optional[asyncio.Semaphore] = None
        self._closed = False
        self._in_flight = 0

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def in_flight(self) -> int:
        """Jobs admitted to the executor that have not finished yet."""
        return self._in_flight

    def _get_slots(self) -> asyncio.Semaphore:
        # Created lazily so the pool can be built outside a running loop
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.max_pending)
        return self._slots

    def _release_slot(self) -> None:
        self._in_flight -= 1
        self._get_slots().release()

    def _on_job_done(self, loop: asyncio.AbstractEventLoop) -> None:
        # Runs on a worker thread, or on the thread that cancelled the job
        try:
            loop.call_soon_threadsafe(self._release_slot)
        except RuntimeError:
            logger.debug("Event loop closed before a worker slot was released")

    async def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run ``fn(*args, **kwargs)`` on a worker and await its result.

        Exceptions raised by ``fn`` propagate unchanged. The admission
        slot stays taken until the job itself finishes, even when the
        caller stops waiting for it.

        Raises:
            TaskDispatchFailure: If the pool is shut down, refuses the job
                or drops it from its queue during shutdown
        """
        task_name = getattr(fn, "__name__", repr(fn))
        if self._closed:
            raise TaskDispatchFailure("Worker pool is shut down", task=task_name)

        loop = asyncio.get_running_loop()
        call = functools.partial(fn, *args, **kwargs)
        slots = self._get_slots()

        await slots.acquire()
        try:
            job = self._executor.submit(call)
        except RuntimeError as e:
            # ThreadPoolExecutor.submit after shutdown
            slots.release()
            logger.error(f"Failed to dispatch {task_name} to worker pool: {e}")
            raise TaskDispatchFailure(task=task_name) from e

        self._in_flight += 1
        job.add_done_callback(lambda _: self._on_job_done(loop))

        try:
            return await asyncio.wrap_future(job, loop=loop)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if job.cancelled() and not (current and current.cancelling()):
                logger.error(f"{task_name} was dropped from the worker queue at shutdown")
                raise TaskDispatchFailure("Worker pool is shut down", task=task_name) from None
            raise

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting work and release the worker threads."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)
        logger.debug("CPU worker pool shut down")

    async def __aenter__(self) -> "CpuWorkerPool":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)


__all__ = ["CpuWorkerPool"]
