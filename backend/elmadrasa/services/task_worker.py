"""
Background task worker: an in-process queue for best-effort side effects
(student notifications) that must never block or fail a request.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Tuple

from elmadrasa.config import logger, TASK_QUEUE_SIZE


@dataclass
class Job:
    name: str
    func: Callable[..., Awaitable[Any]]
    args: Tuple = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


class TaskQueue:
    """
    FIFO of async jobs. Failures are logged and dropped; nothing is retried.
    """

    def __init__(self, maxsize: int = TASK_QUEUE_SIZE):
        self._queue: "asyncio.Queue[Job]" = asyncio.Queue(maxsize=maxsize)

    def __len__(self) -> int:
        return self._queue.qsize()

    def enqueue(self, name: str, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> bool:
        """Queue a job; returns False (and logs) when the queue is full."""
        try:
            self._queue.put_nowait(Job(name=name, func=func, args=args, kwargs=kwargs))
            return True
        except asyncio.QueueFull:
            logger.warning(f"Task queue full, dropping job '{name}'")
            return False

    async def _run(self, job: Job) -> None:
        try:
            await job.func(*job.args, **job.kwargs)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Background job '{job.name}' failed: {e}", exc_info=True)

    async def run_once(self) -> bool:
        """Run the next queued job, if any. Returns whether one ran."""
        try:
            job = self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return False
        try:
            await self._run(job)
        finally:
            self._queue.task_done()
        return True

    async def drain(self) -> int:
        """Run every queued job; returns how many ran."""
        count = 0
        while await self.run_once():
            count += 1
        return count

    async def worker_loop(self) -> None:
        """Main worker loop. Runs until cancelled."""
        logger.info("Task worker loop started")
        while True:
            job = await self._queue.get()
            try:
                await self._run(job)
            finally:
                self._queue.task_done()


task_queue = TaskQueue()
