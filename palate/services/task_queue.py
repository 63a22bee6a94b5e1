"""RQ task queue wrapper with an inline fallback for local/test runs.

Invariants:
- ``dispatch`` never raises into its caller and never waits for the job.
- Inline tasks are tracked until they finish so ``drain`` can await them.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Awaitable, Callable

from redis import Redis
from redis.exceptions import RedisError
from rq import Queue, Retry
from rq.registry import FailedJobRegistry, ScheduledJobRegistry, StartedJobRegistry
from rq.worker import Worker

from palate.core.config import settings

logger = logging.getLogger("palate.services.task_queue")

# Profile recomputes are idempotent, so a couple of quick retries are safe.
DEFAULT_RETRY = Retry(max=2, interval=[5, 30])


class TaskQueue:
    """Thin wrapper around RQ that can fall back to inline execution."""

    def __init__(self) -> None:
        self.queue_names: list[str] = settings.worker_queue_names or ["default"]
        self._connection: Redis | None = None
        self._enabled = False
        self._inline_tasks: set[asyncio.Task] = set()
        self._bootstrap()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def connection(self) -> Redis | None:
        return self._connection

    def _bootstrap(self) -> None:
        """Initialize Redis connectivity unless disabled for tests."""
        if settings.environment.lower() == "test":
            logger.info("Task queue disabled in test environment")
            return
        try:
            connection = Redis.from_url(settings.redis_url)
            connection.ping()
        except RedisError as exc:  # pragma: no cover - network/redis specific
            logger.warning("Redis unavailable; running jobs inline: %s", exc)
            return
        self._connection = connection
        self._enabled = True
        logger.info("Task queue ready (queues: %s)", ", ".join(self.queue_names))

    def resolve_queue_name(self, queue_name: str | None) -> str:
        if queue_name and queue_name in self.queue_names:
            return queue_name
        return self.queue_names[0] if self.queue_names else "default"

    def get_queue(self, queue_name: str | None = None) -> Queue:
        """Return a configured queue instance for enqueuing jobs."""
        if not self._connection:
            raise RuntimeError("Queue connection not initialized")
        return Queue(self.resolve_queue_name(queue_name), connection=self._connection)

    async def enqueue_profile_recompute(self, *, user_id: uuid.UUID) -> str | None:
        """Schedule a rebuild of the user's profile embedding."""
        from palate.jobs.profiles import recompute_profile_job, recompute_profile_task

        return await self.dispatch(
            recompute_profile_job,
            inline=recompute_profile_task,
            queue_name="profiles",
            timeout_seconds=60,
            description=f"profile:{user_id}",
            user_id=str(user_id),
        )

    async def enqueue_dish_embedding(self, *, dish_id: uuid.UUID) -> str | None:
        """Schedule embedding generation for one dish."""
        from palate.jobs.embeddings import generate_dish_embedding_job, generate_dish_embedding_task

        # No RQ retry: failures are recorded on the dish and picked up by the backfill sweep.
        return await self.dispatch(
            generate_dish_embedding_job,
            inline=generate_dish_embedding_task,
            queue_name="embeddings",
            timeout_seconds=int(settings.embedding_timeout_seconds) + 30,
            retry=None,
            description=f"embed:{dish_id}",
            dish_id=str(dish_id),
        )

    async def dispatch(
        self,
        func: Callable[..., Any],
        *,
        inline: Callable[..., Awaitable[Any]],
        queue_name: str | None = None,
        timeout_seconds: int = 60,
        retry: Retry | None = DEFAULT_RETRY,
        description: str | None = None,
        **kwargs: Any,
    ) -> str | None:
        """Fire-and-forget: enqueue ``func`` on RQ, else schedule ``inline`` on this loop.

        Returns the RQ job id when enqueued, None when run inline or when
        dispatch itself failed (which is logged, not raised).
        """
        if self._enabled and self._connection:

            def _enqueue() -> str:
                queue = self.get_queue(queue_name)
                enqueue_kwargs: dict[str, Any] = {
                    "kwargs": kwargs,
                    "job_timeout": timeout_seconds,
                    "description": description,
                }
                if retry:
                    enqueue_kwargs["retry"] = retry
                return queue.enqueue(func, **enqueue_kwargs).id

            try:
                return await asyncio.to_thread(_enqueue)
            except RedisError as exc:  # pragma: no cover - network/redis specific
                logger.warning("Falling back to inline execution after queue failure: %s", exc)

        try:
            task = asyncio.get_running_loop().create_task(inline(**kwargs), name=description)
        except RuntimeError as exc:
            logger.error("Unable to schedule %s inline: %s", description or func.__name__, exc)
            return None
        self._inline_tasks.add(task)
        task.add_done_callback(self._finish_inline)
        return None

    def _finish_inline(self, task: asyncio.Task) -> None:
        self._inline_tasks.discard(task)
        if task.cancelled():
            logger.warning("Inline task %s was cancelled", task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Inline task %s failed", task.get_name(), exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._inline_tasks)

    async def drain(self) -> None:
        """Wait for inline tasks, including any they schedule, to finish."""
        while self._inline_tasks:
            await asyncio.gather(*list(self._inline_tasks), return_exceptions=True)

    def snapshot(self) -> dict[str, Any]:
        """Return a diagnostic snapshot of queue and worker state."""
        if not self._connection:
            return {
                "status": "inline",
                "queues": [],
                "workers": [],
                "pending_inline": self.pending,
            }

        queues: list[dict[str, Any]] = []
        for name in self.queue_names:
            queue = Queue(name, connection=self._connection)
            queues.append(
                {
                    "name": name,
                    "size": queue.count,
                    "scheduled": len(ScheduledJobRegistry(queue=queue)),
                    "started": len(StartedJobRegistry(queue=queue)),
                    "failed": len(FailedJobRegistry(queue=queue)),
                }
            )

        workers: list[dict[str, Any]] = []
        try:
            for worker in Worker.all(connection=self._connection):
                workers.append(
                    {
                        "name": worker.name,
                        "state": getattr(worker, "state", "unknown"),
                        "queues": list(worker.queue_names()),
                    }
                )
        except RedisError as exc:  # pragma: no cover - network/redis specific
            logger.warning("Unable to list workers: %s", exc)

        return {
            "status": "online" if workers else "degraded",
            "queues": queues,
            "workers": workers,
            "checked_at": datetime.utcnow().isoformat() + "Z",
        }


task_queue = TaskQueue()
