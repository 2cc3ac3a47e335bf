"""In-process review queue.

Submissions enqueue their id; a single worker task produces the review with
retries and exponential backoff. Jobs that keep failing are dead-lettered and
the submission is left in ``failed`` so a later ``POST /review-code`` can retry
it. Pending jobs live in memory only.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional

from mentor.common.errors import NotFound, ReviewNotReady
from mentor.common.utils import describe_error, utcnow_iso
from mentor.core.config import get_settings

logger = logging.getLogger("mentor.reviews.worker")

Runner = Callable[[str], Awaitable[Any]]
FailureHook = Callable[[str, str, int], Awaitable[None]]


@dataclass
class DeadLetter:
    submission_id: str
    attempts: int
    error: str
    failed_at: str = field(default_factory=utcnow_iso)


async def _default_runner(submission_id: str) -> Any:
    from mentor.features.reviews.service import review_service

    return await review_service.review_submission(submission_id)


async def _default_failure_hook(submission_id: str, error: str, attempts: int) -> None:
    from mentor.features.submissions.repository import submissions_repository

    await submissions_repository.mark_failed(submission_id, error, attempts)


class ReviewQueue:
    def __init__(
        self,
        runner: Optional[Runner] = None,
        *,
        on_dead_letter: Optional[FailureHook] = None,
        max_attempts: Optional[int] = None,
        base_delay_s: Optional[float] = None,
        maxsize: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self._runner = runner or _default_runner
        self._on_dead_letter = on_dead_letter or _default_failure_hook
        self.max_attempts = max(1, max_attempts if max_attempts is not None else settings.review_max_attempts)
        self.base_delay_s = base_delay_s if base_delay_s is not None else settings.review_retry_base_delay_s
        self.maxsize = maxsize if maxsize is not None else settings.review_queue_size
        self.dead_letters: List[DeadLetter] = []
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._overflow: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def depth(self) -> int:
        return self._queue.qsize() if self._queue is not None else 0

    def retry_delay(self, attempt: int) -> float:
        return self.base_delay_s * (2 ** (attempt - 1))

    def start(self) -> None:
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            # queue and worker are bound to the loop that created them
            self._loop = loop
            self._queue = None
            self._task = None
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.maxsize)
        if not self.running:
            self._task = loop.create_task(self._worker_loop())
            logger.info("review_worker_started max_attempts=%s base_delay_s=%s", self.max_attempts, self.base_delay_s)

    async def stop(self) -> None:
        task, self._task = self._task, None
        for pending in list(self._overflow):
            pending.cancel()
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.info("review_worker_stopped dropped=%s", self.depth())
        self._queue = None
        self._loop = None

    def enqueue(self, submission_id: str) -> None:
        """Schedule a review without waiting for it; must run inside the event loop."""
        self.start()
        queue = self._queue
        if queue is None:
            raise RuntimeError("review queue failed to start")
        try:
            queue.put_nowait(submission_id)
        except asyncio.QueueFull:
            task = asyncio.get_running_loop().create_task(queue.put(submission_id))
            self._overflow.add(task)
            task.add_done_callback(self._overflow.discard)
            logger.warning("review_queue_full submission_id=%s depth=%s", submission_id, self.depth())
            return
        logger.info("review_enqueued submission_id=%s depth=%s", submission_id, self.depth())

    async def join(self) -> None:
        if self._queue is not None:
            await self._queue.join()

    async def _worker_loop(self) -> None:
        queue = self._queue
        if queue is None:
            return
        while True:
            submission_id = await queue.get()
            try:
                await self._process(submission_id)
            except asyncio.CancelledError:
                logger.warning("review_worker_cancelled submission_id=%s requeued", submission_id)
                queue.put_nowait(submission_id)
                raise
            finally:
                queue.task_done()

    async def _process(self, submission_id: str) -> None:
        last_error = ""
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self._runner(submission_id)
                logger.info("review_job_done submission_id=%s attempt=%s", submission_id, attempt)
                return
            except ReviewNotReady:
                logger.info("review_job_skipped submission_id=%s reason=claimed_elsewhere", submission_id)
                return
            except NotFound as exc:
                logger.warning("review_job_dropped submission_id=%s reason=%s", submission_id, exc.message)
                return
            except Exception as exc:
                last_error = describe_error(exc)
                if attempt >= self.max_attempts:
                    break
                delay = self.retry_delay(attempt)
                logger.warning(
                    "review_job_retry submission_id=%s attempt=%s delay_s=%s error=%s",
                    submission_id,
                    attempt,
                    delay,
                    last_error,
                )
                await asyncio.sleep(delay)
        await self._dead_letter(submission_id, last_error)

    async def _dead_letter(self, submission_id: str, error: str) -> None:
        self.dead_letters.append(DeadLetter(submission_id, self.max_attempts, error))
        logger.error(
            "review_job_dead_lettered submission_id=%s attempts=%s error=%s",
            submission_id,
            self.max_attempts,
            error,
        )
        try:
            await self._on_dead_letter(submission_id, error, self.max_attempts)
        except Exception:
            logger.exception("review_dead_letter_mark_failed_error submission_id=%s", submission_id)


review_queue = ReviewQueue()

__all__ = ["DeadLetter", "ReviewQueue", "review_queue"]
