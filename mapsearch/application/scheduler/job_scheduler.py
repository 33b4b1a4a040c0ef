"""
Periodic claim loop that feeds pending jobs to the search executor.

Claiming happens in the job store as one atomic conditional update; this loop
only decides *whether* to claim (the ``active`` ceiling) and never waits for
execution to finish before the next tick.
"""
import asyncio

import structlog

from mapsearch.application.interfaces.job_repository import JobRepository
from mapsearch.application.use_cases.execute_search import SearchExecutor
from mapsearch.domain.entities.search_job import SearchJob
from mapsearch.domain.enums.job_status import JobStatus
from mapsearch.domain.errors import ScrapeFailure, SearchError

logger = structlog.get_logger(__name__)


class JobScheduler:
    def __init__(
        self,
        job_repo: JobRepository,
        executor: SearchExecutor,
        *,
        max_concurrent: int = 5,
        interval_seconds: float = 2.0,
        shutdown_timeout_seconds: float = 30.0,
    ) -> None:
        self._job_repo = job_repo
        self._executor = executor
        self._max_concurrent = max_concurrent
        self._interval = interval_seconds
        self._shutdown_timeout = shutdown_timeout_seconds
        self._active = 0
        self._in_flight: set[asyncio.Task[None]] = set()
        self._loop_task: asyncio.Task[None] | None = None

    @property
    def active(self) -> int:
        """Jobs claimed and not yet written back."""
        return self._active

    @property
    def max_concurrent(self) -> int:
        return self._max_concurrent

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        if self.is_running:
            return
        logger.info(
            "scheduler_starting",
            max_concurrent=self._max_concurrent,
            interval_seconds=self._interval,
        )
        self._loop_task = asyncio.create_task(self._run_loop(), name="job-claim-loop")

    async def stop(self) -> None:
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

        if self._in_flight:
            logger.info("scheduler_draining", in_flight=len(self._in_flight))
            await self.drain(timeout=self._shutdown_timeout)
        logger.info("scheduler_stopped")

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for every dispatched job to be written back."""
        if not self._in_flight:
            return
        _, pending = await asyncio.wait(set(self._in_flight), timeout=timeout)
        if pending:
            # Stragglers are cancelled so nothing outlives the engine; their
            # jobs stay processing.
            logger.warning("scheduler_drain_timed_out", cancelled=len(pending))
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    async def _run_loop(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception:
                logger.exception("scheduler_tick_failed")
            await asyncio.sleep(self._interval)

    # -------------------------------------------------------------------------
    # Claim & dispatch
    # -------------------------------------------------------------------------

    async def tick(self) -> int:
        """Claim and dispatch pending jobs until the ceiling is reached.

        Returns the number of jobs dispatched during this tick.
        """
        dispatched = 0
        while self._active < self._max_concurrent:
            job = await self._job_repo.claim_one_pending()
            if job is None:
                break
            self._dispatch(job)
            dispatched += 1
        return dispatched

    def _dispatch(self, job: SearchJob) -> None:
        if job.id is None:
            raise ValueError("Claimed job has no id.")
        self._active += 1
        logger.info(
            "job_claimed",
            job_id=job.id,
            query=job.query,
            location=job.location.describe(),
            active=self._active,
        )
        task = asyncio.create_task(self._run_job(job.id, job), name=f"search-job-{job.id}")
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run_job(self, job_id: int, job: SearchJob) -> None:
        try:
            try:
                outcome = await self._executor.execute(job)
            except SearchError as exc:
                attempts = exc.attempts if isinstance(exc, ScrapeFailure) else 0
                logger.warning(
                    "job_failed",
                    job_id=job_id,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                await self._write_back(job_id, JobStatus.FAILED, error=str(exc), attempts=attempts)
            except Exception as exc:
                logger.exception("job_crashed", job_id=job_id)
                await self._write_back(job_id, JobStatus.FAILED, error=f"Internal error: {exc}")
            else:
                stored = await self._write_back(
                    job_id,
                    JobStatus.COMPLETED,
                    result=outcome.payload,
                    attempts=outcome.attempts,
                )
                if not stored:
                    # Fall back so the job still reaches a terminal state.
                    await self._write_back(
                        job_id,
                        JobStatus.FAILED,
                        error="Internal error: result could not be stored.",
                        attempts=outcome.attempts,
                    )
        finally:
            self._active -= 1

    async def _write_back(
        self,
        job_id: int,
        status: JobStatus,
        *,
        result: dict | None = None,  # type: ignore[type-arg]
        error: str | None = None,
        attempts: int = 0,
    ) -> bool:
        """Record the terminal state; False only when the store itself failed."""
        try:
            updated = await self._job_repo.complete(
                job_id, status, result=result, error=error, attempts=attempts
            )
        except Exception:
            logger.exception("job_write_back_failed", job_id=job_id, status=status.value)
            return False
        if updated:
            logger.info("job_finished", job_id=job_id, status=status.value, attempts=attempts)
        else:
            logger.warning("job_already_terminal", job_id=job_id, status=status.value)
        return True
