"""
Composition root: one explicitly constructed object owning every piece of
runtime state (database engine, result cache, capability clients, claim loop).

The FastAPI app creates it in its lifespan and tears it down on shutdown;
nothing is created at import time.
"""
import asyncio
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from mapsearch.application.interfaces.geocoder import Geocoder
from mapsearch.application.interfaces.job_repository import JobRepository
from mapsearch.application.interfaces.listing_scraper import ListingScraper
from mapsearch.application.interfaces.result_cache import ResultCache
from mapsearch.application.scheduler.job_scheduler import JobScheduler
from mapsearch.application.search_criteria import DEFAULT_QUERY_MAX_LENGTH
from mapsearch.application.use_cases.execute_search import ExecutorConfig, SearchExecutor
from mapsearch.application.use_cases.get_search_job_status import (
    GetSearchJobStatus,
    JobStatusView,
)
from mapsearch.application.use_cases.submit_search_job import (
    SubmitSearchJob,
    SubmitSearchJobInput,
)
from mapsearch.config import Settings
from mapsearch.infrastructure.cache.memory_cache import InMemoryResultCache
from mapsearch.infrastructure.database.connection import (
    create_engine,
    create_session_factory,
    init_schema,
)
from mapsearch.infrastructure.database.repositories.job_repository import (
    SqlAlchemyJobRepository,
)
from mapsearch.infrastructure.external_services.geocoder_client import NominatimGeocoder
from mapsearch.infrastructure.external_services.scraper_client import HttpListingScraper

logger = structlog.get_logger(__name__)


class SearchService:
    """Submission/status façade plus lifecycle of the background machinery."""

    def __init__(
        self,
        *,
        job_repo: JobRepository,
        cache: ResultCache,
        scheduler: JobScheduler,
        query_max_length: int = DEFAULT_QUERY_MAX_LENGTH,
        cache_sweep_interval_seconds: float = 120.0,
        engine: AsyncEngine | None = None,
        create_schema: bool = False,
    ) -> None:
        self._job_repo = job_repo
        self._cache = cache
        self._scheduler = scheduler
        self._submit = SubmitSearchJob(job_repo, query_max_length=query_max_length)
        self._get_status = GetSearchJobStatus(job_repo)
        self._sweep_interval = cache_sweep_interval_seconds
        self._engine = engine
        self._create_schema = create_schema
        self._sweeper: asyncio.Task[None] | None = None

    @property
    def scheduler(self) -> JobScheduler:
        return self._scheduler

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        if self._engine is not None and self._create_schema:
            await init_schema(self._engine)
        self._scheduler.start()
        if self._sweeper is None:
            self._sweeper = asyncio.create_task(self._sweep_cache(), name="cache-sweeper")
        logger.info("search_service_started")

    async def stop(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        await self._scheduler.stop()
        if self._engine is not None:
            await self._engine.dispose()
        logger.info("search_service_stopped")

    async def _sweep_cache(self) -> None:
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                self._cache.sweep()
            except Exception:
                logger.exception("cache_sweep_failed")

    # -------------------------------------------------------------------------
    # Façade
    # -------------------------------------------------------------------------

    async def submit(
        self,
        owner_id: str,
        query: str | None,
        location: str | None = None,
        lat: float | None = None,
        lng: float | None = None,
    ) -> int:
        return await self._submit.execute(
            SubmitSearchJobInput(
                owner_id=owner_id, query=query, location=location, lat=lat, lng=lng
            )
        )

    async def status(self, job_id: int, owner_id: str) -> JobStatusView:
        return await self._get_status.execute(job_id, owner_id)

    async def health(self) -> dict[str, Any]:
        database = "connected"
        jobs: dict[str, int] = {}
        try:
            if self._engine is not None:
                async with self._engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
            counts = await self._job_repo.count_by_status()
            jobs = {status.value: count for status, count in counts.items()}
        except Exception as exc:
            database = f"error: {exc}"

        return {
            "status": "healthy" if database == "connected" else "degraded",
            "database": database,
            "scheduler": {
                "running": self._scheduler.is_running,
                "active": self._scheduler.active,
                "max_concurrent": self._scheduler.max_concurrent,
            },
            "jobs": jobs,
        }


def build_search_service(
    settings: Settings,
    *,
    geocoder: Geocoder | None = None,
    scraper: ListingScraper | None = None,
    create_schema: bool = True,
) -> SearchService:
    """Wire the production object graph from settings."""
    engine = create_engine(settings.database_url)
    job_repo = SqlAlchemyJobRepository(create_session_factory(engine))
    cache = InMemoryResultCache()

    executor = SearchExecutor(
        geocoder=geocoder
        or NominatimGeocoder(
            base_url=settings.geocoder_api_url,
            user_agent=settings.geocoder_user_agent,
            timeout_seconds=settings.geocoder_timeout_seconds,
        ),
        scraper=scraper
        or HttpListingScraper(
            base_url=settings.scraper_api_url,
            api_key=settings.scraper_api_key,
        ),
        cache=cache,
        config=ExecutorConfig(
            scrape_timeout_seconds=settings.scrape_timeout_ms / 1000,
            retry_count=settings.retry_count,
            retry_backoff_seconds=settings.retry_backoff_ms / 1000,
            cache_ttl_seconds=settings.cache_ttl_seconds,
            max_concurrent_scrapes=settings.max_concurrent_scrapes,
            query_max_length=settings.query_max_length,
        ),
    )
    scheduler = JobScheduler(
        job_repo,
        executor,
        max_concurrent=settings.max_concurrent,
        interval_seconds=settings.claim_interval_ms / 1000,
        shutdown_timeout_seconds=settings.shutdown_timeout_seconds,
    )
    return SearchService(
        job_repo=job_repo,
        cache=cache,
        scheduler=scheduler,
        query_max_length=settings.query_max_length,
        cache_sweep_interval_seconds=settings.cache_sweep_interval_seconds,
        engine=engine,
        create_schema=create_schema,
    )
