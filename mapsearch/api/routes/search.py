import structlog
from fastapi import APIRouter, Depends, status

from mapsearch.api.dependencies import get_owner_id, get_search_service
from mapsearch.api.schemas.search import (
    ErrorResponse,
    JobStatusResponse,
    SearchAcceptedResponse,
    SearchRequest,
)
from mapsearch.service import SearchService

logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/search", tags=["search"])


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=SearchAcceptedResponse,
    responses={400: {"model": ErrorResponse}},
)
async def create_search_job(
    body: SearchRequest,
    owner_id: str = Depends(get_owner_id),
    service: SearchService = Depends(get_search_service),
) -> SearchAcceptedResponse:
    """Queue a search; the result is fetched by polling the status URL."""
    job_id = await service.submit(
        owner_id,
        body.q,
        location=body.location,
        lat=body.lat,
        lng=body.lng,
    )
    return SearchAcceptedResponse(job_id=job_id, status_url=f"/search/status/{job_id}")


@router.get(
    "/status/{job_id}",
    response_model=JobStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_search_status(
    job_id: int,
    owner_id: str = Depends(get_owner_id),
    service: SearchService = Depends(get_search_service),
) -> JobStatusResponse:
    view = await service.status(job_id, owner_id)
    return JobStatusResponse(
        job_id=view.job_id,
        status=view.status,
        result=view.result,
        error=view.error,
        created_at=view.created_at,
        updated_at=view.updated_at,
    )
