from fastapi import APIRouter, Depends

from mapsearch.api.dependencies import get_search_service
from mapsearch.service import SearchService

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(service: SearchService = Depends(get_search_service)) -> dict:  # type: ignore[type-arg]
    """Liveness + dependency health check."""
    return await service.health()
