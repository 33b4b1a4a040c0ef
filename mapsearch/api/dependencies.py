"""
FastAPI dependency wiring.

The SearchService is created once in the app lifespan and stored on
``app.state``; route handlers receive it (and the caller's identity) here.
"""
from fastapi import Header, HTTPException, Request, status

from mapsearch.service import SearchService


def get_search_service(request: Request) -> SearchService:
    service: SearchService | None = getattr(request.app.state, "search_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Search service is not running.",
        )
    return service


def get_owner_id(x_owner_id: str | None = Header(default=None)) -> str:
    """Identity of the caller, set by the upstream auth layer."""
    if not x_owner_id or not x_owner_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Owner-Id header.",
        )
    return x_owner_id.strip()
