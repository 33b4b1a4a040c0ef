"""HTTP client for a Nominatim-compatible geocoding service."""
import httpx
import structlog

from mapsearch.application.interfaces.geocoder import GeocodeResult, Geocoder
from mapsearch.config import settings

logger = structlog.get_logger(__name__)


class GeocoderClientError(Exception):
    pass


class NominatimGeocoder(Geocoder):
    def __init__(
        self,
        base_url: str = settings.geocoder_api_url,
        user_agent: str = settings.geocoder_user_agent,
        timeout_seconds: float = settings.geocoder_timeout_seconds,
        max_results: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = {"User-Agent": user_agent, "Accept": "application/json"}
        self._timeout = timeout_seconds
        self._max_results = max_results
        self._transport = transport

    async def geocode(self, place_name: str) -> list[GeocodeResult]:
        """
        GET /search?q=...&format=json → [{"lat": "...", "lon": "...", "display_name": "..."}]
        """
        params = {"q": place_name, "format": "json", "limit": str(self._max_results)}

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.get(
                    f"{self._base_url}/search",
                    params=params,
                    headers=self._headers,
                )
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                logger.error(
                    "geocoder_request_failed",
                    status_code=exc.response.status_code,
                    place_name=place_name,
                )
                raise GeocoderClientError(
                    f"Geocoder returned {exc.response.status_code}"
                ) from exc
            except httpx.RequestError as exc:
                logger.error("geocoder_connection_failed", error=str(exc))
                raise GeocoderClientError(f"Failed to reach geocoder: {exc}") from exc
            except ValueError as exc:
                raise GeocoderClientError("Geocoder returned a non-JSON body") from exc

        results = []
        for item in data if isinstance(data, list) else []:
            try:
                results.append(
                    GeocodeResult(
                        latitude=float(item["lat"]),
                        longitude=float(item["lon"]),
                        formatted_address=item.get("display_name"),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.debug("geocoder_result_skipped", item=item)
        return results
