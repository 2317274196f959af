"""
CampFinder Backend — MapQuest Geocoder
========================================

What:  Geocoder implementation backed by the MapQuest Geocoding API.
Who:   Called by BootcampService when creating a bootcamp (address → location)
       and for radius searches (zipcode → centre point).
How:   One GET per lookup with httpx.AsyncClient. Transient failures (connection
       errors, timeouts, 5xx) are retried by tenacity with exponential backoff
       and jitter; anything left over becomes GeocodingError (503).

Response shape (abridged):
    {
        "info": {"statuscode": 0, "messages": []},
        "results": [{
            "locations": [{
                "street": "233 Bay State Rd",
                "adminArea5": "Boston", "adminArea3": "MA",
                "postalCode": "02215", "adminArea1": "US",
                "latLng": {"lat": 42.350, "lng": -71.105}
            }]
        }]
    }
"""

import logging
import time
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings
from app.exceptions import GeocodingError
from app.services.geocoder_base import GeocodeResult, Geocoder

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    """Connection problems and 5xx answers are worth retrying; 4xx are not."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    return False


def _format_address(location: Dict[str, Any]) -> Optional[str]:
    region = " ".join(
        part for part in (location.get("adminArea3"), location.get("postalCode")) if part
    )
    parts = [location.get("street"), location.get("adminArea5"), region, location.get("adminArea1")]
    formatted = ", ".join(part for part in parts if part)
    return formatted or None


def parse_mapquest_response(payload: Dict[str, Any]) -> List[GeocodeResult]:
    """Extract every location that carries coordinates from a MapQuest payload."""
    results = payload.get("results") or []
    candidates: List[GeocodeResult] = []
    for result in results:
        for location in result.get("locations") or []:
            lat_lng = location.get("latLng") or {}
            if lat_lng.get("lat") is None or lat_lng.get("lng") is None:
                continue
            candidates.append(
                GeocodeResult(
                    latitude=float(lat_lng["lat"]),
                    longitude=float(lat_lng["lng"]),
                    formatted_address=_format_address(location),
                    street=location.get("street") or None,
                    city=location.get("adminArea5") or None,
                    state=location.get("adminArea3") or None,
                    zipcode=location.get("postalCode") or None,
                    country=location.get("adminArea1") or None,
                )
            )
    return candidates


class MapQuestGeocoder(Geocoder):
    """
    MapQuest forward geocoder.

    Args:
        api_key:   MapQuest consumer key (defaults to settings.geocoder_api_key)
        base_url:  Address endpoint (defaults to settings.geocoder_base_url)
        timeout:   Per-request timeout in seconds
        transport: Optional httpx transport; tests pass httpx.MockTransport
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.geocoder_api_key
        self.base_url = base_url or settings.geocoder_base_url
        self.timeout = timeout or settings.geocoder_timeout
        self._transport = transport

    async def geocode(self, query: str) -> List[GeocodeResult]:
        start_time = time.perf_counter()
        try:
            payload = await self._fetch_with_retry(query)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Geocoding '%s' failed: %s", query, str(e))
            raise GeocodingError(
                message="Could not reach the geocoding service. Please try again later.",
                retry_after=settings.retry_max_wait,
                context={"query": query, "error_type": type(e).__name__},
            )

        info = payload.get("info") or {}
        status_code = info.get("statuscode", 0)
        if status_code != 0:
            logger.error(
                "Geocoder returned status %s for '%s': %s",
                status_code,
                query,
                info.get("messages"),
            )
            raise GeocodingError(
                message="The geocoding service rejected the request.",
                context={"query": query, "provider_status": status_code},
            )

        candidates = parse_mapquest_response(payload)
        logger.info(
            "Geocoded '%s' to %d candidate(s) in %.0fms",
            query,
            len(candidates),
            (time.perf_counter() - start_time) * 1000,
        )
        return candidates

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _fetch_with_retry(self, query: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(
                self.base_url,
                params={"key": self.api_key, "location": query, "maxResults": 5},
            )
            response.raise_for_status()
            return response.json()

    async def health_check(self) -> bool:
        return bool(self.api_key)


geocoder = MapQuestGeocoder()
