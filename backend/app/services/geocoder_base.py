"""
CampFinder Backend — Abstract Geocoder Interface
==================================================

What:  The contract every geocoding provider implements, and the result type.
Why:   BootcampService only needs "address or postal code in, coordinates out".
       Keeping the provider behind this interface lets tests substitute a fake
       and lets a deployment switch providers without touching the service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class GeocodeResult:
    """One candidate location returned by a provider."""
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None


class Geocoder(ABC):
    """
    Abstract interface for forward geocoding.

    Contract:
        - geocode() returns candidates best-first; callers use the first one.
        - An empty list means the provider found nothing for the query.
        - Provider and transport failures surface as GeocodingError.
    """

    @abstractmethod
    async def geocode(self, query: str) -> List[GeocodeResult]:
        """
        Resolve a free-form address or postal code to coordinates.

        Raises:
            GeocodingError: provider unreachable or returned an error after retries.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Whether the provider is usable. Must not consume geocoding quota."""
        ...
