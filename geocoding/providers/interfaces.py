"""
Provider interfaces for the geocoding cascade.
"""

from typing import Protocol

from geocoding.schemas import ProviderResult


class Geocoder(Protocol):
    """Interface for a single-match forward geocoder (text -> coordinates)."""

    name: str

    async def geocode(self, query: str) -> ProviderResult:
        """
        Return the best match for ``query``.

        Raises ``ConfigurationException`` when a required credential is
        missing and ``ExternalServiceException`` for every upstream failure,
        including an empty result set.
        """
        ...
