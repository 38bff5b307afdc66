"""
Cascade resolver for forward and reverse geocoding.

Providers are tried strictly in order and the first success wins; a
provider is not called until the previous one has settled. Provider errors
of any kind become "try the next one". Nothing raised by a provider
escapes ``resolve_address`` or ``search_address``.

Forward search returns a single best match from the text providers but up
to ``NOMINATIM_SEARCH_LIMIT`` matches from the Nominatim fallback. That
asymmetry is kept as-is.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from core.constants import MIN_QUERY_LENGTH, NOMINATIM_SEARCH_LIMIT
from core.exceptions import ConfigurationException, ExternalServiceException
from geocoding.cache import QueryCache, ResultCache
from geocoding.normalize import (
    coordinate_fallback,
    coordinate_query,
    nominatim_to_geocoding_result,
    provider_to_geocoding_result,
    provider_to_search_result,
)
from geocoding.providers.interfaces import Geocoder
from geocoding.providers.nominatim import NominatimGeocoder
from geocoding.schemas import GeocodingResult, ProviderResult, SearchResult

logger = logging.getLogger(__name__)

# Providers whose misses are routine and not worth a warning
QUIET_PROVIDERS = frozenset({"photon"})


def _valid_coordinates(lat: float, lng: float) -> bool:
    return (
        math.isfinite(lat)
        and math.isfinite(lng)
        and -90 <= lat <= 90
        and -180 <= lng <= 180
    )


class CascadeResolver:
    def __init__(
        self,
        *,
        providers: Sequence[Geocoder],
        fallback: NominatimGeocoder,
        result_cache: ResultCache,
        query_cache: QueryCache,
        min_query_length: int = MIN_QUERY_LENGTH,
        search_limit: int = NOMINATIM_SEARCH_LIMIT,
    ) -> None:
        self._providers = list(providers)
        self._fallback = fallback
        self._result_cache = result_cache
        self._query_cache = query_cache
        self._min_query_length = min_query_length
        self._search_limit = search_limit

    @property
    def provider_names(self) -> list[str]:
        return [provider.name for provider in self._providers] + [self._fallback.name]

    def _log_failure(self, provider_name: str, query: str, exc: Exception) -> None:
        if isinstance(exc, ConfigurationException):
            logger.warning("%s skipped: %s", provider_name, exc)
        elif provider_name in QUIET_PROVIDERS:
            logger.info("%s found nothing for %r: %s", provider_name, query, exc)
        elif isinstance(exc, ExternalServiceException):
            logger.warning("%s failed for %r: %s", provider_name, query, exc)
        else:
            logger.exception("%s raised unexpectedly for %r", provider_name, query)

    async def _first_match(
        self,
        query: str,
    ) -> tuple[ProviderResult | None, Exception | None]:
        """Run the text providers in order; return the first match."""
        last_error: Exception | None = None
        for provider in self._providers:
            try:
                result = await provider.geocode(query)
            except Exception as exc:
                self._log_failure(provider.name, query, exc)
                last_error = exc
                continue
            logger.info("Geocoded %r with %s", query, provider.name)
            return result, None
        return None, last_error

    async def resolve_address(self, lat: float, lng: float) -> GeocodingResult:
        """Reverse geocode a coordinate pair; never raises."""
        try:
            return await self._resolve(lat, lng)
        except Exception as exc:
            logger.exception("Reverse geocoding failed for %s,%s", lat, lng)
            return GeocodingResult(
                success=False,
                error=str(exc),
                address=coordinate_fallback(lat, lng),
            )

    async def _resolve(self, lat: float, lng: float) -> GeocodingResult:
        if not _valid_coordinates(lat, lng):
            return GeocodingResult(
                success=False,
                error="Invalid coordinates",
                address=coordinate_fallback(lat, lng),
            )

        cached = self._result_cache.get(lat, lng)
        if cached is not None:
            logger.debug("Using cached geocoding result for %s,%s", lat, lng)
            return cached

        query = coordinate_query(lat, lng)
        match, last_error = await self._first_match(query)
        if match is not None:
            result = provider_to_geocoding_result(match)
            self._result_cache.set(lat, lng, result)
            return result

        try:
            data = await self._fallback.reverse(lat, lng)
            # A malformed payload counts as a fallback failure
            result = nominatim_to_geocoding_result(data)
        except Exception as exc:
            self._log_failure(self._fallback.name, query, exc)
            last_error = exc
        else:
            self._result_cache.set(lat, lng, result)
            return result

        error = str(last_error) if last_error is not None else "Unknown geocoding error"
        logger.warning("All geocoding providers failed for %s,%s", lat, lng)
        return GeocodingResult(
            success=False,
            error=error,
            address=coordinate_fallback(lat, lng),
        )

    async def search_address(self, query: str) -> list[SearchResult]:
        """Forward geocode free text; never raises."""
        try:
            return await self._search(query)
        except Exception:
            logger.exception("Address search failed for %r", query)
            return []

    async def _search(self, query: str) -> list[SearchResult]:
        trimmed = (query or "").strip()
        if len(trimmed) < self._min_query_length:
            return []

        cached = self._query_cache.get(trimmed)
        if cached is not None:
            logger.debug("Using cached search results for %r", trimmed)
            return cached

        match, _ = await self._first_match(trimmed)
        if match is not None:
            results = [provider_to_search_result(match)]
            self._query_cache.set(trimmed, results)
            return results

        try:
            results = await self._fallback.search(trimmed, limit=self._search_limit)
        except Exception as exc:
            self._log_failure(self._fallback.name, trimmed, exc)
            return []

        self._query_cache.set(trimmed, results)
        return results

    def clear_result_cache(self) -> None:
        self._result_cache.clear()

    def clear_query_cache(self) -> None:
        self._query_cache.clear()
