"""GeocodingService: composition root for the caches, meter and providers."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from core.http.session import cleanup_session
from geocoding.cache import QueryCache, ResultCache
from geocoding.normalize import format_search_result
from geocoding.providers.google import GoogleGeocoder, GoogleMapsLoader
from geocoding.providers.interfaces import Geocoder
from geocoding.providers.nominatim import NominatimGeocoder
from geocoding.providers.opencage import OpenCageGeocoder
from geocoding.providers.photon import PhotonGeocoder
from geocoding.resolver import CascadeResolver
from geocoding.schemas import GeocodingResult, SearchResult
from geocoding.usage import UsageMeter

logger = logging.getLogger(__name__)


class GeocodingService:
    """
    Public entry points of the geocoding subsystem.

    Owns one result cache, one query cache and one usage meter. Build one per
    application and pass it to whatever needs geocoding.

    Args:
        providers: Text geocoders in priority order. Defaults to
            Google (metered) -> OpenCage -> Photon.
        fallback: Nominatim client used for reverse lookups and the final
            multi-result search.
        usage_meter: Meter wired into the default Google provider.
        google_loader: Loader for the Google client handle; defaults to the
            process-wide loader.
    """

    def __init__(
        self,
        *,
        providers: Sequence[Geocoder] | None = None,
        fallback: NominatimGeocoder | None = None,
        result_cache: ResultCache | None = None,
        query_cache: QueryCache | None = None,
        usage_meter: UsageMeter | None = None,
        google_loader: GoogleMapsLoader | None = None,
    ) -> None:
        self.usage_meter = usage_meter if usage_meter is not None else UsageMeter()
        self.result_cache = result_cache if result_cache is not None else ResultCache()
        self.query_cache = query_cache if query_cache is not None else QueryCache()
        if providers is None:
            providers = [
                GoogleGeocoder(usage_meter=self.usage_meter, loader=google_loader),
                OpenCageGeocoder(),
                PhotonGeocoder(),
            ]
        self.resolver = CascadeResolver(
            providers=providers,
            fallback=fallback if fallback is not None else NominatimGeocoder(),
            result_cache=self.result_cache,
            query_cache=self.query_cache,
        )

    async def search_address(self, query: str) -> list[SearchResult]:
        return await self.resolver.search_address(query)

    async def get_address_with_cache(self, lat: float, lng: float) -> GeocodingResult:
        return await self.resolver.resolve_address(lat, lng)

    def get_cached_address(self, lat: float, lng: float) -> GeocodingResult | None:
        return self.result_cache.get(lat, lng)

    def clear_geocoding_cache(self) -> None:
        self.result_cache.clear()
        logger.info("Reverse geocoding cache cleared")

    def clear_search_cache(self) -> None:
        self.query_cache.clear()
        logger.info("Search cache cleared")

    async def get_usage(self, month_key: str | None = None):
        return await self.usage_meter.get_usage(month_key)

    async def get_all_usage(self):
        return await self.usage_meter.get_all_usage()

    @staticmethod
    def format_search_result(result: SearchResult) -> str:
        return format_search_result(result)

    async def close(self) -> None:
        """Flush pending usage writes and release the HTTP session."""
        await self.usage_meter.drain()
        self.clear_geocoding_cache()
        self.clear_search_cache()
        await cleanup_session()
