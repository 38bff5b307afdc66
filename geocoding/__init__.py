"""
Cascaded geocoding package.

Resolves free-text addresses and coordinate pairs by trying Google Maps,
OpenCage, Photon and finally Nominatim, with TTL caches in front and a
monthly usage meter on the metered provider.
"""

from .cache import QueryCache, ResultCache, TTLCache
from .normalize import format_address_from_nominatim, format_search_result
from .resolver import CascadeResolver
from .schemas import (
    GeocodingResult,
    ProviderResult,
    SearchAddress,
    SearchResult,
    UsageSummary,
)
from .service import GeocodingService
from .usage import UsageMeter, current_month_key

__all__ = [
    "CascadeResolver",
    "GeocodingResult",
    "GeocodingService",
    "ProviderResult",
    "QueryCache",
    "ResultCache",
    "SearchAddress",
    "SearchResult",
    "TTLCache",
    "UsageMeter",
    "UsageSummary",
    "current_month_key",
    "format_address_from_nominatim",
    "format_search_result",
]
