"""
Normalization and display formatting for geocoding results.

Turns provider-level matches into the caller-facing ``GeocodingResult`` and
``SearchResult`` shapes, and renders short human-readable addresses.
"""

from __future__ import annotations

import threading
import time
from typing import Any

from core.constants import (
    DEFAULT_COUNTRY_NAME,
    PROVIDER_IMPORTANCE,
    REVERSE_QUERY_PRECISION,
)
from geocoding.schemas import (
    GeocodingResult,
    ProviderResult,
    SearchAddress,
    SearchResult,
)


class _PlaceIdSequence:
    """Millisecond timestamps, bumped so ids from this process never repeat."""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            self._last = max(time.time_ns() // 1_000_000, self._last + 1)
            return self._last


_place_ids = _PlaceIdSequence()


def next_place_id() -> int:
    return _place_ids.next()


def coordinate_query(lat: float, lng: float) -> str:
    """Text form of a coordinate pair for forward-only providers."""
    precision = REVERSE_QUERY_PRECISION
    return f"{lat:.{precision}f},{lng:.{precision}f}"


def coordinate_fallback(lat: float, lng: float) -> str:
    return f"Lat: {lat:.6f}, Lng: {lng:.6f}"


def _street_line(street: str | None, house_number: str | None) -> str | None:
    line = " ".join(part for part in (street, house_number) if part)
    return line or None


def format_provider_address(result: ProviderResult) -> str:
    """Short address: street + number, city, country."""
    parts = [
        _street_line(result.street, result.house_number),
        result.city,
        result.country,
    ]
    short = ", ".join(part for part in parts if part)
    return short or result.address or coordinate_fallback(result.lat, result.lng)


def format_address_from_nominatim(data: dict[str, Any]) -> str:
    """Short address from a Nominatim reverse/search payload."""
    address = data.get("address") or {}
    parts: list[str] = []

    if address.get("road"):
        parts.append(address["road"])

    city = address.get("city") or address.get("town") or address.get("village")
    if city:
        parts.append(city)

    if address.get("postcode"):
        parts.append(address["postcode"])

    if address.get("country"):
        parts.append(address["country"])

    if parts:
        return ", ".join(parts)
    if data.get("display_name"):
        return data["display_name"]
    return f"Lat: {data.get('lat')}, Lng: {data.get('lon')}"


def format_search_result(result: SearchResult) -> str:
    """One-line label for a search hit as shown in the search box."""
    address = result.address
    parts: list[str] = []

    street = _street_line(address.road, address.house_number)
    if street:
        parts.append(street)

    city = address.city or address.town or address.village
    if city:
        parts.append(city)

    if address.postcode:
        parts.append(address.postcode)

    return ", ".join(parts) if parts else result.display_name


def provider_to_geocoding_result(result: ProviderResult) -> GeocodingResult:
    return GeocodingResult(
        success=True,
        address=format_provider_address(result),
        full_address=result.address,
        raw_data=result.model_dump(),
    )


def nominatim_to_geocoding_result(data: dict[str, Any]) -> GeocodingResult:
    return GeocodingResult(
        success=True,
        address=format_address_from_nominatim(data),
        full_address=data.get("display_name"),
        raw_data=data,
    )


def provider_to_search_result(result: ProviderResult) -> SearchResult:
    return SearchResult(
        place_id=next_place_id(),
        lat=str(result.lat),
        lon=str(result.lng),
        display_name=result.address or format_provider_address(result),
        address=SearchAddress(
            road=result.street,
            house_number=result.house_number,
            city=result.city,
            country=result.country or DEFAULT_COUNTRY_NAME,
        ),
        importance=PROVIDER_IMPORTANCE.get(result.source),
        source=result.source,
    )
