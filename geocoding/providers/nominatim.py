"""
Nominatim HTTP client (last-resort provider).

Unlike the other providers it supports a native multi-result search and
reverse lookups by raw coordinates. Reverse lookups are cancelled after a
fixed deadline.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from config import (
    get_nominatim_reverse_url,
    get_nominatim_search_url,
    get_nominatim_user_agent,
)
from core.constants import (
    COUNTRY_CODE,
    ITALY_BOUNDING_BOX,
    NOMINATIM_REVERSE_TIMEOUT_SECONDS,
    NOMINATIM_REVERSE_ZOOM,
    NOMINATIM_SEARCH_LIMIT,
)
from core.exceptions import ExternalServiceException
from core.http.request import request_json
from core.http.session import get_session
from geocoding.normalize import next_place_id
from geocoding.providers.common import (
    build_provider_result,
    first_non_empty,
    provider_timeout,
)
from geocoding.rate_limiting import nominatim_rate_limiter
from geocoding.schemas import ProviderResult, SearchAddress, SearchResult

logger = logging.getLogger(__name__)

ACCEPT_LANGUAGE = "it,en"


def _viewbox() -> str:
    min_lon, min_lat, max_lon, max_lat = ITALY_BOUNDING_BOX
    return f"{min_lon},{max_lat},{max_lon},{min_lat}"


class NominatimGeocoder:
    name = "nominatim"

    def __init__(
        self,
        *,
        reverse_timeout_s: float = NOMINATIM_REVERSE_TIMEOUT_SECONDS,
    ) -> None:
        self._search_url = get_nominatim_search_url()
        self._reverse_url = get_nominatim_reverse_url()
        self._user_agent = get_nominatim_user_agent()
        self._reverse_timeout_s = reverse_timeout_s

    def _headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent, "Accept-Language": ACCEPT_LANGUAGE}

    async def search_raw(self, query: str, *, limit: int) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "q": query,
            "format": "json",
            "limit": limit,
            "addressdetails": 1,
            "countrycodes": COUNTRY_CODE,
            "viewbox": _viewbox(),
        }
        session = await get_session()
        async with nominatim_rate_limiter:
            results = await request_json(
                "GET",
                self._search_url,
                session=session,
                params=params,
                headers=self._headers(),
                service_name="Nominatim search",
                timeout=provider_timeout(),
            )
        if not isinstance(results, list):
            msg = "Nominatim search error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._search_url})
        return results

    async def geocode(self, query: str) -> ProviderResult:
        results = await self.search_raw(query, limit=1)
        if not results:
            msg = "Nominatim: No results found"
            raise ExternalServiceException(msg, {"query": query})

        best = results[0]
        address = best.get("address") or {}
        return build_provider_result(
            "Nominatim search",
            lat=best.get("lat"),
            lng=best.get("lon"),
            address=best.get("display_name") or "",
            house_number=address.get("house_number"),
            street=address.get("road"),
            city=first_non_empty(
                address.get("city"),
                address.get("town"),
                address.get("village"),
            ),
            country=address.get("country"),
            source=self.name,
        )

    async def search(
        self,
        query: str,
        *,
        limit: int = NOMINATIM_SEARCH_LIMIT,
    ) -> list[SearchResult]:
        results = await self.search_raw(query, limit=limit)
        normalized: list[SearchResult] = []
        for item in results:
            try:
                normalized.append(self._to_search_result(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping malformed Nominatim result: %s", exc)
        return normalized

    @staticmethod
    def _to_search_result(item: dict[str, Any]) -> SearchResult:
        # Validate before keeping Nominatim's own string form
        float(item["lat"])
        float(item["lon"])
        place_id = item.get("place_id")
        importance = item.get("importance")
        return SearchResult(
            place_id=int(place_id) if place_id is not None else next_place_id(),
            lat=str(item["lat"]),
            lon=str(item["lon"]),
            display_name=item.get("display_name") or "",
            address=SearchAddress(**(item.get("address") or {})),
            importance=float(importance) if importance is not None else None,
            boundingbox=item.get("boundingbox"),
            source="nominatim",
        )

    async def reverse(self, lat: float, lng: float) -> dict[str, Any]:
        params = {
            "format": "json",
            "lat": lat,
            "lon": lng,
            "zoom": NOMINATIM_REVERSE_ZOOM,
            "addressdetails": 1,
        }
        session = await get_session()
        try:
            async with asyncio.timeout(self._reverse_timeout_s):
                async with nominatim_rate_limiter:
                    data = await request_json(
                        "GET",
                        self._reverse_url,
                        session=session,
                        params=params,
                        headers=self._headers(),
                        service_name="Nominatim reverse",
                    )
        except TimeoutError as exc:
            msg = "Nominatim reverse timed out"
            raise ExternalServiceException(
                msg,
                {"timeout_s": self._reverse_timeout_s, "lat": lat, "lon": lng},
            ) from exc

        if not isinstance(data, dict):
            msg = "Nominatim reverse error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._reverse_url})
        if data.get("error"):
            msg = f"Nominatim reverse error: {data['error']}"
            raise ExternalServiceException(msg, {"lat": lat, "lon": lng})
        return data
