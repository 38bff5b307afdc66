"""
Google Maps geocoder (primary, metered provider).

The client handle is loaded lazily once per process and then reused. Each
successful lookup is counted by the usage meter as a detached task, so
metering can never slow down or fail a lookup.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from config import GOOGLE_GEOCODE_URL, get_google_maps_api_key
from core.constants import COUNTRY_CODE, LANGUAGE
from core.exceptions import (
    ConfigurationException,
    ExternalServiceException,
    RateLimitException,
)
from core.http.request import request_json
from core.http.session import get_session
from geocoding.providers.common import (
    build_provider_result,
    first_non_empty,
    provider_timeout,
)
from geocoding.rate_limiting import google_rate_limiter

if TYPE_CHECKING:
    from geocoding.schemas import ProviderResult
    from geocoding.usage import UsageMeter

logger = logging.getLogger(__name__)

QUOTA_STATUSES = frozenset({"OVER_QUERY_LIMIT", "OVER_DAILY_LIMIT"})


class GoogleMapsClient:
    """Loaded handle for the Google Geocoding web service."""

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    async def geocode(self, address: str) -> dict[str, Any]:
        session = await get_session()
        params = {
            "address": address,
            "key": self._api_key,
            "region": COUNTRY_CODE,
            "language": LANGUAGE,
        }
        data = await request_json(
            "GET",
            GOOGLE_GEOCODE_URL,
            session=session,
            params=params,
            service_name="Google Maps geocoding",
            timeout=provider_timeout(),
        )
        if not isinstance(data, dict):
            msg = "Google Maps geocoding error: unexpected response"
            raise ExternalServiceException(msg)
        return data


class GoogleMapsLoader:
    """Load the Google client once and hand out the memoized handle."""

    def __init__(self) -> None:
        self._client: GoogleMapsClient | None = None
        self._lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._client is not None

    async def load(self) -> GoogleMapsClient:
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                api_key = get_google_maps_api_key()
                if not api_key:
                    msg = "Google Maps API key not configured"
                    raise ConfigurationException(msg, {"provider": "google"})
                self._client = GoogleMapsClient(api_key)
                logger.info("Google Maps geocoding client loaded")
        return self._client

    def reset(self) -> None:
        self._client = None


google_maps_loader = GoogleMapsLoader()


def _find_component(
    components: list[dict[str, Any]],
    component_type: str,
) -> str | None:
    for component in components:
        if component_type in (component.get("types") or []):
            return component.get("long_name")
    return None


class GoogleGeocoder:
    name = "google"

    def __init__(
        self,
        *,
        usage_meter: UsageMeter | None = None,
        loader: GoogleMapsLoader | None = None,
    ) -> None:
        self._usage_meter = usage_meter
        self._loader = loader or google_maps_loader

    async def geocode(self, query: str) -> ProviderResult:
        client = await self._loader.load()
        async with google_rate_limiter:
            data = await client.geocode(query)

        result = self._parse(data)
        if self._usage_meter is not None:
            self._usage_meter.record_usage()
        return result

    @staticmethod
    def _parse(data: dict[str, Any]) -> ProviderResult:
        status = str(data.get("status") or "UNKNOWN")
        if status in QUOTA_STATUSES:
            msg = f"Google Maps geocoding failed: {status}"
            raise RateLimitException(msg, {"status": status})
        results = data.get("results") or []
        if status != "OK" or not results:
            msg = f"Google Maps geocoding failed: {status}"
            raise ExternalServiceException(msg, {"status": status})

        best = results[0]
        components = best.get("address_components") or []
        location = (best.get("geometry") or {}).get("location") or {}
        return build_provider_result(
            "Google Maps geocoding",
            lat=location.get("lat"),
            lng=location.get("lng"),
            address=best.get("formatted_address") or "",
            house_number=_find_component(components, "street_number"),
            street=_find_component(components, "route"),
            city=first_non_empty(
                _find_component(components, "locality"),
                _find_component(components, "administrative_area_level_3"),
                _find_component(components, "administrative_area_level_2"),
            ),
            country=_find_component(components, "country"),
            source="google",
        )
