"""OpenCage geocoder (second in the cascade)."""

from __future__ import annotations

import logging
from typing import Any

from config import OPENCAGE_GEOCODE_URL, get_opencage_api_key
from core.constants import COUNTRY_CODE, LANGUAGE
from core.exceptions import ConfigurationException, ExternalServiceException
from core.http.request import request_json
from core.http.session import get_session
from geocoding.providers.common import (
    build_provider_result,
    first_non_empty,
    provider_timeout,
)
from geocoding.schemas import ProviderResult

logger = logging.getLogger(__name__)


class OpenCageGeocoder:
    name = "opencage"

    async def geocode(self, query: str) -> ProviderResult:
        api_key = get_opencage_api_key()
        if not api_key:
            msg = "OpenCage API key not configured"
            raise ConfigurationException(msg, {"provider": self.name})

        params: dict[str, Any] = {
            "q": query,
            "key": api_key,
            "limit": 1,
            "language": LANGUAGE,
            "countrycode": COUNTRY_CODE,
            "no_annotations": 1,
        }
        session = await get_session()
        data = await request_json(
            "GET",
            OPENCAGE_GEOCODE_URL,
            session=session,
            params=params,
            service_name="OpenCage",
            timeout=provider_timeout(),
        )
        if not isinstance(data, dict):
            msg = "OpenCage error: unexpected response"
            raise ExternalServiceException(msg)

        results = data.get("results") or []
        if not results:
            msg = "OpenCage: No results found"
            raise ExternalServiceException(msg, {"query": query})

        best = results[0]
        components = best.get("components") or {}
        geometry = best.get("geometry") or {}
        return build_provider_result(
            "OpenCage",
            lat=geometry.get("lat"),
            lng=geometry.get("lng"),
            address=best.get("formatted") or "",
            house_number=components.get("house_number"),
            street=first_non_empty(
                components.get("road"),
                components.get("footway"),
                components.get("path"),
            ),
            city=first_non_empty(
                components.get("city"),
                components.get("town"),
                components.get("village"),
            ),
            country=components.get("country"),
            source=self.name,
        )
