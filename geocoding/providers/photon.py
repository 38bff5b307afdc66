"""
Photon (komoot) geocoder.

Keyless and biased to the Italy bounding box. Empty responses are common
for partial addresses, so its failures are logged quietly by the cascade.
"""

from __future__ import annotations

import logging

from config import get_photon_search_url
from core.constants import ITALY_BOUNDING_BOX, LANGUAGE
from core.exceptions import ExternalServiceException
from core.http.request import request_json
from core.http.session import get_session
from geocoding.providers.common import build_provider_result, provider_timeout
from geocoding.schemas import ProviderResult

logger = logging.getLogger(__name__)


def _compose_address(properties: dict) -> str:
    if properties.get("name"):
        return str(properties["name"])
    street_part = " ".join(
        part for part in (properties.get("street"), properties.get("housenumber")) if part
    )
    return ", ".join(part for part in (street_part, properties.get("city")) if part)


class PhotonGeocoder:
    name = "photon"

    async def geocode(self, query: str) -> ProviderResult:
        url = get_photon_search_url()
        params = {
            "q": query,
            "limit": 1,
            "lang": LANGUAGE,
            "bbox": ",".join(str(value) for value in ITALY_BOUNDING_BOX),
        }
        session = await get_session()
        data = await request_json(
            "GET",
            url,
            session=session,
            params=params,
            service_name="Photon",
            timeout=provider_timeout(),
        )
        if not isinstance(data, dict):
            msg = "Photon error: unexpected response"
            raise ExternalServiceException(msg, {"url": url})

        features = data.get("features") or []
        if not features:
            msg = "Photon: No results found"
            raise ExternalServiceException(msg, {"query": query})

        feature = features[0]
        properties = feature.get("properties") or {}
        coordinates = (feature.get("geometry") or {}).get("coordinates") or []
        if len(coordinates) < 2:
            msg = "Photon error: malformed result"
            raise ExternalServiceException(msg, {"query": query})

        # GeoJSON order is [lon, lat]
        return build_provider_result(
            "Photon",
            lat=coordinates[1],
            lng=coordinates[0],
            address=_compose_address(properties),
            house_number=properties.get("housenumber"),
            street=properties.get("street"),
            city=properties.get("city"),
            country=properties.get("country"),
            source=self.name,
        )
