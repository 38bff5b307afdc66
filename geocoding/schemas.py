"""
Result models exchanged between providers, the resolver and callers.

Attributes are snake_case; JSON output uses camelCase aliases
(``full_address`` -> ``fullAddress``) to match what the map UI consumes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeocodingResult(_CamelModel):
    """Outcome of a reverse lookup as returned to callers."""

    success: bool
    address: str | None = None
    full_address: str | None = None
    error: str | None = None
    raw_data: Any | None = None


class ProviderResult(_CamelModel):
    """Single best match produced by a provider adapter."""

    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    address: str
    house_number: str | None = None
    street: str | None = None
    city: str | None = None
    country: str | None = None
    source: str


class SearchAddress(_CamelModel):
    """Structured address components; every key is optional."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    road: str | None = None
    house_number: str | None = None
    neighbourhood: str | None = None
    suburb: str | None = None
    city: str | None = None
    town: str | None = None
    village: str | None = None
    municipality: str | None = None
    county: str | None = None
    state: str | None = None
    postcode: str | None = None
    country: str | None = None


class SearchResult(_CamelModel):
    """Forward search hit, shaped like a Nominatim search item."""

    place_id: int
    lat: str
    lon: str
    display_name: str
    address: SearchAddress = Field(default_factory=SearchAddress)
    importance: float | None = None
    boundingbox: list[str] | None = None
    source: str | None = None


class UsageSummary(_CamelModel):
    """Public view of one monthly usage record."""

    month_key: str
    count: int
    last_request: datetime
