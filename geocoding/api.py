"""
Geocoding API for address search, reverse lookups and usage reporting.

The router is a thin layer over the application's ``GeocodingService``;
search and reverse lookups never fail with an upstream error, they degrade
to an empty list or a coordinate string instead.
"""

import logging
import re
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from core.api import api_route
from core.exceptions import ResourceNotFoundException, ValidationException
from geocoding.schemas import GeocodingResult, SearchResult, UsageSummary
from geocoding.service import GeocodingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/geocoding", tags=["geocoding"])

MONTH_KEY_PATTERN = re.compile(r"^(0[1-9]|1[0-2])-\d{4}$")


def get_geocoding_service(request: Request) -> GeocodingService:
    return request.app.state.geocoding_service


ServiceDep = Annotated[GeocodingService, Depends(get_geocoding_service)]


@router.get("/search", response_model=list[SearchResult])
@api_route(logger)
async def search_address(
    service: ServiceDep,
    query: Annotated[str, Query(description="Free-text address to search for")],
):
    """Forward geocode an address through the provider cascade."""
    return await service.search_address(query)


@router.get("/reverse", response_model=GeocodingResult)
@api_route(logger)
async def reverse_geocode(
    service: ServiceDep,
    lat: Annotated[float, Query(ge=-90, le=90, description="Latitude")],
    lng: Annotated[float, Query(ge=-180, le=180, description="Longitude")],
):
    """Reverse geocode a coordinate pair, falling back to a coordinate string."""
    return await service.get_address_with_cache(lat, lng)


@router.post("/cache/clear")
@api_route(logger)
async def clear_caches(service: ServiceDep):
    service.clear_geocoding_cache()
    service.clear_search_cache()
    return {"status": "success", "message": "Geocoding caches cleared"}


@router.get("/usage", response_model=UsageSummary)
@api_route(logger)
async def get_usage(
    service: ServiceDep,
    month: Annotated[
        str | None,
        Query(description="Month in MM-YYYY format; defaults to the current month"),
    ] = None,
):
    """Usage counter of the metered provider for one month."""
    if month is not None and not MONTH_KEY_PATTERN.match(month):
        msg = "month must be in MM-YYYY format"
        raise ValidationException(msg, {"month": month})

    record = await service.get_usage(month)
    if record is None:
        msg = "No usage recorded for this month"
        raise ResourceNotFoundException(msg, {"month": month})
    return UsageSummary(
        month_key=record.month_key,
        count=record.request_count,
        last_request=record.last_request,
    )


@router.get("/usage/all", response_model=list[UsageSummary])
@api_route(logger)
async def get_all_usage(service: ServiceDep):
    records = await service.get_all_usage()
    return [
        UsageSummary(
            month_key=record.month_key,
            count=record.request_count,
            last_request=record.last_request,
        )
        for record in records
    ]
