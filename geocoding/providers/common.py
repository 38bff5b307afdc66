"""Helpers shared by the provider adapters."""

from __future__ import annotations

import math
from typing import Any

import aiohttp

from config import get_provider_timeout_seconds
from core.exceptions import ExternalServiceException
from geocoding.schemas import ProviderResult


def provider_timeout() -> aiohttp.ClientTimeout:
    """Explicit per-request timeout; providers never wait indefinitely."""
    return aiohttp.ClientTimeout(total=get_provider_timeout_seconds())


def coerce_coordinate(value: Any) -> float:
    number = float(value)
    if not math.isfinite(number):
        msg = f"non-finite coordinate: {value!r}"
        raise ValueError(msg)
    return number


def build_provider_result(service_name: str, **fields: Any) -> ProviderResult:
    """
    Build a ProviderResult, converting any shape or range problem in the
    upstream payload into an ExternalServiceException.
    """
    try:
        fields["lat"] = coerce_coordinate(fields.get("lat"))
        fields["lng"] = coerce_coordinate(fields.get("lng"))
        return ProviderResult(**fields)
    except (TypeError, ValueError) as exc:
        msg = f"{service_name} error: malformed result"
        raise ExternalServiceException(msg, {"error": str(exc)}) from exc


def first_non_empty(*values: Any) -> str | None:
    for value in values:
        if value:
            return str(value)
    return None
