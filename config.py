"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
application. Import the getters from here rather than calling os.getenv
directly in multiple places.

Getters read the environment on every call so that credentials added to the
environment after import (or patched in tests) are picked up.
"""

from __future__ import annotations

import os
from typing import Final

from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()


# --- Provider endpoints ---
GOOGLE_GEOCODE_URL: Final[str] = "https://maps.googleapis.com/maps/api/geocode/json"
OPENCAGE_GEOCODE_URL: Final[str] = "https://api.opencagedata.com/geocode/v1/json"
DEFAULT_PHOTON_BASE_URL: Final[str] = "https://photon.komoot.io"
DEFAULT_NOMINATIM_BASE_URL: Final[str] = "https://nominatim.openstreetmap.org"
DEFAULT_NOMINATIM_USER_AGENT: Final[str] = (
    "PuntiInteresseGeocoder/1.0 (contact@puntiinteresse.it)"
)

DEFAULT_PROVIDER_TIMEOUT_SECONDS: Final[float] = 10.0


def _get_env(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


# --- Credentials ---
def get_google_maps_api_key() -> str | None:
    """API key for the metered Google Maps geocoder (provider A)."""
    return _get_env("GOOGLE_MAPS_API_KEY")


def get_opencage_api_key() -> str | None:
    """API key for OpenCage (provider B)."""
    return _get_env("OPENCAGE_API_KEY")


# --- Keyless providers ---
def get_photon_base_url() -> str:
    return (_get_env("PHOTON_BASE_URL") or DEFAULT_PHOTON_BASE_URL).rstrip("/")


def get_photon_search_url() -> str:
    return f"{get_photon_base_url()}/api"


def get_nominatim_base_url() -> str:
    return (_get_env("NOMINATIM_BASE_URL") or DEFAULT_NOMINATIM_BASE_URL).rstrip("/")


def get_nominatim_search_url() -> str:
    return f"{get_nominatim_base_url()}/search"


def get_nominatim_reverse_url() -> str:
    return f"{get_nominatim_base_url()}/reverse"


def get_nominatim_user_agent() -> str:
    return _get_env("NOMINATIM_USER_AGENT") or DEFAULT_NOMINATIM_USER_AGENT


# --- Timeouts ---
def get_provider_timeout_seconds() -> float:
    """Per-request timeout applied to every provider call."""
    raw = _get_env("GEOCODER_PROVIDER_TIMEOUT")
    if raw is None:
        return DEFAULT_PROVIDER_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_PROVIDER_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_PROVIDER_TIMEOUT_SECONDS


__all__ = [
    "DEFAULT_NOMINATIM_BASE_URL",
    "DEFAULT_NOMINATIM_USER_AGENT",
    "DEFAULT_PHOTON_BASE_URL",
    "DEFAULT_PROVIDER_TIMEOUT_SECONDS",
    "GOOGLE_GEOCODE_URL",
    "OPENCAGE_GEOCODE_URL",
    "get_google_maps_api_key",
    "get_nominatim_base_url",
    "get_nominatim_reverse_url",
    "get_nominatim_search_url",
    "get_nominatim_user_agent",
    "get_opencage_api_key",
    "get_photon_base_url",
    "get_photon_search_url",
    "get_provider_timeout_seconds",
]
