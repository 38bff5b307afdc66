"""Global constants for the core package.

This module contains shared constants used across the application core.
"""

from typing import Final

# HTTP Client Constants
HTTP_CONNECTION_LIMIT: Final[int] = 10
HTTP_TIMEOUT_CONNECT: Final[float] = 5.0
HTTP_TIMEOUT_SOCK_READ: Final[float] = 10.0
HTTP_TIMEOUT_TOTAL: Final[float] = 15.0

# Reverse geocoding cache (coordinates -> address)
RESULT_CACHE_MAX_SIZE: Final[int] = 100
RESULT_CACHE_TTL_SECONDS: Final[float] = 30 * 60
# 5 decimals is roughly 1.1 m at the equator
RESULT_CACHE_PRECISION: Final[int] = 5

# Forward search cache (query -> results)
QUERY_CACHE_MAX_SIZE: Final[int] = 50
QUERY_CACHE_TTL_SECONDS: Final[float] = 15 * 60

# Cascade tuning
MIN_QUERY_LENGTH: Final[int] = 2
REVERSE_QUERY_PRECISION: Final[int] = 6
NOMINATIM_SEARCH_LIMIT: Final[int] = 5
NOMINATIM_REVERSE_TIMEOUT_SECONDS: Final[float] = 8.0
NOMINATIM_REVERSE_ZOOM: Final[int] = 18

# Regional bias (Italy)
COUNTRY_CODE: Final[str] = "it"
LANGUAGE: Final[str] = "it"
DEFAULT_COUNTRY_NAME: Final[str] = "Italia"
# (min_lon, min_lat, max_lon, max_lat)
ITALY_BOUNDING_BOX: Final[tuple[float, float, float, float]] = (
    6.6,
    35.4,
    18.6,
    47.1,
)

# Display weights for single-match providers (higher sorts first in the UI)
PROVIDER_IMPORTANCE: Final[dict[str, float]] = {
    "google": 1.0,
    "opencage": 0.9,
    "photon": 0.8,
    "nominatim": 0.5,
}
