"""Provider adapters, in cascade priority order."""

from geocoding.providers.google import (
    GoogleGeocoder,
    GoogleMapsClient,
    GoogleMapsLoader,
    google_maps_loader,
)
from geocoding.providers.interfaces import Geocoder
from geocoding.providers.nominatim import NominatimGeocoder
from geocoding.providers.opencage import OpenCageGeocoder
from geocoding.providers.photon import PhotonGeocoder

__all__ = [
    "Geocoder",
    "GoogleGeocoder",
    "GoogleMapsClient",
    "GoogleMapsLoader",
    "NominatimGeocoder",
    "OpenCageGeocoder",
    "PhotonGeocoder",
    "google_maps_loader",
]
