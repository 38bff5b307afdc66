"""
Centralized exception hierarchy for domain-specific errors.

Provider adapters raise these; the cascade resolver catches them per
provider and turns them into "try the next provider". Only the HTTP layer
maps them to status codes.
"""


class GeocodingError(Exception):
    """Base exception for all application-specific errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(GeocodingError):
    """Exception raised when input validation fails."""


class ConfigurationError(GeocodingError):
    """Exception raised when a required credential or setting is missing."""


class ExternalServiceError(GeocodingError):
    """Exception raised when an upstream provider call fails."""


class RateLimitError(ExternalServiceError):
    """Exception raised when an upstream provider rejects us for quota."""

    @property
    def retry_after(self) -> int | None:
        value = self.details.get("retry_after")
        return int(value) if value is not None else None


class ResourceNotFoundError(GeocodingError):
    """Exception raised when a requested resource is not found."""


GeocodingException = GeocodingError
ValidationException = ValidationError
ConfigurationException = ConfigurationError
ExternalServiceException = ExternalServiceError
RateLimitException = RateLimitError
ResourceNotFoundException = ResourceNotFoundError
