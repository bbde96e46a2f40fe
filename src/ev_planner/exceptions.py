class TripPlannerError(Exception):
    """Base exception for trip planning errors."""


class ExternalServiceError(TripPlannerError):
    """Raised when the route provider cannot be reached or answers with an error."""


class ProviderQuotaError(ExternalServiceError):
    """Raised when the route provider rejects a request for quota or rate-limit reasons."""


class ProviderRefusalError(TripPlannerError):
    """Raised when the route provider answers with empty or refusing content."""


class MalformedResponseError(TripPlannerError):
    """Raised when the provider text does not hold a valid route array."""
