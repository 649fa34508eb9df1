"""Exception hierarchy for city lookups and backend calls."""


class CityInsightsError(Exception):
    """Base exception for city insights failures."""
    pass


class CityNotFoundError(CityInsightsError):
    """Raised when a city lookup returns no results."""
    pass


class ExternalAPIError(CityInsightsError):
    """Raised when a required upstream API fails or returns malformed data."""
    pass


class NetworkError(ExternalAPIError):
    """Raised when an upstream call fails at the transport level."""
    pass


class RateUnavailableError(CityInsightsError):
    """Raised when the exchange rate cannot be obtained."""
    pass


class AuthenticationError(CityInsightsError):
    """Raised when the backend refuses to issue a session token."""
    pass
