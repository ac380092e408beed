"""Exception types raised by the market data client."""
from typing import Optional


class MarketDataError(Exception):
    """Base class for every error raised by this client."""


class ValidationError(MarketDataError, ValueError):
    """Caller options are invalid or contradictory. Raised before any network call."""


class RequestError(MarketDataError):
    """Transport-level failure: network error or an HTTP error status."""

    def __init__(self, message: str, url: str = "", status_code: Optional[int] = None,
                 response=None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.response = response


class NormalizationError(MarketDataError):
    """Response body did not have the shape expected for the action."""

    def __init__(self, message: str, action: str = ""):
        super().__init__(message)
        self.action = action
