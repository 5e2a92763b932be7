"""
Error Taxonomy

Every failure the ordering core reports derives from OrderingError so
callers (the HTTP layer, scripts) can catch the whole family at once.

Local, non-fatal:
    - PriceFormatError: a catalog price string could not be parsed

Reported to the caller:
    - EmptyCartError: payment requested for an empty cart

Network layer:
    - TransportError: the request never produced a usable response
    - ServerError: the upstream answered with an error
    - NotFound: the upstream reported an empty catalog
"""

from typing import Optional


class OrderingError(Exception):
    """Base class for all ordering client errors."""


class PriceFormatError(OrderingError, ValueError):
    """Raised when no numeric value can be extracted from a price string."""

    def __init__(self, raw: str):
        self.raw = raw
        super().__init__(f"Could not parse price: {raw!r}")


class EmptyCartError(OrderingError):
    """Raised when a payment is requested for an empty cart."""

    def __init__(self, message: str = "Cart is empty"):
        super().__init__(message)


class TransportError(OrderingError):
    """Raised when the upstream could not be reached or answered garbage."""


class ServerError(OrderingError):
    """
    Raised when the upstream API reports a failure.

    Attributes:
        message: Message reported by the server
        status_code: HTTP status code, when one was received
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(f"Server error: {message}")


class NotFound(ServerError):
    """Raised when the upstream reports that no cuisines were found."""

    def __init__(self, message: str = "No Cuisines Found"):
        super().__init__(message, status_code=404)
