"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from ordering_client.core.config import get_settings, Settings, EnvironmentMode, Language
from ordering_client.core.exceptions import (
    OrderingError,
    PriceFormatError,
    EmptyCartError,
    TransportError,
    ServerError,
    NotFound,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "Language",
    "OrderingError",
    "PriceFormatError",
    "EmptyCartError",
    "TransportError",
    "ServerError",
    "NotFound",
]
