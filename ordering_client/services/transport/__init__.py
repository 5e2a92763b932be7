"""
Transport Factory

Provides a single entry point for obtaining a transport instance.
The factory lets the rest of the application stay agnostic about which
implementation is being used.

Usage:
    from ordering_client.services.transport import create_transport

    # Returns MockTransport or HttpTransport based on ENV_MODE
    transport = create_transport(get_settings())

    cuisines = await transport.fetch_catalog_page(1, 10)

Environment Switching:
    - ENV_MODE=development → MockTransport (no API calls)
    - ENV_MODE=staging → HttpTransport (test partner key)
    - ENV_MODE=production → HttpTransport

Each ordering session owns its transport; nothing is cached at module level.
"""

import logging

from ordering_client.core.config import Settings
from ordering_client.services.transport.base import BaseTransport
from ordering_client.services.transport.http import HttpTransport
from ordering_client.services.transport.mock import MockTransport
from ordering_client.services.transport.retry import retry_with_backoff

logger = logging.getLogger(__name__)


def create_transport(settings: Settings) -> BaseTransport:
    """
    Build the transport configured for this environment.

    Returns:
        BaseTransport: MockTransport in development, HttpTransport otherwise

    Raises:
        ValueError: If staging/production but PARTNER_API_KEY is not configured
    """
    if settings.is_development:
        logger.info("Transport: Using MockTransport (development mode)")
        return MockTransport(
            failure_rate=settings.mock_failure_rate,
            min_latency=settings.mock_min_latency,
            max_latency=settings.mock_max_latency,
        )

    logger.info(f"Transport: Using HttpTransport ({settings.env_mode.value} mode)")
    return HttpTransport.from_settings(settings)


__all__ = [
    "create_transport",
    "BaseTransport",
    "HttpTransport",
    "MockTransport",
    "retry_with_backoff",
]
