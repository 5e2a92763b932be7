"""
Transport Abstract Base Class

Defines the interface contract for the collaborator that talks to the
catalog and payment API. Both MockTransport and HttpTransport implement
these methods, so the ordering session behaves identically against the
in-memory catalog and the live one.

Error contract:
    - NotFound: upstream reports an empty catalog
    - ServerError: upstream answered with an error
    - TransportError: no usable response
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from ordering_client.core.config import Language
from ordering_client.models import Cuisine, MenuItem
from ordering_client.schemas import PaymentPayload


class BaseTransport(ABC):
    """
    Abstract base class for catalog/payment transports.

    Example:
        >>> transport = create_transport(settings)
        >>> cuisines = await transport.fetch_catalog_page(1, 10, Language.ENGLISH)
        >>> txn = await transport.submit_payment(payload)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the transport.

        Returns:
            str: Provider name (e.g., "mock", "http")
        """
        pass

    @abstractmethod
    async def fetch_catalog_page(
        self,
        page: int,
        count: int,
        language: Language = Language.ENGLISH,
    ) -> list[Cuisine]:
        """
        Fetch one page of cuisines.

        Args:
            page: 1-based page index
            count: Cuisines per page
            language: Catalog language

        Returns:
            list[Cuisine]: Cuisines on that page

        Raises:
            NotFound: no cuisines on this page
            ServerError, TransportError: after retries are exhausted
        """
        pass

    @abstractmethod
    async def fetch_filtered_catalog(
        self,
        min_rating: Optional[float] = None,
        cuisine_types: Optional[Sequence[str]] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        language: Language = Language.ENGLISH,
    ) -> list[Cuisine]:
        """
        Fetch cuisines matching a filter.

        A price range is only applied when both bounds are given.
        """
        pass

    @abstractmethod
    async def fetch_item(
        self,
        item_id: str,
        language: Language = Language.ENGLISH,
    ) -> MenuItem:
        """Fetch a single dish by id."""
        pass

    @abstractmethod
    async def submit_payment(self, payload: PaymentPayload) -> str:
        """
        Submit a payment request.

        Returns:
            str: Transaction reference

        Raises:
            ServerError: payment rejected
            TransportError: no usable response
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the upstream.

        Returns:
            bool: True if the catalog is reachable
        """
        pass

    async def aclose(self) -> None:
        """Release network resources."""
        return None
