"""
HTTP Transport Implementation

Production implementation talking to the catalog/payment API with httpx.
Used when ENV_MODE=production or ENV_MODE=staging.

Every call is a JSON POST to /emulator/interview/<action> carrying:
    - X-Partner-API-Key: partner key from settings
    - X-Forward-Proxy-Action: the action name
    - Accept-Language: catalog language

Requirements:
    - PARTNER_API_KEY must be set in environment
"""

import json
import logging
from typing import Any, Optional, Sequence

import httpx
from pydantic import ValidationError

from ordering_client.core.config import Language, Settings
from ordering_client.core.exceptions import NotFound, ServerError, TransportError
from ordering_client.models import Cuisine, MenuItem
from ordering_client.schemas import (
    CatalogPageResponse,
    ItemDetailResponse,
    PaymentPayload,
    PaymentResponse,
)
from ordering_client.services.transport.base import BaseTransport
from ordering_client.services.transport.retry import retry_with_backoff

logger = logging.getLogger(__name__)

API_PREFIX = "/emulator/interview"
NO_CUISINES_MARKER = "No Cuisines Found"


class HttpTransport(BaseTransport):
    """
    httpx-backed transport.

    Only the catalog page fetch is retried with exponential backoff; the
    filter, item and payment calls surface their first error.

    Example:
        >>> transport = HttpTransport.from_settings(get_settings())
        >>> cuisines = await transport.fetch_catalog_page(1, 10)
        >>> await transport.aclose()
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_base: float = 0.5,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the transport.

        Args:
            base_url: API root, e.g. https://uat.onebanc.ai
            api_key: Partner API key
            timeout: Request timeout in seconds
            max_retries: Retries for catalog page fetches
            backoff_base: First backoff delay in seconds
            client: Pre-built httpx client (tests pass one with a MockTransport)
        """
        if not api_key:
            raise ValueError(
                "PARTNER_API_KEY is required for the HTTP transport. "
                "Set it in your .env file or environment variables."
            )

        self._api_key = api_key
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._owns_client = client is None

        logger.info(f"HttpTransport initialized (base_url={base_url})")

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpTransport":
        return cls(
            base_url=settings.api_base_url,
            api_key=settings.partner_api_key or "",
            timeout=settings.request_timeout,
            max_retries=settings.catalog_max_retries,
            backoff_base=settings.catalog_backoff_base,
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "http"

    # ==========================================================================
    # REQUEST HELPERS
    # ==========================================================================

    def _headers(self, action: str, language: Language) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Partner-API-Key": self._api_key,
            "X-Forward-Proxy-Action": action,
            "Accept-Language": language.value,
        }

    async def _post(
        self,
        action: str,
        body: dict[str, Any],
        language: Language = Language.ENGLISH,
    ) -> httpx.Response:
        logger.debug(f"POST {API_PREFIX}/{action} body={body}")
        try:
            response = await self._client.post(
                f"{API_PREFIX}/{action}",
                json=body,
                headers=self._headers(action, language),
            )
        except httpx.HTTPError as e:
            raise TransportError(f"{action}: {e}") from e

        logger.debug(f"{action} → {response.status_code}")
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransportError("Invalid response from server") from e

    def _decode_catalog(self, response: httpx.Response) -> list[Cuisine]:
        if NO_CUISINES_MARKER in response.text:
            raise NotFound()

        if not response.is_success:
            raise ServerError(
                f"Server returned status code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            envelope = CatalogPageResponse.model_validate(self._json(response))
        except ValidationError as e:
            raise TransportError(f"Data error: {e}") from e

        if not envelope.ok:
            if NO_CUISINES_MARKER in envelope.response_message:
                raise NotFound(envelope.response_message)
            raise ServerError(envelope.response_message, status_code=response.status_code)

        return list(envelope.cuisines)

    # ==========================================================================
    # CATALOG
    # ==========================================================================

    async def _fetch_page_once(self, page: int, count: int, language: Language) -> list[Cuisine]:
        response = await self._post(
            "get_item_list",
            {"page": page, "count": count, "language": language.value},
            language,
        )
        return self._decode_catalog(response)

    async def fetch_catalog_page(
        self,
        page: int,
        count: int,
        language: Language = Language.ENGLISH,
    ) -> list[Cuisine]:
        cuisines = await retry_with_backoff(
            lambda: self._fetch_page_once(page, count, language),
            max_retries=self.max_retries,
            base_delay=self.backoff_base,
            label=f"get_item_list page {page}",
        )
        logger.info(f"Received {len(cuisines)} cuisines for page {page} ({language.value})")
        return cuisines

    async def fetch_filtered_catalog(
        self,
        min_rating: Optional[float] = None,
        cuisine_types: Optional[Sequence[str]] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        language: Language = Language.ENGLISH,
    ) -> list[Cuisine]:
        body: dict[str, Any] = {"language": language.value}
        if cuisine_types is not None:
            body["cuisine_type"] = list(cuisine_types)
        if min_price is not None and max_price is not None:
            body["price_range"] = {"min_amount": min_price, "max_amount": max_price}
        if min_rating is not None:
            body["min_rating"] = min_rating

        response = await self._post("get_item_by_filter", body, language)
        return self._decode_catalog(response)

    async def fetch_item(
        self,
        item_id: str,
        language: Language = Language.ENGLISH,
    ) -> MenuItem:
        response = await self._post(
            "get_item_by_id",
            {"item_id": item_id, "language": language.value},
            language,
        )
        if not response.is_success:
            raise ServerError(
                f"Server returned status code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            detail = ItemDetailResponse.model_validate(self._json(response))
        except ValidationError as e:
            raise TransportError(f"Data error: {e}") from e

        if not detail.ok:
            raise ServerError(detail.response_message, status_code=response.status_code)
        return detail.to_menu_item()

    # ==========================================================================
    # PAYMENT
    # ==========================================================================

    async def submit_payment(self, payload: PaymentPayload) -> str:
        logger.info(
            f"Submitting payment: {payload.total_items} items, total {payload.total_amount}"
        )
        response = await self._post("make_payment", payload.model_dump())

        body = self._json(response)
        if not isinstance(body, dict):
            raise TransportError("Failed to parse server response")
        try:
            result = PaymentResponse.model_validate(body)
        except ValidationError as e:
            raise TransportError("Failed to parse server response") from e

        if not response.is_success:
            raise ServerError(
                result.error_details or result.response_message,
                status_code=response.status_code,
            )

        if not result.ok:
            raise ServerError(result.response_message, status_code=response.status_code)

        logger.info(f"Payment successful with transaction reference: {result.txn_ref_no}")
        return result.txn_ref_no

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    async def health_check(self) -> bool:
        try:
            await self._fetch_page_once(1, 1, Language.ENGLISH)
            return True
        except NotFound:
            # Reachable, just empty.
            return True
        except (ServerError, TransportError) as e:
            logger.error(f"Upstream health check failed: {e}")
            return False

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
