"""
Mock Transport Implementation

Serves an in-memory catalog without making real API calls.
Used in development mode (ENV_MODE=development) to:
    - Browse, fill a cart and check out locally
    - Develop without a partner API key or connectivity
    - Exercise pagination, top dishes and payment failures

Behavior:
    - Paginates like the real API and raises NotFound past the last page
    - Serves English or Hindi names depending on the requested language
    - Declines a configurable share of payments
    - Generates txn_mock_xxx transaction references
"""

import asyncio
import random
import uuid
import logging
from typing import Optional, Sequence

from ordering_client.core.config import Language
from ordering_client.core.exceptions import NotFound, ServerError
from ordering_client.models import Cuisine, MenuItem
from ordering_client.schemas import PaymentPayload
from ordering_client.services.price_parser import parse_price
from ordering_client.services.transport.base import BaseTransport

logger = logging.getLogger(__name__)


# (cuisine_id, English name, Hindi name, dishes)
# dish: (item_id, English name, Hindi name, price, rating)
SAMPLE_CATALOG = [
    ("1", "North Indian", "उत्तर भारतीय", [
        ("101", "Butter Chicken", "बटर चिकन", "₹350", "4.7"),
        ("102", "Dal Makhani", "दाल मखनी", "₹220", "4.5"),
        ("103", "Paneer Tikka", "पनीर टिक्का", "₹280", "4.9"),
    ]),
    ("2", "South Indian", "दक्षिण भारतीय", [
        ("201", "Masala Dosa", "मसाला डोसा", "₹150", "4.6"),
        ("202", "Idli Sambar", "इडली सांभर", "₹90", "4.2"),
        ("203", "Medu Vada", "मेदु वड़ा", "₹80", "4.0"),
    ]),
    ("3", "Chinese", "चाइनीज़", [
        ("301", "Hakka Noodles", "हक्का नूडल्स", "₹180", "4.3"),
        ("302", "Veg Manchurian", "वेज मंचूरियन", "₹200", "4.4"),
        ("303", "Spring Rolls", "स्प्रिंग रोल्स", "₹160", "3.9"),
    ]),
    ("4", "Italian", "इटैलियन", [
        ("401", "Margherita Pizza", "मार्गेरिटा पिज़्ज़ा", "₹399", "4.8"),
        ("402", "Penne Arrabbiata", "पेने अरेबियाटा", "₹329", "4.1"),
    ]),
    ("5", "Mexican", "मैक्सिकन", [
        ("501", "Veg Burrito", "वेज बरिटो", "₹249", "4.2"),
        ("502", "Nachos", "नाचोज़", "₹199", "3.8"),
    ]),
    ("6", "Desserts", "मिठाइयाँ", [
        ("601", "Gulab Jamun", "गुलाब जामुन", "₹120", "4.9"),
        ("602", "Rasmalai", "रसमलाई", "₹1,050", "4.6"),
    ]),
]

IMAGE_BASE = "https://images.example.com"


def build_catalog(language: Language = Language.ENGLISH) -> list[Cuisine]:
    """Materialize SAMPLE_CATALOG in the requested language."""
    use_hindi = language == Language.HINDI
    cuisines = []
    for cuisine_id, name_en, name_hi, dishes in SAMPLE_CATALOG:
        items = tuple(
            MenuItem(
                id=item_id,
                name=dish_hi if use_hindi else dish_en,
                image_url=f"{IMAGE_BASE}/items/{item_id}.jpg",
                price=price,
                rating=rating,
            )
            for item_id, dish_en, dish_hi, price, rating in dishes
        )
        cuisines.append(
            Cuisine(
                id=cuisine_id,
                name=name_hi if use_hindi else name_en,
                image_url=f"{IMAGE_BASE}/cuisines/{cuisine_id}.jpg",
                items=items,
            )
        )
    return cuisines


class MockTransport(BaseTransport):
    """
    Mock implementation of the transport.

    Attributes:
        failure_rate: Probability of a declined payment (0.0-1.0)
        min_latency: Minimum simulated response time in seconds
        max_latency: Maximum simulated response time in seconds

    Example:
        >>> transport = MockTransport(failure_rate=0.1)
        >>> page = await transport.fetch_catalog_page(1, 4)
        >>> len(page)
        4
    """

    # Simulated decline messages
    DECLINE_REASONS = [
        "Your card was declined.",
        "Your card has insufficient funds.",
        "An error occurred while processing your card.",
    ]

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
        catalog: Optional[dict[Language, list[Cuisine]]] = None,
    ):
        """
        Initialize the mock transport.

        Args:
            failure_rate: Probability of payment failure
            min_latency: Minimum response time in seconds
            max_latency: Maximum response time in seconds
            catalog: Per-language catalog overriding SAMPLE_CATALOG
        """
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self._catalog = catalog
        self.payments: list[PaymentPayload] = []

        logger.info(
            f"MockTransport initialized "
            f"(failure_rate={failure_rate:.0%}, "
            f"latency={min_latency}-{max_latency}s)"
        )

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "mock"

    def _cuisines(self, language: Language) -> list[Cuisine]:
        if self._catalog is not None:
            return list(self._catalog.get(language) or self._catalog.get(Language.ENGLISH, []))
        return build_catalog(language)

    async def _simulate_latency(self) -> None:
        if self.max_latency > 0:
            await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

    def _should_fail(self) -> bool:
        """Determine if this payment should be declined."""
        return random.random() < self.failure_rate

    async def fetch_catalog_page(
        self,
        page: int,
        count: int,
        language: Language = Language.ENGLISH,
    ) -> list[Cuisine]:
        await self._simulate_latency()
        cuisines = self._cuisines(language)
        start = (page - 1) * count
        chunk = cuisines[start:start + count] if page >= 1 else []
        if not chunk:
            logger.debug(f"Mock: page {page} is empty")
            raise NotFound()
        logger.debug(f"Mock: serving {len(chunk)} cuisines for page {page}")
        return chunk

    async def fetch_filtered_catalog(
        self,
        min_rating: Optional[float] = None,
        cuisine_types: Optional[Sequence[str]] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        language: Language = Language.ENGLISH,
    ) -> list[Cuisine]:
        await self._simulate_latency()
        wanted = {name.lower() for name in cuisine_types} if cuisine_types else None
        results = []
        for cuisine in self._cuisines(language):
            if wanted is not None and cuisine.name.lower() not in wanted:
                continue
            items = []
            for item in cuisine.items:
                if min_rating is not None and item.rating_value < min_rating:
                    continue
                if min_price is not None and max_price is not None:
                    price = parse_price(item.price)
                    if not (min_price <= price <= max_price):
                        continue
                items.append(item)
            if items:
                results.append(cuisine.model_copy(update={"items": tuple(items)}))
        return results

    async def fetch_item(
        self,
        item_id: str,
        language: Language = Language.ENGLISH,
    ) -> MenuItem:
        await self._simulate_latency()
        for cuisine in self._cuisines(language):
            for item in cuisine.items:
                if item.id == item_id:
                    return item
        raise ServerError(f"Item {item_id} not found", status_code=404)

    async def submit_payment(self, payload: PaymentPayload) -> str:
        await self._simulate_latency()

        if self._should_fail():
            message = random.choice(self.DECLINE_REASONS)
            logger.debug(f"Mock: Payment declined - {message}")
            raise ServerError(message, status_code=402)

        self.payments.append(payload)
        txn_ref = f"txn_mock_{uuid.uuid4().hex[:16]}"
        logger.info(f"Mock: Payment successful - {txn_ref} - {payload.total_amount}")
        return txn_ref

    async def health_check(self) -> bool:
        """Mock health check always returns True."""
        logger.debug("Mock: Health check passed")
        return True
