"""
Catalog Aggregation

Merges paginated catalog pages without duplicates and derives the "top
dishes" view from a sample of the catalog.

Top dishes are a heuristic: the sample is the first few pages plus one
high-rating filtered slice, not the whole catalog. Ratings arrive as text;
unparsable ratings rank as 0.

Sampling protocol:
    1. Fetch pages 1..max_pages one at a time, stopping early once
       `target` cuisines were collected or a page reports NotFound
    2. Fetch one filtered slice with min_rating (failures ignored)
    3. Deduplicate by cuisine id, then by dish id, keeping first occurrences
"""

import logging
from typing import Iterable, Optional, Sequence

from ordering_client.core.cancellation import CancellationToken
from ordering_client.core.config import Language
from ordering_client.core.exceptions import NotFound, OrderingError
from ordering_client.models import Cuisine, MenuItem
from ordering_client.services.transport.base import BaseTransport

logger = logging.getLogger(__name__)

TOP_DISH_COUNT = 3


# =============================================================================
# PURE OPERATIONS
# =============================================================================

def dedupe_cuisines(cuisines: Iterable[Cuisine]) -> list[Cuisine]:
    """Keep the first cuisine seen for each id, preserving order."""
    seen: set[str] = set()
    unique = []
    for cuisine in cuisines:
        if cuisine.id not in seen:
            seen.add(cuisine.id)
            unique.append(cuisine)
    return unique


def merge_page(
    existing: Sequence[Cuisine],
    incoming: Sequence[Cuisine],
) -> tuple[list[Cuisine], bool]:
    """
    Append the cuisines of a new page that are not already present.

    Returns:
        (merged, any_new): any_new is False when the page added nothing,
        which tells the caller to stop paginating.
    """
    known = {cuisine.id for cuisine in existing}
    fresh = [cuisine for cuisine in dedupe_cuisines(incoming) if cuisine.id not in known]
    return list(existing) + fresh, bool(fresh)


def _rank(cuisines: Sequence[Cuisine], limit: int) -> list[MenuItem]:
    seen: set[str] = set()
    dishes = []
    for cuisine in cuisines:
        for item in cuisine.items:
            if item.id not in seen:
                seen.add(item.id)
                dishes.append(item)
    # sorted() is stable: equal ratings keep their flatten order.
    dishes = sorted(dishes, key=lambda item: item.rating_value, reverse=True)
    return dishes[:limit]


def compute_top_dishes(
    sampled: Sequence[Cuisine],
    fallback: Sequence[Cuisine] = (),
    limit: int = TOP_DISH_COUNT,
) -> list[MenuItem]:
    """
    Highest rated dishes across the sampled cuisines.

    If the sample holds no dishes at all, the same ranking is applied to
    fallback instead.
    """
    top = _rank(sampled, limit)
    if not top:
        top = _rank(fallback, limit)
    return top


async def collect_top_dish_sample(
    transport: BaseTransport,
    language: Language = Language.ENGLISH,
    page_size: int = 10,
    max_pages: int = 5,
    target: int = 20,
    min_rating: float = 4.8,
    token: Optional[CancellationToken] = None,
) -> list[Cuisine]:
    """
    Fetch the catalog sample used for top dishes.

    Raises:
        ServerError, TransportError: if a page fetch fails
        LoadCancelled: if token was cancelled while fetching
    """
    collected: list[Cuisine] = []
    for page in range(1, max_pages + 1):
        try:
            page_cuisines = await transport.fetch_catalog_page(page, page_size, language)
        except NotFound:
            page_cuisines = None
        if token is not None:
            token.raise_if_cancelled()
        if page_cuisines is None:
            logger.debug(f"Sampling stopped at page {page}: no more cuisines")
            break
        collected.extend(page_cuisines)
        if len(collected) >= target:
            break

    try:
        collected.extend(
            await transport.fetch_filtered_catalog(min_rating=min_rating, language=language)
        )
    except OrderingError as e:
        logger.info(f"Filtered sample unavailable: {e}")
    if token is not None:
        token.raise_if_cancelled()

    unique = dedupe_cuisines(collected)
    logger.info(f"Analyzing dishes across {len(unique)} unique cuisines")
    return unique


# =============================================================================
# SESSION STATE
# =============================================================================

class CatalogAggregator:
    """
    Working set of one browsing session.

    Holds the cuisines merged so far, the next page to request and the top
    dishes. Nothing here is persisted; reset() starts over, e.g. after a
    language change.
    """

    def __init__(
        self,
        transport: BaseTransport,
        page_size: int = 10,
        sample_pages: int = 5,
        sample_target: int = 20,
        min_rating: float = 4.8,
        top_dish_count: int = TOP_DISH_COUNT,
    ):
        self.transport = transport
        self.page_size = page_size
        self.sample_pages = sample_pages
        self.sample_target = sample_target
        self.min_rating = min_rating
        self.top_dish_count = top_dish_count
        self.reset()

    def reset(self) -> None:
        self.cuisines: list[Cuisine] = []
        self.next_page = 1
        self.has_more_pages = True
        self.top_dishes: list[MenuItem] = []
        self.top_dishes_loaded = False

    def find_cuisine(self, cuisine_id: str) -> Optional[Cuisine]:
        for cuisine in self.cuisines:
            if cuisine.id == cuisine_id:
                return cuisine
        return None

    async def load_next_page(
        self,
        token: CancellationToken,
        language: Language = Language.ENGLISH,
    ) -> bool:
        """
        Fetch and merge the next page.

        Returns:
            bool: True if the page contributed new cuisines

        Raises:
            NotFound: if the catalog is empty and nothing was loaded yet
            ServerError, TransportError: if the fetch failed
            LoadCancelled: if token was cancelled meanwhile (nothing applied)
        """
        if not self.has_more_pages:
            return False

        page = self.next_page
        logger.info(f"Fetching cuisine data for page {page} in {language.value}")
        try:
            incoming = await self.transport.fetch_catalog_page(page, self.page_size, language)
        except NotFound:
            token.raise_if_cancelled()
            if not self.cuisines:
                raise
            logger.info("No more cuisines; pagination finished")
            self.has_more_pages = False
            return False
        token.raise_if_cancelled()

        merged, any_new = merge_page(self.cuisines, incoming)
        if any_new:
            self.cuisines = merged
            self.next_page += 1
        else:
            self.has_more_pages = False
        logger.debug(f"Page {page}: {len(incoming)} received, {len(self.cuisines)} total")
        return any_new

    async def load_top_dishes(
        self,
        token: CancellationToken,
        language: Language = Language.ENGLISH,
    ) -> list[MenuItem]:
        """
        Sample the catalog and store the top dishes.

        If sampling fails, the ranking falls back to the cuisines already
        loaded in this session.
        """
        try:
            sample = await collect_top_dish_sample(
                self.transport,
                language=language,
                page_size=self.page_size,
                max_pages=self.sample_pages,
                target=self.sample_target,
                min_rating=self.min_rating,
                token=token,
            )
            sampled = dedupe_cuisines(sample + self.cuisines)
        except OrderingError as e:
            logger.warning(f"Error loading top dishes, using loaded cuisines: {e}")
            sampled = []
        token.raise_if_cancelled()

        top = compute_top_dishes(sampled, self.cuisines, limit=self.top_dish_count)
        if top:
            self.top_dishes = top
            self.top_dishes_loaded = True
            for dish in top:
                logger.info(f"Top dish: {dish.name} (rating {dish.rating})")
        else:
            logger.warning("No top dishes found")
        return top
