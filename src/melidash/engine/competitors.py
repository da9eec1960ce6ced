"""
Competitor Feed - session cache of competitor offers per product.

There is no real price feed: the first lookup for a product fabricates a
single competitor priced within ±10% of the product and caches it for the
lifetime of the feed.
"""
import random
from typing import Optional

from .models import CompetitorData, Product, utcnow


class CompetitorFeed:
    """Lazily fabricated, per-product cache of competitor prices."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._data: dict[str, list[CompetitorData]] = {}

    async def get_competitors(self, product: Product) -> list[CompetitorData]:
        """Return cached competitors, fabricating one on first access."""
        competitors = self._data.get(product.id)
        if competitors:
            return list(competitors)

        fabricated = CompetitorData(
            product_id=product.id,
            competitor_name='Competitor A',
            competitor_price=product.price * (0.9 + self._rng.random() * 0.2),
            competitor_url='https://example.com',
            last_updated=utcnow(),
            availability=True,
        )
        self._data[product.id] = [fabricated]
        return [fabricated]

    async def lowest_price(self, product: Product) -> float:
        competitors = await self.get_competitors(product)
        return min(c.competitor_price for c in competitors)

    def cached(self, product_id: str) -> list[CompetitorData]:
        """Competitors already known for a product (never fabricates)."""
        return list(self._data.get(product_id, []))

    def set_competitors(self, product_id: str, competitors: list[CompetitorData]):
        self._data[product_id] = list(competitors)

    def clear(self):
        self._data.clear()
