"""
Module: clients.marketplace

Marketplace product API as seen by the pricing engine, plus an in-memory
implementation backed by the mock product catalog.
"""
import abc
import asyncio
from dataclasses import replace
from typing import Any, Optional

from ..config.settings import Settings, get_settings
from ..engine.models import Product
from ..utils.exceptions import MarketplaceError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MarketplaceClient(abc.ABC):
    """Opaque product API used by the pricing engine."""

    @abc.abstractmethod
    async def update_product(self, product_id: str, changes: dict[str, Any]) -> None:
        """Apply field changes (e.g. ``{"price": 99.9}``) to a listing."""

    @abc.abstractmethod
    async def get_my_products(self) -> dict[str, list[Product]]:
        """Return the seller's listings as ``{"results": [...]}``."""


class InMemoryMarketplaceClient(MarketplaceClient):
    """
    Marketplace client backed by an in-memory product store.

    Product ids listed in ``fail_updates_for`` make ``update_product`` raise,
    which lets callers exercise the failure path.
    """

    def __init__(
        self,
        products: Optional[list[Product]] = None,
        settings: Optional[Settings] = None,
        fail_updates_for: Optional[set[str]] = None,
    ):
        self.settings = settings or get_settings()
        self._products: dict[str, Product] = {p.id: replace(p) for p in (products or [])}
        self.fail_updates_for = set(fail_updates_for or ())
        self.updates: list[tuple[str, dict[str, Any]]] = []

    async def update_product(self, product_id: str, changes: dict[str, Any]) -> None:
        await asyncio.sleep(self.settings.delay(0.2))

        if product_id in self.fail_updates_for:
            raise MarketplaceError(f"Marketplace rejected update for product {product_id}")

        product = self._products.get(product_id)
        if product is None:
            raise MarketplaceError(f"Product {product_id} not found")

        for key, value in changes.items():
            if hasattr(product, key):
                setattr(product, key, value)
        self.updates.append((product_id, dict(changes)))
        logger.info(f"Updated product {product_id}: {changes}")

    async def get_my_products(self) -> dict[str, list[Product]]:
        await asyncio.sleep(self.settings.delay(0.3))
        return {"results": [replace(p) for p in self._products.values()]}

    def get_product(self, product_id: str) -> Optional[Product]:
        product = self._products.get(product_id)
        return replace(product) if product else None
