"""
Price Calculator - folds pricing actions over the current price.

Actions compose: each one applies to the output of the previous one, so a
10% decrease followed by a 5% increase on 100.00 gives 94.50.
"""
from decimal import Decimal, ROUND_HALF_UP

from ..utils.logger import get_logger
from .competitors import CompetitorFeed
from .models import PricingAction, Product

logger = get_logger(__name__)


def round_price(value: float) -> float:
    """Round half-up to 2 decimal places."""
    return float(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


class PriceCalculator:
    """Computes the candidate price for a rule's actions."""

    def __init__(self, feed: CompetitorFeed):
        self.feed = feed

    async def calculate_new_price(self, actions: list[PricingAction], product: Product) -> float:
        """Apply actions sequentially starting from the product price."""
        new_price = product.price

        for action in actions:
            new_price = await self.apply_action(action, new_price, product)

        return round_price(new_price)

    async def apply_action(self, action: PricingAction, price: float, product: Product) -> float:
        """Apply a single action to a price."""
        value = float(action.value)

        if action.type == 'increase_price':
            if action.unit == 'percentage':
                return price * (1 + value / 100)
            return price + value

        elif action.type == 'decrease_price':
            if action.unit == 'percentage':
                return price * (1 - value / 100)
            return price - value

        elif action.type == 'set_price':
            return value

        elif action.type == 'match_competitor':
            lowest = await self.feed.lowest_price(product)
            if action.unit == 'percentage':
                return lowest * (1 + value / 100)
            return lowest + value

        logger.debug(f"Action {action.type} does not change the price")
        return price
