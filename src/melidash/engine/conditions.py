"""
Condition Evaluator - decides whether a pricing rule should fire for a product.

Each condition is dispatched by type to a metric extractor, and the metric is
compared against the condition value with the condition operator. A rule
fires only when every condition holds.
"""
from datetime import datetime
from typing import Any, Callable, Optional

from ..config.settings import Settings, get_settings
from ..utils.logger import get_logger
from .competitors import CompetitorFeed
from .models import PricingCondition, Product, ValidationResult, utcnow

logger = get_logger(__name__)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def compare(metric: float, operator: str, value: Any) -> bool:
    """
    Compare a numeric metric against a condition value.

    ``between`` expects a two-item ``[low, high]`` value (inclusive). Text
    operators and non-numeric values never match.
    """
    if operator == 'between':
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            return False
        low, high = _as_number(value[0]), _as_number(value[1])
        if low is None or high is None:
            return False
        return low <= metric <= high

    target = _as_number(value)
    if target is None:
        return False

    if operator == 'less_than':
        return metric < target
    elif operator == 'greater_than':
        return metric > target
    elif operator == 'less_equal':
        return metric <= target
    elif operator == 'greater_equal':
        return metric >= target
    elif operator == 'equals':
        return metric == target
    elif operator == 'not_equals':
        return metric != target
    return False


class ConditionEvaluator:
    """Evaluates rule conditions against a product snapshot."""

    def __init__(
        self,
        feed: CompetitorFeed,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.feed = feed
        self.settings = settings or get_settings()
        self.clock = clock

    async def evaluate_conditions(self, conditions: list[PricingCondition], product: Product) -> ValidationResult:
        """
        Evaluate all conditions (logical AND).

        An empty list is valid. Every failing condition adds
        ``"Condition <type> not met"`` to the result errors.
        """
        result = ValidationResult()

        for condition in conditions:
            if not await self.evaluate_condition(condition, product, result):
                result.add_error(f"Condition {condition.type} not met")

        return result

    async def evaluate_condition(
        self,
        condition: PricingCondition,
        product: Product,
        result: Optional[ValidationResult] = None,
    ) -> bool:
        """Evaluate a single condition."""
        if condition.type == 'competitor_price':
            return await self._competitor_price(condition, product)
        elif condition.type == 'stock_level':
            return compare(product.available_quantity, condition.operator, condition.value)
        elif condition.type == 'sales_velocity':
            return compare(self.sales_velocity(product), condition.operator, condition.value)
        elif condition.type == 'profit_margin':
            return compare(self.profit_margin(product), condition.operator, condition.value)
        elif condition.type in ('time_based', 'product_age'):
            return compare(self.age_in_days(product), condition.operator, condition.value)

        logger.warning(f"Condition type not supported: {condition.type}")
        if result is not None:
            result.add_warning(f"Condition type {condition.type} is not supported")
        return False

    async def _competitor_price(self, condition: PricingCondition, product: Product) -> bool:
        # The comparison is competitor vs. our price: less_than means a competitor is cheaper.
        lowest = await self.feed.lowest_price(product)
        return compare(lowest, condition.operator, product.price)

    @staticmethod
    def sales_velocity(product: Product) -> float:
        return product.sold_quantity / max(1, product.initial_quantity)

    def profit_margin(self, product: Product) -> float:
        if product.price <= 0:
            return 0.0
        estimated_cost = product.price * self.settings.cost_ratio
        return (product.price - estimated_cost) / product.price * 100

    def age_in_days(self, product: Product) -> float:
        return (self.clock() - product.date_created).total_seconds() / 86400
