"""
Change Validator - checks a candidate price against a rule's guard rails.
"""
from typing import Optional

from ..config.settings import Settings, get_settings
from .models import PricingLimits, ValidationResult


class ChangeValidator:
    """Validates price changes against PricingLimits."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()

    def validate_price_change(
        self,
        old_price: float,
        new_price: float,
        limits: Optional[PricingLimits] = None,
    ) -> ValidationResult:
        """
        Return a failed result with one message per violated limit.

        Margin uses an estimated cost of ``old_price * cost_ratio``.
        """
        result = ValidationResult()

        if limits is None:
            return result

        if new_price <= 0:
            result.add_error(f"Price {new_price:.2f} must be greater than zero")

        if limits.min_price is not None and new_price < limits.min_price:
            result.add_error(f"Price {new_price:.2f} is below the minimum allowed ({limits.min_price:.2f})")

        if limits.max_price is not None and new_price > limits.max_price:
            result.add_error(f"Price {new_price:.2f} is above the maximum allowed ({limits.max_price:.2f})")

        if limits.max_change_percentage is not None and old_price > 0:
            change = abs((new_price - old_price) / old_price) * 100
            if change > limits.max_change_percentage:
                result.add_error(
                    f"Change of {change:.1f}% exceeds the limit of {limits.max_change_percentage}%"
                )

        # Margin is undefined for a non-positive price
        if new_price > 0 and (limits.min_margin is not None or limits.max_margin is not None):
            estimated_cost = old_price * self.settings.cost_ratio
            margin = (new_price - estimated_cost) / new_price * 100
            if limits.min_margin is not None and margin < limits.min_margin:
                result.add_error(f"Margin of {margin:.1f}% is below the minimum of {limits.min_margin}%")
            if limits.max_margin is not None and margin > limits.max_margin:
                result.add_error(f"Margin of {margin:.1f}% is above the maximum of {limits.max_margin}%")

        return result
