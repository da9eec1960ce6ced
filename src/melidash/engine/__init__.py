"""Engine subpackage - pricing rule evaluation and execution.

The orchestrator lives in ``melidash.engine.pricing_engine`` and is imported
from there; it depends on ``melidash.clients.marketplace``, which in turn needs
the models defined here.
"""
from .competitors import CompetitorFeed
from .models import (
    PricingRule,
    PricingCondition,
    PricingAction,
    PricingLimits,
    PricingExecution,
    PricingAlert,
    Product,
)

__all__ = [
    'CompetitorFeed',
    'PricingRule',
    'PricingCondition',
    'PricingAction',
    'PricingLimits',
    'PricingExecution',
    'PricingAlert',
    'Product',
]
