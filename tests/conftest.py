import os
import random
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

# No simulated latency while testing; must be set before settings load
os.environ['MELIDASH_LATENCY_SCALE'] = '0'
os.environ.setdefault('MELIDASH_LOG_LEVEL', 'WARNING')

from melidash.clients.marketplace import InMemoryMarketplaceClient
from melidash.config.settings import Settings, reset_settings
from melidash.engine.competitors import CompetitorFeed
from melidash.engine.models import (
    CompetitorData,
    PricingAction,
    PricingRule,
    Product,
)
from melidash.engine.pricing_engine import PricingAutomationService


@pytest.fixture(autouse=True)
def fresh_settings():
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings():
    return Settings(latency_scale=0.0, log_level='WARNING')


@pytest.fixture
def feed():
    return CompetitorFeed(random.Random(42))


def make_product(id='P1', price=100.0, qty=5, sold=10, initial=50, **kwargs):
    return Product(
        id=id,
        title=f"Product {id}",
        price=price,
        available_quantity=qty,
        sold_quantity=sold,
        initial_quantity=initial,
        **kwargs,
    )


def make_rule(id='r1', actions=None, conditions=None, priority=1, limits=None, is_active=True, name=None):
    if actions is None:
        actions = [PricingAction(type='decrease_price', value=10, unit='percentage', limits=limits)]
    elif limits is not None:
        actions[0].limits = limits
    return PricingRule(
        id=id,
        name=name or f"Rule {id}",
        is_active=is_active,
        priority=priority,
        conditions=conditions or [],
        actions=actions,
    )


def competitor(product_id, price, name='Competitor B'):
    return CompetitorData(product_id=product_id, competitor_name=name, competitor_price=price)


@pytest.fixture
def product():
    return make_product()


@pytest.fixture
def client(settings, product):
    return InMemoryMarketplaceClient([product], settings)


@pytest.fixture
def service(client, feed, settings):
    return PricingAutomationService(client, feed, settings)
