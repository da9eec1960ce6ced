import pytest

from melidash.engine.models import PricingLimits
from melidash.engine.validator import ChangeValidator


@pytest.fixture
def validator(settings):
    return ChangeValidator(settings)


def test_no_limits_is_always_valid(validator):
    assert validator.validate_price_change(100.0, 1.0, None).is_valid


def test_below_minimum_price(validator):
    result = validator.validate_price_change(100.0, 40.0, PricingLimits(min_price=50.0))

    assert not result.is_valid
    assert len(result.errors) == 1
    assert "below the minimum allowed (50.00)" in result.errors[0]


def test_above_maximum_price(validator):
    result = validator.validate_price_change(100.0, 120.0, PricingLimits(max_price=110.0))
    assert result.errors == ["Price 120.00 is above the maximum allowed (110.00)"]


def test_change_percentage_limit(validator):
    limits = PricingLimits(max_change_percentage=20)

    assert validator.validate_price_change(100.0, 80.0, limits).is_valid
    result = validator.validate_price_change(100.0, 70.0, limits)
    assert result.errors == ["Change of 30.0% exceeds the limit of 20%"]


def test_margin_limits_use_cost_ratio(validator):
    """Cost is 70% of the old price, so 80.00 on a 100.00 item leaves a 12.5% margin."""
    low = validator.validate_price_change(100.0, 80.0, PricingLimits(min_margin=15))
    assert low.errors == ["Margin of 12.5% is below the minimum of 15%"]

    high = validator.validate_price_change(100.0, 100.5, PricingLimits(max_margin=20))
    assert not high.is_valid
    assert "above the maximum of 20%" in high.errors[0]


def test_non_positive_price_is_rejected(validator):
    result = validator.validate_price_change(100.0, 0.0, PricingLimits(min_margin=5))
    assert result.errors == ["Price 0.00 must be greater than zero"]


def test_all_violations_are_reported(validator):
    limits = PricingLimits(min_price=90.0, max_change_percentage=10, min_margin=20)
    result = validator.validate_price_change(100.0, 75.0, limits)
    assert len(result.errors) == 3


def test_negative_price_still_checks_minimum(validator):
    result = validator.validate_price_change(100.0, -50.0, PricingLimits(min_price=10.0))

    assert not result.is_valid
    assert result.errors == [
        "Price -50.00 must be greater than zero",
        "Price -50.00 is below the minimum allowed (10.00)",
    ]
