import pytest

from conftest import make_rule
from melidash.config.settings import Settings
from melidash.engine.models import PricingAction, PricingCondition, PricingLimits
from melidash.services.rules_service import RulesService
from melidash.utils.exceptions import NotFoundError, ValidationError


@pytest.fixture
def rules():
    return RulesService(Settings().seed_rules)


def valid_rule(id='new', name='Weekend Push'):
    return make_rule(
        id,
        name=name,
        conditions=[PricingCondition(type='stock_level', operator='greater_than', value=20)],
        actions=[PricingAction(type='increase_price', value=5, unit='percentage')],
    )


def test_seed_rules_are_loaded_in_priority_order(rules):
    loaded = rules.list_rules()

    assert [r.id for r in loaded] == ['1', '2']
    assert loaded[0].name == 'Beat the Competition'
    assert loaded[0].limits.min_margin == 15
    assert loaded[1].conditions[0].type == 'stock_level'


def test_missing_seed_file_starts_empty(tmp_path):
    assert RulesService(tmp_path / 'missing.json').list_rules() == []


def test_create_rule_resets_bookkeeping(rules):
    rule = valid_rule()
    rule.execution_count = 99

    created = rules.create_rule(rule)

    assert created.execution_count == 0
    assert created.last_executed is None
    assert rules.get_rule('new') is created
    assert len(rules.list_rules()) == 3


def test_create_rule_rejects_invalid_rule(rules):
    rule = make_rule('bad', name=' ', actions=[])

    with pytest.raises(ValidationError) as exc:
        rules.create_rule(rule)

    assert "Name is required" in exc.value.errors
    assert "At least one action is required" in exc.value.errors


def test_create_rule_rejects_duplicate_id(rules):
    with pytest.raises(ValidationError):
        rules.create_rule(valid_rule(id='1', name='Other'))


def test_validate_rule_checks_values_and_limits(rules):
    rule = make_rule(
        'v',
        conditions=[PricingCondition(type='stock_level', operator='between', value=5)],
        actions=[PricingAction(
            type='set_price', value=-1, unit='fixed_amount',
            limits=PricingLimits(min_price=100, max_price=50),
        )],
    )

    result = rules.validate_rule(rule)

    assert not result.is_valid
    assert "Condition stock_level with 'between' needs two values" in result.errors
    assert "set_price needs a positive value" in result.errors
    assert "Minimum price must not exceed maximum price" in result.errors


def test_validate_rule_warnings(rules):
    rule = valid_rule(name='beat the competition')
    rule.conditions.append(PricingCondition(type='conversion_rate', operator='greater_than', value=1))

    result = rules.validate_rule(rule)

    assert result.is_valid
    assert any("already named" in w for w in result.warnings)
    assert any("conversion_rate" in w for w in result.warnings)


def test_update_rule_only_touches_allowed_fields(rules):
    updated = rules.update_rule('2', {'name': 'Clearance', 'priority': 5, 'execution_count': 0})

    assert updated.name == 'Clearance'
    assert updated.priority == 5
    assert updated.execution_count == 12


def test_update_rule_is_validated_before_saving(rules):
    with pytest.raises(ValidationError):
        rules.update_rule('2', {'actions': []})
    assert len(rules.get_rule('2').actions) == 1


def test_update_rule_rejects_null_required_fields(rules):
    with pytest.raises(ValidationError) as exc:
        rules.update_rule('2', {'priority': None, 'is_active': None})

    assert exc.value.errors == ["Priority must be an integer", "is_active must be true or false"]
    assert rules.get_rule('2').priority == 2
    assert [r.id for r in rules.list_rules()] == ['1', '2']


def test_toggle_and_delete(rules):
    assert rules.toggle_rule('1').is_active is False
    assert [r.id for r in rules.list_rules(include_inactive=False)] == ['2']

    assert rules.delete_rule('1')
    with pytest.raises(NotFoundError):
        rules.delete_rule('1')
    with pytest.raises(NotFoundError):
        rules.toggle_rule('missing')


def test_stats(rules):
    rules.toggle_rule('2')
    stats = rules.get_stats()

    assert stats['total'] == 2
    assert stats['active'] == 1
    assert stats['inactive'] == 1
    assert stats['executions'] == 57
    assert stats['by_condition_type'] == {'competitor_price': 1, 'stock_level': 1}
