import pytest

from melidash.config.settings import Settings
from melidash.services.rules_service import RulesService
from melidash.ui.workflow import DialogState, InvalidTransition, RuleDialog
from melidash.utils.exceptions import MarketplaceError


@pytest.fixture
def rules():
    return RulesService(Settings().seed_rules)


@pytest.fixture
def dialog():
    dialog = RuleDialog()
    dialog.open()
    return dialog


def fill(dialog, action_value=10):
    dialog.set_fields(name='Night Sale', priority=3)
    dialog.add_condition(type='stock_level', operator='greater_than', value=20, field='available_quantity')
    dialog.add_action(type='decrease_price', value=action_value)


def test_starts_closed():
    dialog = RuleDialog()

    assert dialog.state is DialogState.CLOSED
    assert not dialog.is_open
    with pytest.raises(InvalidTransition):
        dialog.add_condition()
    with pytest.raises(InvalidTransition):
        dialog.cancel()


def test_successful_submit_closes_and_resets(dialog, rules):
    fill(dialog)

    rule = dialog.submit(rules.create_rule)

    assert rule.name == 'Night Sale'
    assert rule.priority == 3
    assert rule.conditions[0].type == 'stock_level'
    assert rules.get_rule(rule.id) is rule
    assert dialog.state is DialogState.CLOSED
    assert dialog.draft.name == ''


def test_incomplete_draft_stays_editing(dialog, rules):
    dialog.set_fields(name='Only a name')

    assert dialog.submit(rules.create_rule) is None
    assert dialog.state is DialogState.EDITING
    assert dialog.problems == [
        "At least one condition is required",
        "At least one action is required",
    ]
    assert len(rules.list_rules()) == 2


def test_rejected_rule_moves_to_error_and_keeps_draft(dialog, rules):
    fill(dialog)
    dialog.update_action(0, type='set_price', value=0)

    assert dialog.submit(rules.create_rule) is None
    assert dialog.state is DialogState.ERROR
    assert dialog.error == 'Invalid rule'
    assert dialog.problems == ["set_price needs a positive value"]

    with pytest.raises(InvalidTransition):
        dialog.update_action(0, value=50)

    dialog.edit()
    dialog.update_action(0, value=50)
    assert dialog.submit(rules.create_rule).actions[0].value == 50
    assert dialog.state is DialogState.CLOSED


def test_domain_error_without_details(dialog):
    fill(dialog)

    def create(rule):
        raise MarketplaceError('marketplace is down')

    assert dialog.submit(create) is None
    assert dialog.state is DialogState.ERROR
    assert dialog.error == 'marketplace is down'
    assert dialog.problems == []


def test_unexpected_error_is_reraised(dialog):
    fill(dialog)

    def create(rule):
        raise RuntimeError('boom')

    with pytest.raises(RuntimeError):
        dialog.submit(create)
    assert dialog.state is DialogState.ERROR


def test_cancel_discards_draft(dialog):
    fill(dialog)
    dialog.cancel()

    assert dialog.state is DialogState.CLOSED
    assert dialog.draft.conditions == []
    with pytest.raises(InvalidTransition):
        dialog.edit()


def test_condition_and_action_editing(dialog):
    dialog.add_condition()
    dialog.add_condition(type='sales_velocity')
    dialog.update_condition(1, value=3)
    dialog.remove_condition(0)

    assert [c['type'] for c in dialog.draft.conditions] == ['sales_velocity']
    assert dialog.draft.conditions[0]['value'] == 3

    dialog.add_action(limits={'min_price': 10})
    dialog.remove_action(0)
    assert dialog.draft.actions == []


def test_transition_table():
    dialog = RuleDialog()
    dialog.open()

    with pytest.raises(InvalidTransition) as exc:
        dialog.open()
    assert exc.value.current is DialogState.EDITING
    assert exc.value.target is DialogState.EDITING


def test_edit_only_returns_from_error():
    dialog = RuleDialog()
    with pytest.raises(InvalidTransition) as exc:
        dialog.edit()
    assert exc.value.current is DialogState.CLOSED

    dialog.open()
    with pytest.raises(InvalidTransition):
        dialog.edit()
    assert dialog.state is DialogState.EDITING
