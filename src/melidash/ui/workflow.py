"""
Form workflow for the create-rule dialog.

The dialog moves through an explicit set of states:

    CLOSED -> EDITING -> SUBMITTING -> CLOSED   (rule created)
                                    -> ERROR    (create failed)
    ERROR -> EDITING                            (fix and retry)
    EDITING | ERROR -> CLOSED                   (cancel)

Any other move raises InvalidTransition. The draft is only editable while
the dialog is EDITING.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from ..engine.models import PricingRule, generate_id
from ..utils.exceptions import MeliDashError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class DialogState(Enum):
    CLOSED = 'closed'
    EDITING = 'editing'
    SUBMITTING = 'submitting'
    ERROR = 'error'


TRANSITIONS = {
    DialogState.CLOSED: {DialogState.EDITING},
    DialogState.EDITING: {DialogState.SUBMITTING, DialogState.CLOSED},
    DialogState.SUBMITTING: {DialogState.CLOSED, DialogState.ERROR},
    DialogState.ERROR: {DialogState.EDITING, DialogState.CLOSED},
}


class InvalidTransition(Exception):
    """Raised when the dialog is asked to move to a state it cannot reach."""

    def __init__(self, current: DialogState, target: DialogState):
        super().__init__(f"Cannot go from {current.value} to {target.value}")
        self.current = current
        self.target = target


@dataclass
class RuleDraft:
    name: str = ''
    description: str = ''
    priority: int = 2
    conditions: list[dict] = field(default_factory=list)
    actions: list[dict] = field(default_factory=list)

    def problems(self) -> list[str]:
        problems = []
        if not self.name.strip():
            problems.append("Name is required")
        if not self.conditions:
            problems.append("At least one condition is required")
        if not self.actions:
            problems.append("At least one action is required")
        return problems

    def to_rule(self) -> PricingRule:
        return PricingRule.from_dict({
            'id': generate_id(),
            'name': self.name.strip(),
            'description': self.description.strip(),
            'priority': self.priority,
            'is_active': True,
            'conditions': self.conditions,
            'actions': self.actions,
        })


class RuleDialog:
    """State machine behind the create-rule form."""

    def __init__(self):
        self.state = DialogState.CLOSED
        self.draft = RuleDraft()
        self.error: Optional[str] = None
        self.problems: list[str] = []

    @property
    def is_open(self) -> bool:
        return self.state is not DialogState.CLOSED

    def _move(self, target: DialogState):
        if target not in TRANSITIONS[self.state]:
            raise InvalidTransition(self.state, target)
        self.state = target

    def _require_editing(self):
        if self.state is not DialogState.EDITING:
            raise InvalidTransition(self.state, DialogState.EDITING)

    # Transitions

    def open(self):
        self._move(DialogState.EDITING)
        self.draft = RuleDraft()
        self.error = None
        self.problems = []

    def cancel(self):
        self._move(DialogState.CLOSED)
        self.draft = RuleDraft()
        self.error = None
        self.problems = []

    def edit(self):
        """Go back to the form after a failed submit, keeping the draft."""
        # A closed dialog reopens through open(), which resets the draft
        if self.state is not DialogState.ERROR:
            raise InvalidTransition(self.state, DialogState.EDITING)
        self._move(DialogState.EDITING)
        self.error = None

    def submit(self, create: Callable[[PricingRule], PricingRule]) -> Optional[PricingRule]:
        """
        Build the rule from the draft and hand it to ``create``.

        An incomplete draft stays in EDITING with ``problems`` filled in.
        Returns the created rule, or None when nothing was created.
        """
        self._require_editing()
        self.problems = self.draft.problems()
        if self.problems:
            return None

        self._move(DialogState.SUBMITTING)
        try:
            rule = create(self.draft.to_rule())
        except ValidationError as e:
            self._fail(e.message, e.errors)
            return None
        except MeliDashError as e:
            self._fail(e.message)
            return None
        except Exception:
            self._fail("Unexpected error while creating the rule")
            raise

        self._move(DialogState.CLOSED)
        self.draft = RuleDraft()
        logger.info(f"Rule {rule.id} created from dialog")
        return rule

    def _fail(self, message: str, problems: Optional[list[str]] = None):
        self._move(DialogState.ERROR)
        self.error = message
        self.problems = list(problems or [])
        logger.warning(f"Rule creation failed: {message}")

    # Draft editing

    def set_fields(self, **changes):
        self._require_editing()
        for key in ('name', 'description', 'priority'):
            if key in changes:
                setattr(self.draft, key, changes[key])

    def add_condition(self, type: str = 'competitor_price', operator: str = 'less_than',
                      value=0, field: str = 'current_price') -> dict:
        self._require_editing()
        condition = {'id': generate_id(), 'type': type, 'operator': operator, 'value': value, 'field': field}
        self.draft.conditions.append(condition)
        return condition

    def update_condition(self, index: int, **changes):
        self._require_editing()
        self.draft.conditions[index].update(changes)

    def remove_condition(self, index: int):
        self._require_editing()
        del self.draft.conditions[index]

    def add_action(self, type: str = 'decrease_price', value: float = 0,
                   unit: str = 'percentage', limits: Optional[dict] = None) -> dict:
        self._require_editing()
        action = {'id': generate_id(), 'type': type, 'value': value, 'unit': unit, 'limits': limits}
        self.draft.actions.append(action)
        return action

    def update_action(self, index: int, **changes):
        self._require_editing()
        self.draft.actions[index].update(changes)

    def remove_action(self, index: int):
        self._require_editing()
        del self.draft.actions[index]
