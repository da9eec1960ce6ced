"""
Rules Service - CRUD operations for pricing rules.
Rules live in memory for the session, seeded from the bundled pricing_rules.json.
"""
import json
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..engine.models import (
    ACTION_TYPES,
    ACTION_UNITS,
    CONDITION_OPERATORS,
    CONDITION_TYPES,
    PricingRule,
    ValidationResult,
    utcnow,
)
from ..utils.exceptions import NotFoundError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

PRICE_ACTIONS = ('increase_price', 'decrease_price', 'set_price', 'match_competitor')

# Fields a client may change through update_rule
UPDATABLE_FIELDS = ('name', 'description', 'is_active', 'priority', 'conditions', 'actions', 'schedule')


class RulesService:
    """Service for managing pricing rules."""

    def __init__(self, seed_path: Optional[Path] = None):
        self._rules: list[PricingRule] = []
        if seed_path and seed_path.exists():
            self._load_rules(seed_path)

    def _load_rules(self, path: Path):
        """Load seed rules from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        self._rules = [PricingRule.from_dict(r) for r in data.get('rules', [])]
        logger.info(f"Loaded {len(self._rules)} pricing rules from {path.name}")

    def list_rules(self, include_inactive: bool = True) -> list[PricingRule]:
        """List rules ordered by priority (lower = runs first)."""
        rules = [r for r in self._rules if include_inactive or r.is_active]
        return sorted(rules, key=lambda r: r.priority)

    def get_rule(self, rule_id: str) -> Optional[PricingRule]:
        """Get a single rule by ID."""
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def _require(self, rule_id: str) -> PricingRule:
        rule = self.get_rule(rule_id)
        if rule is None:
            raise NotFoundError(f"Rule with ID '{rule_id}' not found")
        return rule

    def create_rule(self, rule: PricingRule) -> PricingRule:
        """Create a new rule after validating it."""
        validation = self.validate_rule(rule)
        if not validation.is_valid:
            raise ValidationError("Invalid rule", validation.errors)

        # Check for duplicate
        if self.get_rule(rule.id):
            raise ValidationError(f"Rule with ID '{rule.id}' already exists")

        now = utcnow()
        rule.created_at = now
        rule.updated_at = now
        rule.execution_count = 0
        rule.last_executed = None
        self._rules.append(rule)
        logger.info(f"Created rule {rule.id} ({rule.name})")
        return rule

    def update_rule(self, rule_id: str, updates: dict) -> PricingRule:
        """Update an existing rule; the result is validated before it is stored."""
        rule = self._require(rule_id)
        changes = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
        candidate = replace(rule, **changes)

        validation = self.validate_rule(candidate)
        if not validation.is_valid:
            raise ValidationError("Invalid rule", validation.errors)

        for key, value in changes.items():
            setattr(rule, key, value)
        rule.updated_at = utcnow()
        logger.info(f"Updated rule {rule_id}: {', '.join(changes) or 'no changes'}")
        return rule

    def toggle_rule(self, rule_id: str) -> PricingRule:
        """Flip a rule between active and inactive."""
        rule = self._require(rule_id)
        rule.is_active = not rule.is_active
        rule.updated_at = utcnow()
        logger.info(f"Rule {rule_id} is now {'active' if rule.is_active else 'inactive'}")
        return rule

    def delete_rule(self, rule_id: str) -> bool:
        """Delete a rule."""
        original_count = len(self._rules)
        self._rules = [r for r in self._rules if r.id != rule_id]

        if len(self._rules) == original_count:
            raise NotFoundError(f"Rule with ID '{rule_id}' not found")

        logger.info(f"Deleted rule {rule_id}")
        return True

    def validate_rule(self, rule: PricingRule) -> ValidationResult:
        """Validate a rule before saving."""
        result = ValidationResult()

        # Required fields
        if not rule.name or not rule.name.strip():
            result.add_error("Name is required")

        if not isinstance(rule.priority, int) or isinstance(rule.priority, bool):
            result.add_error("Priority must be an integer")

        if not isinstance(rule.is_active, bool):
            result.add_error("is_active must be true or false")

        if not rule.conditions:
            result.add_error("At least one condition is required")

        if not rule.actions:
            result.add_error("At least one action is required")

        for condition in rule.conditions:
            if condition.type not in CONDITION_TYPES:
                result.add_error(f"Unknown condition type '{condition.type}'")
            if condition.operator not in CONDITION_OPERATORS:
                result.add_error(f"Unknown operator '{condition.operator}'")
            if condition.operator == 'between':
                value = condition.value
                if not isinstance(value, (list, tuple)) or len(value) != 2:
                    result.add_error(f"Condition {condition.type} with 'between' needs two values")

        for action in rule.actions:
            if action.type not in ACTION_TYPES:
                result.add_error(f"Unknown action type '{action.type}'")
            if action.unit not in ACTION_UNITS:
                result.add_error(f"Unknown action unit '{action.unit}'")

            # Validate action value is numeric for price actions
            if action.type in PRICE_ACTIONS:
                try:
                    float(action.value)
                except (TypeError, ValueError):
                    result.add_error(f"Action value must be a number for {action.type}")

            if action.type == 'set_price' and isinstance(action.value, (int, float)) and action.value <= 0:
                result.add_error("set_price needs a positive value")

            limits = action.limits
            if limits:
                if limits.min_price is not None and limits.max_price is not None and limits.min_price > limits.max_price:
                    result.add_error("Minimum price must not exceed maximum price")
                if limits.min_margin is not None and limits.max_margin is not None and limits.min_margin > limits.max_margin:
                    result.add_error("Minimum margin must not exceed maximum margin")

        # Warn on duplicate names
        for existing in self._rules:
            if existing.id != rule.id and existing.name.strip().lower() == (rule.name or '').strip().lower():
                result.add_warning(f"Another rule is already named '{existing.name}' ({existing.id})")

        unsupported = {c.type for c in rule.conditions} & {'category_trend', 'conversion_rate'}
        for condition_type in sorted(unsupported):
            result.add_warning(f"Condition type '{condition_type}' is not evaluated and never matches")

        return result

    def get_stats(self) -> dict:
        """Get statistics about rules."""
        rules = self._rules
        active = [r for r in rules if r.is_active]
        by_condition = {}
        for r in rules:
            for c in r.conditions:
                by_condition[c.type] = by_condition.get(c.type, 0) + 1

        return {
            'total': len(rules),
            'active': len(active),
            'inactive': len(rules) - len(active),
            'executions': sum(r.execution_count for r in rules),
            'by_condition_type': by_condition,
        }
