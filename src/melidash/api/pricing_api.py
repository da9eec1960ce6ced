"""
Pricing API - FastAPI router for rule management and pricing automation.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..engine.models import (
    PricingAction,
    PricingCondition,
    PricingRule,
    PricingSchedule,
    Product,
)
from ..engine.pricing_engine import PricingAutomationService
from ..services import reports
from ..services.rules_service import RulesService
from ..utils.exceptions import NotFoundError
from .responses import ok
from .state import ServiceContainer, get_pricing, get_rules, get_services

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


class ApiModel(BaseModel):
    """Accepts both snake_case and camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Pydantic models for API
class ConditionModel(ApiModel):
    id: Optional[str] = None
    type: str
    operator: str
    value: Any = 0
    field: str = ''


class LimitsModel(ApiModel):
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_margin: Optional[float] = None
    max_margin: Optional[float] = None
    max_change_percentage: Optional[float] = None


class ActionModel(ApiModel):
    id: Optional[str] = None
    type: str
    value: Any = 0
    unit: str = 'percentage'
    limits: Optional[LimitsModel] = None


class ScheduleModel(ApiModel):
    frequency: str
    interval: int = 1
    timezone: str = 'America/Sao_Paulo'
    days_of_week: Optional[list[int]] = None
    time_of_day: Optional[str] = None


class RuleCreate(ApiModel):
    """Request model for creating (or validating) a rule."""
    id: Optional[str] = None
    name: str
    description: str = ''
    is_active: bool = True
    priority: int = 1
    conditions: list[ConditionModel] = []
    actions: list[ActionModel] = []
    schedule: Optional[ScheduleModel] = None


class RuleUpdate(ApiModel):
    """Request model for updating a rule."""
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None
    conditions: Optional[list[ConditionModel]] = None
    actions: Optional[list[ActionModel]] = None
    schedule: Optional[ScheduleModel] = None


class ProductSelection(ApiModel):
    """Restrict a run to some products (all listings when omitted)."""
    product_ids: Optional[list[str]] = None


def _to_updates(data: dict) -> dict:
    """Turn request dicts into domain objects for RulesService.update_rule."""
    updates = dict(data)
    if updates.get('conditions') is not None:
        updates['conditions'] = [PricingCondition.from_dict(c) for c in updates['conditions']]
    if updates.get('actions') is not None:
        updates['actions'] = [PricingAction.from_dict(a) for a in updates['actions']]
    if 'schedule' in updates:
        updates['schedule'] = PricingSchedule.from_dict(updates['schedule'])
    return updates


async def _select_products(services: ServiceContainer, selection: Optional[ProductSelection]) -> list[Product]:
    response = await services.marketplace.get_my_products()
    products = response["results"]
    if selection and selection.product_ids is not None:
        wanted = set(selection.product_ids)
        products = [p for p in products if p.id in wanted]
    return products


def _summary(executions) -> dict:
    return {
        'total': len(executions),
        'successful': sum(1 for e in executions if e.status == 'success'),
        'failed': sum(1 for e in executions if e.status == 'failed'),
        'skipped': sum(1 for e in executions if e.status == 'skipped'),
    }


# Rules

@router.get("/rules")
async def list_rules(include_inactive: bool = True, rules: RulesService = Depends(get_rules)):
    """List all pricing rules (priority order)."""
    return ok(rules.list_rules(include_inactive=include_inactive))


@router.get("/rules/stats")
async def get_stats(rules: RulesService = Depends(get_rules)):
    """Get rule statistics."""
    return ok(rules.get_stats())


@router.post("/rules/validate")
async def validate_rule(rule_data: RuleCreate, rules: RulesService = Depends(get_rules)):
    """Validate a rule without saving."""
    rule = PricingRule.from_dict(rule_data.model_dump())
    return ok(rules.validate_rule(rule))


@router.get("/rules/{rule_id}")
async def get_rule(rule_id: str, rules: RulesService = Depends(get_rules)):
    """Get a single rule by ID."""
    rule = rules.get_rule(rule_id)
    if not rule:
        raise NotFoundError(f"Rule '{rule_id}' not found")
    return ok(rule)


@router.post("/rules", status_code=201)
async def create_rule(rule_data: RuleCreate, rules: RulesService = Depends(get_rules)):
    """Create a new pricing rule."""
    rule = PricingRule.from_dict(rule_data.model_dump())
    return ok(rules.create_rule(rule), message="Rule created")


@router.put("/rules/{rule_id}")
async def update_rule(rule_id: str, updates: RuleUpdate, rules: RulesService = Depends(get_rules)):
    """Update an existing rule."""
    # exclude_unset keeps fields the client did not send untouched
    update_dict = _to_updates(updates.model_dump(exclude_unset=True))
    return ok(rules.update_rule(rule_id, update_dict), message="Rule updated")


@router.delete("/rules/{rule_id}")
async def delete_rule(rule_id: str, rules: RulesService = Depends(get_rules)):
    """Delete a rule."""
    rules.delete_rule(rule_id)
    return ok({'id': rule_id}, message=f"Rule '{rule_id}' deleted")


@router.post("/rules/{rule_id}/toggle")
async def toggle_rule(rule_id: str, rules: RulesService = Depends(get_rules)):
    """Activate or deactivate a rule."""
    return ok(rules.toggle_rule(rule_id))


@router.post("/rules/{rule_id}/execute")
async def execute_rule(
    rule_id: str,
    selection: Optional[ProductSelection] = None,
    services: ServiceContainer = Depends(get_services),
):
    """Run one rule against the seller's products."""
    rule = services.rules.get_rule(rule_id)
    if not rule:
        raise NotFoundError(f"Rule '{rule_id}' not found")

    products = await _select_products(services, selection)
    executions = await services.pricing.execute_rule(rule, products)
    return ok({'executions': executions, 'summary': _summary(executions)})


# Automation

@router.post("/execute")
async def execute_all(
    selection: Optional[ProductSelection] = None,
    services: ServiceContainer = Depends(get_services),
):
    """Run every active rule in priority order."""
    products = await _select_products(services, selection)
    executions = await services.pricing.execute_all(services.rules.list_rules(), products)
    return ok({'executions': executions, 'summary': _summary(executions)})


@router.get("/executions")
async def list_executions(
    rule_id: Optional[str] = None,
    product_id: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 100,
    pricing: PricingAutomationService = Depends(get_pricing),
):
    """Execution history, newest first."""
    history = pricing.get_execution_history()
    if rule_id:
        history = [e for e in history if e.rule_id == rule_id]
    if product_id:
        history = [e for e in history if e.product_id == product_id]
    if status:
        history = [e for e in history if e.status == status]
    history.reverse()
    return ok(history[:max(limit, 0)])


@router.get("/metrics")
async def get_metrics(services: ServiceContainer = Depends(get_services)):
    """Dashboard metrics and 24h execution activity."""
    history = services.pricing.get_execution_history()
    return ok({
        'metrics': reports.pricing_metrics(history, services.rules.list_rules()),
        'hourly_activity': reports.hourly_activity(history),
    })


@router.get("/alerts")
async def list_alerts(unread_only: bool = False, pricing: PricingAutomationService = Depends(get_pricing)):
    alerts = [a for a in pricing.get_alerts() if not (unread_only and a.is_read)]
    alerts.sort(key=lambda a: a.created_at, reverse=True)
    return ok(alerts)


@router.post("/alerts/{alert_id}/read")
async def mark_alert_read(alert_id: str, pricing: PricingAutomationService = Depends(get_pricing)):
    if not pricing.mark_alert_as_read(alert_id):
        raise NotFoundError(f"Alert '{alert_id}' not found")
    return ok({'id': alert_id, 'is_read': True})


@router.post("/recommendations")
async def recommendations(
    selection: Optional[ProductSelection] = None,
    services: ServiceContainer = Depends(get_services),
):
    """Price recommendations; competitor data is fetched for products that lack it."""
    products = await _select_products(services, selection)
    for product in products:
        await services.pricing.feed.get_competitors(product)
    return ok(await services.pricing.generate_recommendations(products))
