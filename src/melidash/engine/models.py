"""
Data models for the pricing automation engine.

Uses dataclasses for structured, type-safe data representation. The
``from_dict`` constructors accept both snake_case keys and the camelCase keys
the dashboard sends.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional
import uuid


CONDITION_TYPES = (
    'competitor_price',
    'stock_level',
    'sales_velocity',
    'profit_margin',
    'time_based',
    'category_trend',
    'product_age',
    'conversion_rate',
)

CONDITION_OPERATORS = (
    'equals',
    'not_equals',
    'greater_than',
    'less_than',
    'greater_equal',
    'less_equal',
    'between',
    'contains',
    'not_contains',
)

ACTION_TYPES = (
    'increase_price',
    'decrease_price',
    'set_price',
    'match_competitor',
    'set_margin',
    'pause_product',
    'activate_product',
)

ACTION_UNITS = ('percentage', 'fixed_amount', 'competitor_offset')

EXECUTION_STATUSES = ('success', 'failed', 'skipped', 'partial')


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    """Short random identifier for executions, alerts and rules."""
    return uuid.uuid4().hex[:9]


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO string (or pass through a datetime); naive values are UTC."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _pick(data: dict, snake: str, camel: str, default: Any = None) -> Any:
    if snake in data:
        return data[snake]
    return data.get(camel, default)


@dataclass
class Product:
    """Snapshot of a marketplace listing as seen by the pricing engine."""
    id: str
    title: str
    price: float
    available_quantity: int = 0
    sold_quantity: int = 0
    initial_quantity: int = 0
    date_created: datetime = field(default_factory=utcnow)
    category_id: Optional[str] = None
    status: str = 'active'

    @classmethod
    def from_dict(cls, data: dict) -> 'Product':
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            price=float(data['price']),
            available_quantity=int(_pick(data, 'available_quantity', 'availableQuantity', 0)),
            sold_quantity=int(_pick(data, 'sold_quantity', 'soldQuantity', 0)),
            initial_quantity=int(_pick(data, 'initial_quantity', 'initialQuantity', 0)),
            date_created=parse_datetime(_pick(data, 'date_created', 'dateCreated')) or utcnow(),
            category_id=_pick(data, 'category_id', 'categoryId'),
            status=data.get('status', 'active'),
        )


@dataclass
class PricingCondition:
    """A tagged comparison evaluated against a product snapshot."""
    type: str
    operator: str
    value: Any = 0
    id: str = field(default_factory=generate_id)
    # Must stay after ``id``: the name shadows dataclasses.field in the class body
    field: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingCondition':
        return cls(
            id=str(data.get('id') or generate_id()),
            type=data['type'],
            operator=data['operator'],
            value=data.get('value', 0),
            field=data.get('field', ''),
        )


@dataclass
class PricingLimits:
    """Guard rails that veto an otherwise valid price change."""
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    min_margin: Optional[float] = None
    max_margin: Optional[float] = None
    max_change_percentage: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['PricingLimits']:
        if not data:
            return None
        return cls(
            min_price=_pick(data, 'min_price', 'minPrice'),
            max_price=_pick(data, 'max_price', 'maxPrice'),
            min_margin=_pick(data, 'min_margin', 'minMargin'),
            max_margin=_pick(data, 'max_margin', 'maxMargin'),
            max_change_percentage=_pick(data, 'max_change_percentage', 'maxChangePercentage'),
        )


@dataclass
class PricingAction:
    """A price mutation instruction."""
    type: str
    value: float = 0.0
    unit: str = 'percentage'
    limits: Optional[PricingLimits] = None
    id: str = field(default_factory=generate_id)

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingAction':
        return cls(
            id=str(data.get('id') or generate_id()),
            type=data['type'],
            value=data.get('value', 0),
            unit=data.get('unit', 'percentage'),
            limits=PricingLimits.from_dict(data.get('limits')),
        )


@dataclass
class PricingSchedule:
    """Descriptive schedule shown in the dashboard; nothing runs it."""
    frequency: str
    interval: int = 1
    timezone: str = 'America/Sao_Paulo'
    days_of_week: Optional[list[int]] = None
    time_of_day: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['PricingSchedule']:
        if not data:
            return None
        return cls(
            frequency=data['frequency'],
            interval=int(data.get('interval', 1)),
            timezone=data.get('timezone', 'America/Sao_Paulo'),
            days_of_week=_pick(data, 'days_of_week', 'daysOfWeek'),
            time_of_day=_pick(data, 'time_of_day', 'timeOfDay'),
        )


@dataclass
class PricingRule:
    """A named set of conditions and actions for automated price adjustment."""
    id: str
    name: str
    description: str = ''
    is_active: bool = True
    priority: int = 1  # lower = runs first
    conditions: list[PricingCondition] = field(default_factory=list)
    actions: list[PricingAction] = field(default_factory=list)
    schedule: Optional[PricingSchedule] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    last_executed: Optional[datetime] = None
    execution_count: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> 'PricingRule':
        now = utcnow()
        return cls(
            id=str(data.get('id') or generate_id()),
            name=data.get('name', ''),
            description=data.get('description', ''),
            is_active=bool(_pick(data, 'is_active', 'isActive', True)),
            priority=int(data.get('priority', 1)),
            conditions=[PricingCondition.from_dict(c) for c in data.get('conditions', [])],
            actions=[PricingAction.from_dict(a) for a in data.get('actions', [])],
            schedule=PricingSchedule.from_dict(data.get('schedule')),
            created_at=parse_datetime(_pick(data, 'created_at', 'createdAt')) or now,
            updated_at=parse_datetime(_pick(data, 'updated_at', 'updatedAt')) or now,
            last_executed=parse_datetime(_pick(data, 'last_executed', 'lastExecuted')),
            execution_count=int(_pick(data, 'execution_count', 'executionCount', 0)),
        )

    @property
    def limits(self) -> Optional[PricingLimits]:
        """Guard rails for the rule (taken from its first action)."""
        if not self.actions:
            return None
        return self.actions[0].limits


@dataclass(frozen=True)
class PricingExecution:
    """Immutable log record of one rule evaluated against one product."""
    id: str
    rule_id: str
    product_id: str
    executed_at: datetime
    status: str
    old_price: float
    new_price: float
    reason: str
    error: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @property
    def change_percentage(self) -> float:
        if not self.old_price:
            return 0.0
        return (self.new_price - self.old_price) / self.old_price * 100


@dataclass
class CompetitorData:
    """One competitor's offer for a product."""
    product_id: str
    competitor_name: str
    competitor_price: float
    competitor_url: str = ''
    last_updated: datetime = field(default_factory=utcnow)
    availability: bool = True


@dataclass
class PricingAlert:
    """Alert raised by the pricing engine."""
    type: str
    severity: str
    product_id: str
    message: str
    data: dict = field(default_factory=dict)
    id: str = field(default_factory=generate_id)
    created_at: datetime = field(default_factory=utcnow)
    is_read: bool = False
    action_required: bool = False

    def __post_init__(self):
        if self.severity in ('high', 'critical'):
            self.action_required = True


@dataclass
class PricingRecommendation:
    """Suggested price for a product based on competitor data and stock."""
    product_id: str
    current_price: float
    recommended_price: float
    confidence: int
    reasoning: list[str]
    expected_impact: dict
    valid_until: datetime


@dataclass
class ValidationResult:
    """Outcome of a condition check or a guard-rail validation."""
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: str):
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str):
        self.warnings.append(warning)
