from datetime import datetime, timedelta, timezone

from conftest import make_rule
from melidash.engine.models import PricingExecution
from melidash.services.reports import executions_frame, hourly_activity, pricing_metrics

NOW = datetime(2024, 1, 20, 12, 30, tzinfo=timezone.utc)


def execution(status, old, new, at=NOW - timedelta(minutes=20), id='e'):
    return PricingExecution(
        id=id,
        rule_id='r1',
        product_id='P1',
        executed_at=at,
        status=status,
        old_price=old,
        new_price=new,
        reason='test',
    )


def test_pricing_metrics():
    executions = [
        execution('success', 100.0, 90.0),
        execution('success', 100.0, 110.0),
        execution('failed', 100.0, 100.0),
        execution('skipped', 50.0, 50.0),
    ]
    rules = [make_rule('a'), make_rule('b', is_active=False)]

    metrics = pricing_metrics(executions, rules)

    assert metrics == {
        'total_executions': 4,
        'successful': 2,
        'failed': 1,
        'skipped': 1,
        'success_rate': 50.0,
        'avg_price_change_pct': 10.0,
        'total_price_increase': 10.0,
        'active_rules': 1,
        'total_rules': 2,
    }


def test_pricing_metrics_without_history():
    metrics = pricing_metrics([], [])
    assert metrics['total_executions'] == 0
    assert metrics['success_rate'] == 0.0
    assert metrics['avg_price_change_pct'] == 0.0


def test_executions_frame_adds_change_column():
    df = executions_frame([execution('success', 200.0, 150.0), execution('success', 0.0, 10.0)])

    assert list(df['change_pct']) == [-25.0, 0.0]
    assert str(df['executed_at'].dt.tz) == 'UTC'


def test_hourly_activity_covers_last_24_hours():
    executions = [
        execution('success', 100.0, 90.0, at=NOW - timedelta(minutes=20)),
        execution('failed', 100.0, 100.0, at=NOW - timedelta(hours=2)),
        execution('success', 100.0, 90.0, at=NOW - timedelta(days=2)),
    ]

    activity = hourly_activity(executions, now=NOW)

    assert len(activity) == 24
    assert activity[0]['hour'] == 13
    assert activity[-1] == {'hour': 12, 'executions': 1, 'successful': 1, 'failed': 0}
    assert activity[-3] == {'hour': 10, 'executions': 1, 'successful': 0, 'failed': 1}
    assert sum(a['executions'] for a in activity) == 2


def test_hourly_activity_empty():
    activity = hourly_activity([], now=NOW)
    assert all(a['executions'] == 0 for a in activity)
