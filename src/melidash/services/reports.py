"""
Pricing reports - tabular summaries of the execution history.
"""
from dataclasses import asdict
from datetime import datetime, timedelta
from typing import Optional

import pandas as pd

from ..engine.models import PricingExecution, PricingRule, utcnow

EXECUTION_COLUMNS = [
    'id', 'rule_id', 'product_id', 'executed_at', 'status',
    'old_price', 'new_price', 'reason', 'error',
]


def executions_frame(executions: list[PricingExecution]) -> pd.DataFrame:
    """Executions as a DataFrame with a ``change_pct`` column."""
    if not executions:
        return pd.DataFrame(columns=EXECUTION_COLUMNS + ['change_pct'])

    df = pd.DataFrame([asdict(e) for e in executions])[EXECUTION_COLUMNS]
    df['executed_at'] = pd.to_datetime(df['executed_at'], utc=True)
    old = df['old_price'].where(df['old_price'] != 0)
    df['change_pct'] = ((df['new_price'] - df['old_price']) / old * 100).fillna(0.0)
    return df


def pricing_metrics(executions: list[PricingExecution], rules: list[PricingRule]) -> dict:
    """Headline numbers for the pricing dashboard."""
    df = executions_frame(executions)
    total = len(df)
    counts = df['status'].value_counts() if total else pd.Series(dtype=int)
    successful = int(counts.get('success', 0))

    changes = df[(df['status'] == 'success') & (df['old_price'] != df['new_price'])] if total else df
    avg_change = float(changes['change_pct'].abs().mean()) if len(changes) else 0.0
    increases = (changes['new_price'] - changes['old_price']).clip(lower=0).sum() if len(changes) else 0.0

    return {
        'total_executions': total,
        'successful': successful,
        'failed': int(counts.get('failed', 0)),
        'skipped': int(counts.get('skipped', 0)),
        'success_rate': round(successful / total * 100, 1) if total else 0.0,
        'avg_price_change_pct': round(avg_change, 2),
        'total_price_increase': round(float(increases), 2),
        'active_rules': sum(1 for r in rules if r.is_active),
        'total_rules': len(rules),
    }


def hourly_activity(executions: list[PricingExecution], now: Optional[datetime] = None) -> list[dict]:
    """Execution counts for each of the last 24 hours (oldest first)."""
    now = now or utcnow()
    end = pd.Timestamp(now).floor('h') + pd.Timedelta(hours=1)
    start = end - pd.Timedelta(hours=24)
    buckets = pd.date_range(start=start, periods=24, freq='h')

    df = executions_frame(executions)
    if len(df):
        df = df[(df['executed_at'] >= start) & (df['executed_at'] < end)]

    activity = []
    for bucket in buckets:
        in_hour = df[(df['executed_at'] >= bucket) & (df['executed_at'] < bucket + timedelta(hours=1))] if len(df) else df
        activity.append({
            'hour': bucket.hour,
            'executions': len(in_hour),
            'successful': int((in_hour['status'] == 'success').sum()) if len(in_hour) else 0,
            'failed': int((in_hour['status'] == 'failed').sum()) if len(in_hour) else 0,
        })
    return activity
