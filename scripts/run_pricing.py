#!/usr/bin/env python
"""
Run the seeded pricing rules once against the mock listings and print the outcome.

Usage:
    python scripts/run_pricing.py [--rule RULE_ID]
"""
import argparse
import asyncio
import sys
from pathlib import Path

import pandas as pd

# Add src to path
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from melidash.api.state import ServiceContainer
from melidash.services import reports


async def run(rule_id=None):
    services = ServiceContainer.build()
    rules = services.rules.list_rules()
    if rule_id:
        rules = [r for r in rules if r.id == rule_id]
        if not rules:
            print(f"Rule '{rule_id}' not found")
            return 1

    print("Rules:")
    for rule in rules:
        print(f"  [{rule.priority}] {rule.id} {rule.name} ({'active' if rule.is_active else 'inactive'})")

    executions = await services.pricing.execute_all(rules)

    print("\nExecutions:")
    df = reports.executions_frame(executions)
    with pd.option_context('display.max_colwidth', 60, 'display.width', 200):
        print(df[['rule_id', 'product_id', 'status', 'old_price', 'new_price', 'reason']].to_string(index=False))

    print("\nMetrics:")
    for key, value in reports.pricing_metrics(executions, rules).items():
        print(f"  {key}: {value}")

    alerts = services.pricing.get_alerts()
    if alerts:
        print("\nAlerts:")
        for alert in alerts:
            print(f"  {alert.severity:<8} {alert.product_id} {alert.message}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Execute pricing rules against mock listings")
    parser.add_argument("--rule", help="Only run this rule id")
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.rule)))


if __name__ == "__main__":
    main()
