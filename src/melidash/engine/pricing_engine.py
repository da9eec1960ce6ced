"""
Pricing Automation Engine - runs pricing rules against products.

For every active rule × product pair:
1. Evaluate the rule conditions (all must hold, otherwise "skipped")
2. Fold the rule actions over the current price
3. Validate the candidate price against the rule's guard rails ("failed" on violation)
4. Write the new price through the marketplace client ("success", or "failed" on API error)

Every outcome is appended to an in-memory execution history. Large price
swings raise a ``price_change_significant`` alert. Executions are one-shot:
there are no retries.
"""
from dataclasses import replace
from datetime import timedelta
from typing import Optional

from ..clients.marketplace import MarketplaceClient
from ..config.settings import Settings, get_settings
from ..utils.logger import get_logger
from .competitors import CompetitorFeed
from .conditions import ConditionEvaluator
from .models import (
    PricingAlert,
    PricingExecution,
    PricingRecommendation,
    PricingRule,
    Product,
    generate_id,
    utcnow,
)
from .price_calculator import PriceCalculator, round_price
from .validator import ChangeValidator

logger = get_logger(__name__)


class PricingAutomationService:
    """
    Orchestrates rule evaluation, price calculation, validation and updates.

    Holds the session state: execution history, alerts and the competitor
    cache. Instances are created explicitly and passed to whoever needs them.
    """

    def __init__(
        self,
        client: MarketplaceClient,
        feed: Optional[CompetitorFeed] = None,
        settings: Optional[Settings] = None,
    ):
        self.client = client
        self.settings = settings or get_settings()
        self.feed = feed or CompetitorFeed()
        self.evaluator = ConditionEvaluator(self.feed, self.settings)
        self.calculator = PriceCalculator(self.feed)
        self.validator = ChangeValidator(self.settings)
        self._history: list[PricingExecution] = []
        self._alerts: list[PricingAlert] = []

    async def execute_rule(self, rule: PricingRule, products: list[Product]) -> list[PricingExecution]:
        """
        Execute a rule against each product.

        Returns one execution per product (empty for inactive rules).
        """
        executions = []

        if not rule.is_active:
            logger.info(f"Rule {rule.name} is inactive")
            return executions

        for product in products:
            try:
                execution = await self._execute_for_product(rule, product)
            except Exception as e:
                logger.error(f"Error executing rule {rule.name} for product {product.id}: {e}")
                execution = self._record(
                    rule, product,
                    status='failed',
                    reason='Execution error',
                    error=str(e) or type(e).__name__,
                )
            executions.append(execution)
            self._history.append(execution)

        rule.execution_count += len(executions)
        rule.last_executed = utcnow()
        return executions

    async def execute_all(
        self,
        rules: list[PricingRule],
        products: Optional[list[Product]] = None,
    ) -> list[PricingExecution]:
        """
        Execute every active rule in priority order (lower number first).

        Products default to the seller's listings. Prices written by one rule
        are seen by the rules that follow it in the same run.
        """
        if products is None:
            response = await self.client.get_my_products()
            products = response["results"]

        working = [replace(p) for p in products]
        active = sorted((r for r in rules if r.is_active), key=lambda r: r.priority)
        executions = []

        for rule in active:
            results = await self.execute_rule(rule, working)
            by_product = {e.product_id: e for e in results if e.status == 'success'}
            for product in working:
                if product.id in by_product:
                    product.price = by_product[product.id].new_price
            executions.extend(results)

        logger.info(f"Executed {len(active)} rules against {len(working)} products ({len(executions)} executions)")
        return executions

    async def _execute_for_product(self, rule: PricingRule, product: Product) -> PricingExecution:
        conditions = await self.evaluator.evaluate_conditions(rule.conditions, product)
        if not conditions.is_valid:
            return self._record(
                rule, product,
                status='skipped',
                reason=f"Conditions not met: {', '.join(conditions.errors)}",
            )

        new_price = await self.calculator.calculate_new_price(rule.actions, product)
        if new_price == product.price:
            return self._record(rule, product, status='skipped', reason='Price already at target value')

        validation = self.validator.validate_price_change(product.price, new_price, rule.limits)
        if not validation.is_valid:
            errors = ', '.join(validation.errors)
            return self._record(
                rule, product,
                status='failed',
                reason=f"Validation failed: {errors}",
                error=errors,
                new_price=product.price,
                metadata={"candidate_price": new_price},
            )

        try:
            await self.client.update_product(product.id, {"price": new_price})
        except Exception as e:
            logger.warning(f"Price update failed for product {product.id}: {e}")
            return self._record(
                rule, product,
                status='failed',
                reason='Failed to apply price change',
                error=str(e) or 'Error updating price',
                metadata={"candidate_price": new_price},
            )

        execution = self._record(
            rule, product,
            status='success',
            reason=f"Price updated from {product.price:.2f} to {new_price:.2f}",
            new_price=new_price,
        )
        logger.info(f"Rule {rule.name}: product {product.id} {product.price:.2f} -> {new_price:.2f}")

        change = self._change_percentage(product.price, new_price)
        if change > self.settings.significant_change_pct:
            self.create_alert(
                type='price_change_significant',
                severity='medium',
                product_id=product.id,
                message=f"Price changed by {change:.1f}%",
                data={
                    "old_price": product.price,
                    "new_price": new_price,
                    "change_percentage": change,
                    "rule_name": rule.name,
                },
            )

        return execution

    def _record(
        self,
        rule: PricingRule,
        product: Product,
        status: str,
        reason: str,
        error: Optional[str] = None,
        new_price: Optional[float] = None,
        metadata: Optional[dict] = None,
    ) -> PricingExecution:
        return PricingExecution(
            id=generate_id(),
            rule_id=rule.id,
            product_id=product.id,
            executed_at=utcnow(),
            status=status,
            old_price=product.price,
            new_price=product.price if new_price is None else new_price,
            reason=reason,
            error=error,
            metadata=metadata or {},
        )

    @staticmethod
    def _change_percentage(old_price: float, new_price: float) -> float:
        if old_price == 0:
            return 0.0 if new_price == 0 else 100.0
        return abs((new_price - old_price) / old_price) * 100

    def create_alert(self, **alert_data) -> PricingAlert:
        alert = PricingAlert(**alert_data)
        self._alerts.append(alert)
        logger.info(f"Alert {alert.type} for product {alert.product_id}: {alert.message}")
        return alert

    async def generate_recommendations(self, products: list[Product]) -> list[PricingRecommendation]:
        """Recommend prices for products that have competitor data."""
        recommendations = []
        for product in products:
            recommendation = self._recommend(product)
            if recommendation:
                recommendations.append(recommendation)
        return recommendations

    def _recommend(self, product: Product) -> Optional[PricingRecommendation]:
        competitors = self.feed.cached(product.id)
        if not competitors:
            return None

        prices = [c.competitor_price for c in competitors]
        avg_price = sum(prices) / len(prices)
        lowest_price = min(prices)

        recommended = product.price
        reasoning = []
        confidence = 50

        if product.price > avg_price * 1.1:
            recommended = avg_price * 0.95
            reasoning.append('Current price is more than 10% above the competitor average')
            reasoning.append('Recommendation: reduce to 5% below the average')
            confidence = 80
        elif product.price < lowest_price * 0.9:
            recommended = lowest_price * 0.95
            reasoning.append('Current price is far below every competitor')
            reasoning.append('Room to raise the margin while staying competitive')
            confidence = 70

        if product.available_quantity < 5:
            recommended *= 1.05
            reasoning.append('Low stock: small increase to pace demand')
            confidence += 10

        cost = product.price * self.settings.cost_ratio
        current_profit = product.price - cost
        profit_change = ((recommended - cost) - current_profit) / current_profit * 100 if current_profit else 0.0

        return PricingRecommendation(
            product_id=product.id,
            current_price=product.price,
            recommended_price=round_price(recommended),
            confidence=min(confidence, 95),
            reasoning=reasoning,
            expected_impact={
                "sales_change": 15 if recommended < product.price else -10,
                "profit_change": profit_change,
                "competitive_position": 'Competitive' if recommended < avg_price else 'Premium',
            },
            valid_until=utcnow() + timedelta(hours=24),
        )

    def get_execution_history(self) -> list[PricingExecution]:
        return list(self._history)

    def get_alerts(self) -> list[PricingAlert]:
        return list(self._alerts)

    def mark_alert_as_read(self, alert_id: str) -> bool:
        for alert in self._alerts:
            if alert.id == alert_id:
                alert.is_read = True
                return True
        return False
