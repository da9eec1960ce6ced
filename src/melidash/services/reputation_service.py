"""
Reputation Service - seller reputation metrics, reviews, alerts and goals.
"""
import asyncio
import random
from datetime import datetime
from typing import Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..data import mock_data
from ..engine.models import generate_id, utcnow
from ..utils.exceptions import NotFoundError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

METRIC_KEYS = ('overall', 'delivery', 'communication', 'product_quality', 'customer_service')

# (minimum temperature, status, color), hottest first
TEMPERATURE_BANDS = [
    (95, 'burning', '#ef4444'),
    (85, 'hot', '#f97316'),
    (70, 'warm', '#eab308'),
    (50, 'cool', '#3b82f6'),
]
COLD = ('cold', '#6366f1')

POSITIVE_WORDS = ['excellent', 'great', 'good', 'recommend', 'perfect', 'fast', 'quality']
NEGATIVE_WORDS = ['bad', 'terrible', 'defect', 'problem', 'took longer', 'do not recommend', 'awful']

REPORT_DAYS = {'week': 7, 'month': 30, 'quarter': 90}

IMPROVEMENTS = [
    'Answer negative reviews faster',
    'Improve product packaging',
    'Add a post-sale follow-up',
    'Create response templates for common problems',
    'Track delivery metrics more closely',
]


def _empty_metrics() -> dict:
    metrics = {key: 0 for key in METRIC_KEYS}
    metrics.update({'trend': 'stable', 'last_updated': utcnow()})
    return metrics


class ReputationService:
    def __init__(self, settings: Optional[Settings] = None, rng: Optional[random.Random] = None):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.metrics: dict = _empty_metrics()
        self.reviews: list[dict] = []
        self.alerts: list[dict] = []
        self.trends: list[dict] = []
        self.goals: list[dict] = []

        if self.settings.use_mock_data:
            self.metrics = mock_data.mock_reputation_metrics()
            self.reviews = mock_data.mock_reviews()
            self.alerts = mock_data.mock_reputation_alerts()
            self.trends = mock_data.mock_reputation_trends()

    async def _delay(self, seconds: float):
        await asyncio.sleep(self.settings.delay(seconds))

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------
    async def get_reputation_metrics(self) -> dict:
        await self._delay(0.5)
        return dict(self.metrics)

    async def get_reputation_trends(self, days: int = 30) -> list[dict]:
        await self._delay(0.3)
        return self.trends[-days:] if days > 0 else []

    @staticmethod
    def calculate_temperature(metrics: dict) -> tuple[float, str, str]:
        """Map the overall score onto the reputation thermometer."""
        temperature = metrics['overall']
        for minimum, status, color in TEMPERATURE_BANDS:
            if temperature >= minimum:
                return temperature, status, color
        return (temperature, *COLD)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------
    async def get_reviews(
        self,
        sentiment: Optional[str] = None,
        category: Optional[str] = None,
        needs_response: bool = False,
        limit: Optional[int] = None,
    ) -> list[dict]:
        await self._delay(0.4)
        reviews = list(self.reviews)

        if sentiment:
            reviews = [r for r in reviews if r['sentiment'] == sentiment]
        if category:
            reviews = [r for r in reviews if r['category'] == category]
        if needs_response:
            reviews = [r for r in reviews if not r['response'] and not r['is_resolved']]

        reviews.sort(key=lambda r: r['date'], reverse=True)
        return reviews[:limit] if limit else reviews

    async def respond_to_review(self, review_id: str, message: str, is_public: bool = True) -> dict:
        """Attach a seller response, resolve the review and drop its alerts."""
        await self._delay(0.6)
        review = next((r for r in self.reviews if r['id'] == review_id), None)
        if review is None:
            raise NotFoundError(f"Review '{review_id}' not found")

        review['response'] = {
            'id': f"resp-{generate_id()}",
            'message': message,
            'date': utcnow(),
            'is_public': is_public,
        }
        review['is_resolved'] = True
        self.alerts = [a for a in self.alerts if a.get('review_id') != review_id]
        logger.info(f"Responded to review {review_id}")
        return review

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------
    async def get_reputation_alerts(self, unread_only: bool = False) -> list[dict]:
        await self._delay(0.2)
        alerts = [a for a in self.alerts if not (unread_only and a['is_read'])]
        return sorted(alerts, key=lambda a: a['date'], reverse=True)

    async def mark_alert_as_read(self, alert_id: str) -> bool:
        for alert in self.alerts:
            if alert['id'] == alert_id:
                alert['is_read'] = True
                return True
        return False

    async def dismiss_alert(self, alert_id: str) -> bool:
        before = len(self.alerts)
        self.alerts = [a for a in self.alerts if a['id'] != alert_id]
        return len(self.alerts) < before

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------
    async def get_reputation_goals(self) -> list[dict]:
        await self._delay(0.3)
        return list(self.goals)

    async def create_reputation_goal(
        self,
        metric: str,
        target: float,
        deadline: datetime,
        current: Optional[float] = None,
        is_active: bool = True,
    ) -> dict:
        if metric not in METRIC_KEYS:
            raise ValidationError(f"Unknown reputation metric '{metric}'")

        await self._delay(0.4)
        goal = {
            'id': f"goal-{generate_id()}",
            'metric': metric,
            'target': target,
            'current': self.metrics.get(metric, 0) if current is None else current,
            'deadline': deadline,
            'is_active': is_active,
        }
        self.goals.append(goal)
        logger.info(f"Created reputation goal {goal['id']} ({metric} -> {target})")
        return goal

    async def update_reputation_goal(self, goal_id: str, updates: dict) -> dict:
        for goal in self.goals:
            if goal['id'] == goal_id:
                goal.update({k: v for k, v in updates.items() if k != 'id'})
                return goal
        raise NotFoundError(f"Goal '{goal_id}' not found")

    async def delete_reputation_goal(self, goal_id: str) -> bool:
        before = len(self.goals)
        self.goals = [g for g in self.goals if g['id'] != goal_id]
        return len(self.goals) < before

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------
    @staticmethod
    def analyze_sentiment(comment: str) -> str:
        text = comment.lower()
        positive = sum(1 for word in POSITIVE_WORDS if word in text)
        negative = sum(1 for word in NEGATIVE_WORDS if word in text)

        if positive > negative:
            return 'positive'
        if negative > positive:
            return 'negative'
        return 'neutral'

    def simulate_realtime_update(self) -> dict:
        """Nudge every metric by up to 2 points, clamped to 0-100."""
        for key in METRIC_KEYS:
            value = self.metrics.get(key, 0) + self.rng.uniform(-2, 2)
            self.metrics[key] = max(0.0, min(100.0, value))
        self.metrics['last_updated'] = utcnow()
        return dict(self.metrics)

    async def generate_reputation_report(self, period: str = 'month') -> dict:
        if period not in REPORT_DAYS:
            raise ValidationError(f"Unknown report period '{period}'")

        await self._delay(0.8)
        negative = pd.DataFrame(
            [r for r in self.reviews if r['sentiment'] == 'negative'],
            columns=['category', 'rating'],
        )

        top_issues = []
        if not negative.empty:
            issues = (
                negative.groupby('category')['rating']
                .agg(reviews='count', avg_rating='mean')
                .reset_index()
                .sort_values('reviews', ascending=False, kind='stable')
                .head(5)
            )
            top_issues = [
                {'category': row.category, 'count': int(row.reviews), 'avg_rating': float(row.avg_rating)}
                for row in issues.itertuples(index=False)
            ]

        return {
            'period': period,
            'summary': dict(self.metrics),
            'trends': self.trends[-REPORT_DAYS[period]:],
            'top_issues': top_issues,
            'improvements': list(IMPROVEMENTS),
        }
