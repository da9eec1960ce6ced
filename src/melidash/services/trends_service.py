"""
Trends Service - trend radar and competitor monitoring over mock data.
"""
import asyncio
import copy
from datetime import timedelta
from typing import Any, Optional

import pandas as pd

from ..config.settings import Settings, get_settings
from ..data import mock_data
from ..engine.models import generate_id, utcnow
from ..utils.logger import get_logger

logger = get_logger(__name__)


class TrendsService:
    """
    Trend data, competitor monitoring, market trends and competitor alerts.

    Starts from the mock arrays when ``use_mock_data`` is on, empty otherwise.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.config: dict[str, Any] = copy.deepcopy(mock_data.DEFAULT_TREND_CONFIG)
        self.trend_data: list[dict] = []
        self.competitors: list[dict] = []
        self.market_trends: list[dict] = []
        self.alerts: list[dict] = []
        self.monitoring = False

        if self.settings.use_mock_data:
            self._load_mock_data()

    def _load_mock_data(self):
        self.trend_data = mock_data.mock_trend_data()
        self.competitors = mock_data.mock_competitors()
        self.market_trends = mock_data.mock_market_trends()
        # Competitor alerts are shared objects, so marking one read shows on both sides
        self.alerts = [alert for c in self.competitors for alert in c['alerts']]

    async def _delay(self, seconds: float = 0.1):
        await asyncio.sleep(self.settings.delay(seconds))

    # ------------------------------------------------------------------
    # Trends
    # ------------------------------------------------------------------
    async def get_trend_data(self, period: str = '30d', category: Optional[str] = None) -> list[dict]:
        await self._delay()
        data = [t for t in self.trend_data if t['period'] == period]
        if category:
            data = [t for t in data if t['category'] == category]
        return sorted(data, key=lambda t: t['growth'], reverse=True)

    async def search_trends(self, query: str) -> list[dict]:
        await self._delay()
        q = query.lower()
        return [
            t for t in self.trend_data
            if q in t['keyword'].lower() or any(q in k.lower() for k in t['related_keywords'])
        ]

    async def get_trends_by_category(self, category: str) -> list[dict]:
        await self._delay()
        return [t for t in self.trend_data if t['category'] == category]

    async def get_top_growing_trends(self, limit: int = 10) -> list[dict]:
        await self._delay()
        return sorted(self.trend_data, key=lambda t: t['growth'], reverse=True)[:limit]

    async def get_seasonal_trends(self) -> list[dict]:
        await self._delay()
        return [t for t in self.trend_data if t.get('seasonality')]

    # ------------------------------------------------------------------
    # Competitors
    # ------------------------------------------------------------------
    async def get_competitors(self) -> list[dict]:
        await self._delay()
        return sorted(self.competitors, key=lambda c: c['market_share'], reverse=True)

    async def get_competitor_by_id(self, competitor_id: str) -> Optional[dict]:
        await self._delay()
        for competitor in self.competitors:
            if competitor['id'] == competitor_id:
                return competitor
        return None

    async def add_competitor(self, competitor: dict) -> dict:
        await self._delay()
        new_competitor = {
            'products': [],
            'alerts': [],
            'market_share': 0.0,
            'price_strategy': 'competitive',
            'performance': {},
            **competitor,
            'id': generate_id(),
            'last_analyzed': utcnow(),
        }
        self.competitors.append(new_competitor)
        self.alerts.extend(new_competitor['alerts'])
        logger.info(f"Added competitor {new_competitor['competitor_name']} ({new_competitor['id']})")
        return new_competitor

    async def update_competitor(self, competitor_id: str, updates: dict) -> Optional[dict]:
        await self._delay()
        for competitor in self.competitors:
            if competitor['id'] == competitor_id:
                competitor.update({k: v for k, v in updates.items() if k != 'id'})
                competitor['last_analyzed'] = utcnow()
                logger.info(f"Updated competitor {competitor_id}")
                return competitor
        return None

    async def remove_competitor(self, competitor_id: str) -> bool:
        await self._delay()
        for index, competitor in enumerate(self.competitors):
            if competitor['id'] == competitor_id:
                del self.competitors[index]
                orphaned = {id(alert) for alert in competitor['alerts']}
                self.alerts = [a for a in self.alerts if id(a) not in orphaned]
                logger.info(f"Removed competitor {competitor_id}")
                return True
        return False

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------
    async def get_alerts(self, unread_only: bool = False) -> list[dict]:
        await self._delay()
        alerts = [a for a in self.alerts if not (unread_only and a['is_read'])]
        return sorted(alerts, key=lambda a: a['created_at'], reverse=True)

    async def mark_alert_as_read(self, alert_id: str) -> bool:
        for alert in self.alerts:
            if alert['id'] == alert_id:
                alert['is_read'] = True
                return True
        return False

    async def mark_all_alerts_as_read(self):
        for alert in self.alerts:
            alert['is_read'] = True

    async def get_alerts_by_type(self, alert_type: str) -> list[dict]:
        return [a for a in self.alerts if a['type'] == alert_type]

    # ------------------------------------------------------------------
    # Market analysis
    # ------------------------------------------------------------------
    async def get_market_trends(self) -> list[dict]:
        await self._delay()
        return sorted(self.market_trends, key=lambda t: t['confidence'], reverse=True)

    async def get_trend_analysis(self, product_id: str) -> dict:
        """Opportunities, threats and recommendations for a product."""
        await self._delay(0.3)
        pid = product_id.lower()
        relevant = [
            t for t in self.market_trends
            if any(pid in product for product in t['related_products'])
        ]
        now = utcnow()

        return {
            'product_id': product_id,
            'trends': relevant,
            'opportunities': [
                {
                    'id': '1',
                    'type': 'price_optimization',
                    'description': 'Adjust prices based on market trends',
                    'potential': 15000,
                    'effort': 'low',
                    'timeframe': '1-2 weeks',
                    'confidence': 78,
                },
                {
                    'id': '2',
                    'type': 'seasonal_demand',
                    'description': 'Take advantage of the December demand peak',
                    'potential': 45000,
                    'effort': 'medium',
                    'timeframe': '2-3 months',
                    'confidence': 85,
                },
            ],
            'threats': [
                {
                    'id': '1',
                    'type': 'price_war',
                    'description': 'Competitors may start a price war',
                    'impact': 25000,
                    'probability': 65,
                    'timeframe': '1 month',
                    'mitigation': [
                        'Monitor prices daily',
                        'Prepare a fast response strategy',
                        'Focus on value differentiation',
                    ],
                },
            ],
            'recommendations': [
                {
                    'id': '1',
                    'type': 'pricing',
                    'title': 'Optimize pricing strategy',
                    'description': 'Adjust prices from competitive analysis and trends',
                    'priority': 'high',
                    'expected_impact': 20000,
                    'implementation_cost': 2000,
                    'time_to_implement': '1 week',
                    'kpis': ['Profit margin', 'Sales volume', 'Competitive position'],
                },
                {
                    'id': '2',
                    'type': 'marketing',
                    'title': 'Seasonal campaign',
                    'description': 'Campaign focused on the seasonal demand peak',
                    'priority': 'medium',
                    'expected_impact': 35000,
                    'implementation_cost': 8000,
                    'time_to_implement': '3 weeks',
                    'kpis': ['Campaign ROI', 'Conversion', 'Awareness'],
                },
            ],
            'last_analyzed': now,
            'next_analysis': now + timedelta(days=7),
        }

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def get_config(self) -> dict:
        return copy.deepcopy(self.config)

    async def update_config(self, updates: dict) -> dict:
        self.config.update(updates)
        logger.info(f"Trend config updated: {', '.join(updates)}")
        return self.get_config()

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------
    async def get_competitive_insights(self) -> Optional[dict]:
        """Market leader, fastest grower, biggest threat and price aggressor."""
        await self._delay()
        if not self.competitors:
            return None

        def growth(c):
            return c.get('performance', {}).get('growth_rate', 0)

        threats = [
            c for c in self.competitors
            if c.get('performance', {}).get('threats') in ('high', 'critical')
        ]
        aggressors = [c for c in self.competitors if c.get('price_strategy') == 'aggressive']

        return {
            'market_leader': max(self.competitors, key=lambda c: c['market_share']),
            'fastest_growing': max(self.competitors, key=growth),
            'biggest_threat': threats[-1] if threats else self.competitors[0],
            'price_aggressor': aggressors[0] if aggressors else self.competitors[0],
        }

    async def get_trend_summary(self) -> dict:
        await self._delay()
        df = pd.DataFrame(self.trend_data, columns=['keyword', 'category', 'growth'])

        if df.empty:
            return {
                'total_trends': 0,
                'growing_trends': 0,
                'declining_trends': 0,
                'stable_trends': 0,
                'top_categories': [],
            }

        stats = (
            df.groupby('category')['growth']
            .agg(trends='count', avg_growth='mean')
            .reset_index()
            .sort_values('avg_growth', ascending=False)
        )

        return {
            'total_trends': len(df),
            'growing_trends': int((df['growth'] > 0).sum()),
            'declining_trends': int((df['growth'] < 0).sum()),
            'stable_trends': int((df['growth'] == 0).sum()),
            'top_categories': [
                {'category': row.category, 'count': int(row.trends), 'avg_growth': float(row.avg_growth)}
                for row in stats.itertuples(index=False)
            ],
        }

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------
    async def start_monitoring(self):
        self.monitoring = True
        logger.info("Trend and competitor monitoring started")

    async def stop_monitoring(self):
        self.monitoring = False
        logger.info("Trend and competitor monitoring stopped")
