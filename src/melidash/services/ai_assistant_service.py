"""
AI Assistant Service - insights, chat and product analyses.

No model is called: replies come from canned responses picked by keyword, and
new insights and analyses are generated from templates.
"""
import asyncio
import copy
import random
from collections import Counter
from typing import Optional

from ..config.settings import Settings, get_settings
from ..data import mock_data
from ..engine.models import generate_id, utcnow
from ..utils.exceptions import NotFoundError, ValidationError
from ..utils.logger import get_logger

logger = get_logger(__name__)

INSIGHT_STATUSES = ('new', 'viewed', 'applied', 'dismissed')
ANALYSIS_TYPES = ('product', 'category', 'competitor', 'market')

RESPONSES = {
    'pricing': [
        'Based on the market analysis, I recommend adjusting the price with both margin and competitiveness in mind.',
        'Your competitors are pricing 5-8% lower. Let us look at pricing strategies.',
        'To optimize your prices, consider a dynamic strategy driven by demand and seasonality.',
    ],
    'optimization': [
        'Looking at your product, I see room to improve the title, images and description.',
        'Your products can perform better with some SEO and visual presentation work.',
        'I found 3 main areas to optimize: title, images and keywords.',
    ],
    'trends': [
        'Current trends show growth in sustainable and technology categories.',
        'I detected an emerging opportunity in your market niche.',
        'Based on trend data, I recommend focusing on products with specific features.',
    ],
    'general': [
        'I can help with detailed analyses, optimizations and tailored strategies.',
        'Let us work together to improve how your products perform on the marketplace.',
        'Based on your data, I can suggest several growth strategies.',
    ],
}

# Checked in order; the first topic with a matching keyword wins
TOPIC_KEYWORDS = [
    ('pricing', ('price', 'cost', 'value')),
    ('optimization', ('optimi', 'improve', 'title')),
    ('trends', ('trend', 'market', 'opportunit')),
]


def classify_message(message: str) -> str:
    """Pick the response topic for a user message."""
    text = message.lower()
    for topic, keywords in TOPIC_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return topic
    return 'general'


class AIAssistantService:
    def __init__(self, settings: Optional[Settings] = None, rng: Optional[random.Random] = None):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()
        self.ai_settings = copy.deepcopy(mock_data.DEFAULT_AI_SETTINGS)
        self.insights: list[dict] = []
        self.chats: list[dict] = []
        self.analyses: list[dict] = []

        if self.settings.use_mock_data:
            self.insights = mock_data.mock_ai_insights()
            self.chats = mock_data.mock_ai_chats()
            self.analyses = mock_data.mock_ai_analyses()

    async def _delay(self):
        await asyncio.sleep(self.settings.delay(0.3 + self.rng.random() * 0.7))

    # ------------------------------------------------------------------
    # Insights
    # ------------------------------------------------------------------
    async def get_insights(
        self,
        type: Optional[str] = None,
        impact: Optional[str] = None,
        status: Optional[str] = None,
        product_id: Optional[str] = None,
    ) -> list[dict]:
        await self._delay()
        insights = list(self.insights)

        if type:
            insights = [i for i in insights if i['type'] == type]
        if impact:
            insights = [i for i in insights if i['impact'] == impact]
        if status:
            insights = [i for i in insights if i['status'] == status]
        if product_id:
            insights = [i for i in insights if i.get('product_id') == product_id]

        return sorted(insights, key=lambda i: i['created_at'], reverse=True)

    async def get_insight_by_id(self, insight_id: str) -> Optional[dict]:
        await self._delay()
        return next((i for i in self.insights if i['id'] == insight_id), None)

    async def update_insight_status(self, insight_id: str, status: str) -> dict:
        if status not in INSIGHT_STATUSES:
            raise ValidationError(f"Unknown insight status '{status}'")

        await self._delay()
        insight = next((i for i in self.insights if i['id'] == insight_id), None)
        if insight is None:
            raise NotFoundError(f"Insight '{insight_id}' not found")

        insight['status'] = status
        logger.info(f"Insight {insight_id} marked {status}")
        return insight

    async def dismiss_insight(self, insight_id: str) -> dict:
        return await self.update_insight_status(insight_id, 'dismissed')

    async def apply_recommendation(self, insight_id: str, recommendation_id: str) -> dict:
        insight = next((i for i in self.insights if i['id'] == insight_id), None)
        if insight is None:
            raise NotFoundError(f"Insight '{insight_id}' not found")
        if not any(r['id'] == recommendation_id for r in insight['recommendations']):
            raise NotFoundError(f"Recommendation '{recommendation_id}' not found in insight '{insight_id}'")

        logger.info(f"Applying recommendation {recommendation_id} of insight {insight_id}")
        return await self.update_insight_status(insight_id, 'applied')

    # ------------------------------------------------------------------
    # Chats
    # ------------------------------------------------------------------
    async def get_chats(self) -> list[dict]:
        await self._delay()
        return sorted(self.chats, key=lambda c: c['updated_at'], reverse=True)

    async def get_chat_by_id(self, chat_id: str) -> Optional[dict]:
        await self._delay()
        return next((c for c in self.chats if c['id'] == chat_id), None)

    async def create_chat(self, context: Optional[dict] = None) -> dict:
        await self._delay()
        now = utcnow()
        chat = {
            'id': generate_id(),
            'messages': [],
            'context': context or {},
            'created_at': now,
            'updated_at': now,
        }
        self.chats.insert(0, chat)
        logger.info(f"Created chat {chat['id']}")
        return chat

    async def send_message(self, chat_id: str, content: str) -> dict:
        """Append the user message and a keyword-routed reply; returns the reply."""
        await self._delay()
        chat = next((c for c in self.chats if c['id'] == chat_id), None)
        if chat is None:
            raise NotFoundError(f"Chat '{chat_id}' not found")

        chat['messages'].append({
            'id': f"{chat_id}-{generate_id()}",
            'role': 'user',
            'content': content,
            'timestamp': utcnow(),
        })

        # Simulated thinking time
        await asyncio.sleep(self.settings.delay(1.0 + self.rng.random() * 2.0))
        reply = {
            'id': f"{chat_id}-{generate_id()}",
            'role': 'assistant',
            'content': self.rng.choice(RESPONSES[classify_message(content)]),
            'timestamp': utcnow(),
        }
        chat['messages'].append(reply)
        chat['updated_at'] = reply['timestamp']
        return reply

    # ------------------------------------------------------------------
    # Analyses
    # ------------------------------------------------------------------
    async def get_analyses(self, type: Optional[str] = None) -> list[dict]:
        await self._delay()
        analyses = [a for a in self.analyses if not type or a['type'] == type]
        return sorted(analyses, key=lambda a: a['created_at'], reverse=True)

    async def get_analysis_by_id(self, analysis_id: str) -> Optional[dict]:
        await self._delay()
        return next((a for a in self.analyses if a['id'] == analysis_id), None)

    async def create_analysis(self, type: str, target_id: str) -> dict:
        if type not in ANALYSIS_TYPES:
            raise ValidationError(f"Unknown analysis type '{type}'")

        await self._delay()
        analysis = {
            'id': generate_id(),
            'type': type,
            'target_id': target_id,
            'analysis': {
                'score': self.rng.randint(60, 99),
                'strengths': [
                    'Competitive market price',
                    'Good seller reputation',
                    'Detailed product description',
                ],
                'weaknesses': [
                    'Title could be optimized',
                    'Few product images',
                    'No active promotions',
                ],
                'opportunities': [
                    'Add more keywords',
                    'Improve image quality',
                    'Run promotional strategies',
                ],
                'threats': [
                    'Competition with lower prices',
                    'Similar products with more reviews',
                    'Marketplace ranking changes',
                ],
            },
            'suggestions': [
                {'title': 'Optimize product title', 'description': 'Add relevant keywords to improve SEO',
                 'priority': 'high', 'category': 'SEO'},
                {'title': 'Improve visual presentation', 'description': 'Add more high quality images',
                 'priority': 'medium', 'category': 'Visual'},
            ],
            'created_at': utcnow(),
        }
        self.analyses.insert(0, analysis)
        logger.info(f"Created {type} analysis {analysis['id']} for {target_id}")
        return analysis

    # ------------------------------------------------------------------
    # Settings and stats
    # ------------------------------------------------------------------
    async def get_settings(self) -> dict:
        await self._delay()
        return copy.deepcopy(self.ai_settings)

    async def update_settings(self, updates: dict) -> dict:
        await self._delay()
        self.ai_settings.update(updates)
        return copy.deepcopy(self.ai_settings)

    async def get_insight_stats(self) -> dict:
        await self._delay()
        return {
            'total': len(self.insights),
            'by_type': dict(Counter(i['type'] for i in self.insights)),
            'by_impact': dict(Counter(i['impact'] for i in self.insights)),
            'by_status': dict(Counter(i['status'] for i in self.insights)),
        }

    async def generate_new_insights(self) -> list[dict]:
        await self._delay()
        insight_id = generate_id()
        insight = {
            'id': insight_id,
            'type': 'optimization',
            'title': 'New optimization opportunity detected',
            'description': 'Automatic analysis found possible improvements in your products',
            'impact': 'medium',
            'confidence': 85,
            'category': 'Automatic',
            'product_id': None,
            'product_title': None,
            'recommendations': [
                {
                    'id': f"{insight_id}-1",
                    'action': 'Apply automatic suggestions',
                    'description': 'Apply AI based optimizations',
                    'priority': 'medium',
                    'effort': 'easy',
                    'estimated_impact': '+20% performance',
                    'steps': ['Review suggestions', 'Apply changes', 'Monitor results'],
                },
            ],
            'metrics': {'current_value': 100, 'projected_value': 120, 'improvement': 20, 'unit': '% performance'},
            'created_at': utcnow(),
            'status': 'new',
            'tags': ['Automatic', 'AI', 'Optimization'],
        }
        self.insights.insert(0, insight)
        logger.info(f"Generated insight {insight_id}")
        return [insight]
