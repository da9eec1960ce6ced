"""
Module: data.mock_data

Static mock data for development. Each accessor returns a fresh copy so a
service can mutate its own data without touching the originals.
"""
import copy
from datetime import datetime, timedelta, timezone
from typing import Any

from ..engine.models import Product


def _dt(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# PRODUCTS (marketplace listings)
# ============================================================================
def mock_products() -> list[Product]:
    return [
        Product(
            id='MLB123456',
            title='Smartphone Samsung Galaxy A54',
            price=1899.90,
            available_quantity=25,
            sold_quantity=140,
            initial_quantity=165,
            date_created=_dt('2023-09-01T12:00:00'),
            category_id='MLB1055',
        ),
        Product(
            id='MLB789012',
            title='Notebook Lenovo IdeaPad 3',
            price=2899.00,
            available_quantity=6,
            sold_quantity=44,
            initial_quantity=50,
            date_created=_dt('2023-11-15T12:00:00'),
            category_id='MLB1652',
        ),
        Product(
            id='MLB345678',
            title='Fone de Ouvido JBL Tune 510BT',
            price=249.90,
            available_quantity=3,
            sold_quantity=97,
            initial_quantity=100,
            date_created=_dt('2024-01-05T12:00:00'),
            category_id='MLB3697',
        ),
        Product(
            id='MLB901234',
            title='Smartwatch Amazfit Bip 5',
            price=499.00,
            available_quantity=40,
            sold_quantity=12,
            initial_quantity=52,
            date_created=_dt('2024-02-20T12:00:00'),
            category_id='MLB417704',
        ),
    ]


# ============================================================================
# TRENDS & COMPETITION
# ============================================================================
_TREND_DATA = [
    {
        "id": '1',
        "keyword": 'smartphone 5G',
        "category": 'Electronics',
        "search_volume": 125000,
        "growth": 23.5,
        "period": '30d',
        "region": 'Brasil',
        "related_keywords": ['celular 5G', 'telefone 5G', 'mobile 5G'],
        "seasonality": {"peak": 'December', "low": 'February', "pattern": 'seasonal', "confidence": 85},
    },
    {
        "id": '2',
        "keyword": 'notebook gamer',
        "category": 'Computers',
        "search_volume": 89000,
        "growth": -5.2,
        "period": '30d',
        "region": 'Brasil',
        "related_keywords": ['laptop gamer', 'computador gamer', 'pc gamer'],
        "seasonality": {"peak": 'November', "low": 'January', "pattern": 'seasonal', "confidence": 78},
    },
    {
        "id": '3',
        "keyword": 'tênis running',
        "category": 'Sports',
        "search_volume": 67000,
        "growth": 15.8,
        "period": '30d',
        "region": 'Brasil',
        "related_keywords": ['tênis corrida', 'sapato corrida', 'calçado esportivo'],
        "seasonality": None,
    },
    {
        "id": '4',
        "keyword": 'smartwatch',
        "category": 'Electronics',
        "search_volume": 54000,
        "growth": 0.0,
        "period": '7d',
        "region": 'São Paulo',
        "related_keywords": ['relógio inteligente', 'smartband'],
        "seasonality": None,
    },
]


def mock_trend_data() -> list[dict[str, Any]]:
    data = copy.deepcopy(_TREND_DATA)
    for trend in data:
        trend["last_updated"] = _now()
    return data


def mock_competitors() -> list[dict[str, Any]]:
    now = _now()
    return [
        {
            "id": '1',
            "competitor_name": 'TechStore',
            "competitor_url": 'https://techstore.com.br',
            "products": [
                {
                    "id": 'p1',
                    "name": 'iPhone 15 Pro 128GB',
                    "price": 7999.99,
                    "previous_price": 8299.99,
                    "price_change": -3.6,
                    "availability": True,
                    "rating": 4.8,
                    "review_count": 1250,
                    "last_updated": now,
                    "url": 'https://techstore.com.br/iphone-15-pro',
                },
            ],
            "market_share": 15.2,
            "price_strategy": 'competitive',
            "last_analyzed": now,
            "alerts": [
                {
                    "id": 'a1',
                    "type": 'price_drop',
                    "severity": 'high',
                    "message": 'Dropped the iPhone 15 Pro price by 3.6%',
                    "product_id": 'p1',
                    "data": {"old_price": 8299.99, "new_price": 7999.99},
                    "created_at": now - timedelta(hours=2),
                    "is_read": False,
                },
            ],
            "performance": {
                "sales_estimate": 2500000,
                "market_position": 3,
                "price_competitiveness": 85,
                "product_quality": 88,
                "customer_satisfaction": 82,
                "growth_rate": 12.5,
                "threats": 'medium',
            },
        },
        {
            "id": '2',
            "competitor_name": 'MegaEletro',
            "competitor_url": 'https://megaeletro.com.br',
            "products": [
                {
                    "id": 'p2',
                    "name": 'Samsung Galaxy S24 256GB',
                    "price": 4299.99,
                    "availability": True,
                    "rating": 4.6,
                    "review_count": 890,
                    "last_updated": now,
                    "url": 'https://megaeletro.com.br/galaxy-s24',
                },
            ],
            "market_share": 22.8,
            "price_strategy": 'aggressive',
            "last_analyzed": now,
            "alerts": [
                {
                    "id": 'a2',
                    "type": 'promotion_started',
                    "severity": 'medium',
                    "message": 'Started a weekend promotion on smartphones',
                    "product_id": 'p2',
                    "data": {"discount": 10},
                    "created_at": now - timedelta(hours=5),
                    "is_read": True,
                },
            ],
            "performance": {
                "sales_estimate": 3200000,
                "market_position": 2,
                "price_competitiveness": 92,
                "product_quality": 85,
                "customer_satisfaction": 79,
                "growth_rate": 18.3,
                "threats": 'high',
            },
        },
    ]


def mock_market_trends() -> list[dict[str, Any]]:
    return [
        {
            "id": '1',
            "category": 'Electronics',
            "trend": 'rising',
            "impact": 'high',
            "description": 'Growing demand for devices with built-in AI',
            "start_date": _dt('2024-01-01T00:00:00'),
            "confidence": 87,
            "sources": ['Google Trends', 'Marketplace Insights', 'Market research'],
            "related_products": ['smartphones', 'tablets', 'smartwatches'],
            "recommendations": [
                'Invest in products with AI features',
                'Highlight smart features in descriptions',
                'Watch competitor launches',
            ],
        },
        {
            "id": '2',
            "category": 'Home & Garden',
            "trend": 'rising',
            "impact": 'medium',
            "description": 'More searches for sustainable, eco-friendly products',
            "start_date": _dt('2024-02-15T00:00:00'),
            "confidence": 73,
            "sources": ['Consumer surveys', 'Social media', 'Marketplace Trends'],
            "related_products": ['cleaning products', 'decoration', 'gardening'],
            "recommendations": [
                'Highlight environmental certifications',
                'Create a sustainable product line',
                'Communicate ecological benefits',
            ],
        },
    ]


DEFAULT_TREND_CONFIG = {
    "monitoring_frequency": 6,  # hours
    "keywords": ['smartphone', 'notebook', 'tablet', 'smartwatch'],
    "competitors": ['techstore.com.br', 'megaeletro.com.br', 'digitalstore.com.br'],
    "categories": ['Electronics', 'Computers', 'Home & Garden', 'Sports'],
    "regions": ['Brasil', 'São Paulo', 'Rio de Janeiro'],
    "alert_thresholds": {"price_change": 5, "volume_change": 20, "market_share_change": 2},
    "notifications": {"email": True, "webhook": False, "in_app": True},
}


# ============================================================================
# REPUTATION
# ============================================================================
def mock_reputation_metrics() -> dict[str, Any]:
    return {
        "overall": 87,
        "delivery": 92,
        "communication": 85,
        "product_quality": 89,
        "customer_service": 83,
        "trend": 'up',
        "last_updated": _now(),
    }


def mock_reviews() -> list[dict[str, Any]]:
    return [
        {
            "id": '1',
            "product_id": 'MLB123456',
            "product_name": 'Smartphone Samsung Galaxy A54',
            "rating": 5,
            "comment": 'Excellent product, fast delivery and well packed!',
            "customer_name": 'Maria Silva',
            "date": _dt('2024-01-15T00:00:00'),
            "sentiment": 'positive',
            "category": 'delivery',
            "response": None,
            "is_resolved": True,
        },
        {
            "id": '2',
            "product_id": 'MLB789012',
            "product_name": 'Notebook Dell Inspiron',
            "rating": 2,
            "comment": 'Product arrived with a defect, scratched screen.',
            "customer_name": 'João Santos',
            "date": _dt('2024-01-14T00:00:00'),
            "sentiment": 'negative',
            "category": 'product_quality',
            "response": None,
            "is_resolved": False,
        },
        {
            "id": '3',
            "product_id": 'MLB345678',
            "product_name": 'Fone de Ouvido JBL',
            "rating": 4,
            "comment": 'Good product, but delivery took longer than expected.',
            "customer_name": 'Ana Costa',
            "date": _dt('2024-01-13T00:00:00'),
            "sentiment": 'neutral',
            "category": 'delivery',
            "response": {
                "id": 'resp-1',
                "message": 'Thanks for the feedback! We are working on faster delivery times.',
                "date": _dt('2024-01-14T00:00:00'),
                "is_public": True,
            },
            "is_resolved": True,
        },
    ]


def mock_reputation_alerts() -> list[dict[str, Any]]:
    return [
        {
            "id": 'alert-1',
            "type": 'negative_review',
            "severity": 'high',
            "title": 'New negative review',
            "description": 'Product arrived with a defect - response needed',
            "review_id": '2',
            "date": _dt('2024-01-14T00:00:00'),
            "is_read": False,
            "action_required": True,
        },
        {
            "id": 'alert-2',
            "type": 'rating_drop',
            "severity": 'medium',
            "title": 'Overall rating dropped',
            "description": 'Overall rating fell 2 points last week',
            "review_id": None,
            "date": _dt('2024-01-13T00:00:00'),
            "is_read": False,
            "action_required": False,
        },
    ]


def mock_reputation_trends() -> list[dict[str, Any]]:
    return [
        {"date": _dt('2024-01-01T00:00:00'), "overall": 85, "delivery": 88, "communication": 82,
         "product_quality": 87, "customer_service": 80, "review_count": 45},
        {"date": _dt('2024-01-08T00:00:00'), "overall": 86, "delivery": 90, "communication": 84,
         "product_quality": 88, "customer_service": 82, "review_count": 52},
        {"date": _dt('2024-01-15T00:00:00'), "overall": 87, "delivery": 92, "communication": 85,
         "product_quality": 89, "customer_service": 83, "review_count": 58},
    ]


# ============================================================================
# AI ASSISTANT
# ============================================================================
def mock_ai_insights() -> list[dict[str, Any]]:
    return [
        {
            "id": '1',
            "type": 'optimization',
            "title": 'Optimize the title of your best seller',
            "description": 'SEO analysis shows specific keywords could raise visibility by 35%',
            "impact": 'high',
            "confidence": 92,
            "category": 'SEO',
            "product_id": 'MLB123456',
            "product_title": 'Smartphone Samsung Galaxy A54',
            "recommendations": [
                {
                    "id": '1-1',
                    "action": 'Add relevant keywords',
                    "description": 'Include terms like "5G", "128GB", "50MP camera" in the title',
                    "priority": 'high',
                    "effort": 'easy',
                    "estimated_impact": '+35% visibility',
                    "steps": [
                        'Open the listing editor',
                        'Add the suggested keywords to the title',
                        'Keep the title within the character limit',
                        'Save the changes',
                    ],
                },
            ],
            "metrics": {"current_value": 1250, "projected_value": 1688, "improvement": 35, "unit": 'views/day'},
            "created_at": _dt('2024-01-15T10:30:00'),
            "status": 'new',
            "tags": ['SEO', 'Title', 'Optimization'],
        },
        {
            "id": '2',
            "type": 'pricing',
            "title": 'Competitive price adjustment detected',
            "description": 'Competitors cut prices by 8%. An adjustment keeps you competitive',
            "impact": 'medium',
            "confidence": 87,
            "category": 'Pricing',
            "product_id": 'MLB789012',
            "product_title": 'Notebook Lenovo IdeaPad 3',
            "recommendations": [
                {
                    "id": '2-1',
                    "action": 'Lower the price by 5%',
                    "description": 'Stay competitive without giving up too much margin',
                    "priority": 'medium',
                    "effort": 'easy',
                    "estimated_impact": '+15% sales',
                    "steps": [
                        'Check the current margin',
                        'Compute the new price with a 5% discount',
                        'Update the price on the platform',
                        'Track performance for 7 days',
                    ],
                },
            ],
            "metrics": {"current_value": 2899, "projected_value": 2754, "improvement": -5, "unit": 'R$'},
            "created_at": _dt('2024-01-15T09:15:00'),
            "status": 'new',
            "tags": ['Price', 'Competition', 'Margin'],
        },
        {
            "id": '3',
            "type": 'trend',
            "title": 'Emerging trend: sustainable products',
            "description": '45% growth in searches for eco-friendly products',
            "impact": 'high',
            "confidence": 78,
            "category": 'Trends',
            "product_id": None,
            "product_title": None,
            "recommendations": [
                {
                    "id": '3-1',
                    "action": 'Highlight sustainable features',
                    "description": 'Add sustainability badges and descriptions where they apply',
                    "priority": 'medium',
                    "effort": 'moderate',
                    "estimated_impact": '+25% conversion',
                    "steps": [
                        'Find products with sustainable features',
                        'Create visual badges',
                        'Update descriptions',
                        'Track conversion impact',
                    ],
                },
            ],
            "metrics": {"current_value": 12, "projected_value": 15, "improvement": 25, "unit": '% conversion'},
            "created_at": _dt('2024-01-15T08:45:00'),
            "status": 'viewed',
            "tags": ['Sustainability', 'Trend', 'Marketing'],
        },
    ]


def mock_ai_chats() -> list[dict[str, Any]]:
    return [
        {
            "id": '1',
            "messages": [
                {
                    "id": '1-1',
                    "role": 'user',
                    "content": 'How can I improve sales of my most popular product?',
                    "timestamp": _dt('2024-01-15T14:30:00'),
                },
                {
                    "id": '1-2',
                    "role": 'assistant',
                    "content": (
                        'Looking at your best seller I found 3 main opportunities:\n\n'
                        '1. **Title optimization**: specific keywords can raise visibility by 35%\n'
                        '2. **Better images**: listings with 5+ images sell 23% more\n'
                        '3. **Pricing strategy**: consider seasonal promotions'
                    ),
                    "timestamp": _dt('2024-01-15T14:30:15'),
                },
            ],
            "context": {"product_id": 'MLB123456', "topic": 'sales optimization'},
            "created_at": _dt('2024-01-15T14:30:00'),
            "updated_at": _dt('2024-01-15T14:30:15'),
        },
    ]


def mock_ai_analyses() -> list[dict[str, Any]]:
    return [
        {
            "id": '1',
            "type": 'product',
            "target_id": 'MLB123456',
            "analysis": {
                "score": 78,
                "strengths": ['Competitive price', 'Good customer rating (4.5/5)', 'Detailed description'],
                "weaknesses": ['Title could be SEO-optimized', 'Only 3 product images', 'No promotional badges'],
                "opportunities": ['Add keywords to the title', 'Include a demo video', 'Run seasonal promotions'],
                "threats": ['Competitors 5% cheaper', 'Similar products with more reviews', 'Marketplace ranking changes'],
            },
            "suggestions": [
                {"title": 'Optimize title for SEO', "description": 'Add relevant keywords to improve ranking',
                 "priority": 'high', "category": 'SEO'},
                {"title": 'Add more images', "description": 'Listings with 5+ images convert 23% better',
                 "priority": 'medium', "category": 'Visual'},
            ],
            "created_at": _dt('2024-01-15T12:00:00'),
        },
    ]


DEFAULT_AI_SETTINGS = {
    "enable_auto_insights": True,
    "insight_frequency": 'daily',
    "focus_areas": {"pricing": True, "listings": True, "competition": True, "trends": True, "performance": True},
    "notification_preferences": {"high_impact": True, "medium_impact": True, "low_impact": False},
    "chat_history": True,
    "data_retention": 30,  # days
}


# ============================================================================
# ADMIN
# ============================================================================
def mock_users() -> list[dict[str, Any]]:
    return [
        {
            "id": 'u-admin',
            "email": 'admin@melidash.com',
            "name": 'Admin',
            "role": 'ADMIN',
            "password_hash": None,
            "created_at": _dt('2024-01-01T00:00:00'),
            "updated_at": _dt('2024-01-01T00:00:00'),
            "invited_by": None,
            "invite_accepted_at": None,
        },
        {
            "id": 'u-seller',
            "email": 'seller@melidash.com',
            "name": 'Seller',
            "role": 'USER',
            "password_hash": None,
            "created_at": _dt('2024-01-10T00:00:00'),
            "updated_at": _dt('2024-01-10T00:00:00'),
            "invited_by": 'u-admin',
            "invite_accepted_at": _dt('2024-01-10T00:00:00'),
        },
    ]
