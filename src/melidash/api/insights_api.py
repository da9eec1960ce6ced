"""
Insights API - trends, reputation and AI assistant routers.
"""
from datetime import datetime
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..services.ai_assistant_service import AIAssistantService
from ..services.reputation_service import ReputationService
from ..services.trends_service import TrendsService
from ..utils.exceptions import NotFoundError
from .responses import ok
from .state import get_ai, get_reputation, get_trends

trends_router = APIRouter(prefix="/api/trends", tags=["trends"])
reputation_router = APIRouter(prefix="/api/reputation", tags=["reputation"])
ai_router = APIRouter(prefix="/api/ai-assistant", tags=["ai-assistant"])


def _found(item: Optional[Any], what: str) -> Any:
    if item is None:
        raise NotFoundError(f"{what} not found")
    return item


# ----------------------------------------------------------------------
# Trends
# ----------------------------------------------------------------------
class CompetitorCreate(BaseModel):
    competitor_name: str = Field(min_length=1)
    competitor_url: str = ''
    market_share: float = 0.0
    price_strategy: str = 'competitive'


@trends_router.get("")
async def list_trends(period: str = '30d', category: Optional[str] = None,
                      trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_trend_data(period=period, category=category))


@trends_router.get("/search")
async def search_trends(q: str, trends: TrendsService = Depends(get_trends)):
    return ok(await trends.search_trends(q))


@trends_router.get("/top")
async def top_trends(limit: int = 10, trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_top_growing_trends(limit))


@trends_router.get("/seasonal")
async def seasonal_trends(trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_seasonal_trends())


@trends_router.get("/summary")
async def trend_summary(trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_trend_summary())


@trends_router.get("/market")
async def market_trends(trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_market_trends())


@trends_router.get("/analysis/{product_id}")
async def trend_analysis(product_id: str, trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_trend_analysis(product_id))


@trends_router.get("/competitors")
async def list_competitors(trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_competitors())


@trends_router.get("/competitors/insights")
async def competitive_insights(trends: TrendsService = Depends(get_trends)):
    return ok(await trends.get_competitive_insights())


@trends_router.get("/competitors/{competitor_id}")
async def get_competitor(competitor_id: str, trends: TrendsService = Depends(get_trends)):
    return ok(_found(await trends.get_competitor_by_id(competitor_id), "Competitor"))


@trends_router.post("/competitors", status_code=201)
async def add_competitor(body: CompetitorCreate, trends: TrendsService = Depends(get_trends)):
    return ok(await trends.add_competitor(body.model_dump()))


@trends_router.put("/competitors/{competitor_id}")
async def update_competitor(competitor_id: str, updates: dict[str, Any],
                            trends: TrendsService = Depends(get_trends)):
    return ok(_found(await trends.update_competitor(competitor_id, updates), "Competitor"))


@trends_router.delete("/competitors/{competitor_id}")
async def remove_competitor(competitor_id: str, trends: TrendsService = Depends(get_trends)):
    _found(await trends.remove_competitor(competitor_id) or None, "Competitor")
    return ok({'id': competitor_id})


@trends_router.get("/alerts")
async def trend_alerts(unread_only: bool = False, type: Optional[str] = None,
                       trends: TrendsService = Depends(get_trends)):
    if type:
        return ok(await trends.get_alerts_by_type(type))
    return ok(await trends.get_alerts(unread_only=unread_only))


@trends_router.post("/alerts/read-all")
async def read_all_trend_alerts(trends: TrendsService = Depends(get_trends)):
    await trends.mark_all_alerts_as_read()
    return ok()


@trends_router.post("/alerts/{alert_id}/read")
async def read_trend_alert(alert_id: str, trends: TrendsService = Depends(get_trends)):
    _found(await trends.mark_alert_as_read(alert_id) or None, "Alert")
    return ok({'id': alert_id, 'is_read': True})


@trends_router.get("/config")
async def trend_config(trends: TrendsService = Depends(get_trends)):
    return ok(trends.get_config())


@trends_router.put("/config")
async def update_trend_config(updates: dict[str, Any], trends: TrendsService = Depends(get_trends)):
    return ok(await trends.update_config(updates))


@trends_router.post("/monitoring/{action}")
async def monitoring(action: Literal['start', 'stop'], trends: TrendsService = Depends(get_trends)):
    if action == 'start':
        await trends.start_monitoring()
    else:
        await trends.stop_monitoring()
    return ok({'monitoring': trends.monitoring})


# ----------------------------------------------------------------------
# Reputation
# ----------------------------------------------------------------------
class ReviewResponse(BaseModel):
    message: str = Field(min_length=1)
    is_public: bool = True


class GoalCreate(BaseModel):
    metric: str
    target: float
    deadline: datetime
    current: Optional[float] = None
    is_active: bool = True


class SentimentRequest(BaseModel):
    comment: str


@reputation_router.get("/metrics")
async def reputation_metrics(reputation: ReputationService = Depends(get_reputation)):
    metrics = await reputation.get_reputation_metrics()
    temperature, status, color = reputation.calculate_temperature(metrics)
    return ok({
        'metrics': metrics,
        'thermometer': {'temperature': temperature, 'status': status, 'color': color},
    })


@reputation_router.get("/trends")
async def reputation_trends(days: int = 30, reputation: ReputationService = Depends(get_reputation)):
    return ok(await reputation.get_reputation_trends(days))


@reputation_router.get("/reviews")
async def list_reviews(
    sentiment: Optional[str] = None,
    category: Optional[str] = None,
    needs_response: bool = False,
    limit: Optional[int] = None,
    reputation: ReputationService = Depends(get_reputation),
):
    return ok(await reputation.get_reviews(sentiment, category, needs_response, limit))


@reputation_router.post("/reviews/{review_id}/respond")
async def respond_to_review(review_id: str, body: ReviewResponse,
                            reputation: ReputationService = Depends(get_reputation)):
    return ok(await reputation.respond_to_review(review_id, body.message, body.is_public))


@reputation_router.get("/alerts")
async def reputation_alerts(unread_only: bool = False, reputation: ReputationService = Depends(get_reputation)):
    return ok(await reputation.get_reputation_alerts(unread_only))


@reputation_router.post("/alerts/{alert_id}/read")
async def read_reputation_alert(alert_id: str, reputation: ReputationService = Depends(get_reputation)):
    _found(await reputation.mark_alert_as_read(alert_id) or None, "Alert")
    return ok({'id': alert_id, 'is_read': True})


@reputation_router.delete("/alerts/{alert_id}")
async def dismiss_reputation_alert(alert_id: str, reputation: ReputationService = Depends(get_reputation)):
    _found(await reputation.dismiss_alert(alert_id) or None, "Alert")
    return ok({'id': alert_id})


@reputation_router.get("/goals")
async def list_goals(reputation: ReputationService = Depends(get_reputation)):
    return ok(await reputation.get_reputation_goals())


@reputation_router.post("/goals", status_code=201)
async def create_goal(body: GoalCreate, reputation: ReputationService = Depends(get_reputation)):
    return ok(await reputation.create_reputation_goal(**body.model_dump()))


@reputation_router.put("/goals/{goal_id}")
async def update_goal(goal_id: str, updates: dict[str, Any],
                      reputation: ReputationService = Depends(get_reputation)):
    return ok(await reputation.update_reputation_goal(goal_id, updates))


@reputation_router.delete("/goals/{goal_id}")
async def delete_goal(goal_id: str, reputation: ReputationService = Depends(get_reputation)):
    _found(await reputation.delete_reputation_goal(goal_id) or None, "Goal")
    return ok({'id': goal_id})


@reputation_router.post("/sentiment")
async def sentiment(body: SentimentRequest, reputation: ReputationService = Depends(get_reputation)):
    return ok({'sentiment': reputation.analyze_sentiment(body.comment)})


@reputation_router.get("/report")
async def reputation_report(period: Literal['week', 'month', 'quarter'] = 'month',
                            reputation: ReputationService = Depends(get_reputation)):
    return ok(await reputation.generate_reputation_report(period))


# ----------------------------------------------------------------------
# AI assistant
# ----------------------------------------------------------------------
class InsightStatus(BaseModel):
    status: Literal['new', 'viewed', 'applied', 'dismissed']


class ChatCreate(BaseModel):
    context: dict[str, Any] = {}


class ChatMessage(BaseModel):
    content: str = Field(min_length=1)


class AnalysisCreate(BaseModel):
    type: Literal['product', 'category', 'competitor', 'market']
    target_id: str


@ai_router.get("/insights")
async def list_insights(
    type: Optional[str] = None,
    impact: Optional[str] = None,
    status: Optional[str] = None,
    product_id: Optional[str] = None,
    ai: AIAssistantService = Depends(get_ai),
):
    return ok(await ai.get_insights(type=type, impact=impact, status=status, product_id=product_id))


@ai_router.get("/insights/stats")
async def insight_stats(ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.get_insight_stats())


@ai_router.post("/insights/generate")
async def generate_insights(ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.generate_new_insights())


@ai_router.get("/insights/{insight_id}")
async def get_insight(insight_id: str, ai: AIAssistantService = Depends(get_ai)):
    return ok(_found(await ai.get_insight_by_id(insight_id), "Insight"))


@ai_router.put("/insights/{insight_id}/status")
async def update_insight_status(insight_id: str, body: InsightStatus, ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.update_insight_status(insight_id, body.status))


@ai_router.post("/insights/{insight_id}/recommendations/{recommendation_id}/apply")
async def apply_recommendation(insight_id: str, recommendation_id: str, ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.apply_recommendation(insight_id, recommendation_id))


@ai_router.get("/chats")
async def list_chats(ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.get_chats())


@ai_router.post("/chats", status_code=201)
async def create_chat(body: ChatCreate, ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.create_chat(body.context))


@ai_router.get("/chats/{chat_id}")
async def get_chat(chat_id: str, ai: AIAssistantService = Depends(get_ai)):
    return ok(_found(await ai.get_chat_by_id(chat_id), "Chat"))


@ai_router.post("/chats/{chat_id}/messages")
async def send_message(chat_id: str, body: ChatMessage, ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.send_message(chat_id, body.content))


@ai_router.get("/analyses")
async def list_analyses(type: Optional[str] = None, ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.get_analyses(type))


@ai_router.post("/analyses", status_code=201)
async def create_analysis(body: AnalysisCreate, ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.create_analysis(body.type, body.target_id))


@ai_router.get("/analyses/{analysis_id}")
async def get_analysis(analysis_id: str, ai: AIAssistantService = Depends(get_ai)):
    return ok(_found(await ai.get_analysis_by_id(analysis_id), "Analysis"))


@ai_router.get("/settings")
async def get_ai_settings(ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.get_settings())


@ai_router.put("/settings")
async def update_ai_settings(updates: dict[str, Any], ai: AIAssistantService = Depends(get_ai)):
    return ok(await ai.update_settings(updates))
