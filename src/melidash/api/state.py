"""
Shared application state for the API.

One ServiceContainer per app, stored on ``app.state.services`` and handed to
the routers through FastAPI dependencies.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..clients.marketplace import InMemoryMarketplaceClient, MarketplaceClient
from ..config.settings import Settings, get_settings
from ..data.mock_data import mock_products
from ..engine.competitors import CompetitorFeed
from ..engine.pricing_engine import PricingAutomationService
from ..services.admin_service import AdminService
from ..services.ai_assistant_service import AIAssistantService
from ..services.auth_service import AuthService
from ..services.reputation_service import ReputationService
from ..services.rules_service import RulesService
from ..services.trends_service import TrendsService
from ..utils.exceptions import AuthenticationError

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class ServiceContainer:
    settings: Settings
    marketplace: MarketplaceClient
    pricing: PricingAutomationService
    rules: RulesService
    trends: TrendsService
    reputation: ReputationService
    ai: AIAssistantService
    admin: AdminService
    auth: AuthService

    @classmethod
    def build(cls, settings: Optional[Settings] = None,
              marketplace: Optional[MarketplaceClient] = None) -> 'ServiceContainer':
        """Wire every service against one settings object."""
        settings = settings or get_settings()
        if marketplace is None:
            products = mock_products() if settings.use_mock_data else []
            marketplace = InMemoryMarketplaceClient(products, settings)

        admin = AdminService(settings)
        return cls(
            settings=settings,
            marketplace=marketplace,
            pricing=PricingAutomationService(marketplace, CompetitorFeed(), settings),
            rules=RulesService(settings.seed_rules if settings.use_mock_data else None),
            trends=TrendsService(settings),
            reputation=ReputationService(settings),
            ai=AIAssistantService(settings),
            admin=admin,
            auth=AuthService(admin, settings),
        )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_pricing(services: ServiceContainer = Depends(get_services)) -> PricingAutomationService:
    return services.pricing


def get_rules(services: ServiceContainer = Depends(get_services)) -> RulesService:
    return services.rules


def get_trends(services: ServiceContainer = Depends(get_services)) -> TrendsService:
    return services.trends


def get_reputation(services: ServiceContainer = Depends(get_services)) -> ReputationService:
    return services.reputation


def get_ai(services: ServiceContainer = Depends(get_services)) -> AIAssistantService:
    return services.ai


def get_admin(services: ServiceContainer = Depends(get_services)) -> AdminService:
    return services.admin


def get_auth(services: ServiceContainer = Depends(get_services)) -> AuthService:
    return services.auth


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    services: ServiceContainer = Depends(get_services),
) -> Optional[dict]:
    """The caller's user record when a valid bearer token is sent, else None."""
    if credentials is None:
        return None
    claims = services.auth.decode_token(credentials.credentials)
    return services.admin.get_user(claims['sub'])


def get_current_user(user: Optional[dict] = Depends(get_optional_user)) -> dict:
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user
