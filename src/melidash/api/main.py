from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..clients.marketplace import MarketplaceClient
from ..config.settings import Settings, get_settings
from ..utils.logger import get_logger
from .admin_api import router as admin_router
from .auth_api import router as auth_router
from .insights_api import ai_router, reputation_router, trends_router
from .pricing_api import router as pricing_router
from .responses import install_error_handlers, ok
from .state import ServiceContainer

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, marketplace: Optional[MarketplaceClient] = None) -> FastAPI:
    """Build the API with a fresh set of in-memory services."""
    settings = settings or get_settings()

    app = FastAPI(
        title="MeliDash API",
        description="Pricing automation and seller insights for the MeliDash dashboard",
        version=__version__,
    )
    app.state.services = ServiceContainer.build(settings, marketplace)

    # Enable CORS for frontend development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_error_handlers(app)

    app.include_router(pricing_router)
    app.include_router(admin_router)
    app.include_router(auth_router)
    app.include_router(trends_router)
    app.include_router(reputation_router)
    app.include_router(ai_router)

    @app.get("/")
    async def root():
        return {"status": "online", "message": "MeliDash API Active"}

    @app.get("/system/status")
    async def get_status(request: Request):
        services: ServiceContainer = request.app.state.services
        rules = services.rules.list_rules()
        return ok({
            "engine_active": True,
            "environment": services.settings.environment,
            "mock_data": services.settings.use_mock_data,
            "rules_count": len(rules),
            "active_rules": sum(1 for r in rules if r.is_active),
            "executions": len(services.pricing.get_execution_history()),
            "version": __version__,
        })

    logger.info(f"MeliDash API ready ({settings.environment}, mock data {'on' if settings.use_mock_data else 'off'})")
    return app


app = create_app()
