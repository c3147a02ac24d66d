"""Bakery storefront FastAPI application.

This is the composition root: settings, the payment gateway, repositories
and application services are all built here and handed to the routes.
Nothing is wired at import time inside the domain packages.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.api import install_ordering_api
from ordering.config import Settings, get_settings
from ordering.domain import ordering
from ordering.utils.logging import add_context, clear_context, get_logger
from payments.gateway import PaymentGateway, build_gateway

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, gateway: PaymentGateway | None = None) -> FastAPI:
    settings = settings or get_settings()
    gateway = gateway or build_gateway(settings.payment_gateway)

    app = FastAPI(
        title="Bakery Commerce API",
        description="Carts, checkout, orders and payment notifications",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the ordering domain context and bind request log context."""
        clear_context()
        add_context(method=request.method, path=request.url.path)
        with ordering.domain_context():
            response = await call_next(request)
        return response

    install_ordering_api(app, settings=settings, gateway=gateway)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": ordering.name,
                "payment_gateway": settings.payment_gateway,
            }
        )

    logger.info("app_created", payment_gateway=settings.payment_gateway)
    return app


# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the domain configuration overlay.
ordering.init()
app = create_app()
