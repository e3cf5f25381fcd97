"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from activ_gateway.api.dependencies import get_request_id
from activ_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from activ_gateway.api.v1 import chat, data, link, summary
from activ_gateway.domain.exceptions import GatewayError, PlaidAPIError
from activ_gateway.infrastructure.observability.logging import setup_logging
from activ_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


async def plaid_error_handler(request: Request, exc: PlaidAPIError) -> JSONResponse:
    logging.error(
        f"Plaid error: {exc.code}",
        extra={"request_id": get_request_id(request), "http_status": exc.http_status, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.response_status, content={"error": exc.code, "details": exc.payload})


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code})


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="ACTIV Gateway",
        description="Plaid proxy, financial KPIs and JAMARI coach for the ACTIV app",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.add_exception_handler(PlaidAPIError, plaid_error_handler)
    app.add_exception_handler(GatewayError, gateway_error_handler)

    @app.get("/")
    def root():
        return {"ok": True, "env": settings.plaid_environment, "countries": settings.country_codes}

    # Frontend connectivity check
    @app.get("/ping")
    def ping():
        return {"ok": True, "env": settings.plaid_environment}

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # The mobile app calls these paths unversioned
    app.include_router(link.router, tags=["link"])
    app.include_router(data.router, tags=["plaid"])
    app.include_router(summary.router, tags=["summary"])
    app.include_router(chat.router, tags=["coach"])

    return app


app = create_app()
