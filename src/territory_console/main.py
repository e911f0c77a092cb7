"""FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import customers, exports, health, markers, sales, territories
from .config import settings
from .data.customers_repository import get_repository
from .services.geocoding import GeocodeResolver, GoogleGeocodingClient
from .services.markers import MarkerCache, MarkerPipeline

logger = logging.getLogger(__name__)


def build_marker_pipeline() -> MarkerPipeline:
    """One pipeline per application, owning its own marker cache."""
    resolver = GeocodeResolver(GoogleGeocodingClient())
    return MarkerPipeline(resolver, get_repository(), cache=MarkerCache())


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, root_path="")
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.state.marker_pipeline = build_marker_pipeline()
    if not settings.google_maps_api_key:
        logger.warning("TERRITORY_GOOGLE_MAPS_API_KEY is not set; only cached or stored coordinates will be mapped")

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(customers.router, prefix=settings.api_prefix)
    app.include_router(territories.router, prefix=settings.api_prefix)
    app.include_router(markers.router, prefix=settings.api_prefix)
    app.include_router(sales.router, prefix=settings.api_prefix)
    app.include_router(exports.router, prefix=settings.api_prefix)
    return app


app = create_app()
