"""FastAPI application."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kjvreader import __version__
from kjvreader.api.routes import router
from kjvreader.services import ReaderServices, build_services


def create_app(services: ReaderServices | None = None) -> FastAPI:
    """Create the reader API.

    Args:
        services: Prebuilt services (tests, embedding). If None, services are
            built from default Settings at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "services", None) is None
        if owned:
            app.state.services = build_services()
        app.state.services.repository.load()
        yield
        if owned:
            app.state.services.close()

    app = FastAPI(
        title="KJV Reader",
        description="Scripture text lookup with archaic English modernization",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    if services is not None:
        app.state.services = services

    # CORS for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "KJV Reader",
            "version": __version__,
            "docs": "/docs",
            "api": "/api/v1",
        }

    return app
