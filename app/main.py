import os
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from app.routers import analysis, live_updates, research
from app.services.request_errors import invalid_request_handler
from vidsentry import __version__
from vidsentry.client_manager import ClientManager


def create_app(client_manager: Optional[ClientManager] = None) -> FastAPI:
    """Build the HTTP application. A ClientManager is created at startup unless one is given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        manager = client_manager or ClientManager()
        app.state.client_manager = manager
        logger.info(f"{manager.config.app_name} API started ({manager.config.environment})")
        try:
            yield
        finally:
            await manager.close()
            logger.info("API stopped")

    app = FastAPI(
        title="VidSentry API",
        description="Video content analysis with live progress updates and security keyword flagging",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True
    )

    app.include_router(analysis.router)
    app.include_router(research.router)
    app.include_router(live_updates.router)
    app.add_exception_handler(RequestValidationError, invalid_request_handler)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint providing API information."""
        return {
            "message": "VidSentry API",
            "version": __version__,
            "docs_url": "/docs",
            "live_updates": "/ws/analysis-status",
        }

    @app.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "vidsentry"}

    return app


app = create_app()


def run():
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":
    run()
