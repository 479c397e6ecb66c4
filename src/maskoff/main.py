# src/maskoff/main.py
"""Main entry point for the MaskOFF chat backend."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from maskoff.api.v1.router import api_v1
from maskoff.core.logging import setup_logging
from maskoff.core.settings import settings
from maskoff.services.connections import InMemoryConnectionRegistry

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="MaskOFF API",
    description="Encrypted direct messaging with real-time update hints",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Push channels of this process; swap for a shared registry to scale out.
app.state.connection_registry = InMemoryConnectionRegistry()

app.include_router(api_v1, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    setup_logging()
    logger.info("%s %s starting", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "MaskOFF API",
        "version": settings.app_version,
        "description": "Welcome to MaskOFF",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("maskoff.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
