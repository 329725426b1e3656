"""FastAPI application for the Drug Interaction Checker."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import drugs_router
from app.core.config import settings
from app.services.interaction_catalog import get_interaction_catalog

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Loads the interaction catalog before accepting requests so the first
    interaction check does not pay for it.
    """
    startup_start = time.perf_counter()

    catalog_stats = get_interaction_catalog().get_stats()
    logger.info(
        f"Interaction catalog loaded: {catalog_stats['total_drugs']} drugs, "
        f"{catalog_stats['total_interactions']} interactions"
    )

    total_startup_ms = (time.perf_counter() - startup_start) * 1000
    logger.info(
        f"Server ready in {total_startup_ms:.0f}ms "
        f"(RxNav: {settings.rxnav_base_url}, mode: {settings.interaction_mode.value})"
    )

    app.state.catalog_stats = catalog_stats
    app.state.startup_time_ms = total_startup_ms

    yield


app = FastAPI(
    title=settings.app_name,
    description="API for resolving drug names against RxNorm and checking drug-drug interactions.",
    version=VERSION,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(drugs_router, prefix=settings.api_prefix)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """Health check endpoint (liveness probe)."""
    return {
        "status": "healthy",
        "service": "drug-interaction-checker",
        "version": VERSION,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "service": "Drug Interaction Checker API",
        "version": VERSION,
        "docs": "/docs",
        "health": "/health",
        "search": f"{settings.api_prefix}/search",
        "interactions": f"{settings.api_prefix}/interactions",
    }
