# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the TrackAura API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   poetry run uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import (
    TrackAuraException,
    trackaura_exception_handler,
    validation_exception_handler,
)
from app.routers import health, track, categories, watchlist
from app.auth import routes as auth_routes
from core.services.track_service import TrackService
from lib.supabase_client import SupabaseClient

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup and shutdown:
    - Startup: Create the shared HTTP client, Supabase wrapper and lookup service
    - Shutdown: Close the HTTP connection pool
    """
    # Startup
    logger.info(f"Starting TrackAura API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")

    http_client = httpx.AsyncClient(timeout=settings.MARKET_TIMEOUT_SECONDS)
    supabase = SupabaseClient.from_settings(settings)

    app.state.http_client = http_client
    app.state.supabase = supabase
    app.state.track_service = TrackService.from_settings(settings, http_client, supabase)

    if not settings.has_grok_key:
        if settings.is_development:
            logger.warning("GROK_API_KEY not set: generic items use the dev mock")
        else:
            logger.warning("GROK_API_KEY not set: generic item lookups will fail")

    yield

    # Shutdown
    logger.info("Shutting down TrackAura API")
    await http_client.aclose()


# Create FastAPI application
app = FastAPI(
    title="TrackAura API",
    description="""
## Item Price Tracking API

TrackAura looks up current prices, 30-day history and descriptive specs for
anything people collect or trade: crypto, stocks, coins, sneakers, cards.

### How It Works

1. **Browse** - `GET /api/v1/categories` lists categories; category pages show teasers
2. **Track** - `POST /api/track` with `{"item": "bitcoin"}` returns price, history and specs
3. **Save** - sign in with a magic link and add items to your watchlist

### Price Sources

| Item | Source |
|------|--------|
| Known coins (bitcoin, eth, sol, ...) | CoinGecko market data |
| Anything else | Grok completion (dev mock without a key) |
| `top-<N>-<category>` | Category catalog teasers |

### Quick Start

```bash
curl -X POST http://localhost:8000/api/track \\
  -H "Content-Type: application/json" \\
  -d '{"item": "bitcoin"}'

curl -X POST http://localhost:8000/api/track \\
  -H "Content-Type: application/json" \\
  -d '{"item": "top-6-crypto"}'
```
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Track",
            "description": "Item price, history and specs lookups",
        },
        {
            "name": "Categories",
            "description": "Category listing and category page teasers",
        },
        {
            "name": "Watchlist",
            "description": "Items saved by the signed-in user",
        },
        {
            "name": "Auth",
            "description": "Magic-link sign-in and token verification",
        },
        {
            "name": "Health",
            "description": "API health and readiness checks",
        },
    ],
)


# =============================================================================
# Middleware
# =============================================================================

# CORS middleware - allows cross-origin requests
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(TrackAuraException)
async def handle_trackaura_exception(request: Request, exc: TrackAuraException):
    """Handle custom TrackAura exceptions."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    return await trackaura_exception_handler(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_exception(request: Request, exc: RequestValidationError):
    """Handle request body/query validation errors."""
    return await validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

# Item lookup endpoint
app.include_router(
    track.router,
    prefix="/api/track",
    tags=["Track"]
)

# Category catalog endpoints
app.include_router(
    categories.router,
    prefix="/api/v1/categories",
    tags=["Categories"]
)

# Static catalog file
app.include_router(categories.static_router)

# Watchlist endpoints
app.include_router(
    watchlist.router,
    prefix="/api/v1/watchlist",
    tags=["Watchlist"]
)

# Authentication endpoints
app.include_router(
    auth_routes.router,
    prefix="/api/v1/auth",
    tags=["Auth"]
)

# Health check endpoints
app.include_router(
    health.router,
    prefix="/api/v1",
    tags=["Health"]
)


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "TrackAura API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
