"""
Corridor Pricing — FastAPI application entry point.

Configures the app, middleware, the pricing error handler and the API
routers.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.api import pricing
from app.pricing_engine.errors import PricingError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    from app.database import engine
    from app.redis_client import close_redis

    logger.info("%s starting (env=%s)", settings.APP_NAME, settings.APP_ENV)
    yield

    await engine.dispose()
    await close_redis()


app = FastAPI(
    title=settings.APP_NAME,
    description="Transaction pricing and FX-rate resolution with time-bounded quote locks.",
    version="0.1.0",
    lifespan=lifespan,
)

# --- CORS Middleware ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handling ---
@app.exception_handler(PricingError)
async def pricing_error_handler(request: Request, exc: PricingError):
    """Render pricing failures as ``{ok, error, message, details}``."""
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# --- Routers ---
app.include_router(pricing.router, prefix="/api/v1/pricing", tags=["Pricing"])


@app.get("/health")
async def health_check():
    """Health check endpoint for load balancers and monitoring."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": "0.1.0",
    }
