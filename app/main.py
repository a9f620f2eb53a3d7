"""FastAPI application entrypoint: lifespan, middleware, routers."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from redis.asyncio import Redis
from redis.exceptions import RedisError

from app.config import get_settings
from app.dependencies import install_services
from app.middleware.logging import RequestLoggingMiddleware, configure_structured_logging
from app.routes import (
    crop_health,
    devices,
    farm_context,
    fertilizer,
    irrigation,
    knowledge,
    sensors,
    sync,
    voice,
    weather,
    ws,
)

VERSION = "0.1.0"

logger = structlog.get_logger("agriguard")


async def _connect_redis(redis_url: str) -> Redis | None:
    """Connect the optional live feed broker. The API works without it."""
    client = Redis.from_url(redis_url, decode_responses=True)
    try:
        await client.ping()
    except (RedisError, OSError) as exc:
        logger.warning("redis_unavailable", redis_url=redis_url, error=str(exc))
        await client.aclose()
        return None
    return client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application startup / shutdown lifecycle.

    Startup:
      1. Initialize structured logging
      2. Build the knowledge base, sensor state, weather cache and engines
      3. Connect to Redis when enabled (failure only disables the live feed)

    Shutdown:
      1. Close the Redis connection pool
    """
    settings = get_settings()
    configure_structured_logging(settings)
    logger.info("agriguard_starting", log_level=settings.log_level, redis_enabled=settings.redis_enabled)

    install_services(app, settings)
    app.state.redis = await _connect_redis(settings.redis_url) if settings.redis_enabled else None

    yield

    logger.info("agriguard_shutting_down")
    if app.state.redis is not None:
        await app.state.redis.aclose()


app = FastAPI(
    title="AgriGuard API",
    description=(
        "Offline-first farm decision engine: irrigation, fertilizer, crop health "
        "and weather advisories from field sensors and agronomic reference tables, "
        "with a bilingual voice command router."
    ),
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── Middleware ──────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)


# ── Health checks ───────────────────────────────────────────────────────────
@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Liveness probe: the API process is up."""
    return {
        "status": "ok",
        "service": "agriguard",
        "version": VERSION,
    }


@app.get("/health/ready", tags=["system"])
async def readiness_check(request: Request) -> dict[str, object]:
    """Readiness probe: engines are wired; Redis is reported but optional."""
    state = request.app.state
    components = {
        name: getattr(state, name, None) is not None
        for name in ("knowledge", "sensors", "weather", "voice")
    }
    return {
        "status": "ready" if all(components.values()) else "starting",
        "components": components,
        "live_feed": getattr(state, "redis", None) is not None,
    }


# ── Router registration ────────────────────────────────────────────────────
app.include_router(irrigation.router, prefix="/api/v1")
app.include_router(fertilizer.router, prefix="/api/v1")
app.include_router(crop_health.router, prefix="/api/v1")
app.include_router(weather.router, prefix="/api/v1")
app.include_router(sensors.router, prefix="/api/v1")
app.include_router(devices.router, prefix="/api/v1")
app.include_router(farm_context.router, prefix="/api/v1")
app.include_router(sync.router, prefix="/api/v1")
app.include_router(voice.router, prefix="/api/v1")
app.include_router(knowledge.router, prefix="/api/v1")
app.include_router(ws.router)
