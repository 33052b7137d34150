from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from starlette.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware
from app.api import quotes
from app.core.cache import MemoryCache, RedisCache
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.core.redis import init_redis, close_redis, get_redis
from app.core.metrics import request_count, request_duration, redis_connected, get_metrics_text
from app.services.providers import default_registry
import time
import logging

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
}


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception:
            duration = time.time() - start_time
            request_count.labels(
                method=request.method,
                endpoint=request.url.path,
                status=500
            ).inc()
            request_duration.labels(
                method=request.method,
                endpoint=request.url.path
            ).observe(duration)
            raise

        duration = time.time() - start_time
        request_count.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()
        request_duration.labels(
            method=request.method,
            endpoint=request.url.path
        ).observe(duration)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=settings.LOG_LEVEL)
    logger.info("Application starting...")

    logger.info("Initializing Redis connection...")
    try:
        client = await init_redis()
        app.state.cache = RedisCache(client)
        redis_connected.set(1)
        logger.info("Redis connected, using Redis quote cache")
    except Exception as e:
        logger.warning(f"Redis not available ({e}), using in-memory cache")
        app.state.cache = MemoryCache()
        redis_connected.set(0)

    yield

    logger.info("Application shutting down...")
    await close_redis()
    redis_connected.set(0)
    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.API_TITLE,
    description=settings.API_DESCRIPTION,
    version=settings.API_VERSION,
    lifespan=lifespan
)

app.state.registry = default_registry()

app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.ALLOWED_ORIGIN],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)

register_exception_handlers(app)

app.include_router(quotes.router)


@app.get("/metrics", tags=["monitoring"])
async def metrics():
    return Response(
        content=get_metrics_text(),
        media_type="text/plain; version=0.0.4; charset=utf-8"
    )


@app.get("/health", tags=["monitoring"])
async def health_check(request: Request):
    cache = getattr(request.app.state, "cache", None)

    return {
        "status": "ok",
        "service": settings.API_TITLE,
        "version": settings.API_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "dependencies": {
            "cache": cache.name if cache is not None else "unconfigured",
            "redis": "connected" if get_redis() is not None else "disconnected",
        }
    }


@app.get("/readiness", tags=["monitoring"])
async def readiness_check(request: Request):
    if getattr(request.app.state, "cache", None) is None:
        return JSONResponse(
            status_code=503,
            content={"ready": False, "reason": "Cache not initialized"}
        )

    return {
        "ready": True,
        "service": settings.API_TITLE
    }


@app.get("/", tags=["root"])
async def root():
    return {
        "message": "Auto Quote API Server",
        "version": settings.API_VERSION,
        "docs": "/docs",
        "health": "/health",
        "metrics": "/metrics",
        "endpoints": {
            "GET /api/quotes": "API information and available endpoints",
            "POST /api/quotes": "Get quotes for a vehicle",
            "GET /api/quotes/vehicle/{vin}": "Get vehicle details from VIN",
            "GET /api/quotes/products": "Get available product types",
        }
    }
