import logging
from fastapi import Depends, Request

from app.core.cache import CacheBackend, MemoryCache
from app.core.rate_limit import check_rate_limit
from app.services.aggregator import QuoteAggregator
from app.services.providers import ProviderRegistry, default_registry
from app.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


def get_cache(request: Request) -> CacheBackend:
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        logger.warning("No cache backend configured, using in-memory cache")
        cache = MemoryCache()
        request.app.state.cache = cache
    return cache


def get_registry(request: Request) -> ProviderRegistry:
    registry = getattr(request.app.state, "registry", None)
    if registry is None:
        registry = default_registry()
        request.app.state.registry = registry
    return registry


def get_aggregator(registry: ProviderRegistry = Depends(get_registry)) -> QuoteAggregator:
    return QuoteAggregator(registry)


def get_quote_service(
    cache: CacheBackend = Depends(get_cache),
    aggregator: QuoteAggregator = Depends(get_aggregator),
) -> QuoteService:
    return QuoteService(cache, aggregator)


async def enforce_rate_limit(request: Request, cache: CacheBackend = Depends(get_cache)):
    client_id = request.client.host if request.client else "unknown"
    await check_rate_limit(cache, client_id)
