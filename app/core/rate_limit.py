import logging
from app.core.cache import CacheBackend
from app.core.config import settings
from app.core.errors import ApiError
from app.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)

async def check_rate_limit(cache: CacheBackend, client_id: str):
    key = f"rl:{client_id}"
    try:
        count = await cache.incr(key, settings.RATE_LIMIT_WINDOW)
    except Exception as e:
        logger.warning(f"Rate limit check skipped, cache unavailable: {e}")
        return
    if count > settings.RATE_LIMIT:
        rate_limit_exceeded.labels(client=client_id).inc()
        raise ApiError.too_many_requests(
            "Too many requests from this IP, please try again later"
        )
