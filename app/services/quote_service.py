"""Quote request pipeline: cache lookup, eligibility, aggregation, cache write"""
import json
import logging
from typing import Optional

from app.core.cache import CacheBackend
from app.core.config import settings
from app.core.errors import ApiError
from app.core.metrics import cache_hits, cache_misses
from app.schemas.quote import (
    CustomerInfo,
    DealerInfo,
    QuoteOptions,
    QuoteRequest,
    QuoteRequestIn,
    VehicleInfo,
)
from app.services.aggregator import QuoteAggregator, build_ineligible_envelope
from app.services.restrictions import split_products
from app.services.vehicle import get_state_from_zip, get_vehicle_details
from app.utils.fingerprint import quote_fingerprint

logger = logging.getLogger(__name__)

CACHE_NAME = "quotes"


def serialize_envelope(envelope: dict) -> str:
    return json.dumps(envelope, separators=(",", ":"))


class QuoteService:
    def __init__(self, cache: CacheBackend, aggregator: QuoteAggregator, ttl: Optional[int] = None):
        self.cache = cache
        self.aggregator = aggregator
        self.ttl = settings.QUOTE_CACHE_TTL if ttl is None else ttl

    async def _cache_get(self, key: str) -> Optional[str]:
        try:
            cached = await self.cache.get(key)
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")
            return None
        if cached is None:
            cache_misses.labels(cache=CACHE_NAME).inc()
        else:
            cache_hits.labels(cache=CACHE_NAME).inc()
        return cached

    async def _cache_set(self, key: str, value: str) -> None:
        try:
            await self.cache.set(key, value, self.ttl)
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    async def get_quotes(self, payload: QuoteRequestIn) -> str:
        """Return the quote envelope for a request as JSON text."""
        cache_key = quote_fingerprint(
            payload.vin,
            payload.zip,
            payload.mileage,
            payload.price,
            payload.products,
            payload.dealer_id,
        )
        cached = await self._cache_get(cache_key)
        if cached is not None:
            return cached

        vehicle = await get_vehicle_details(payload.vin)
        if vehicle is None:
            raise ApiError.bad_request("Invalid VIN or vehicle details not found")

        state = await get_state_from_zip(payload.zip)
        available, restricted = split_products(payload.products, state)

        if not available:
            logger.info(f"No products available for {payload.vin} in {state}")
            return serialize_envelope(build_ineligible_envelope(restricted, state))

        request = QuoteRequest(
            vehicle=VehicleInfo(
                vin=payload.vin,
                year=vehicle.year,
                make=vehicle.make,
                model=vehicle.model,
                trim=vehicle.trim,
                mileage=payload.mileage,
            ),
            customer=CustomerInfo(zip=payload.zip, state=state),
            dealer=(
                DealerInfo(id=payload.dealer_id, name="Dealer Partner")
                if payload.dealer_id
                else DealerInfo()
            ),
            options=QuoteOptions(
                price=payload.price,
                products=tuple(available),
            ),
        )

        envelope = await self.aggregator.aggregate(request, restricted)
        body = serialize_envelope(envelope)
        await self._cache_set(cache_key, body)
        return body
