"""Fan quote requests out to providers and merge the answers into one envelope"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from app.core.config import settings
from app.core.enums import ProductType, ProviderCallStatus, QuoteTag, VehicleEligibility
from app.core.metrics import provider_calls, track_provider_call
from app.schemas.provider import ProviderConfig
from app.schemas.quote import AggregatedQuote, QuoteRequest, RawQuote
from app.services.providers import ProviderClient, ProviderRegistry
from app.utils.money import round_half_up

logger = logging.getLogger(__name__)

COVERAGE_DISCLAIMER = "Coverage is subject to terms and conditions of the service contract."
INELIGIBLE_DISCLAIMER = "No products available in your state."
DIRECT_DEALER_ID = "direct"


@dataclass
class ProviderResult:
    provider: ProviderConfig
    status: ProviderCallStatus
    quotes: List[RawQuote] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ProviderCallStatus.SUCCESS


def apply_markup(raw: RawQuote, provider: ProviderConfig) -> AggregatedQuote:
    return AggregatedQuote(
        id=raw.product_id,
        provider=raw.provider.name,
        name=raw.name,
        description=raw.description,
        term=raw.term.months,
        mileage=raw.term.miles,
        deductible=raw.deductible,
        price=round_half_up(raw.retail_price * provider.markup, 2),
        coverage=raw.coverage,
        exclusions=raw.exclusions,
        sample_contract_url=raw.sample_contract_url,
    )


def rank_and_tag(quotes: List[AggregatedQuote], dealer_id: str) -> List[AggregatedQuote]:
    """Sort a bucket by price and tag its notable entries in place."""
    if not quotes:
        return quotes

    quotes.sort(key=lambda q: q.price)

    quotes[0].tags.append(QuoteTag.BEST_VALUE.value)
    quotes[min(1, len(quotes) - 1)].tags.append(QuoteTag.MOST_POPULAR.value)

    if dealer_id != DIRECT_DEALER_ID and len(quotes) > 2:
        quotes[2].tags.append(QuoteTag.DEALER_RECOMMENDED.value)

    return quotes


def state_restrictions_meta(restricted: Sequence[ProductType], state: str) -> dict:
    if not restricted:
        return {}
    return {
        "restricted_products": [str(p) for p in restricted],
        "state": state,
    }


def build_envelope(
    buckets: Dict[ProductType, List[AggregatedQuote]],
    restricted: Sequence[ProductType],
    state: str,
) -> dict:
    envelope: dict = {
        str(product): [q.model_dump(mode="json") for q in quotes]
        for product, quotes in buckets.items()
    }
    envelope["meta"] = {
        "vehicle_eligibility": VehicleEligibility.ELIGIBLE.value,
        "coverage_disclaimer": COVERAGE_DISCLAIMER,
        "state_restrictions": state_restrictions_meta(restricted, state),
    }
    return envelope


def build_ineligible_envelope(restricted: Sequence[ProductType], state: str) -> dict:
    return {
        "meta": {
            "vehicle_eligibility": VehicleEligibility.INELIGIBLE.value,
            "coverage_disclaimer": INELIGIBLE_DISCLAIMER,
            "state_restrictions": {
                "restricted_products": [str(p) for p in restricted],
                "state": state,
            },
        }
    }


class QuoteAggregator:
    def __init__(
        self,
        registry: ProviderRegistry,
        client: Optional[ProviderClient] = None,
        timeout: Optional[float] = None,
    ):
        self.registry = registry
        self.client = client or ProviderClient()
        self.timeout = settings.PROVIDER_TIMEOUT if timeout is None else timeout

    async def _call_provider(self, provider: ProviderConfig, request: QuoteRequest) -> ProviderResult:
        with track_provider_call(provider.id):
            try:
                quotes = await asyncio.wait_for(
                    self.client.fetch_quotes(provider, request), timeout=self.timeout
                )
                result = ProviderResult(provider, ProviderCallStatus.SUCCESS, list(quotes))
            except asyncio.TimeoutError:
                logger.warning(f"Provider {provider.id} timed out after {self.timeout}s")
                result = ProviderResult(provider, ProviderCallStatus.TIMEOUT, error="timeout")
            except Exception as e:
                logger.warning(f"Error getting quotes from provider {provider.id}: {e}")
                result = ProviderResult(provider, ProviderCallStatus.FAILURE, error=str(e))

        provider_calls.labels(provider=provider.id, status=result.status.value).inc()
        return result

    async def fan_out(self, request: QuoteRequest) -> List[ProviderResult]:
        """Call every eligible provider concurrently and wait for all of them to settle"""
        eligible = self.registry.eligible_for(request.options.products)
        return list(await asyncio.gather(
            *(self._call_provider(provider, request) for provider in eligible)
        ))

    @staticmethod
    def merge(
        results: Sequence[ProviderResult], products: Sequence[ProductType]
    ) -> Dict[ProductType, List[AggregatedQuote]]:
        buckets: Dict[ProductType, List[AggregatedQuote]] = {p: [] for p in products}
        for result in results:
            if not result.ok:
                continue
            for raw in result.quotes:
                if raw.product_type in buckets:
                    buckets[raw.product_type].append(apply_markup(raw, result.provider))
        return buckets

    async def aggregate(
        self,
        request: QuoteRequest,
        restricted: Sequence[ProductType] = (),
    ) -> dict:
        results = await self.fan_out(request)
        buckets = self.merge(results, request.options.products)
        for quotes in buckets.values():
            rank_and_tag(quotes, request.dealer.id)
        return build_envelope(buckets, restricted, request.customer.state)
