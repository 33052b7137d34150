"""Provider registry and the simulated provider client"""
import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from app.core.config import settings
from app.core.enums import ProductType
from app.schemas.provider import ProviderConfig
from app.schemas.quote import QuoteRequest, RawQuote
from app.services.quote_rules import QUOTE_RULES

logger = logging.getLogger(__name__)

DEFAULT_PROVIDERS = [
    ProviderConfig(
        id="providerA",
        name="Provider A",
        products=frozenset({ProductType.VSC, ProductType.GAP}),
        markup=1.2,
        priority=1,
    ),
    ProviderConfig(
        id="providerB",
        name="Provider B",
        products=frozenset({ProductType.VSC, ProductType.TIRE, ProductType.DENT}),
        markup=1.15,
        priority=2,
    ),
    ProviderConfig(
        id="providerC",
        name="Provider C",
        products=frozenset({ProductType.GAP}),
        markup=1.25,
        priority=3,
    ),
    ProviderConfig(
        id="providerD",
        name="Provider D",
        products=frozenset({ProductType.TIRE, ProductType.DENT}),
        markup=1.3,
        priority=4,
    ),
]


class ProviderRegistry:
    """Read-only lookup of configured providers, ordered by priority"""

    def __init__(self, providers: Iterable[ProviderConfig]):
        ordered = sorted(providers, key=lambda p: p.priority)
        self._providers: Dict[str, ProviderConfig] = {p.id: p for p in ordered}

    def __iter__(self):
        return iter(self._providers.values())

    def __len__(self) -> int:
        return len(self._providers)

    def get(self, provider_id: str) -> Optional[ProviderConfig]:
        return self._providers.get(provider_id)

    def eligible_for(self, products: Iterable[ProductType]) -> List[ProviderConfig]:
        requested = set(products)
        return [p for p in self._providers.values() if p.products & requested]


def default_registry() -> ProviderRegistry:
    return ProviderRegistry(DEFAULT_PROVIDERS)


class ProviderClient:
    """Generates a provider's quotes locally instead of calling its API."""

    def __init__(self, simulated_delay: Optional[float] = None, current_year: Optional[int] = None):
        self.simulated_delay = settings.PROVIDER_SIMULATED_DELAY if simulated_delay is None else simulated_delay
        self.current_year = current_year

    async def fetch_quotes(self, provider: ProviderConfig, request: QuoteRequest) -> List[RawQuote]:
        if self.simulated_delay > 0:
            await asyncio.sleep(self.simulated_delay)

        quotes: List[RawQuote] = []
        for product in request.options.products:
            if not provider.supports(product):
                continue
            quotes.extend(QUOTE_RULES[product](provider, request, self.current_year))

        logger.debug(f"{provider.id} returned {len(quotes)} quotes")
        return quotes
