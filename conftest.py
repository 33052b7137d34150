import pytest
from httpx import AsyncClient, ASGITransport

from app.main import app
from app.api.deps import get_aggregator, get_cache
from app.core.cache import MemoryCache
from app.core.enums import ProductType
from app.schemas.quote import (
    CustomerInfo,
    DealerInfo,
    QuoteOptions,
    QuoteRequest,
    VehicleInfo,
)
from app.services.aggregator import QuoteAggregator
from app.services.providers import ProviderClient, default_registry

# Model year code "R" decodes to 2024, make "H" to Honda, model "CIV" to Civic
TEST_VIN = "1HGCIV82XRA123456"
TEST_YEAR = 2026


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_cache(clock):
    return MemoryCache(clock=clock)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def provider_client():
    return ProviderClient(simulated_delay=0, current_year=TEST_YEAR)


@pytest.fixture
def aggregator(registry, provider_client):
    return QuoteAggregator(registry, provider_client, timeout=1.0)


@pytest.fixture
def override_dependencies(memory_cache, aggregator):
    app.dependency_overrides[get_cache] = lambda: memory_cache
    app.dependency_overrides[get_aggregator] = lambda: aggregator
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def test_client(override_dependencies):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def valid_quote_payload():
    return {
        "vin": TEST_VIN,
        "zip": "30301",
        "mileage": 30000,
        "price": 25000,
        "products": ["vsc", "gap", "tire", "dent"],
    }


@pytest.fixture
def make_quote_request():
    def _make(
        products=(ProductType.VSC,),
        year=2024,
        mileage=30000,
        price=25000.0,
        state="FL",
        dealer_id=None,
    ):
        return QuoteRequest(
            vehicle=VehicleInfo(
                vin=TEST_VIN,
                year=year,
                make="Honda",
                model="Civic",
                trim="XLT",
                mileage=mileage,
            ),
            customer=CustomerInfo(zip="30301", state=state),
            dealer=DealerInfo(id=dealer_id, name="Dealer Partner") if dealer_id else DealerInfo(),
            options=QuoteOptions(price=price, products=tuple(products)),
        )

    return _make


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to quote pricing rules"
    )
    config.addinivalue_line(
        "markers", "cache: marks tests related to response caching"
    )
    config.addinivalue_line(
        "markers", "rate_limit: marks tests related to rate limiting"
    )
    config.addinivalue_line(
        "markers", "auth: marks tests related to authentication"
    )
