import asyncio

import pytest
from app.core.enums import ProductType, ProviderCallStatus, QuoteTag
from app.schemas.quote import AggregatedQuote
from app.services.aggregator import (
    QuoteAggregator,
    build_ineligible_envelope,
    rank_and_tag,
)
from app.services.providers import ProviderClient
from app.utils.money import round_half_up

TEST_YEAR = 2026


class FailingClient(ProviderClient):
    """Raises for the given providers, answers normally for the rest"""

    def __init__(self, failing_ids, **kwargs):
        super().__init__(simulated_delay=0, current_year=TEST_YEAR, **kwargs)
        self.failing_ids = set(failing_ids)
        self.calls = []

    async def fetch_quotes(self, provider, request):
        self.calls.append(provider.id)
        if provider.id in self.failing_ids:
            raise ConnectionError(f"{provider.id} unavailable")
        return await super().fetch_quotes(provider, request)


class SlowClient(ProviderClient):
    def __init__(self, slow_ids):
        super().__init__(simulated_delay=0, current_year=TEST_YEAR)
        self.slow_ids = set(slow_ids)

    async def fetch_quotes(self, provider, request):
        if provider.id in self.slow_ids:
            await asyncio.sleep(5)
        return await super().fetch_quotes(provider, request)


def _quote(price: float, qid: str = "q") -> AggregatedQuote:
    return AggregatedQuote(
        id=qid,
        provider="Provider",
        name="Quote",
        description="",
        term=36,
        mileage=None,
        deductible=0,
        price=price,
        coverage={},
        exclusions=[],
        sample_contract_url="",
    )


class TestEligibility:

    def test_providers_without_matching_products_are_skipped(self, registry):
        eligible = registry.eligible_for([ProductType.GAP])
        assert [p.id for p in eligible] == ["providerA", "providerC"]

    def test_eligible_providers_ordered_by_priority(self, registry):
        eligible = registry.eligible_for([ProductType.DENT, ProductType.VSC])
        assert [p.id for p in eligible] == ["providerA", "providerB", "providerD"]

    def test_no_products_no_providers(self, registry):
        assert registry.eligible_for([]) == []

    @pytest.mark.asyncio
    async def test_ineligible_providers_never_called(self, registry, make_quote_request):
        client = FailingClient(failing_ids=[])
        aggregator = QuoteAggregator(registry, client, timeout=1.0)

        await aggregator.aggregate(make_quote_request(products=[ProductType.TIRE]))

        assert sorted(client.calls) == ["providerB", "providerD"]


class TestFanOut:

    @pytest.mark.asyncio
    async def test_failed_provider_contributes_nothing(self, registry, make_quote_request):
        aggregator = QuoteAggregator(registry, FailingClient(["providerA"]), timeout=1.0)
        request = make_quote_request(products=[ProductType.VSC, ProductType.GAP])

        results = await aggregator.fan_out(request)
        by_id = {r.provider.id: r for r in results}

        assert by_id["providerA"].status == ProviderCallStatus.FAILURE
        assert by_id["providerA"].quotes == []
        assert "unavailable" in by_id["providerA"].error
        assert by_id["providerB"].ok
        assert by_id["providerC"].ok

        envelope = await aggregator.aggregate(request)
        assert {q["provider"] for q in envelope["vsc"]} == {"Provider B"}
        assert {q["provider"] for q in envelope["gap"]} == {"Provider C"}

    @pytest.mark.asyncio
    async def test_all_providers_failing_yields_empty_buckets(self, registry, make_quote_request):
        aggregator = QuoteAggregator(
            registry, FailingClient(["providerA", "providerB", "providerC", "providerD"]), timeout=1.0
        )
        envelope = await aggregator.aggregate(make_quote_request(products=[ProductType.VSC]))

        assert envelope["vsc"] == []
        assert envelope["meta"]["vehicle_eligibility"] == "eligible"

    @pytest.mark.asyncio
    async def test_timed_out_provider_is_captured(self, registry, make_quote_request):
        aggregator = QuoteAggregator(registry, SlowClient(["providerD"]), timeout=0.05)
        request = make_quote_request(products=[ProductType.DENT])

        results = await aggregator.fan_out(request)
        by_id = {r.provider.id: r for r in results}

        assert by_id["providerD"].status == ProviderCallStatus.TIMEOUT
        assert by_id["providerD"].quotes == []
        assert len(by_id["providerB"].quotes) == 1


class TestMerge:

    @pytest.mark.asyncio
    async def test_markup_applied_to_every_quote(self, aggregator, registry, make_quote_request):
        request = make_quote_request(products=list(ProductType))
        results = await aggregator.fan_out(request)
        buckets = aggregator.merge(results, request.options.products)

        by_id = {}
        for result in results:
            for raw in result.quotes:
                by_id[raw.product_id] = (raw, result.provider)

        for quotes in buckets.values():
            for quote in quotes:
                raw, provider = by_id[quote.id]
                assert quote.price == round_half_up(raw.retail_price * provider.markup, 2)
                assert quote.provider == provider.name

    @pytest.mark.asyncio
    async def test_quotes_for_unrequested_products_dropped(self, aggregator, make_quote_request):
        request = make_quote_request(products=[ProductType.TIRE])
        results = await aggregator.fan_out(request)
        buckets = aggregator.merge(results, [ProductType.TIRE])

        assert list(buckets) == [ProductType.TIRE]
        assert len(buckets[ProductType.TIRE]) == 4

    @pytest.mark.asyncio
    async def test_display_record_shape(self, aggregator, make_quote_request):
        envelope = await aggregator.aggregate(make_quote_request(products=[ProductType.DENT]))
        quote = envelope["dent"][0]

        assert list(quote) == [
            "id", "provider", "name", "description", "term", "mileage", "deductible",
            "price", "coverage", "exclusions", "sample_contract_url", "tags",
        ]
        assert quote["id"] == "providerB_dent_repair"
        assert quote["term"] == 36
        assert quote["mileage"] is None


class TestRankAndTag:

    def test_bucket_sorted_by_price(self):
        quotes = rank_and_tag([_quote(300, "c"), _quote(100, "a"), _quote(200, "b")], "direct")
        assert [q.id for q in quotes] == ["a", "b", "c"]

    def test_ties_keep_original_order(self):
        quotes = rank_and_tag([_quote(100, "first"), _quote(100, "second")], "direct")
        assert [q.id for q in quotes] == ["first", "second"]

    def test_single_quote_gets_both_tags(self):
        quotes = rank_and_tag([_quote(100)], "direct")
        assert quotes[0].tags == [QuoteTag.BEST_VALUE.value, QuoteTag.MOST_POPULAR.value]

    def test_direct_customer_never_gets_dealer_tag(self):
        quotes = rank_and_tag([_quote(p) for p in (1, 2, 3, 4)], "direct")
        assert quotes[0].tags == ["Best Value"]
        assert quotes[1].tags == ["Most Popular"]
        assert all(q.tags == [] for q in quotes[2:])

    def test_dealer_recommended_on_third_quote(self):
        quotes = rank_and_tag([_quote(p) for p in (4, 3, 2, 1)], "dealer-42")
        tagged = [i for i, q in enumerate(quotes) if "Dealer Recommended" in q.tags]
        assert tagged == [2]

    def test_dealer_tag_needs_more_than_two_quotes(self):
        quotes = rank_and_tag([_quote(1), _quote(2)], "dealer-42")
        assert all("Dealer Recommended" not in q.tags for q in quotes)

    def test_empty_bucket_untouched(self):
        assert rank_and_tag([], "dealer-42") == []

    @pytest.mark.asyncio
    async def test_buckets_sorted_in_envelope(self, aggregator, make_quote_request):
        envelope = await aggregator.aggregate(
            make_quote_request(products=list(ProductType), dealer_id="dealer-42")
        )
        for product in ("vsc", "gap", "tire", "dent"):
            prices = [q["price"] for q in envelope[product]]
            assert prices == sorted(prices)

        vsc = envelope["vsc"]
        assert vsc[0]["price"] == pytest.approx(845.25)
        assert vsc[2]["tags"] == ["Dealer Recommended"]


class TestEnvelopes:

    @pytest.mark.asyncio
    async def test_meta_without_restrictions(self, aggregator, make_quote_request):
        envelope = await aggregator.aggregate(make_quote_request(products=[ProductType.TIRE]))

        assert list(envelope) == ["tire", "meta"]
        assert envelope["meta"] == {
            "vehicle_eligibility": "eligible",
            "coverage_disclaimer": "Coverage is subject to terms and conditions of the service contract.",
            "state_restrictions": {},
        }

    @pytest.mark.asyncio
    async def test_meta_with_restrictions(self, aggregator, make_quote_request):
        envelope = await aggregator.aggregate(
            make_quote_request(products=[ProductType.VSC], state="CA"),
            restricted=[ProductType.GAP],
        )
        assert "gap" not in envelope
        assert envelope["meta"]["state_restrictions"] == {
            "restricted_products": ["gap"],
            "state": "CA",
        }

    def test_ineligible_envelope(self):
        envelope = build_ineligible_envelope([ProductType.GAP], "NY")
        assert envelope == {
            "meta": {
                "vehicle_eligibility": "ineligible",
                "coverage_disclaimer": "No products available in your state.",
                "state_restrictions": {"restricted_products": ["gap"], "state": "NY"},
            }
        }
