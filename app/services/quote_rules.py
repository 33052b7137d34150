"""Per-product quote generation rules shared by every simulated provider.

Each rule takes the provider entry and the normalized request and returns the
raw (pre-markup) quotes that provider would offer for one product type. The
rules are deterministic: same inputs, same quotes.
"""
from datetime import date
from typing import Callable, Dict, List, Optional

from app.core.enums import ProductType
from app.schemas.provider import ProviderConfig
from app.schemas.quote import ProviderDescriptor, QuoteRequest, RawQuote, Term
from app.utils.money import round_price

MAX_VSC_AGE = 12
MAX_VSC_MILEAGE = 150000
AGE_FACTOR_STEP = 0.1
MILEAGE_FACTOR_STEP = 0.15
MILEAGE_FACTOR_UNIT = 20000
VSC_DEALER_COST_RATIO = 0.6

GAP_PRICE_RATIO = 0.02

VSC_TIERS = [
    {
        "tier": "premium",
        "name": "Premium Coverage",
        "description": "Comprehensive coverage for your vehicle",
        "max_age": 7,
        "max_mileage": 85000,
        "base_price": 800,
        "months": 36,
        "deductible": 100,
        "coverage": {
            "engine": True,
            "transmission": True,
            "drivetrain": True,
            "electrical": True,
            "steering": True,
            "suspension": True,
            "brakes": True,
            "air_conditioning": True,
            "fuel_system": True,
            "high_tech": True,
        },
        "exclusions": [
            "Normal wear and tear",
            "Maintenance items",
            "Pre-existing conditions",
        ],
    },
    {
        "tier": "standard",
        "name": "Standard Coverage",
        "description": "Essential coverage for your vehicle",
        "max_age": 10,
        "max_mileage": 100000,
        "base_price": 700,
        "months": 48,
        "deductible": 100,
        "coverage": {
            "engine": True,
            "transmission": True,
            "drivetrain": True,
            "electrical": True,
            "steering": True,
            "suspension": True,
            "brakes": True,
            "air_conditioning": True,
            "fuel_system": False,
            "high_tech": False,
        },
        "exclusions": [
            "Normal wear and tear",
            "Maintenance items",
            "Pre-existing conditions",
            "High-tech components",
        ],
    },
    {
        "tier": "basic",
        "name": "Basic Coverage",
        "description": "Basic powertrain coverage for your vehicle",
        "max_age": 12,
        "max_mileage": 120000,
        "base_price": 500,
        "months": 60,
        "deductible": 250,
        "coverage": {
            "engine": True,
            "transmission": True,
            "drivetrain": True,
            "electrical": False,
            "steering": True,
            "suspension": False,
            "brakes": True,
            "air_conditioning": False,
            "fuel_system": False,
            "high_tech": False,
        },
        "exclusions": [
            "Normal wear and tear",
            "Maintenance items",
            "Pre-existing conditions",
            "Electrical components",
            "High-tech components",
            "Suspension components",
        ],
    },
]

GAP_EXCLUSIONS = [
    "Commercial vehicles",
    "Exotic vehicles",
    "Vehicles over $100,000",
]

GAP_TIERS = [
    {
        "tier": "premium",
        "name": "Premium GAP",
        "description": "Comprehensive GAP coverage with insurance deductible coverage",
        "retail_ratio": 1.2,
        "dealer_ratio": 0.7,
        "coverage": {
            "loan_payoff": True,
            "insurance_deductible": True,
            "max_benefit": 10000,
        },
        "exclusions": GAP_EXCLUSIONS,
    },
    {
        "tier": "standard",
        "name": "Standard GAP",
        "description": "Basic GAP coverage",
        "retail_ratio": 1.0,
        "dealer_ratio": 0.6,
        "coverage": {
            "loan_payoff": True,
            "insurance_deductible": False,
            "max_benefit": 7500,
        },
        "exclusions": GAP_EXCLUSIONS + ["Insurance deductible"],
    },
]

TIRE_EXCLUSIONS = [
    "Racing or off-road use",
    "Cosmetic damage",
    "Pre-existing damage",
]

# Prices here do not depend on the vehicle or the purchase price.
FIXED_TIERS = {
    ProductType.TIRE: [
        {
            "slug": "tire_premium",
            "name": "Premium Tire & Wheel",
            "description": "Comprehensive tire and wheel protection with roadside assistance",
            "deductible": 0,
            "retail_price": 495,
            "dealer_cost": 295,
            "coverage": {
                "tire_replacement": True,
                "wheel_replacement": True,
                "roadside_assistance": True,
            },
            "exclusions": TIRE_EXCLUSIONS,
        },
        {
            "slug": "tire_basic",
            "name": "Basic Tire & Wheel",
            "description": "Basic tire and wheel protection",
            "deductible": 50,
            "retail_price": 395,
            "dealer_cost": 235,
            "coverage": {
                "tire_replacement": True,
                "wheel_replacement": False,
                "roadside_assistance": False,
            },
            "exclusions": TIRE_EXCLUSIONS + ["Wheel replacement", "Roadside assistance"],
        },
    ],
    ProductType.DENT: [
        {
            "slug": "dent_repair",
            "name": "Dent & Ding Protection",
            "description": "Paintless dent repair coverage",
            "deductible": 0,
            "retail_price": 395,
            "dealer_cost": 235,
            "coverage": {
                "paintless_dent_repair": True,
                "unlimited_repairs": True,
            },
            "exclusions": [
                "Dents larger than 4 inches",
                "Dents with paint damage",
                "Pre-existing damage",
            ],
        },
    ],
}

FIXED_TERM_MONTHS = 36


def provider_descriptor(provider: ProviderConfig) -> ProviderDescriptor:
    return ProviderDescriptor(
        id=provider.id,
        name=provider.name,
        logo_url=f"https://example.com/logos/{provider.id}.png",
    )


def contract_url(provider_id: str, slug: str) -> str:
    return f"https://example.com/contracts/{provider_id}_{slug}.pdf"


def generate_vsc_quotes(
    provider: ProviderConfig, request: QuoteRequest, current_year: Optional[int] = None
) -> List[RawQuote]:
    year = current_year if current_year is not None else date.today().year
    age = year - request.vehicle.year
    mileage = request.vehicle.mileage

    if age > MAX_VSC_AGE or mileage > MAX_VSC_MILEAGE:
        return []

    age_factor = 1 + age * AGE_FACTOR_STEP
    mileage_factor = 1 + (mileage / MILEAGE_FACTOR_UNIT) * MILEAGE_FACTOR_STEP

    quotes = []
    for tier in VSC_TIERS:
        if age > tier["max_age"] or mileage > tier["max_mileage"]:
            continue
        months = tier["months"]
        slug = f"{tier['tier']}_{months}_{months}"
        base_price = tier["base_price"] * age_factor * mileage_factor
        quotes.append(RawQuote(
            product_type=ProductType.VSC,
            product_id=f"{provider.id}_vsc_{slug}",
            provider=provider_descriptor(provider),
            name=tier["name"],
            description=tier["description"],
            term=Term(months=months, miles=months * 1000),
            deductible=tier["deductible"],
            retail_price=round_price(base_price),
            dealer_cost=round_price(base_price * VSC_DEALER_COST_RATIO),
            coverage=dict(tier["coverage"]),
            exclusions=list(tier["exclusions"]),
            sample_contract_url=contract_url(provider.id, slug),
        ))
    return quotes


def generate_gap_quotes(
    provider: ProviderConfig, request: QuoteRequest, current_year: Optional[int] = None
) -> List[RawQuote]:
    if not request.options.price:
        return []

    base_price = request.options.price * GAP_PRICE_RATIO

    quotes = []
    for tier in GAP_TIERS:
        slug = f"gap_{tier['tier']}"
        quotes.append(RawQuote(
            product_type=ProductType.GAP,
            product_id=f"{provider.id}_{slug}",
            provider=provider_descriptor(provider),
            name=tier["name"],
            description=tier["description"],
            term=Term(months=FIXED_TERM_MONTHS, miles=None),
            deductible=0,
            retail_price=round_price(base_price * tier["retail_ratio"]),
            dealer_cost=round_price(base_price * tier["dealer_ratio"]),
            coverage=dict(tier["coverage"]),
            exclusions=list(tier["exclusions"]),
            sample_contract_url=contract_url(provider.id, slug),
        ))
    return quotes


def _fixed_price_rule(product_type: ProductType) -> Callable[..., List[RawQuote]]:
    def generate(
        provider: ProviderConfig, request: QuoteRequest, current_year: Optional[int] = None
    ) -> List[RawQuote]:
        return [
            RawQuote(
                product_type=product_type,
                product_id=f"{provider.id}_{tier['slug']}",
                provider=provider_descriptor(provider),
                name=tier["name"],
                description=tier["description"],
                term=Term(months=FIXED_TERM_MONTHS, miles=None),
                deductible=tier["deductible"],
                retail_price=tier["retail_price"],
                dealer_cost=tier["dealer_cost"],
                coverage=dict(tier["coverage"]),
                exclusions=list(tier["exclusions"]),
                sample_contract_url=contract_url(provider.id, tier["slug"]),
            )
            for tier in FIXED_TIERS[product_type]
        ]
    generate.__name__ = f"generate_{product_type.value}_quotes"
    return generate


generate_tire_quotes = _fixed_price_rule(ProductType.TIRE)
generate_dent_quotes = _fixed_price_rule(ProductType.DENT)

QUOTE_RULES: Dict[ProductType, Callable[..., List[RawQuote]]] = {
    ProductType.VSC: generate_vsc_quotes,
    ProductType.GAP: generate_gap_quotes,
    ProductType.TIRE: generate_tire_quotes,
    ProductType.DENT: generate_dent_quotes,
}
