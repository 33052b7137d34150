from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Tuple
from app.core.enums import ProductType


class QuoteRequestIn(BaseModel):
    vin: str = Field(..., min_length=17, max_length=17)
    zip: str = Field(..., pattern=r"^\d{5}$")
    mileage: int = Field(..., ge=0)
    price: float = Field(..., ge=0)
    products: List[ProductType]
    dealer_id: Optional[str] = None


class VehicleInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    vin: str
    year: int
    make: str
    model: str
    trim: str
    mileage: int


class CustomerInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    zip: str
    state: str


class DealerInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = "direct"
    name: str = "Direct Consumer"


class QuoteOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: float
    products: Tuple[ProductType, ...]


class QuoteRequest(BaseModel):
    """Normalized request handed to every provider"""
    model_config = ConfigDict(frozen=True)

    vehicle: VehicleInfo
    customer: CustomerInfo
    dealer: DealerInfo
    options: QuoteOptions


class ProviderDescriptor(BaseModel):
    id: str
    name: str
    logo_url: str


class Term(BaseModel):
    months: int
    miles: Optional[int] = None


class RawQuote(BaseModel):
    product_type: ProductType
    product_id: str
    provider: ProviderDescriptor
    name: str
    description: str
    term: Term
    deductible: int
    retail_price: float
    dealer_cost: float
    coverage: Dict[str, Any]
    exclusions: List[str]
    sample_contract_url: str


class AggregatedQuote(BaseModel):
    id: str
    provider: str
    name: str
    description: str
    term: int
    mileage: Optional[int] = None
    deductible: int
    price: float
    coverage: Dict[str, Any]
    exclusions: List[str]
    sample_contract_url: str
    tags: List[str] = Field(default_factory=list)


class ProductDescriptor(BaseModel):
    id: ProductType
    name: str
    description: str
