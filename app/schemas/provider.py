from pydantic import BaseModel, ConfigDict, Field
from typing import FrozenSet
from app.core.enums import ProductType


class ProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    products: FrozenSet[ProductType]
    markup: float = Field(1.0, ge=1.0)
    priority: int

    def supports(self, product: ProductType) -> bool:
        return product in self.products
