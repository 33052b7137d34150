from typing import Dict, FrozenSet, Iterable, List, Tuple
from app.core.enums import ProductType

STATE_RESTRICTIONS: Dict[ProductType, FrozenSet[str]] = {
    ProductType.GAP: frozenset({"NY", "CA"}),
    ProductType.VSC: frozenset(),
}


def is_restricted(product: ProductType, state: str) -> bool:
    return state in STATE_RESTRICTIONS.get(product, frozenset())


def split_products(
    products: Iterable[ProductType], state: str
) -> Tuple[List[ProductType], List[ProductType]]:
    """Partition requested products into (available, restricted), keeping request order.

    Repeated products are only counted once.
    """
    available: List[ProductType] = []
    restricted: List[ProductType] = []
    for product in dict.fromkeys(products):
        if is_restricted(product, state):
            restricted.append(product)
        else:
            available.append(product)
    return available, restricted
