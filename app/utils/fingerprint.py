from typing import Iterable, Optional, Union
from app.core.config import settings


def _format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def quote_fingerprint(
    vin: str,
    zip_code: str,
    mileage: Union[int, float],
    price: Union[int, float],
    products: Iterable[str],
    dealer_id: Optional[str] = None,
    prefix: Optional[str] = None,
) -> str:
    """Cache key for a quote request. Product order is part of the key."""
    parts = [
        prefix or settings.QUOTE_CACHE_PREFIX,
        vin,
        zip_code,
        _format_number(mileage),
        _format_number(price),
        ",".join(str(p) for p in products),
        dealer_id or "none",
    ]
    return ":".join(parts)
