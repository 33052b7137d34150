"""Quote endpoints: aggregated quotes, VIN lookup and the product catalog"""
import logging
from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.deps import enforce_rate_limit, get_quote_service
from app.core.enums import ProductType
from app.core.errors import ApiError
from app.core.security import verify_token
from app.schemas.quote import ProductDescriptor, QuoteRequestIn
from app.schemas.vehicle import VehicleDetails
from app.services.quote_service import QuoteService
from app.services.vehicle import VIN_LENGTH, get_vehicle_details

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/api/quotes",
    tags=["quotes"],
    dependencies=[Depends(enforce_rate_limit), Depends(verify_token)],
)

PRODUCT_CATALOG = [
    ProductDescriptor(
        id=ProductType.VSC,
        name="Vehicle Service Contract",
        description="Covers mechanical breakdowns and repairs after the manufacturer's warranty expires.",
    ),
    ProductDescriptor(
        id=ProductType.GAP,
        name="GAP Insurance",
        description="Covers the difference between what you owe on your vehicle and what it's worth if it's totaled.",
    ),
    ProductDescriptor(
        id=ProductType.TIRE,
        name="Tire & Wheel Protection",
        description="Covers damage to tires and wheels from road hazards.",
    ),
    ProductDescriptor(
        id=ProductType.DENT,
        name="Dent & Ding Protection",
        description="Covers minor dents and dings on your vehicle.",
    ),
]


@router.get("")
async def quotes_info():
    return {
        "message": "Auto Quote API is running",
        "endpoints": {
            "GET /api/quotes": "This endpoint (API information)",
            "POST /api/quotes": "Get quotes for a vehicle",
            "GET /api/quotes/vehicle/{vin}": "Get vehicle details from VIN",
            "GET /api/quotes/products": "Get available product types",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("")
async def get_quotes(
    payload: QuoteRequestIn,
    service: QuoteService = Depends(get_quote_service),
):
    body = await service.get_quotes(payload)
    return Response(content=body, media_type="application/json")


@router.get("/vehicle/{vin}", response_model=VehicleDetails)
async def get_vehicle(vin: str):
    logger.info(f"Vehicle details request for VIN: {vin}")

    if vin == ":vin":
        raise ApiError.bad_request("Invalid VIN format - received placeholder instead of actual VIN")

    if len(vin) != VIN_LENGTH:
        raise ApiError.bad_request(f"Invalid VIN length: {len(vin)} (expected {VIN_LENGTH})")

    vehicle = await get_vehicle_details(vin)
    if vehicle is None:
        logger.error(f"Vehicle details not found for VIN: {vin}")
        raise ApiError.not_found("Vehicle details not found")

    return vehicle


@router.get("/products", response_model=List[ProductDescriptor])
async def get_products():
    return PRODUCT_CATALOG
