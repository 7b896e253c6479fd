import logging
from time import perf_counter

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database.connection import get_db
from app.schemas.common import ApiResponse
from app.schemas.pricing import (
    BundlePriceBreakdown,
    BundlePriceRequest,
    CompetitorCompareRequest,
    CompetitorComparison,
    PriceBreakdown,
    PriceCalculationRequest,
)
from app.services.pricing_service.calculate_price import (
    calculate_bundle_price,
    calculate_price,
    compare_competitors,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pricing", tags=["Pricing & Calculation"])


def _warn_if_slow(label: str, started: float) -> float:
    duration_ms = (perf_counter() - started) * 1000.0
    if duration_ms > settings.SLOW_PRICE_CALCULATION_MS:
        logger.warning("%s took %.2f ms", label, duration_ms)
    return duration_ms


@router.post("/calculate", response_model=ApiResponse[PriceBreakdown])
def calculate(request: PriceCalculationRequest, db: Session = Depends(get_db)):
    """
    Price a quantity of one product. Discounts stack in a fixed order:

    1. Bulk (quantity threshold)
    2. Promotion (date window)
    3. Category
    4. Customer tier (only with customer_id)
    """
    start = perf_counter()
    breakdown = calculate_price(
        db,
        product_id=request.product_id,
        quantity=request.quantity,
        customer_id=request.customer_id,
    )
    _warn_if_slow(
        f"Price calculation for product {request.product_id} (quantity={request.quantity})",
        start,
    )
    return {"success": True, "data": breakdown}


@router.post("/calculate-bundle", response_model=ApiResponse[BundlePriceBreakdown])
def calculate_bundle(request: BundlePriceRequest, db: Session = Depends(get_db)):
    start = perf_counter()
    breakdown = calculate_bundle_price(db, request.items)
    _warn_if_slow(f"Bundle calculation for {len(request.items)} items", start)
    return {"success": True, "data": breakdown}


@router.post("/compare", response_model=ApiResponse[CompetitorComparison])
def compare(request: CompetitorCompareRequest, db: Session = Depends(get_db)):
    comparison = compare_competitors(db, request.product_id, request.competitor_prices)
    return {"success": True, "data": comparison}
