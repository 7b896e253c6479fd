from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PriceCalculationRequest(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    customer_id: Optional[int] = None


class AppliedDiscount(BaseModel):
    type: str  # bulk / promotion / category / customer_tier
    rule: str
    percentage: float
    amount: float  # per-unit step discount scaled by quantity


class PriceBreakdown(BaseModel):
    product_id: int
    product_name: str
    sku: str
    quantity: int
    base_price: float
    price_per_unit: float
    subtotal: float
    total_discount: float
    final_total: float
    applied_discounts: List[AppliedDiscount] = []
    calculated_at: datetime


class BundleItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)
    customer_id: Optional[int] = None


class BundlePriceRequest(BaseModel):
    items: List[BundleItem] = Field(min_length=1)


class BundlePriceBreakdown(BaseModel):
    items: List[PriceBreakdown]
    subtotal: float
    item_discounts: float
    bundle_discount: float
    bundle_discount_percentage: float
    final_total: float
    calculated_at: datetime


class CompetitorPrice(BaseModel):
    name: str
    price: float = Field(gt=0)


class CompetitorCompareRequest(BaseModel):
    product_id: int
    competitor_prices: List[CompetitorPrice] = []


class CompetitorDifference(BaseModel):
    competitor: str
    price: float
    difference: float
    percentage_diff: float


class CompetitorComparison(BaseModel):
    product_id: int
    our_price: float
    competitors: List[CompetitorDifference]
    positioning: str  # lowest / premium / competitive / no_comparison
