from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime

from app.enums.rule_types import RuleType

class PricingRuleBase(BaseModel):
    rule_name: str = Field(min_length=1, max_length=255)
    rule_type: RuleType
    product_id: Optional[int] = None
    category_id: Optional[int] = None
    min_quantity: int = Field(default=1, ge=1)
    discount_percentage: float = Field(ge=0, le=100)
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None

class PricingRuleCreate(PricingRuleBase):
    pass

class PricingRuleUpdate(BaseModel):
    rule_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    discount_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    min_quantity: Optional[int] = Field(default=None, ge=1)
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None
    is_active: Optional[bool] = None

class PricingRuleResponse(PricingRuleBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
