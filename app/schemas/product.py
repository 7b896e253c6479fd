from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

class ProductBase(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category_id: Optional[int] = Field(default=None, gt=0)
    size: Optional[str] = Field(default=None, max_length=20)
    color: Optional[str] = Field(default=None, max_length=50)
    unit_price: float = Field(gt=0)
    attributes: Optional[Dict[str, Any]] = None

class ProductCreate(ProductBase):
    # generated as {CODE}-{YEAR}-{NNNN} when omitted
    sku: Optional[str] = Field(default=None, min_length=2, max_length=50)

class ProductUpdate(BaseModel):
    sku: Optional[str] = Field(default=None, min_length=2, max_length=50)
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    category_id: Optional[int] = Field(default=None, gt=0)
    size: Optional[str] = Field(default=None, max_length=20)
    color: Optional[str] = Field(default=None, max_length=50)
    unit_price: Optional[float] = Field(default=None, gt=0)
    attributes: Optional[Dict[str, Any]] = None

class ProductResponse(BaseModel):
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    category_id: Optional[int] = None
    size: Optional[str] = None
    color: Optional[str] = None
    unit_price: float
    attributes: Optional[Dict[str, Any]] = None
    lifecycle_state: str
    is_active: bool
    created_by: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ProductBatchRequest(BaseModel):
    ids: List[int] = Field(min_length=1)
