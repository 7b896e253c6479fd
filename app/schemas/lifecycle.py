from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.enums.lifecycle_states import LifecycleState
from app.schemas.product import ProductResponse


class TransitionRequest(BaseModel):
    new_state: LifecycleState
    notes: Optional[str] = None


class LifecycleActionRequest(BaseModel):
    notes: Optional[str] = None


class BulkApproveRequest(BaseModel):
    product_ids: List[int] = Field(min_length=1)
    notes: str = "Bulk approval"


class BulkApproveItem(BaseModel):
    product_id: int
    success: bool
    product: Optional[ProductResponse] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


class BulkApproveResult(BaseModel):
    success_count: int
    failure_count: int
    results: List[BulkApproveItem]


class LifecycleHistoryResponse(BaseModel):
    id: int
    product_id: int
    old_state: Optional[str] = None
    new_state: str
    changed_by: str
    changed_at: datetime
    notes: Optional[str] = None

    class Config:
        from_attributes = True


class PendingApprovalResponse(ProductResponse):
    history_count: int = 0


class LifecycleStatsResponse(BaseModel):
    counts: Dict[str, int]
    total: int
