from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database.connection import get_db
from app.dependencies.auth import require_admin, require_staff
from app.enums.lifecycle_states import LifecycleState
from app.models.user import User
from app.schemas.common import ApiResponse, ListResponse
from app.schemas.lifecycle import (
    BulkApproveRequest,
    BulkApproveResult,
    LifecycleActionRequest,
    LifecycleHistoryResponse,
    LifecycleStatsResponse,
    PendingApprovalResponse,
    TransitionRequest,
)
from app.schemas.product import ProductCreate, ProductResponse
from app.services import lifecycle_service
from app.services.history_service import get_lifecycle_history
from app.services.product_service import create_product

router = APIRouter(prefix="/products", tags=["Product Lifecycle"])


# ---------- CREATION & TRANSITIONS ----------

@router.post("/lifecycle", response_model=ApiResponse[ProductResponse], status_code=201)
def create_draft(data: ProductCreate, db: Session = Depends(get_db), user: User = Depends(require_staff)):
    product = create_product(db, data, created_by=user.username)
    return {"success": True, "message": "Product created successfully in DRAFT state", "data": product}


@router.post("/{product_id}/transition", response_model=ApiResponse[ProductResponse])
def transition_state(
    product_id: int,
    body: TransitionRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    product = lifecycle_service.transition(db, product_id, body.new_state, user.username, body.notes)
    return {
        "success": True,
        "message": f"Product transitioned to {body.new_state.value} successfully",
        "data": product,
    }


# ---------- APPROVAL WORKFLOW ----------

@router.get("/pending-approvals", response_model=ListResponse[PendingApprovalResponse], dependencies=[Depends(require_admin)])
def pending_approvals(db: Session = Depends(get_db)):
    rows = lifecycle_service.get_pending_approvals(db)
    data = [
        PendingApprovalResponse(
            **ProductResponse.model_validate(row["product"]).model_dump(),
            history_count=row["history_count"],
        )
        for row in rows
    ]
    return {"success": True, "count": len(data), "data": data}


@router.post("/{product_id}/submit-for-approval", response_model=ApiResponse[ProductResponse])
def submit_for_approval(
    product_id: int,
    body: Optional[LifecycleActionRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_staff),
):
    notes = body.notes if body else None
    product = lifecycle_service.submit_for_approval(db, product_id, user.username, notes)
    return {"success": True, "message": "Product submitted for approval successfully", "data": product}


@router.post("/{product_id}/approve", response_model=ApiResponse[ProductResponse])
def approve(
    product_id: int,
    body: Optional[LifecycleActionRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    notes = body.notes if body else None
    product = lifecycle_service.approve(db, product_id, user.username, notes)
    return {"success": True, "message": "Product approved successfully", "data": product}


@router.post("/bulk-approve", response_model=ApiResponse[BulkApproveResult])
def bulk_approve(
    body: BulkApproveRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    result = lifecycle_service.bulk_approve(db, body.product_ids, user.username, body.notes)
    return {
        "success": True,
        "message": (
            f"Bulk approval completed: {result['success_count']} succeeded, "
            f"{result['failure_count']} failed"
        ),
        "data": result,
    }


# ---------- STATE SHORTCUTS ----------

@router.post("/{product_id}/activate", response_model=ApiResponse[ProductResponse])
def activate(
    product_id: int,
    body: Optional[LifecycleActionRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    notes = body.notes if body else None
    product = lifecycle_service.activate(db, product_id, user.username, notes)
    return {"success": True, "message": "Product activated and available for sale", "data": product}


@router.post("/{product_id}/discontinue", response_model=ApiResponse[ProductResponse])
def discontinue(
    product_id: int,
    body: Optional[LifecycleActionRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    notes = body.notes if body else None
    product = lifecycle_service.discontinue(db, product_id, user.username, notes)
    return {"success": True, "message": "Product discontinued successfully", "data": product}


@router.post("/{product_id}/archive", response_model=ApiResponse[ProductResponse])
def archive(
    product_id: int,
    body: Optional[LifecycleActionRequest] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    notes = body.notes if body else None
    product = lifecycle_service.archive(db, product_id, user.username, notes)
    return {"success": True, "message": "Product archived successfully", "data": product}


# ---------- QUERIES ----------

@router.get("/by-state/{state}", response_model=ListResponse[ProductResponse])
def products_by_state(
    state: LifecycleState,
    category_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    products = lifecycle_service.get_products_by_state(db, state, category_id=category_id)
    return {"success": True, "count": len(products), "data": products}


@router.get("/lifecycle-stats", response_model=ApiResponse[LifecycleStatsResponse], dependencies=[Depends(require_admin)])
def lifecycle_stats(db: Session = Depends(get_db)):
    return {"success": True, "data": lifecycle_service.get_lifecycle_stats(db)}


@router.get("/{product_id}/lifecycle-history", response_model=ListResponse[LifecycleHistoryResponse])
def lifecycle_history(
    product_id: int,
    limit: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    history = get_lifecycle_history(db, product_id, limit=limit)
    return {"success": True, "count": len(history), "data": history}
