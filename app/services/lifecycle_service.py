import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import CatalogError, InvalidTransitionError, NotFoundError, ValidationError
from app.enums.lifecycle_states import LifecycleState, can_transition
from app.models.lifecycle_history import LifecycleHistory
from app.models.pricing_rule import PricingRule
from app.models.product import Product
from app.services.history_service import record_transition
from app.services.locks import product_lock

logger = logging.getLogger(__name__)


# ---------- SIDE EFFECTS PER TARGET STATE ----------

def validate_for_activation(product: Product) -> None:
    """Collect every reason the product cannot go on sale."""
    errors: List[str] = []

    if product.unit_price is None or product.unit_price <= 0:
        errors.append("Valid unit price required")
    if not product.sku or not product.sku.strip():
        errors.append("SKU required")
    if product.category_id is None:
        errors.append("Category required")

    if errors:
        raise ValidationError("Product validation failed", errors)


def _deactivate_product_rules(db: Session, product_id: int) -> int:
    count = (
        db.query(PricingRule)
        .filter(PricingRule.product_id == product_id, PricingRule.is_active.is_(True))
        .update({PricingRule.is_active: False}, synchronize_session=False)
    )
    logger.info("Deactivated %s pricing rules for archived product %s", count, product_id)
    return count


def _apply_side_effects(
    db: Session,
    product: Product,
    new_state: LifecycleState,
    actor: str,
    now: datetime,
) -> None:
    if new_state == LifecycleState.active:
        validate_for_activation(product)
    elif new_state == LifecycleState.archived:
        _deactivate_product_rules(db, product.id)
    elif new_state == LifecycleState.approved:
        product.approved_by = actor
        product.approved_at = now
    elif new_state == LifecycleState.discontinued:
        logger.info("Discontinuing product %s", product.id)


# ---------- TRANSITION ----------

def transition(
    db: Session,
    product_id: int,
    new_state: LifecycleState,
    actor: str,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Product:
    """
    Move a product to new_state as one all-or-nothing unit of work.

    The product is locked for the whole read-modify-write, so a concurrent
    transition on the same product waits and then re-evaluates against the
    state this one committed.
    """
    new_state = LifecycleState(new_state)
    now = now or datetime.utcnow()

    with product_lock(product_id):
        try:
            product = (
                db.query(Product)
                .filter(Product.id == product_id)
                .populate_existing()
                .with_for_update()
                .first()
            )
            if not product:
                raise NotFoundError("Product", product_id)

            current_state = LifecycleState(product.lifecycle_state)
            if not can_transition(current_state, new_state):
                raise InvalidTransitionError(current_state.value, new_state.value)

            _apply_side_effects(db, product, new_state, actor, now)

            product.lifecycle_state = new_state.value
            product.is_active = new_state == LifecycleState.active
            product.updated_at = now

            record_transition(
                db,
                product_id=product.id,
                old_state=current_state.value,
                new_state=new_state.value,
                changed_by=actor,
                notes=notes,
                changed_at=now,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

    db.refresh(product)
    logger.info(
        "Product %s transitioned: %s -> %s by %s",
        product_id, current_state.value, new_state.value, actor,
    )
    return product


# ---------- SHORTCUTS ----------

def submit_for_approval(db: Session, product_id: int, actor: str, notes: Optional[str] = None) -> Product:
    return transition(db, product_id, LifecycleState.pending_approval, actor, notes or "Submitted for approval")


def approve(db: Session, product_id: int, actor: str, notes: Optional[str] = None) -> Product:
    return transition(db, product_id, LifecycleState.approved, actor, notes or "Approved")


def activate(db: Session, product_id: int, actor: str, notes: Optional[str] = None) -> Product:
    return transition(db, product_id, LifecycleState.active, actor, notes or "Activated for sale")


def discontinue(db: Session, product_id: int, actor: str, notes: Optional[str] = None) -> Product:
    return transition(db, product_id, LifecycleState.discontinued, actor, notes or "Product discontinued")


def archive(db: Session, product_id: int, actor: str, notes: Optional[str] = None) -> Product:
    return transition(db, product_id, LifecycleState.archived, actor, notes or "Product archived")


# ---------- BULK APPROVE ----------

def bulk_approve(
    db: Session,
    product_ids: List[int],
    actor: str,
    notes: str = "Bulk approval",
) -> Dict[str, Any]:
    """
    Approve each product independently. Successful members stay committed
    even when others fail; failures are reported per item, never raised.
    """
    results: List[Dict[str, Any]] = []

    for product_id in product_ids:
        try:
            product = transition(db, product_id, LifecycleState.approved, actor, notes)
            results.append({"product_id": product_id, "success": True, "product": product})
        except CatalogError as e:
            results.append({
                "product_id": product_id,
                "success": False,
                "error": e.message,
                "error_type": type(e).__name__,
            })
        except SQLAlchemyError as e:
            logger.exception("Bulk approval failed for product %s", product_id)
            results.append({
                "product_id": product_id,
                "success": False,
                "error": str(e),
                "error_type": type(e).__name__,
            })

    success_count = sum(1 for r in results if r["success"])
    failure_count = len(results) - success_count
    logger.info("Bulk approval: %s succeeded, %s failed", success_count, failure_count)

    return {
        "success_count": success_count,
        "failure_count": failure_count,
        "results": results,
    }


# ---------- QUERIES ----------

def get_products_by_state(
    db: Session,
    state: LifecycleState,
    category_id: Optional[int] = None,
) -> List[Product]:
    state = LifecycleState(state)
    query = db.query(Product).filter(Product.lifecycle_state == state.value)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    return query.order_by(Product.updated_at.desc(), Product.id.desc()).all()


def get_pending_approvals(db: Session) -> List[Dict[str, Any]]:
    """Products waiting for approval, oldest first, with their history size."""
    history_count = (
        db.query(func.count(LifecycleHistory.id))
        .filter(LifecycleHistory.product_id == Product.id)
        .correlate(Product)
        .scalar_subquery()
    )
    rows = (
        db.query(Product, history_count.label("history_count"))
        .filter(Product.lifecycle_state == LifecycleState.pending_approval.value)
        .order_by(Product.created_at.asc(), Product.id.asc())
        .all()
    )
    return [{"product": product, "history_count": count or 0} for product, count in rows]


def get_lifecycle_stats(db: Session) -> Dict[str, Any]:
    rows = (
        db.query(Product.lifecycle_state, func.count(Product.id))
        .group_by(Product.lifecycle_state)
        .all()
    )
    counts = {state.value: 0 for state in LifecycleState}
    for state, count in rows:
        counts[state] = count
    return {"counts": counts, "total": sum(counts.values())}
