import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.lifecycle_history import LifecycleHistory
from app.models.product import Product

logger = logging.getLogger(__name__)


def record_transition(
    db: Session,
    product_id: int,
    old_state: Optional[str],
    new_state: str,
    changed_by: str,
    notes: Optional[str] = None,
    changed_at: Optional[datetime] = None,
) -> LifecycleHistory:
    """Append a history entry inside the caller's unit of work (no commit)."""
    entry = LifecycleHistory(
        product_id=product_id,
        old_state=old_state,
        new_state=new_state,
        changed_by=changed_by,
        notes=notes,
        changed_at=changed_at or datetime.utcnow(),
    )
    db.add(entry)
    return entry


def get_lifecycle_history(
    db: Session,
    product_id: int,
    limit: Optional[int] = None,
) -> List[LifecycleHistory]:
    """
    Returns the product's transitions, most recent first.
    limit defaults to HISTORY_DEFAULT_LIMIT and is clamped to 1..HISTORY_MAX_LIMIT.
    """
    if db.get(Product, product_id) is None:
        raise NotFoundError("Product", product_id)

    if limit is None:
        limit = settings.HISTORY_DEFAULT_LIMIT
    limit = max(1, min(limit, settings.HISTORY_MAX_LIMIT))

    return (
        db.query(LifecycleHistory)
        .filter(LifecycleHistory.product_id == product_id)
        .order_by(LifecycleHistory.changed_at.desc(), LifecycleHistory.id.desc())
        .limit(limit)
        .all()
    )
