import logging
import random
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.category import Category
from app.models.product import Product

logger = logging.getLogger(__name__)


def generate_fallback_sku(now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"PROD-{int(now.timestamp() * 1000)}-{random.randint(0, 999)}"


def next_sku_for_prefix(db: Session, prefix: str) -> str:
    """Highest numeric suffix among SKUs starting with prefix, plus one."""
    rows = db.query(Product.sku).filter(Product.sku.like(f"{prefix}%")).all()

    max_seq = 0
    for (sku,) in rows:
        suffix = sku[len(prefix):]
        if suffix.isdigit():
            max_seq = max(max_seq, int(suffix))

    return f"{prefix}{max_seq + 1:04d}"


def generate_sku(
    db: Session,
    category_id: Optional[int],
    now: Optional[datetime] = None,
) -> str:
    """
    Build a SKU of the form {CATEGORY_CODE}-{YEAR}-{NNNN}, e.g. ELE-2025-0008.

    Categories without a code (or no category) use DEFAULT_CATEGORY_CODE.
    A database failure never blocks product creation: a timestamp-based
    random SKU is returned instead.
    """
    now = now or datetime.utcnow()
    try:
        # a failed lookup only rolls back this savepoint, not the caller's transaction
        with db.begin_nested():
            code = settings.DEFAULT_CATEGORY_CODE
            if category_id is not None:
                category = db.get(Category, category_id)
                if category is not None and category.code:
                    code = category.code.upper()

            sku = next_sku_for_prefix(db, f"{code}-{now.year}-")
        logger.info("Generated SKU %s", sku)
        return sku
    except SQLAlchemyError:
        logger.exception("SKU generation failed, using fallback SKU")
        return generate_fallback_sku(now)
