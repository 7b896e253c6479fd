import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.enums.lifecycle_states import LifecycleState
from app.models.category import Category
from app.models.pricing_rule import PricingRule
from app.models.product import Product
from app.schemas.product import ProductCreate, ProductUpdate
from app.services.history_service import record_transition
from app.services.sku_service import generate_sku

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "sku", "name", "description", "category_id",
    "size", "color", "unit_price", "attributes",
)


def to_price(value) -> Decimal:
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _ensure_category_exists(db: Session, category_id: Optional[int]) -> None:
    if category_id is not None and db.get(Category, category_id) is None:
        raise NotFoundError("Category", category_id)


def _sku_taken(db: Session, sku: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Product.id).filter(Product.sku == sku)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    return query.first() is not None


# --------------------------
# CREATE PRODUCT
# --------------------------
def create_product(
    db: Session,
    data: ProductCreate,
    created_by: str,
    now: Optional[datetime] = None,
) -> Product:
    """Insert a product in DRAFT together with its creation history entry."""
    now = now or datetime.utcnow()
    _ensure_category_exists(db, data.category_id)

    sku = data.sku or generate_sku(db, data.category_id, now=now)
    if _sku_taken(db, sku):
        raise ConflictError(f"SKU {sku} already exists")

    product = Product(
        sku=sku,
        name=data.name,
        description=data.description,
        category_id=data.category_id,
        size=data.size,
        color=data.color,
        unit_price=to_price(data.unit_price),
        attributes=data.attributes or {},
        lifecycle_state=LifecycleState.draft.value,
        is_active=False,
        created_by=created_by,
    )
    try:
        db.add(product)
        try:
            db.flush()
        except IntegrityError:
            # a concurrent create claimed the same SKU after our check
            raise ConflictError(f"SKU {sku} already exists")
        record_transition(
            db,
            product_id=product.id,
            old_state=None,
            new_state=LifecycleState.draft.value,
            changed_by=created_by,
            notes="Product created",
            changed_at=now,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(product)
    logger.info("Product created: %s - %s", product.sku, product.name)
    return product

# --------------------------
# GET PRODUCT
# --------------------------
def get_product(db: Session, product_id: int) -> Product:
    product = db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product", product_id)
    return product

def get_product_by_sku(db: Session, sku: str) -> Product:
    product = db.query(Product).filter(Product.sku == sku).first()
    if not product:
        raise NotFoundError("Product", sku)
    return product

# --------------------------
# LIST PRODUCTS
# --------------------------
def list_products(
    db: Session,
    category_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> List[Product]:
    query = db.query(Product)
    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if is_active is not None:
        query = query.filter(Product.is_active == is_active)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(pattern),
                Product.sku.ilike(pattern),
                Product.description.ilike(pattern),
            )
        )
    return query.order_by(Product.created_at.desc(), Product.id.desc()).all()

def get_products_by_ids(db: Session, ids: List[int]) -> List[Product]:
    return db.query(Product).filter(Product.id.in_(ids)).order_by(Product.id).all()

# --------------------------
# UPDATE PRODUCT
# --------------------------
def update_product(db: Session, product_id: int, data: ProductUpdate) -> Product:
    """Partial update of descriptive fields; lifecycle fields are not writable here."""
    product = get_product(db, product_id)

    changes = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if key in UPDATABLE_FIELDS
    }
    if not changes:
        raise ValidationError("No fields to update")

    if "sku" in changes:
        if changes["sku"] is None:
            raise ValidationError("Validation error", ["SKU cannot be empty"])
        if _sku_taken(db, changes["sku"], exclude_id=product_id):
            raise ConflictError(f"SKU {changes['sku']} already exists")
    if "category_id" in changes:
        _ensure_category_exists(db, changes["category_id"])
    if "unit_price" in changes:
        if changes["unit_price"] is None:
            raise ValidationError("Validation error", ["Unit price cannot be empty"])
        changes["unit_price"] = to_price(changes["unit_price"])

    for key, value in changes.items():
        setattr(product, key, value)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(f"SKU {changes.get('sku', product.sku)} already exists")
    db.refresh(product)
    logger.info("Product updated: %s - %s", product.sku, product.name)
    return product

# --------------------------
# DELETE PRODUCT
# --------------------------
def delete_product(db: Session, product_id: int) -> Product:
    product = get_product(db, product_id)

    if product.lifecycle_state == LifecycleState.archived.value:
        raise ValidationError(
            "Archived products cannot be deleted",
            [f"Product {product_id} is archived"],
        )

    # product-scoped rules go with the product on every backend
    rule_count = (
        db.query(PricingRule)
        .filter(PricingRule.product_id == product_id)
        .delete(synchronize_session=False)
    )
    db.delete(product)
    db.commit()
    logger.info(
        "Product deleted: %s - %s (%s pricing rules removed)",
        product.sku, product.name, rule_count,
    )
    return product
