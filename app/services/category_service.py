import logging
from typing import List

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.category import Category
from app.schemas.category import CategoryCreate, CategoryUpdate

logger = logging.getLogger(__name__)


def _ensure_unique(db: Session, name=None, code=None, exclude_id=None):
    errors = []
    if name is not None:
        query = db.query(Category).filter(Category.name == name)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first():
            errors.append(f"Category name '{name}' already exists")
    if code is not None:
        query = db.query(Category).filter(Category.code == code)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        if query.first():
            errors.append(f"Category code '{code}' already exists")
    if errors:
        raise ConflictError("Duplicate category", errors)


def create_category(db: Session, data: CategoryCreate) -> Category:
    _ensure_unique(db, name=data.name, code=data.code)

    category = Category(**data.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Category created: %s", category.name)
    return category


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if not category:
        raise NotFoundError("Category", category_id)
    return category


def list_categories(db: Session) -> List[Category]:
    return db.query(Category).order_by(Category.name).all()


def update_category(db: Session, category_id: int, data: CategoryUpdate) -> Category:
    category = get_category(db, category_id)

    changes = data.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")

    _ensure_unique(
        db,
        name=changes.get("name"),
        code=changes.get("code"),
        exclude_id=category_id,
    )

    for key, value in changes.items():
        setattr(category, key, value)

    db.commit()
    db.refresh(category)
    logger.info("Category updated: %s", category.name)
    return category


def delete_category(db: Session, category_id: int) -> None:
    category = get_category(db, category_id)

    # products outlive their category
    for product in category.products:
        product.category_id = None

    db.delete(category)
    db.commit()
    logger.info("Category deleted: %s", category.name)
