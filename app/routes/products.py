from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.schemas.common import ApiResponse, ListResponse
from app.schemas.product import ProductBatchRequest, ProductCreate, ProductUpdate, ProductResponse
from app.services.product_service import (
    create_product, get_product, get_product_by_sku, list_products,
    get_products_by_ids, update_product, delete_product,
)
from app.dependencies.auth import require_admin, require_staff
from app.models.user import User


router = APIRouter(prefix="/products", tags=["Product Management"])

# CREATE (always lands in DRAFT)
@router.post("/", response_model=ApiResponse[ProductResponse], status_code=201)
def create(data: ProductCreate, db: Session = Depends(get_db), user: User = Depends(require_staff)):
    product = create_product(db, data, created_by=user.username)
    return {"success": True, "message": "Product created successfully", "data": product}

# LIST
@router.get("/", response_model=ListResponse[ProductResponse])
def list_all(
    category_id: Optional[int] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    products = list_products(db, category_id=category_id, is_active=is_active, search=search)
    return {"success": True, "count": len(products), "data": products}

# GET BY SKU
@router.get("/sku/{sku}", response_model=ApiResponse[ProductResponse])
def get_by_sku(sku: str, db: Session = Depends(get_db)):
    return {"success": True, "data": get_product_by_sku(db, sku)}

# GET MANY BY ID
@router.post("/batch", response_model=ListResponse[ProductResponse])
def get_batch(request: ProductBatchRequest, db: Session = Depends(get_db)):
    products = get_products_by_ids(db, request.ids)
    return {"success": True, "count": len(products), "data": products}

# GET BY ID
@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
def get(product_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": get_product(db, product_id)}

# UPDATE
@router.put("/{product_id}", response_model=ApiResponse[ProductResponse], dependencies=[Depends(require_staff)])
def update(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    product = update_product(db, product_id, data)
    return {"success": True, "message": "Product updated successfully", "data": product}

# DELETE
@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
def delete(product_id: int, db: Session = Depends(get_db)):
    delete_product(db, product_id)
    return {"success": True, "message": "Product deleted successfully"}
