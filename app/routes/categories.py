from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.schemas.category import CategoryCreate, CategoryUpdate, CategoryResponse
from app.schemas.common import ApiResponse, ListResponse
from app.services.category_service import (
    create_category, get_category, list_categories,
    update_category, delete_category,
)
from app.dependencies.auth import require_admin, require_staff


router = APIRouter(prefix="/categories", tags=["Categories"])

# CREATE
@router.post("/", response_model=ApiResponse[CategoryResponse], status_code=201, dependencies=[Depends(require_staff)])
def create(data: CategoryCreate, db: Session = Depends(get_db)):
    category = create_category(db, data)
    return {"success": True, "message": "Category created successfully", "data": category}

# LIST
@router.get("/", response_model=ListResponse[CategoryResponse])
def list_all(db: Session = Depends(get_db)):
    categories = list_categories(db)
    return {"success": True, "count": len(categories), "data": categories}

# GET BY ID
@router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
def get(category_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": get_category(db, category_id)}

# UPDATE
@router.put("/{category_id}", response_model=ApiResponse[CategoryResponse], dependencies=[Depends(require_staff)])
def update(category_id: int, data: CategoryUpdate, db: Session = Depends(get_db)):
    category = update_category(db, category_id, data)
    return {"success": True, "message": "Category updated successfully", "data": category}

# DELETE
@router.delete("/{category_id}", dependencies=[Depends(require_admin)])
def delete(category_id: int, db: Session = Depends(get_db)):
    delete_category(db, category_id)
    return {"success": True, "message": "Category deleted successfully"}
