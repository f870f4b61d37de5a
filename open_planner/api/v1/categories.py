"""/v1/categories - Expense category management"""

import uuid
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import CategoryCreate, CategoryResponse, CategoryUpdate
from open_planner.api.dependencies import get_current_user_id
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.database.repositories import CategoryRepository

router = APIRouter()


@router.get("/categories", response_model=List[CategoryResponse])
def list_categories(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Default categories first, then by name"""
    return [CategoryResponse.model_validate(c) for c in CategoryRepository(db).list_for_user(user_id)]


@router.post("/categories", response_model=CategoryResponse, status_code=201)
def create_category(
    body: CategoryCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    category = CategoryRepository(db).create(user_id, body.name, icon=body.icon, color=body.color)
    db.commit()
    return CategoryResponse.model_validate(category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    category = CategoryRepository(db).update(user_id, category_id, body.changes())
    db.commit()
    return CategoryResponse.model_validate(category)


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    CategoryRepository(db).delete(user_id, category_id)
    db.commit()
    return {"message": "Category deleted successfully"}
