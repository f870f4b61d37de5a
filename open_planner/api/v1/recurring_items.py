"""/v1/recurring-items - Recurring item management and monthly generation"""

import time
import logging
import uuid
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import (
    GenerateResponse,
    RecurringItemCreate,
    RecurringItemResponse,
    RecurringItemUpdate,
)
from open_planner.api.dependencies import get_current_user_id, get_request_id
from open_planner.domain.exceptions import ValidationError
from open_planner.domain.validation import resolve_target_month
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.database.repositories import CategoryRepository, RecurringItemRepository
from open_planner.infrastructure.observability.logging import log_generation
from open_planner.infrastructure.observability.metrics import record_generation
from open_planner.services.recurring import RecurringExpenseGenerator

router = APIRouter()


@router.get("/recurring-items", response_model=List[RecurringItemResponse])
def list_recurring_items(
    active_only: bool = Query(False),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    items = RecurringItemRepository(db).list_for_user(user_id, active_only=active_only)
    return [RecurringItemResponse.model_validate(i) for i in items]


@router.post("/recurring-items", response_model=RecurringItemResponse, status_code=201)
def create_recurring_item(
    body: RecurringItemCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    CategoryRepository(db).require(user_id, body.category_id)
    item = RecurringItemRepository(db).create(
        user_id=user_id,
        category_id=body.category_id,
        amount=body.amount,
        description=body.description,
        day_of_month=body.day_of_month,
        start_date=body.start_date or date.today(),
    )
    db.commit()
    return RecurringItemResponse.model_validate(item)


@router.put("/recurring-items/{item_id}", response_model=RecurringItemResponse)
def update_recurring_item(
    item_id: uuid.UUID,
    body: RecurringItemUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    changes = body.changes()
    if "category_id" in changes:
        CategoryRepository(db).require(user_id, changes["category_id"])

    item = RecurringItemRepository(db).update(user_id, item_id, changes)
    db.commit()
    return RecurringItemResponse.model_validate(item)


@router.delete("/recurring-items/{item_id}")
def delete_recurring_item(
    item_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    RecurringItemRepository(db).delete(user_id, item_id)
    db.commit()
    return {"message": "Recurring item deleted successfully"}


@router.post("/recurring-items/generate", response_model=GenerateResponse)
def generate_recurring_expenses(
    request: Request,
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Materialize recurring items into expenses for a month.

    Safe to call repeatedly (sign-in hook, scheduled job): each item
    produces at most one expense per month.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        target_year, target_month = resolve_target_month(year, month)
        result = RecurringExpenseGenerator(db).generate(user_id, target_year, target_month)

    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except SQLAlchemyError as e:
        logging.error(f"Recurring generation failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Failed to generate recurring expenses")

    duration_ms = (time.time() - start_time) * 1000
    record_generation(result)
    log_generation(
        request_id,
        user_id,
        target_year,
        target_month,
        result.generated_count,
        result.skipped_count,
        result.failed_count,
        duration_ms,
    )

    return GenerateResponse(
        year=target_year,
        month=target_month,
        generated_count=result.generated_count,
        skipped_count=result.skipped_count,
        failed_count=result.failed_count,
    )
