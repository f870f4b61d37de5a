"""/v1/income - Income entry and listing"""

import uuid
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import IncomeCreate, IncomeResponse, IncomeUpdate, MonthlyIncomeResponse
from open_planner.api.dependencies import get_current_user_id
from open_planner.domain.validation import month_or_current
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.database.repositories import IncomeRepository

router = APIRouter()


@router.get("/income", response_model=List[IncomeResponse])
def list_income(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    entries = IncomeRepository(db).list_for_user(user_id, start_date=start_date, end_date=end_date)
    return [IncomeResponse.model_validate(i) for i in entries]


@router.get("/income/monthly", response_model=MonthlyIncomeResponse)
def get_monthly_income(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    year, month = month_or_current(year, month)
    return MonthlyIncomeResponse(
        year=year,
        month=month,
        total_income=IncomeRepository(db).total_for_month(user_id, year, month),
    )


@router.post("/income", response_model=IncomeResponse, status_code=201)
def create_income(
    body: IncomeCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    income = IncomeRepository(db).create(
        user_id=user_id,
        amount=body.amount,
        description=body.description,
        income_date=body.date or date.today(),
        is_recurring=body.is_recurring,
    )
    db.commit()
    return IncomeResponse.model_validate(income)


@router.put("/income/{income_id}", response_model=IncomeResponse)
def update_income(
    income_id: uuid.UUID,
    body: IncomeUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    income = IncomeRepository(db).update(user_id, income_id, body.changes())
    db.commit()
    return IncomeResponse.model_validate(income)


@router.delete("/income/{income_id}")
def delete_income(
    income_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    IncomeRepository(db).delete(user_id, income_id)
    db.commit()
    return {"message": "Income deleted successfully"}
