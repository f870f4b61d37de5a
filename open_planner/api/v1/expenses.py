"""/v1/expenses - Expense entry and listing"""

import uuid
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import (
    CategorySpendSchema,
    ExpenseCreate,
    ExpenseResponse,
    ExpenseUpdate,
    MonthlyExpensesResponse,
)
from open_planner.api.dependencies import get_current_user_id
from open_planner.domain.validation import month_or_current
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.database.repositories import CategoryRepository, ExpenseRepository

router = APIRouter()


@router.get("/expenses", response_model=List[ExpenseResponse])
def list_expenses(
    start_date: Optional[date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound"),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    expenses = ExpenseRepository(db).list_for_user(user_id, start_date=start_date, end_date=end_date)
    return [ExpenseResponse.model_validate(e) for e in expenses]


@router.get("/expenses/monthly", response_model=MonthlyExpensesResponse)
def get_monthly_expenses(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Spend for a month grouped by category, defaults to the current month"""
    year, month = month_or_current(year, month)
    repo = ExpenseRepository(db)

    return MonthlyExpensesResponse(
        year=year,
        month=month,
        expenses_by_category=[
            CategorySpendSchema.model_validate(c) for c in repo.by_category_for_month(user_id, year, month)
        ],
        total_spend=repo.total_for_month(user_id, year, month),
    )


@router.post("/expenses", response_model=ExpenseResponse, status_code=201)
def create_expense(
    body: ExpenseCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    CategoryRepository(db).require(user_id, body.category_id)
    expense = ExpenseRepository(db).create(
        user_id=user_id,
        category_id=body.category_id,
        amount=body.amount,
        description=body.description,
        expense_date=body.date or date.today(),
    )
    db.commit()
    return ExpenseResponse.model_validate(expense)


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: uuid.UUID,
    body: ExpenseUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    changes = body.changes()
    if "category_id" in changes:
        CategoryRepository(db).require(user_id, changes["category_id"])

    expense = ExpenseRepository(db).update(user_id, expense_id, changes)
    db.commit()
    return ExpenseResponse.model_validate(expense)


@router.delete("/expenses/{expense_id}")
def delete_expense(
    expense_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    ExpenseRepository(db).delete(user_id, expense_id)
    db.commit()
    return {"message": "Expense deleted successfully"}
