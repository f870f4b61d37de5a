"""GET /v1/dashboard/monthly - Monthly overview"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import CategorySpendSchema, DashboardResponse
from open_planner.api.v1.loans import to_loan_response
from open_planner.api.dependencies import get_current_user_id
from open_planner.domain.validation import month_or_current
from open_planner.infrastructure.database.session import get_db
from open_planner.services.dashboard import DashboardService

router = APIRouter()


@router.get("/dashboard/monthly", response_model=DashboardResponse)
def get_monthly_dashboard(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Income, spending by category and loan obligations for a month.

    Defaults to the current month.
    """
    today = date.today()
    year, month = month_or_current(year, month, today)
    dashboard = DashboardService(db).get_monthly_dashboard(user_id, year, month, today=today)

    return DashboardResponse(
        year=dashboard.year,
        month=dashboard.month,
        income=dashboard.income,
        expenses=dashboard.expenses,
        loan_obligations=dashboard.loan_obligations,
        remaining_balance=dashboard.remaining_balance,
        expenses_by_category=[CategorySpendSchema.model_validate(c) for c in dashboard.expenses_by_category],
        loans=[to_loan_response(s.loan, today) for s in dashboard.loans],
    )
