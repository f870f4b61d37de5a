"""Monthly dashboard assembly"""

from datetime import date
from typing import Optional
from sqlalchemy.orm import Session

from open_planner.domain.amortization import calculate_total_loan_obligations, summarize_loan
from open_planner.domain.models import MonthlyDashboard
from open_planner.domain.validation import validate_year_month
from open_planner.infrastructure.database.repositories import (
    ExpenseRepository,
    IncomeRepository,
    LoanRepository,
)


class DashboardService:
    """Income, spending and loan obligations for a month"""

    def __init__(self, db: Session):
        self.income = IncomeRepository(db)
        self.expenses = ExpenseRepository(db)
        self.loans = LoanRepository(db)

    def get_monthly_dashboard(
        self,
        user_id: str,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> MonthlyDashboard:
        validate_year_month(year, month)
        today = today or date.today()

        total_income = self.income.total_for_month(user_id, year, month)
        total_expenses = self.expenses.total_for_month(user_id, year, month)
        by_category = self.expenses.by_category_for_month(user_id, year, month)
        loans = self.loans.list_for_user(user_id)

        obligations = calculate_total_loan_obligations(loans, today)

        return MonthlyDashboard(
            year=year,
            month=month,
            income=total_income,
            expenses=total_expenses,
            loan_obligations=obligations,
            remaining_balance=total_income - total_expenses - obligations,
            expenses_by_category=by_category,
            loans=[summarize_loan(loan, today) for loan in loans],
        )
