"""Insights service - gathers monthly aggregates and runs the insight rules"""

import logging
from datetime import date
from typing import List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from open_planner.domain.amortization import calculate_total_loan_obligations
from open_planner.domain.insights import InsightSnapshot, generate_insights
from open_planner.domain.models import Insight
from open_planner.domain.validation import validate_year_month
from open_planner.infrastructure.database.repositories import (
    ExpenseRepository,
    IncomeRepository,
    LoanRepository,
)
from open_planner.infrastructure.observability.metrics import insights_degraded_counter
from open_planner.utils.date_utils import previous_month


class InsightsService:
    """Compute insights for one user and month, recomputed on every call"""

    def __init__(self, db: Session):
        self.db = db
        self.income = IncomeRepository(db)
        self.expenses = ExpenseRepository(db)
        self.loans = LoanRepository(db)

    def _previous_totals(self, user_id: str, year: int, month: int) -> Tuple[float, float]:
        """Previous month income and spend; (0, 0) when they cannot be read"""
        prev_year, prev_month = previous_month(year, month)
        try:
            return (
                self.income.total_for_month(user_id, prev_year, prev_month),
                self.expenses.total_for_month(user_id, prev_year, prev_month),
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            insights_degraded_counter.inc()
            logging.warning(
                f"Previous month data unavailable, skipping comparison: {e}",
                extra={"user_id": user_id},
            )
            return 0.0, 0.0

    def build_snapshot(
        self,
        user_id: str,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> InsightSnapshot:
        today = today or date.today()

        income = self.income.total_for_month(user_id, year, month)
        expenses = self.expenses.total_for_month(user_id, year, month)
        loans = self.loans.list_for_user(user_id)
        previous_income, previous_expenses = self._previous_totals(user_id, year, month)

        return InsightSnapshot(
            income=income,
            expenses=expenses,
            loan_obligations=calculate_total_loan_obligations(loans, today),
            previous_income=previous_income,
            previous_expenses=previous_expenses,
            loans=loans,
            as_of=today,
        )

    def get_insights(
        self,
        user_id: str,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> List[Insight]:
        """
        Insights for the month, in fixed order: overspending, loan
        acceleration, month-over-month.

        Raises:
            ValidationError: year/month out of range
            SQLAlchemyError: Current month data could not be read
        """
        validate_year_month(year, month)
        snapshot = self.build_snapshot(user_id, year, month, today)
        return generate_insights(snapshot)
