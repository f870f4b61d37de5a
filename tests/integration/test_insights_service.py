"""Integration tests for the insights service"""

import pytest
from datetime import date
from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from open_planner.domain.exceptions import ValidationError
from open_planner.infrastructure.database.repositories import IncomeRepository
from open_planner.services.insights import InsightsService

pytestmark = pytest.mark.integration

USER_ID = "user_test"
TODAY = date(2024, 3, 20)


def test_month_over_month_uses_previous_month(db, category, make_income, make_expense):
    make_income(1000, date(2024, 2, 1))
    make_expense(category.id, 100, date(2024, 2, 10))
    make_income(800, date(2024, 3, 1))
    make_expense(category.id, 100, date(2024, 3, 10))

    insights = InsightsService(db).get_insights(USER_ID, 2024, 3, today=TODAY)

    assert [i.type for i in insights] == ["month_over_month"]
    assert insights[0].message == "Compared to last month: Income decreased by 20%."


def test_january_compares_with_previous_december(db, category, make_income, make_expense):
    make_income(1000, date(2023, 12, 15))
    make_income(1500, date(2024, 1, 15))

    snapshot = InsightsService(db).build_snapshot(USER_ID, 2024, 1, today=TODAY)

    assert snapshot.previous_income == 1000
    assert snapshot.income == 1500


def test_previous_month_failure_degrades_gracefully(db, category, make_income, make_expense):
    """Previous month read errors drop the comparison instead of failing the request"""
    make_income(1000, date(2024, 2, 1))
    make_income(500, date(2024, 3, 1))
    make_expense(category.id, 480, date(2024, 3, 5))

    real_total = IncomeRepository.total_for_month

    def flaky_total(self, user_id, year, month):
        if (year, month) == (2024, 2):
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return real_total(self, user_id, year, month)

    with patch.object(IncomeRepository, "total_for_month", flaky_total):
        insights = InsightsService(db).get_insights(USER_ID, 2024, 3, today=TODAY)

    assert [i.type for i in insights] == ["overspending"]
    assert insights[0].severity == "warning"


def test_current_month_failure_propagates(db):
    with patch.object(
        IncomeRepository,
        "total_for_month",
        side_effect=OperationalError("SELECT", {}, Exception("connection reset")),
    ):
        with pytest.raises(OperationalError):
            InsightsService(db).get_insights(USER_ID, 2024, 3, today=TODAY)


def test_loan_obligations_included(db, make_income, make_loan):
    make_income(2000, date(2024, 3, 1))
    make_loan(12000, 0, 12, date(2024, 1, 1))  # 1000/month, active
    make_loan(5000, 0.1, 12, date(2020, 1, 1))  # paid off

    snapshot = InsightsService(db).build_snapshot(USER_ID, 2024, 3, today=TODAY)

    assert snapshot.loan_obligations == pytest.approx(1000)
    assert snapshot.remaining_balance == pytest.approx(1000)


def test_invalid_month_rejected(db):
    with pytest.raises(ValidationError):
        InsightsService(db).get_insights(USER_ID, 2024, 13)
