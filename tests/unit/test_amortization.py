"""Unit tests for loan amortization math"""

import uuid
import pytest
from datetime import date
from open_planner.domain.models import Loan
from open_planner.domain.amortization import (
    calculate_monthly_payment,
    calculate_total_loan_obligations,
    estimate_remaining_balance,
    is_loan_active,
    months_elapsed,
    summarize_loan,
)


def make_loan(principal=12000.0, interest_rate=0.06, term_months=12, start_date=date(2024, 1, 15)) -> Loan:
    return Loan(
        id=uuid.uuid4(),
        user_id="user_test",
        principal=principal,
        interest_rate=interest_rate,
        term_months=term_months,
        start_date=start_date,
    )


@pytest.mark.parametrize(
    "principal, term",
    [(12000.0, 12), (1000.0, 3), (999.99, 7), (250000.0, 360), (1.0, 600)],
)
def test_zero_rate_is_straight_line(principal, term):
    """No interest: principal split evenly, exactly"""
    assert calculate_monthly_payment(principal, 0, term) == principal / term


def test_payment_closed_form():
    """12000 at 6% over 12 months"""
    r = 0.06 / 12
    expected = 12000 * (r * (1 + r) ** 12) / ((1 + r) ** 12 - 1)

    payment = calculate_monthly_payment(12000, 0.06, 12)

    assert round(payment, 2) == round(expected, 2)
    assert round(payment, 2) == 1032.80


def test_payment_monotonic_in_rate():
    """Higher rate never lowers the payment"""
    rates = [0, 0.0001, 0.01, 0.05, 0.06, 0.12, 0.25, 0.5, 1.0]
    payments = [calculate_monthly_payment(10000, rate, 60) for rate in rates]

    assert payments == sorted(payments)


def test_zero_term_returns_zero():
    assert calculate_monthly_payment(5000, 0.05, 0) == 0.0


def test_months_elapsed_ignores_day_of_month():
    assert months_elapsed(date(2024, 1, 31), date(2024, 2, 1)) == 1
    assert months_elapsed(date(2024, 1, 1), date(2024, 1, 31)) == 0
    assert months_elapsed(date(2023, 11, 10), date(2024, 2, 5)) == 3


def test_loan_active_until_term_elapses():
    loan = make_loan(term_months=12, start_date=date(2024, 1, 15))

    assert is_loan_active(loan, date(2024, 12, 31))  # 11 months elapsed
    assert not is_loan_active(loan, date(2025, 1, 1))  # 12 months elapsed


def test_total_obligations_skip_paid_off_loans():
    active = make_loan(principal=1200, interest_rate=0, term_months=12, start_date=date(2024, 1, 1))
    paid_off = make_loan(principal=5000, interest_rate=0.05, term_months=6, start_date=date(2020, 1, 1))

    total = calculate_total_loan_obligations([active, paid_off], as_of=date(2024, 6, 1))

    assert total == 100.0


def test_total_obligations_empty():
    assert calculate_total_loan_obligations([], as_of=date(2024, 6, 1)) == 0


def test_remaining_balance_approximation():
    """Principal minus payments made, no principal/interest split"""
    loan = make_loan(principal=1200, interest_rate=0, term_months=12, start_date=date(2024, 1, 1))

    assert estimate_remaining_balance(loan, date(2024, 4, 10)) == 900.0


def test_remaining_balance_never_negative():
    loan = make_loan(principal=12000, interest_rate=0.3, term_months=12, start_date=date(2024, 1, 1))

    assert estimate_remaining_balance(loan, date(2024, 12, 1)) == 0.0


def test_remaining_balance_zero_when_paid_off():
    loan = make_loan(start_date=date(2020, 1, 1))

    assert estimate_remaining_balance(loan, date(2024, 1, 1)) == 0.0


def test_summarize_paid_off_loan():
    loan = make_loan(start_date=date(2020, 1, 1))

    summary = summarize_loan(loan, date(2024, 1, 1))

    assert summary.is_active is False
    assert summary.monthly_payment == 0.0
    assert summary.remaining_balance == 0.0


def test_summarize_active_loan():
    loan = make_loan(start_date=date(2024, 1, 1))

    summary = summarize_loan(loan, date(2024, 1, 20))

    assert summary.is_active is True
    assert round(summary.monthly_payment, 2) == 1032.80
    assert summary.remaining_balance == 12000
