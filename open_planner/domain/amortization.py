"""Loan amortization math - monthly payment, active status and obligations"""

from datetime import date
from typing import Iterable
from open_planner.domain.models import Loan, LoanSummary
from open_planner.utils.date_utils import months_between


def calculate_monthly_payment(principal: float, annual_rate: float, term_months: int) -> float:
    """
    Fixed monthly payment for a fully amortizing loan.

    Formula: M = P * [r(1+r)^n] / [(1+r)^n - 1]
    - P = principal
    - r = monthly rate (annual_rate / 12)
    - n = number of payments (term_months)

    Example:
        12000 at 6% over 12 months → 1032.80
    """
    if term_months == 0:
        return 0.0
    if annual_rate == 0:
        # Straight-line, the general formula divides by zero here
        return principal / term_months

    monthly_rate = annual_rate / 12
    growth = (1 + monthly_rate) ** term_months

    return principal * (monthly_rate * growth) / (growth - 1)


def months_elapsed(start_date: date, as_of: date) -> int:
    """Calendar months since the loan started (day of month ignored)"""
    return months_between(start_date, as_of)


def is_loan_active(loan: Loan, as_of: date) -> bool:
    """A loan is active until its term has fully elapsed"""
    return months_elapsed(loan.start_date, as_of) < loan.term_months


def estimate_remaining_balance(loan: Loan, as_of: date) -> float:
    """
    Approximate outstanding balance: principal minus payments made so far.

    Does not split payments into principal and interest, payment history
    is not tracked.
    """
    if not is_loan_active(loan, as_of):
        return 0.0

    elapsed = max(months_elapsed(loan.start_date, as_of), 0)
    payment = calculate_monthly_payment(loan.principal, loan.interest_rate, loan.term_months)
    return max(0.0, loan.principal - elapsed * payment)


def calculate_total_loan_obligations(loans: Iterable[Loan], as_of: date) -> float:
    """Sum of monthly payments across active loans; paid-off loans contribute nothing"""
    return sum(
        calculate_monthly_payment(loan.principal, loan.interest_rate, loan.term_months)
        for loan in loans
        if is_loan_active(loan, as_of)
    )


def summarize_loan(loan: Loan, as_of: date) -> LoanSummary:
    active = is_loan_active(loan, as_of)
    payment = (
        calculate_monthly_payment(loan.principal, loan.interest_rate, loan.term_months)
        if active
        else 0.0
    )
    return LoanSummary(
        loan=loan,
        monthly_payment=payment,
        remaining_balance=estimate_remaining_balance(loan, as_of),
        is_active=active,
    )
