"""Insights engine - rule-based advice over a month's aggregates"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Sequence
from open_planner.domain.models import Insight, Loan
from open_planner.domain.amortization import calculate_monthly_payment, is_loan_active


@dataclass
class InsightSnapshot:
    """Aggregates every rule is evaluated against"""

    income: float
    expenses: float
    loan_obligations: float
    previous_income: float = 0.0
    previous_expenses: float = 0.0
    loans: List[Loan] = field(default_factory=list)
    as_of: date = field(default_factory=date.today)

    @property
    def total_obligations(self) -> float:
        return self.expenses + self.loan_obligations

    @property
    def remaining_balance(self) -> float:
        return self.income - self.total_obligations

    def active_loans(self) -> List[Loan]:
        return [loan for loan in self.loans if is_loan_active(loan, self.as_of)]


def format_currency(amount: float) -> str:
    """Whole-dollar USD formatting for messages: 1234.5 → $1,235"""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


class InsightRule:
    """Base class: a rule inspects a snapshot and returns at most one insight"""

    insight_type = ""

    def evaluate(self, snapshot: InsightSnapshot) -> Optional[Insight]:
        raise NotImplementedError


class OverspendingRule(InsightRule):
    """
    Compare spending plus loan obligations against income.

    Thresholds:
    - > 100% of income: error
    - > 90%:            warning
    - (70%, 90%]:       info, within budget
    """

    insight_type = "overspending"

    def evaluate(self, snapshot: InsightSnapshot) -> Optional[Insight]:
        income = snapshot.income
        obligations = snapshot.total_obligations

        if obligations > income:
            return Insight(
                type=self.insight_type,
                title="Overspending Detected",
                message=(
                    f"Your expenses and loan obligations ({format_currency(obligations)}) exceed "
                    f"your income ({format_currency(income)}) by "
                    f"{format_currency(obligations - income)}. Consider reducing expenses."
                ),
                severity="error",
                actionable=True,
                action_label="Review Expenses",
                action_route="/expenses",
            )

        if income <= 0:
            return None

        ratio = obligations / income
        if ratio > 0.9:
            return Insight(
                type=self.insight_type,
                title="High Spending Alert",
                message=(
                    f"You're spending {ratio * 100:.0f}% of your income. "
                    "Consider building a buffer by reducing expenses."
                ),
                severity="warning",
                actionable=True,
                action_label="Review Expenses",
                action_route="/expenses",
            )

        if ratio > 0.7:
            return Insight(
                type=self.insight_type,
                title="Spending Review",
                message=(
                    f"You're spending {ratio * 100:.0f}% of your income. "
                    "Good job staying within budget!"
                ),
                severity="info",
            )

        return None


class LoanAccelerationRule(InsightRule):
    """Suggest an extra payment on the most expensive active loan when money is left over"""

    insight_type = "loan_acceleration"
    min_payment_multiple = 1.5
    extra_payment_share = 0.5

    def evaluate(self, snapshot: InsightSnapshot) -> Optional[Insight]:
        remaining = snapshot.remaining_balance
        if remaining <= 0:
            return None

        active_loans = snapshot.active_loans()
        if not active_loans:
            return None

        # max() keeps the first loan on ties
        loan = max(active_loans, key=lambda candidate: candidate.interest_rate)
        payment = calculate_monthly_payment(loan.principal, loan.interest_rate, loan.term_months)
        if payment <= 0 or remaining < payment * self.min_payment_multiple:
            return None

        extra_payment = math.floor(remaining / payment) * payment * self.extra_payment_share

        return Insight(
            type=self.insight_type,
            title="Loan Acceleration Opportunity",
            message=(
                f"You have {format_currency(remaining)} remaining. Consider making an extra "
                f"payment of {format_currency(extra_payment)} on your loan with "
                f"{loan.interest_rate * 100:.2f}% interest to save on interest."
            ),
            severity="success",
            actionable=True,
            action_label="View Loans",
            action_route="/loans",
        )


class MonthOverMonthRule(InsightRule):
    """Flag income or expense swings of more than 10% against the previous month"""

    insight_type = "month_over_month"
    threshold_percent = 10.0

    @staticmethod
    def _percent_change(current: float, previous: float) -> float:
        if previous <= 0:
            return 0.0
        return (current - previous) / previous * 100

    def evaluate(self, snapshot: InsightSnapshot) -> Optional[Insight]:
        # No previous data is not a 100% change
        if snapshot.previous_income == 0 and snapshot.previous_expenses == 0:
            return None

        income_change = self._percent_change(snapshot.income, snapshot.previous_income)
        expense_change = self._percent_change(snapshot.expenses, snapshot.previous_expenses)

        messages = []
        if abs(income_change) > self.threshold_percent:
            direction = "increased" if income_change > 0 else "decreased"
            messages.append(f"Income {direction} by {abs(income_change):.0f}%")
        if abs(expense_change) > self.threshold_percent:
            direction = "increased" if expense_change > 0 else "decreased"
            messages.append(f"Expenses {direction} by {abs(expense_change):.0f}%")

        if not messages:
            return None

        worsened = income_change < -self.threshold_percent or expense_change > self.threshold_percent

        return Insight(
            type=self.insight_type,
            title="Month-over-Month Change",
            message=f"Compared to last month: {', '.join(messages)}.",
            severity="warning" if worsened else "info",
        )


# Output order is fixed for presentation stability
DEFAULT_RULES: Sequence[InsightRule] = (
    OverspendingRule(),
    LoanAccelerationRule(),
    MonthOverMonthRule(),
)


def generate_insights(
    snapshot: InsightSnapshot,
    rules: Sequence[InsightRule] = DEFAULT_RULES,
) -> List[Insight]:
    """Evaluate every rule against the snapshot, keeping rule order"""
    insights = []
    for rule in rules:
        insight = rule.evaluate(snapshot)
        if insight is not None:
            insights.append(insight)
    return insights
