"""Domain models - pure Python dataclasses representing business entities"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass
class Category:
    """Expense category owned by a user"""

    id: uuid.UUID
    user_id: str
    name: str
    icon: Optional[str]
    color: str
    is_default: bool


@dataclass
class Expense:
    """Money spent, entered manually or materialized from a recurring item"""

    id: uuid.UUID
    user_id: str
    category_id: uuid.UUID
    amount: float
    description: Optional[str]
    date: date


@dataclass
class Income:
    """Money received"""

    id: uuid.UUID
    user_id: str
    amount: float
    description: Optional[str]
    date: date
    is_recurring: bool = False


@dataclass
class Loan:
    """Fixed-rate amortizing loan"""

    id: uuid.UUID
    user_id: str
    principal: float
    interest_rate: float  # Annual, as a fraction (0.05 = 5%)
    term_months: int
    start_date: date
    description: Optional[str] = None


@dataclass
class RecurringItem:
    """Template that materializes into one expense per calendar month"""

    id: uuid.UUID
    user_id: str
    category_id: uuid.UUID
    amount: float
    description: Optional[str]
    day_of_month: int
    start_date: date
    last_generated_month: Optional[date]  # First day of the last generated month
    is_active: bool = True


@dataclass
class LoanSummary:
    """Derived loan figures shown on the dashboard"""

    loan: Loan
    monthly_payment: float
    remaining_balance: float
    is_active: bool


@dataclass
class CategorySpend:
    """Expense totals for one category within a month"""

    category_id: uuid.UUID
    category_name: str
    category_icon: Optional[str]
    category_color: str
    total_amount: float
    expense_count: int


@dataclass
class MonthlyDashboard:
    """Aggregated view of a single month"""

    year: int
    month: int
    income: float
    expenses: float
    loan_obligations: float
    remaining_balance: float
    expenses_by_category: List[CategorySpend] = field(default_factory=list)
    loans: List[LoanSummary] = field(default_factory=list)


@dataclass
class GenerateResult:
    """Outcome of a recurring expense generation run"""

    generated_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0


@dataclass
class Insight:
    """Advisory message computed on demand, never persisted"""

    type: str  # overspending | loan_acceleration | month_over_month
    title: str
    message: str
    severity: str  # info | warning | error | success
    actionable: bool = False
    action_label: Optional[str] = None
    action_route: Optional[str] = None
