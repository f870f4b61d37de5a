"""Pydantic schemas for API request/response validation"""

import datetime
import uuid
from typing import Annotated, Any, ClassVar, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from open_planner.domain.validation import MAX_AMOUNT, MAX_DESCRIPTION_LENGTH, MAX_TERM_MONTHS

Amount = Annotated[float, Field(gt=0, le=MAX_AMOUNT, description="Positive amount, at most 999,999,999,999.99")]
Description = Optional[Annotated[str, Field(max_length=MAX_DESCRIPTION_LENGTH)]]
HEX_COLOR = r"^#[0-9A-Fa-f]{6}$"


class UpdateModel(BaseModel):
    """Partial update body: only fields present in the request are applied"""

    # Fields that may be explicitly cleared with null
    nullable_fields: ClassVar[frozenset] = frozenset({"description", "icon"})

    def changes(self) -> Dict[str, Any]:
        return {
            name: value
            for name, value in self.model_dump(exclude_unset=True).items()
            if value is not None or name in self.nullable_fields
        }


class ResponseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Users


class UserResponse(ResponseModel):
    external_user_id: str
    currency: str


class CurrencyUpdate(BaseModel):
    currency: str = Field(..., min_length=3, max_length=3, description="ISO 4217 code, e.g. USD")


# Categories


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: Optional[str] = Field(None, max_length=16)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class CategoryUpdate(UpdateModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    icon: Optional[str] = Field(None, max_length=16)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


class CategoryResponse(ResponseModel):
    id: uuid.UUID
    name: str
    icon: Optional[str] = None
    color: str
    is_default: bool


# Expenses


class ExpenseCreate(BaseModel):
    category_id: uuid.UUID
    amount: Amount
    description: Description = None
    date: Optional[datetime.date] = None  # Defaults to today


class ExpenseUpdate(UpdateModel):
    category_id: Optional[uuid.UUID] = None
    amount: Optional[Amount] = None
    description: Description = None
    date: Optional[datetime.date] = None


class ExpenseResponse(ResponseModel):
    id: uuid.UUID
    category_id: uuid.UUID
    amount: float
    description: Optional[str] = None
    date: datetime.date


# Income


class IncomeCreate(BaseModel):
    amount: Amount
    description: Description = None
    date: Optional[datetime.date] = None
    is_recurring: bool = False


class IncomeUpdate(UpdateModel):
    amount: Optional[Amount] = None
    description: Description = None
    date: Optional[datetime.date] = None
    is_recurring: Optional[bool] = None


class IncomeResponse(ResponseModel):
    id: uuid.UUID
    amount: float
    description: Optional[str] = None
    date: datetime.date
    is_recurring: bool


# Loans


class LoanCreate(BaseModel):
    principal: Amount
    interest_rate: float = Field(..., ge=0, le=1, description="Annual rate as a fraction (0.05 = 5%)")
    term_months: int = Field(..., gt=0, le=MAX_TERM_MONTHS)
    start_date: Optional[datetime.date] = None
    description: Description = None


class LoanUpdate(UpdateModel):
    principal: Optional[Amount] = None
    interest_rate: Optional[float] = Field(None, ge=0, le=1)
    term_months: Optional[int] = Field(None, gt=0, le=MAX_TERM_MONTHS)
    start_date: Optional[datetime.date] = None
    description: Description = None


class LoanResponse(BaseModel):
    id: uuid.UUID
    principal: float
    interest_rate: float
    term_months: int
    start_date: datetime.date
    description: Optional[str] = None
    monthly_payment: float
    remaining_balance: float
    is_active: bool


class PaymentResponse(BaseModel):
    principal: float
    interest_rate: float
    term_months: int
    monthly_payment: float


# Recurring items


class RecurringItemCreate(BaseModel):
    category_id: uuid.UUID
    amount: Amount
    description: Description = None
    day_of_month: int = Field(1, ge=1, le=31)
    start_date: Optional[datetime.date] = None


class RecurringItemUpdate(UpdateModel):
    category_id: Optional[uuid.UUID] = None
    amount: Optional[Amount] = None
    description: Description = None
    day_of_month: Optional[int] = Field(None, ge=1, le=31)
    start_date: Optional[datetime.date] = None
    is_active: Optional[bool] = None


class RecurringItemResponse(ResponseModel):
    id: uuid.UUID
    category_id: uuid.UUID
    amount: float
    description: Optional[str] = None
    day_of_month: int
    start_date: datetime.date
    last_generated_month: Optional[datetime.date] = None
    is_active: bool


class GenerateResponse(ResponseModel):
    """Response for POST /v1/recurring-items/generate"""

    year: int
    month: int
    generated_count: int
    skipped_count: int
    failed_count: int


# Dashboard


class CategorySpendSchema(ResponseModel):
    category_id: uuid.UUID
    category_name: str
    category_icon: Optional[str] = None
    category_color: str
    total_amount: float
    expense_count: int


class MonthlyExpensesResponse(BaseModel):
    """Response for GET /v1/expenses/monthly"""

    year: int
    month: int
    expenses_by_category: List[CategorySpendSchema]
    total_spend: float


class MonthlyIncomeResponse(BaseModel):
    """Response for GET /v1/income/monthly"""

    year: int
    month: int
    total_income: float


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard/monthly"""

    year: int
    month: int
    income: float
    expenses: float
    loan_obligations: float
    remaining_balance: float
    expenses_by_category: List[CategorySpendSchema]
    loans: List[LoanResponse]


# Insights


class InsightSchema(ResponseModel):
    type: str
    title: str
    message: str
    severity: str
    actionable: bool = False
    action_label: Optional[str] = None
    action_route: Optional[str] = None


class InsightsResponse(BaseModel):
    """Response for GET /v1/insights"""

    year: int
    month: int
    insights: List[InsightSchema]
