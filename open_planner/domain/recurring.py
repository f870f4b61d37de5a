"""Recurring item materialization rules - which items produce an expense for a month"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
from open_planner.domain.models import RecurringItem
from open_planner.utils.date_utils import first_day_of_month, last_day_of_month

DEFAULT_DESCRIPTION = "Recurring expense"

# Plan outcomes
GENERATE = "generate"
ALREADY_GENERATED = "already_generated"
NOT_STARTED = "not_started"
INACTIVE = "inactive"
OUT_OF_MONTH = "out_of_month"


@dataclass
class GenerationPlan:
    """What to do with one recurring item for a target month"""

    action: str
    month_key: date
    expense_date: Optional[date] = None
    description: Optional[str] = None

    @property
    def should_generate(self) -> bool:
        return self.action == GENERATE


def month_key(year: int, month: int) -> date:
    """Marker value stored on an item once the month has been generated"""
    return first_day_of_month(year, month)


def expense_date_for(day_of_month: int, year: int, month: int) -> date:
    """
    Date the generated expense lands on.

    Days past the end of the month clamp to the last day instead of
    rolling over (day 31 in February → Feb 28/29).
    """
    last_day = last_day_of_month(year, month)
    return date(year, month, min(day_of_month, last_day.day))


def is_candidate(item: RecurringItem, year: int, month: int) -> bool:
    """Active items that have started by the end of the target month"""
    return item.is_active and item.start_date <= last_day_of_month(year, month)


def plan_generation(item: RecurringItem, year: int, month: int) -> GenerationPlan:
    """
    Decide whether an item produces an expense for the target month.

    The last-generated-month marker is the only idempotence guard: an item
    whose marker already equals the month key is never generated again.
    """
    key = month_key(year, month)

    if not item.is_active:
        return GenerationPlan(action=INACTIVE, month_key=key)

    if item.start_date > last_day_of_month(year, month):
        return GenerationPlan(action=NOT_STARTED, month_key=key)

    if item.last_generated_month is not None and first_day_of_month(
        item.last_generated_month.year, item.last_generated_month.month
    ) == key:
        return GenerationPlan(action=ALREADY_GENERATED, month_key=key)

    expense_date = expense_date_for(item.day_of_month, year, month)
    if not key <= expense_date <= last_day_of_month(year, month):
        return GenerationPlan(action=OUT_OF_MONTH, month_key=key)

    return GenerationPlan(
        action=GENERATE,
        month_key=key,
        expense_date=expense_date,
        description=item.description or DEFAULT_DESCRIPTION,
    )
