"""Input validation shared by services and routes"""

import re
from datetime import date
from typing import Optional, Tuple
from open_planner.domain.exceptions import ValidationError

MIN_YEAR = 2000
MAX_YEAR = 2100
MAX_AMOUNT = 999_999_999_999.99
MAX_TERM_MONTHS = 600  # 50 years
MAX_DESCRIPTION_LENGTH = 500

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def validate_year_month(year: int, month: int) -> None:
    if month < 1 or month > 12:
        raise ValidationError("Month must be between 1 and 12")
    if year < MIN_YEAR or year > MAX_YEAR:
        raise ValidationError(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")


def resolve_target_month(
    year: Optional[int],
    month: Optional[int],
    today: Optional[date] = None,
) -> Tuple[int, int]:
    """
    Fill in the target month, defaulting to the current calendar month.

    Both values are needed to pick a month explicitly; a lone year or
    month falls back to today, but is still rejected when out of range.
    """
    today = today or date.today()
    validate_year_month(
        year if year is not None else today.year,
        month if month is not None else today.month,
    )

    if year is None or month is None:
        return today.year, today.month
    return year, month


def month_or_current(
    year: Optional[int],
    month: Optional[int],
    today: Optional[date] = None,
) -> Tuple[int, int]:
    """Report month: each missing value defaults to today's independently"""
    today = today or date.today()
    year = year if year is not None else today.year
    month = month if month is not None else today.month
    validate_year_month(year, month)
    return year, month


def validate_loan_terms(principal: float, interest_rate: float, term_months: int) -> None:
    if principal <= 0:
        raise ValidationError("Principal must be greater than 0")
    if principal > MAX_AMOUNT:
        raise ValidationError("Principal exceeds maximum value")
    if interest_rate < 0 or interest_rate > 1:
        raise ValidationError("Interest rate must be between 0 and 1 (0% to 100%)")
    if term_months <= 0:
        raise ValidationError("Term must be a positive integer (months)")
    if term_months > MAX_TERM_MONTHS:
        raise ValidationError(f"Term cannot exceed {MAX_TERM_MONTHS} months (50 years)")


def normalize_currency(value: str) -> str:
    """Upper-case ISO 4217 code, e.g. 'eur' → 'EUR'"""
    code = (value or "").strip().upper()
    if not _CURRENCY_RE.match(code):
        raise ValidationError("Currency must be a three-letter ISO 4217 code")
    return code
