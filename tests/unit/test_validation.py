"""Unit tests for target-month resolution"""

import pytest
from datetime import date
from open_planner.domain.exceptions import ValidationError
from open_planner.domain.validation import month_or_current, resolve_target_month

TODAY = date(2024, 6, 15)


def test_resolve_uses_explicit_month():
    assert resolve_target_month(2023, 2, TODAY) == (2023, 2)


@pytest.mark.parametrize("year,month", [(None, None), (2023, None), (None, 2)])
def test_resolve_falls_back_to_today_without_both_values(year, month):
    assert resolve_target_month(year, month, TODAY) == (2024, 6)


@pytest.mark.parametrize("year,month", [(None, 13), (None, 0), (1999, None), (2101, None), (2024, 13)])
def test_resolve_rejects_any_supplied_value_out_of_range(year, month):
    with pytest.raises(ValidationError):
        resolve_target_month(year, month, TODAY)


def test_month_or_current_defaults_each_value():
    assert month_or_current(None, None, TODAY) == (2024, 6)
    assert month_or_current(2023, None, TODAY) == (2023, 6)
    assert month_or_current(None, 2, TODAY) == (2024, 2)


@pytest.mark.parametrize("year,month", [(None, 13), (1999, None), (2024, 0)])
def test_month_or_current_rejects_out_of_range(year, month):
    with pytest.raises(ValidationError):
        month_or_current(year, month, TODAY)
