"""Integration tests for recurring expense generation against a real database"""

import pytest
from datetime import date
from unittest.mock import patch
from sqlalchemy.exc import OperationalError
from open_planner.domain.exceptions import ValidationError
from open_planner.infrastructure.database.models import RecurringItemRecord
from open_planner.infrastructure.database.repositories import (
    ExpenseRepository,
    RecurringItemRepository,
)
from open_planner.services.recurring import RecurringExpenseGenerator

pytestmark = pytest.mark.integration

USER_ID = "user_test"
MARCH_2024 = date(2024, 3, 10)


def markers(db):
    return {item.id: item.last_generated_month for item in RecurringItemRepository(db).list_for_user(USER_ID)}


def test_generates_one_expense_per_item(db, category, make_recurring_item):
    rent = make_recurring_item(category.id, amount=1200, day_of_month=1, description="Rent")
    gym = make_recurring_item(category.id, amount=40, day_of_month=15, description="Gym")

    result = RecurringExpenseGenerator(db).generate(USER_ID, today=MARCH_2024)

    assert result.generated_count == 2
    assert result.skipped_count == 0
    assert result.failed_count == 0

    expenses = ExpenseRepository(db).list_for_user(USER_ID)
    assert sorted((e.date, e.amount, e.description) for e in expenses) == [
        (date(2024, 3, 1), 1200.0, "Rent"),
        (date(2024, 3, 15), 40.0, "Gym"),
    ]
    assert markers(db) == {rent.id: date(2024, 3, 1), gym.id: date(2024, 3, 1)}


def test_second_run_is_a_no_op(db, category, make_recurring_item):
    make_recurring_item(category.id, day_of_month=1)
    make_recurring_item(category.id, day_of_month=15)
    generator = RecurringExpenseGenerator(db)

    generator.generate(USER_ID, 2024, 3)
    result = generator.generate(USER_ID, 2024, 3)

    assert result.generated_count == 0
    assert result.skipped_count == 2
    assert len(ExpenseRepository(db).list_for_user(USER_ID)) == 2


def test_next_month_generates_again(db, category, make_recurring_item):
    make_recurring_item(category.id, day_of_month=5)
    generator = RecurringExpenseGenerator(db)

    generator.generate(USER_ID, 2024, 3)
    result = generator.generate(USER_ID, 2024, 4)

    assert result.generated_count == 1
    dates = sorted(e.date for e in ExpenseRepository(db).list_for_user(USER_ID))
    assert dates == [date(2024, 3, 5), date(2024, 4, 5)]


def test_day_clamped_to_short_month(db, category, make_recurring_item):
    make_recurring_item(category.id, day_of_month=31)

    result = RecurringExpenseGenerator(db).generate(USER_ID, 2023, 2)

    assert result.generated_count == 1
    [expense] = ExpenseRepository(db).list_for_user(USER_ID)
    assert expense.date == date(2023, 2, 28)


def test_items_not_started_or_inactive_are_not_counted(db, category, make_recurring_item):
    make_recurring_item(category.id, start_date=date(2024, 4, 1))
    make_recurring_item(category.id, is_active=False)

    result = RecurringExpenseGenerator(db).generate(USER_ID, 2024, 3)

    assert (result.generated_count, result.skipped_count, result.failed_count) == (0, 0, 0)
    assert ExpenseRepository(db).list_for_user(USER_ID) == []


def test_item_starting_mid_month_generates(db, category, make_recurring_item):
    make_recurring_item(category.id, day_of_month=1, start_date=date(2024, 3, 20))

    result = RecurringExpenseGenerator(db).generate(USER_ID, 2024, 3)

    assert result.generated_count == 1


def test_foreign_category_fails_only_that_item(db, category, other_category, make_recurring_item):
    """An item pointing at another user's category fails; the rest still run"""
    bad = make_recurring_item(other_category.id, day_of_month=1)
    good = make_recurring_item(category.id, day_of_month=2)

    result = RecurringExpenseGenerator(db).generate(USER_ID, 2024, 3)

    assert result.generated_count == 1
    assert result.failed_count == 1
    assert markers(db) == {bad.id: None, good.id: date(2024, 3, 1)}
    [expense] = ExpenseRepository(db).list_for_user(USER_ID)
    assert expense.category_id == category.id


def test_missing_description_uses_default(db, category, make_recurring_item):
    make_recurring_item(category.id, description=None)

    RecurringExpenseGenerator(db).generate(USER_ID, 2024, 3)

    [expense] = ExpenseRepository(db).list_for_user(USER_ID)
    assert expense.description == "Recurring expense"


def test_claim_month_only_succeeds_once(db, category, make_recurring_item):
    item = make_recurring_item(category.id)
    repo = RecurringItemRepository(db)

    assert repo.claim_month(USER_ID, item.id, date(2024, 3, 1)) is True
    assert repo.claim_month(USER_ID, item.id, date(2024, 3, 1)) is False
    assert repo.claim_month(USER_ID, item.id, date(2024, 4, 1)) is True
    db.commit()


def test_claim_month_scoped_to_owner(db, category, make_recurring_item):
    item = make_recurring_item(category.id)

    assert RecurringItemRepository(db).claim_month("someone_else", item.id, date(2024, 3, 1)) is False


def test_database_error_rolls_back_marker(db, category, make_recurring_item):
    """A failed insert must not leave the month claimed"""
    item = make_recurring_item(category.id)

    with patch.object(
        ExpenseRepository,
        "create",
        side_effect=OperationalError("INSERT INTO expenses", {}, Exception("disk I/O error")),
    ):
        with pytest.raises(OperationalError):
            RecurringExpenseGenerator(db).generate(USER_ID, 2024, 3)

    assert markers(db) == {item.id: None}

    # Retry succeeds once the database recovers
    result = RecurringExpenseGenerator(db).generate(USER_ID, 2024, 3)
    assert result.generated_count == 1


@pytest.mark.parametrize("year,month", [(2024, 13), (2024, 0), (1999, 6)])
def test_invalid_target_month(db, year, month):
    with pytest.raises(ValidationError):
        RecurringExpenseGenerator(db).generate(USER_ID, year, month)


def test_mid_month_marker_counts_as_generated(db, category, make_recurring_item):
    """Any marker date inside the month blocks the claim, not only the first"""
    item = make_recurring_item(category.id)
    db.query(RecurringItemRecord).filter(RecurringItemRecord.id == item.id).update(
        {RecurringItemRecord.last_generated_month: date(2024, 3, 17)}
    )
    db.commit()
    repo = RecurringItemRepository(db)

    assert repo.claim_month(USER_ID, item.id, date(2024, 3, 1)) is False
    assert repo.claim_month(USER_ID, item.id, date(2024, 4, 1)) is True
    db.commit()
