"""Recurring expense generation - turns recurring items into expenses once per month"""

import logging
from datetime import date
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from open_planner.domain.exceptions import NotFoundError
from open_planner.domain.models import GenerateResult
from open_planner.domain.recurring import plan_generation
from open_planner.domain.validation import resolve_target_month
from open_planner.infrastructure.database.repositories import (
    CategoryRepository,
    ExpenseRepository,
    RecurringItemRepository,
)


class RecurringExpenseGenerator:
    """Materialize a user's recurring items into expenses for a target month"""

    def __init__(self, db: Session):
        self.db = db
        self.items = RecurringItemRepository(db)
        self.categories = CategoryRepository(db)
        self.expenses = ExpenseRepository(db)

    def generate(
        self,
        user_id: str,
        year: Optional[int] = None,
        month: Optional[int] = None,
        today: Optional[date] = None,
    ) -> GenerateResult:
        """
        Generate this month's expenses for every eligible recurring item.

        Flow per item:
        1. Skip if the last-generated-month marker already equals the month
        2. Check the category still exists and belongs to the user
        3. Claim the month with an atomic conditional update of the marker
        4. Insert the expense and commit, one transaction per item

        An ownership failure only fails that item. A database error rolls
        back the current item and aborts the whole run.

        Raises:
            ValidationError: year/month out of range
            SQLAlchemyError: Persistence failure, not retried
        """
        year, month = resolve_target_month(year, month, today)
        result = GenerateResult()

        try:
            for item in self.items.candidates_for_month(user_id, year, month):
                plan = plan_generation(item, year, month)
                if not plan.should_generate:
                    result.skipped_count += 1
                    continue

                try:
                    self.categories.require(user_id, item.category_id)
                except NotFoundError as e:
                    result.failed_count += 1
                    logging.warning(
                        f"Recurring item {item.id} not generated: {e}",
                        extra={"user_id": user_id, "recurring_item_id": str(item.id)},
                    )
                    continue

                # Lost the claim to a concurrent run
                if not self.items.claim_month(user_id, item.id, plan.month_key):
                    result.skipped_count += 1
                    continue

                self.expenses.create(
                    user_id=user_id,
                    category_id=item.category_id,
                    amount=item.amount,
                    description=plan.description,
                    expense_date=plan.expense_date,
                )
                self.db.commit()
                result.generated_count += 1

            self.db.commit()

        except SQLAlchemyError:
            self.db.rollback()
            raise

        return result
