"""Data access layer for finance entities, every query scoped to the owning user"""

import uuid
from datetime import date
from typing import Any, Dict, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from open_planner.infrastructure.database.models import (
    CategoryRecord,
    ExpenseRecord,
    IncomeRecord,
    LoanRecord,
    RecurringItemRecord,
    UserRecord,
)
from open_planner.domain.models import (
    Category,
    CategorySpend,
    Expense,
    Income,
    Loan,
    RecurringItem,
)
from open_planner.domain.exceptions import ConflictError, NotFoundError
from open_planner.utils.date_utils import first_day_of_month, last_day_of_month

# Seeded for every new user: (name, icon, color)
DEFAULT_CATEGORIES = [
    ("Food & Dining", "🍽️", "#EF4444"),
    ("Transportation", "🚗", "#3B82F6"),
    ("Shopping", "🛍️", "#8B5CF6"),
    ("Bills & Utilities", "💡", "#F59E0B"),
    ("Entertainment", "🎬", "#EC4899"),
    ("Healthcare", "🏥", "#10B981"),
    ("Education", "📚", "#6366F1"),
    ("Travel", "✈️", "#06B6D4"),
    ("Personal Care", "💅", "#F97316"),
    ("Other", "📦", "#6B7280"),
]


def _apply_changes(record: Any, changes: Dict[str, Any]) -> None:
    for name, value in changes.items():
        setattr(record, name, value)


def _category(record: CategoryRecord) -> Category:
    return Category(
        id=record.id,
        user_id=record.user_id,
        name=record.name,
        icon=record.icon,
        color=record.color,
        is_default=record.is_default,
    )


def _expense(record: ExpenseRecord) -> Expense:
    return Expense(
        id=record.id,
        user_id=record.user_id,
        category_id=record.category_id,
        amount=float(record.amount),
        description=record.description,
        date=record.date,
    )


def _income(record: IncomeRecord) -> Income:
    return Income(
        id=record.id,
        user_id=record.user_id,
        amount=float(record.amount),
        description=record.description,
        date=record.date,
        is_recurring=record.is_recurring,
    )


def _loan(record: LoanRecord) -> Loan:
    return Loan(
        id=record.id,
        user_id=record.user_id,
        principal=float(record.principal),
        interest_rate=float(record.interest_rate),
        term_months=record.term_months,
        start_date=record.start_date,
        description=record.description,
    )


def _recurring_item(record: RecurringItemRecord) -> RecurringItem:
    return RecurringItem(
        id=record.id,
        user_id=record.user_id,
        category_id=record.category_id,
        amount=float(record.amount),
        description=record.description,
        day_of_month=record.day_of_month,
        start_date=record.start_date,
        last_generated_month=record.last_generated_month,
        is_active=record.is_active,
    )


class UserRepository:
    """Repository for users keyed by their external identity"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_external_id(self, external_user_id: str) -> Optional[UserRecord]:
        return (
            self.db.query(UserRecord)
            .filter(UserRecord.external_user_id == external_user_id)
            .first()
        )

    def get_or_create(self, external_user_id: str, currency: str = "USD") -> UserRecord:
        """Fetch the user, creating it with default categories on first sight"""
        user = self.get_by_external_id(external_user_id)
        if user is not None:
            return user

        user = UserRecord(external_user_id=external_user_id, currency=currency)
        self.db.add(user)
        CategoryRepository(self.db).seed_defaults(external_user_id)
        self.db.flush()
        return user

    def update_currency(self, external_user_id: str, currency: str) -> UserRecord:
        user = self.get_by_external_id(external_user_id)
        if user is None:
            raise NotFoundError("User not found")
        user.currency = currency
        self.db.flush()
        return user


class CategoryRepository:
    """Repository for expense categories"""

    def __init__(self, db: Session):
        self.db = db

    def _get_record(self, user_id: str, category_id: uuid.UUID) -> CategoryRecord:
        record = (
            self.db.query(CategoryRecord)
            .filter(CategoryRecord.id == category_id, CategoryRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Category not found or access denied")
        return record

    def _name_taken(self, user_id: str, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        query = self.db.query(CategoryRecord.id).filter(
            CategoryRecord.user_id == user_id,
            CategoryRecord.name == name,
        )
        if exclude_id is not None:
            query = query.filter(CategoryRecord.id != exclude_id)
        return query.first() is not None

    def list_for_user(self, user_id: str) -> List[Category]:
        records = (
            self.db.query(CategoryRecord)
            .filter(CategoryRecord.user_id == user_id)
            .order_by(CategoryRecord.is_default.desc(), CategoryRecord.name.asc())
            .all()
        )
        return [_category(r) for r in records]

    def require(self, user_id: str, category_id: uuid.UUID) -> Category:
        """
        Ownership guard for records that reference a category.

        Raises:
            NotFoundError: Category missing or owned by someone else
        """
        return _category(self._get_record(user_id, category_id))

    def seed_defaults(self, user_id: str) -> None:
        existing = {
            name
            for (name,) in self.db.query(CategoryRecord.name).filter(CategoryRecord.user_id == user_id)
        }
        for name, icon, color in DEFAULT_CATEGORIES:
            if name in existing:
                continue
            self.db.add(
                CategoryRecord(user_id=user_id, name=name, icon=icon, color=color, is_default=True)
            )
        self.db.flush()

    def create(self, user_id: str, name: str, icon: Optional[str] = None, color: Optional[str] = None) -> Category:
        if self._name_taken(user_id, name):
            raise ConflictError(f"Category '{name}' already exists")

        record = CategoryRecord(user_id=user_id, name=name, icon=icon, color=color or "#3B82F6")
        self.db.add(record)
        self.db.flush()
        return _category(record)

    def update(self, user_id: str, category_id: uuid.UUID, changes: Dict[str, Any]) -> Category:
        record = self._get_record(user_id, category_id)
        if record.is_default:
            raise ConflictError("Cannot update default category")
        if "name" in changes and self._name_taken(user_id, changes["name"], exclude_id=record.id):
            raise ConflictError(f"Category '{changes['name']}' already exists")

        _apply_changes(record, changes)
        self.db.flush()
        return _category(record)

    def delete(self, user_id: str, category_id: uuid.UUID) -> None:
        record = self._get_record(user_id, category_id)
        if record.is_default:
            raise ConflictError("Cannot delete default category")

        in_use = (
            self.db.query(ExpenseRecord.id).filter(ExpenseRecord.category_id == record.id).first()
            or self.db.query(RecurringItemRecord.id).filter(RecurringItemRecord.category_id == record.id).first()
        )
        if in_use:
            raise ConflictError("Category is still used by expenses or recurring items")

        self.db.delete(record)
        self.db.flush()


class ExpenseRepository:
    """Repository for expenses and their monthly aggregates"""

    def __init__(self, db: Session):
        self.db = db

    def _get_record(self, user_id: str, expense_id: uuid.UUID) -> ExpenseRecord:
        record = (
            self.db.query(ExpenseRecord)
            .filter(ExpenseRecord.id == expense_id, ExpenseRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Expense not found or access denied")
        return record

    def list_for_user(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Expense]:
        query = self.db.query(ExpenseRecord).filter(ExpenseRecord.user_id == user_id)
        if start_date is not None:
            query = query.filter(ExpenseRecord.date >= start_date)
        if end_date is not None:
            query = query.filter(ExpenseRecord.date <= end_date)
        records = query.order_by(ExpenseRecord.date.desc(), ExpenseRecord.created_at.desc()).all()
        return [_expense(r) for r in records]

    def create(
        self,
        user_id: str,
        category_id: uuid.UUID,
        amount: float,
        description: Optional[str],
        expense_date: date,
    ) -> Expense:
        """Insert an expense; category ownership is checked by the caller"""
        record = ExpenseRecord(
            user_id=user_id,
            category_id=category_id,
            amount=amount,
            description=description,
            date=expense_date,
        )
        self.db.add(record)
        self.db.flush()
        return _expense(record)

    def update(self, user_id: str, expense_id: uuid.UUID, changes: Dict[str, Any]) -> Expense:
        record = self._get_record(user_id, expense_id)
        _apply_changes(record, changes)
        self.db.flush()
        return _expense(record)

    def delete(self, user_id: str, expense_id: uuid.UUID) -> None:
        self.db.delete(self._get_record(user_id, expense_id))
        self.db.flush()

    def total_for_month(self, user_id: str, year: int, month: int) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(ExpenseRecord.amount), 0))
            .filter(
                ExpenseRecord.user_id == user_id,
                ExpenseRecord.date >= first_day_of_month(year, month),
                ExpenseRecord.date <= last_day_of_month(year, month),
            )
            .scalar()
        )
        return float(total or 0)

    def by_category_for_month(self, user_id: str, year: int, month: int) -> List[CategorySpend]:
        total_amount = func.sum(ExpenseRecord.amount).label("total_amount")
        rows = (
            self.db.query(
                CategoryRecord.id,
                CategoryRecord.name,
                CategoryRecord.icon,
                CategoryRecord.color,
                total_amount,
                func.count(ExpenseRecord.id).label("expense_count"),
            )
            .join(ExpenseRecord, ExpenseRecord.category_id == CategoryRecord.id)
            .filter(
                ExpenseRecord.user_id == user_id,
                ExpenseRecord.date >= first_day_of_month(year, month),
                ExpenseRecord.date <= last_day_of_month(year, month),
            )
            .group_by(CategoryRecord.id, CategoryRecord.name, CategoryRecord.icon, CategoryRecord.color)
            .order_by(total_amount.desc(), CategoryRecord.name.asc())
            .all()
        )
        return [
            CategorySpend(
                category_id=row.id,
                category_name=row.name,
                category_icon=row.icon,
                category_color=row.color,
                total_amount=float(row.total_amount),
                expense_count=row.expense_count,
            )
            for row in rows
        ]


class IncomeRepository:
    """Repository for income entries"""

    def __init__(self, db: Session):
        self.db = db

    def _get_record(self, user_id: str, income_id: uuid.UUID) -> IncomeRecord:
        record = (
            self.db.query(IncomeRecord)
            .filter(IncomeRecord.id == income_id, IncomeRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Income not found or access denied")
        return record

    def list_for_user(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Income]:
        query = self.db.query(IncomeRecord).filter(IncomeRecord.user_id == user_id)
        if start_date is not None:
            query = query.filter(IncomeRecord.date >= start_date)
        if end_date is not None:
            query = query.filter(IncomeRecord.date <= end_date)
        records = query.order_by(IncomeRecord.date.desc(), IncomeRecord.created_at.desc()).all()
        return [_income(r) for r in records]

    def create(
        self,
        user_id: str,
        amount: float,
        description: Optional[str],
        income_date: date,
        is_recurring: bool = False,
    ) -> Income:
        record = IncomeRecord(
            user_id=user_id,
            amount=amount,
            description=description,
            date=income_date,
            is_recurring=is_recurring,
        )
        self.db.add(record)
        self.db.flush()
        return _income(record)

    def update(self, user_id: str, income_id: uuid.UUID, changes: Dict[str, Any]) -> Income:
        record = self._get_record(user_id, income_id)
        _apply_changes(record, changes)
        self.db.flush()
        return _income(record)

    def delete(self, user_id: str, income_id: uuid.UUID) -> None:
        self.db.delete(self._get_record(user_id, income_id))
        self.db.flush()

    def total_for_month(self, user_id: str, year: int, month: int) -> float:
        total = (
            self.db.query(func.coalesce(func.sum(IncomeRecord.amount), 0))
            .filter(
                IncomeRecord.user_id == user_id,
                IncomeRecord.date >= first_day_of_month(year, month),
                IncomeRecord.date <= last_day_of_month(year, month),
            )
            .scalar()
        )
        return float(total or 0)


class LoanRepository:
    """Repository for loans"""

    def __init__(self, db: Session):
        self.db = db

    def _get_record(self, user_id: str, loan_id: uuid.UUID) -> LoanRecord:
        record = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.id == loan_id, LoanRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Loan not found or access denied")
        return record

    def list_for_user(self, user_id: str) -> List[Loan]:
        records = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.user_id == user_id)
            .order_by(LoanRecord.start_date.desc(), LoanRecord.created_at.desc())
            .all()
        )
        return [_loan(r) for r in records]

    def create(
        self,
        user_id: str,
        principal: float,
        interest_rate: float,
        term_months: int,
        start_date: date,
        description: Optional[str] = None,
    ) -> Loan:
        record = LoanRecord(
            user_id=user_id,
            principal=principal,
            interest_rate=interest_rate,
            term_months=term_months,
            start_date=start_date,
            description=description,
        )
        self.db.add(record)
        self.db.flush()
        return _loan(record)

    def update(self, user_id: str, loan_id: uuid.UUID, changes: Dict[str, Any]) -> Loan:
        record = self._get_record(user_id, loan_id)
        _apply_changes(record, changes)
        self.db.flush()
        return _loan(record)

    def delete(self, user_id: str, loan_id: uuid.UUID) -> None:
        self.db.delete(self._get_record(user_id, loan_id))
        self.db.flush()


class RecurringItemRepository:
    """Repository for recurring items and their generation markers"""

    def __init__(self, db: Session):
        self.db = db

    def _get_record(self, user_id: str, item_id: uuid.UUID) -> RecurringItemRecord:
        record = (
            self.db.query(RecurringItemRecord)
            .filter(RecurringItemRecord.id == item_id, RecurringItemRecord.user_id == user_id)
            .first()
        )
        if record is None:
            raise NotFoundError("Recurring item not found or access denied")
        return record

    def list_for_user(self, user_id: str, active_only: bool = False) -> List[RecurringItem]:
        query = self.db.query(RecurringItemRecord).filter(RecurringItemRecord.user_id == user_id)
        if active_only:
            query = query.filter(RecurringItemRecord.is_active.is_(True))
        records = query.order_by(
            RecurringItemRecord.day_of_month.asc(),
            RecurringItemRecord.created_at.desc(),
        ).all()
        return [_recurring_item(r) for r in records]

    def candidates_for_month(self, user_id: str, year: int, month: int) -> List[RecurringItem]:
        """Active items that have started on or before the last day of the month"""
        records = (
            self.db.query(RecurringItemRecord)
            .filter(
                RecurringItemRecord.user_id == user_id,
                RecurringItemRecord.is_active.is_(True),
                RecurringItemRecord.start_date <= last_day_of_month(year, month),
            )
            .order_by(RecurringItemRecord.day_of_month.asc(), RecurringItemRecord.created_at.desc())
            .all()
        )
        return [_recurring_item(r) for r in records]

    def create(
        self,
        user_id: str,
        category_id: uuid.UUID,
        amount: float,
        description: Optional[str],
        day_of_month: int,
        start_date: date,
    ) -> RecurringItem:
        record = RecurringItemRecord(
            user_id=user_id,
            category_id=category_id,
            amount=amount,
            description=description,
            day_of_month=day_of_month,
            start_date=start_date,
            is_active=True,
        )
        self.db.add(record)
        self.db.flush()
        return _recurring_item(record)

    def update(self, user_id: str, item_id: uuid.UUID, changes: Dict[str, Any]) -> RecurringItem:
        record = self._get_record(user_id, item_id)
        _apply_changes(record, changes)
        self.db.flush()
        return _recurring_item(record)

    def delete(self, user_id: str, item_id: uuid.UUID) -> None:
        self.db.delete(self._get_record(user_id, item_id))
        self.db.flush()

    def claim_month(self, user_id: str, item_id: uuid.UUID, month_key: date) -> bool:
        """
        Atomically set the last-generated-month marker.

        Single conditional UPDATE: only applies when the marker falls
        outside the target month. `month_key` is the first of the month and
        is the value stored; any stored date inside the month counts as
        generated. Returns False when another caller got there first, so the
        check and the mark cannot race.
        """
        month_end = last_day_of_month(month_key.year, month_key.month)
        updated = (
            self.db.query(RecurringItemRecord)
            .filter(
                RecurringItemRecord.id == item_id,
                RecurringItemRecord.user_id == user_id,
                or_(
                    RecurringItemRecord.last_generated_month.is_(None),
                    RecurringItemRecord.last_generated_month < month_key,
                    RecurringItemRecord.last_generated_month > month_end,
                ),
            )
            .update(
                {RecurringItemRecord.last_generated_month: month_key},
                synchronize_session=False,
            )
        )
        return updated == 1
