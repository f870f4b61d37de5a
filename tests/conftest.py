"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from open_planner.api.main import create_app
from open_planner.domain.models import Category, Loan, RecurringItem
from open_planner.infrastructure.database.models import Base
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.database.repositories import (
    CategoryRepository,
    ExpenseRepository,
    IncomeRepository,
    LoanRepository,
    RecurringItemRepository,
)


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

USER_ID = "user_test"
OTHER_USER_ID = "user_other"


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db: Session):
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app) -> TestClient:
    """FastAPI test client authenticated as USER_ID"""
    return TestClient(app, headers={"X-User-Id": USER_ID})


@pytest.fixture
def anonymous_client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def category(db: Session) -> Category:
    """Custom category owned by USER_ID"""
    category = CategoryRepository(db).create(USER_ID, "Rent", icon="🏠", color="#111111")
    db.commit()
    return category


@pytest.fixture
def other_category(db: Session) -> Category:
    """Category owned by a different user"""
    category = CategoryRepository(db).create(OTHER_USER_ID, "Rent", color="#222222")
    db.commit()
    return category


@pytest.fixture
def make_recurring_item(db: Session) -> Callable[..., RecurringItem]:
    def _make(
        category_id,
        amount: float = 100.0,
        day_of_month: int = 1,
        start_date: date = date(2020, 1, 1),
        description: str | None = "Recurring",
        is_active: bool = True,
        user_id: str = USER_ID,
    ) -> RecurringItem:
        repo = RecurringItemRepository(db)
        item = repo.create(
            user_id=user_id,
            category_id=category_id,
            amount=amount,
            description=description,
            day_of_month=day_of_month,
            start_date=start_date,
        )
        if not is_active:
            item = repo.update(user_id, item.id, {"is_active": False})
        db.commit()
        return item

    return _make


@pytest.fixture
def make_expense(db: Session) -> Callable[..., None]:
    def _make(category_id, amount: float, expense_date: date, user_id: str = USER_ID) -> None:
        ExpenseRepository(db).create(user_id, category_id, amount, "Expense", expense_date)
        db.commit()

    return _make


@pytest.fixture
def make_income(db: Session) -> Callable[..., None]:
    def _make(amount: float, income_date: date, user_id: str = USER_ID) -> None:
        IncomeRepository(db).create(user_id, amount, "Salary", income_date)
        db.commit()

    return _make


@pytest.fixture
def make_loan(db: Session) -> Callable[..., Loan]:
    def _make(
        principal: float,
        interest_rate: float,
        term_months: int,
        start_date: date,
        user_id: str = USER_ID,
    ) -> Loan:
        loan = LoanRepository(db).create(user_id, principal, interest_rate, term_months, start_date)
        db.commit()
        return loan

    return _make
