"""SQLAlchemy ORM models for users and their finance records"""

import uuid
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# Money columns come back as float, the domain layer works in floats
Money = Numeric(12, 2, asdecimal=False)


class UserRecord(Base):
    """User known by the external identity provider's identifier"""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    external_user_id = Column(Text, nullable=False, unique=True, index=True)
    currency = Column(Text, nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class CategoryRecord(Base):
    """Expense category"""

    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "name", name="categories_user_name_unique"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    name = Column(Text, nullable=False)
    icon = Column(Text, nullable=True)
    color = Column(Text, nullable=False, default="#3B82F6")
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    expenses = relationship("ExpenseRecord", back_populates="category")


class ExpenseRecord(Base):
    """Expense, manual or generated from a recurring item"""

    __tablename__ = "expenses"
    __table_args__ = (CheckConstraint("amount > 0", name="expenses_amount_positive"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    category = relationship("CategoryRecord", back_populates="expenses")


class IncomeRecord(Base):
    """Income entry"""

    __tablename__ = "income"
    __table_args__ = (CheckConstraint("amount > 0", name="income_amount_positive"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    amount = Column(Money, nullable=False)
    description = Column(Text, nullable=True)
    date = Column(Date, nullable=False, index=True)
    is_recurring = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class LoanRecord(Base):
    """Fixed-rate loan"""

    __tablename__ = "loans"
    __table_args__ = (
        CheckConstraint("principal > 0", name="loans_principal_positive"),
        CheckConstraint("interest_rate >= 0 AND interest_rate <= 1", name="loans_interest_rate_range"),
        CheckConstraint("term_months > 0", name="loans_term_positive"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    principal = Column(Money, nullable=False)
    interest_rate = Column(Numeric(5, 4, asdecimal=False), nullable=False)
    term_months = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class RecurringItemRecord(Base):
    """Monthly expense template with its last-generated-month marker"""

    __tablename__ = "recurring_items"
    __table_args__ = (
        CheckConstraint("amount > 0", name="recurring_items_amount_positive"),
        CheckConstraint("day_of_month >= 1 AND day_of_month <= 31", name="recurring_items_day_range"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Text, nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    amount = Column(Money, nullable=False)
    description = Column(Text, nullable=True)
    day_of_month = Column(Integer, nullable=False, default=1)
    start_date = Column(Date, nullable=False, index=True)
    last_generated_month = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
