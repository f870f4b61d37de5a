"""/v1/loans - Loan management and payment calculation"""

import uuid
from datetime import date
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import LoanCreate, LoanResponse, LoanUpdate, PaymentResponse
from open_planner.api.dependencies import get_current_user_id
from open_planner.domain.amortization import calculate_monthly_payment, summarize_loan
from open_planner.domain.models import Loan
from open_planner.domain.validation import validate_loan_terms
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.database.repositories import LoanRepository

router = APIRouter()


def to_loan_response(loan: Loan, as_of: date) -> LoanResponse:
    summary = summarize_loan(loan, as_of)
    return LoanResponse(
        id=loan.id,
        principal=loan.principal,
        interest_rate=loan.interest_rate,
        term_months=loan.term_months,
        start_date=loan.start_date,
        description=loan.description,
        monthly_payment=summary.monthly_payment,
        remaining_balance=summary.remaining_balance,
        is_active=summary.is_active,
    )


@router.get("/loans/payment", response_model=PaymentResponse)
def calculate_payment(
    principal: float = Query(...),
    interest_rate: float = Query(..., description="Annual rate as a fraction"),
    term_months: int = Query(...),
):
    """Monthly payment for arbitrary terms, used by the loan form preview"""
    validate_loan_terms(principal, interest_rate, term_months)
    return PaymentResponse(
        principal=principal,
        interest_rate=interest_rate,
        term_months=term_months,
        monthly_payment=calculate_monthly_payment(principal, interest_rate, term_months),
    )


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    today = date.today()
    return [to_loan_response(loan, today) for loan in LoanRepository(db).list_for_user(user_id)]


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(
    body: LoanCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    loan = LoanRepository(db).create(
        user_id=user_id,
        principal=body.principal,
        interest_rate=body.interest_rate,
        term_months=body.term_months,
        start_date=body.start_date or date.today(),
        description=body.description,
    )
    db.commit()
    return to_loan_response(loan, date.today())


@router.put("/loans/{loan_id}", response_model=LoanResponse)
def update_loan(
    loan_id: uuid.UUID,
    body: LoanUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    loan = LoanRepository(db).update(user_id, loan_id, body.changes())
    db.commit()
    return to_loan_response(loan, date.today())


@router.delete("/loans/{loan_id}")
def delete_loan(
    loan_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    LoanRepository(db).delete(user_id, loan_id)
    db.commit()
    return {"message": "Loan deleted successfully"}
