"""GET /v1/users/me, PUT /v1/users/me/currency - Current user profile"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import CurrencyUpdate, UserResponse
from open_planner.api.dependencies import get_current_user_id
from open_planner.config import settings
from open_planner.domain.validation import normalize_currency
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.database.repositories import UserRepository

router = APIRouter()


@router.get("/users/me", response_model=UserResponse)
def get_me(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """
    Fetch the caller's profile, creating it on first sign-in.

    New users get the default category set.
    """
    user = UserRepository(db).get_or_create(user_id, currency=settings.default_currency)
    db.commit()
    return UserResponse.model_validate(user)


@router.put("/users/me/currency", response_model=UserResponse)
def update_currency(
    body: CurrencyUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    repo = UserRepository(db)
    repo.get_or_create(user_id, currency=settings.default_currency)
    user = repo.update_currency(user_id, normalize_currency(body.currency))
    db.commit()
    return UserResponse.model_validate(user)
