"""GET /v1/insights - Rule-based financial insights"""

import time
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from open_planner.api.v1.schemas import InsightSchema, InsightsResponse
from open_planner.api.dependencies import get_current_user_id, get_request_id
from open_planner.domain.validation import month_or_current
from open_planner.infrastructure.database.session import get_db
from open_planner.infrastructure.observability.logging import log_insights
from open_planner.infrastructure.observability.metrics import record_insights
from open_planner.services.insights import InsightsService

router = APIRouter()


@router.get("/insights", response_model=InsightsResponse)
def get_insights(
    request: Request,
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Overspending, loan acceleration and month-over-month insights, in that order"""
    start_time = time.time()
    today = date.today()
    year, month = month_or_current(year, month, today)

    insights = InsightsService(db).get_insights(user_id, year, month, today=today)

    record_insights(insights)
    log_insights(
        get_request_id(request),
        user_id,
        [i.type for i in insights],
        (time.time() - start_time) * 1000,
    )

    return InsightsResponse(
        year=year,
        month=month,
        insights=[InsightSchema.model_validate(i) for i in insights],
    )
