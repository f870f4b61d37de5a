"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger.json import JsonFormatter
from open_planner.config import settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_generation(
    request_id: str,
    user_id: str,
    year: int,
    month: int,
    generated_count: int,
    skipped_count: int,
    failed_count: int,
    duration_ms: float,
) -> None:
    """Log structured outcome of a recurring expense generation run"""
    logging.info(
        "Recurring generation completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "recurring_generation_complete",
            "target_month": f"{year:04d}-{month:02d}",
            "generated_count": generated_count,
            "skipped_count": skipped_count,
            "failed_count": failed_count,
            "duration_ms": duration_ms,
        },
    )


def log_insights(request_id: str, user_id: str, insight_types: list[str], duration_ms: float) -> None:
    """Log which insights were produced for a request"""
    logging.info(
        "Insights computed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "insights_complete",
            "insight_types": insight_types,
            "duration_ms": duration_ms,
        },
    )
