"""Database engine and per-request sessions"""

from typing import Any, Dict
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from open_planner.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Pool settings for server databases; sqlite (local dev) only needs thread sharing"""
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,  # Verify connections before using
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_recycle": settings.db_pool_recycle_seconds,
    }


engine = create_engine(settings.database_url, **engine_options(settings.database_url))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Session:
    """Request-scoped session; routes commit explicitly"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
