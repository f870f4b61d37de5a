"""FastAPI application factory"""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from open_planner.api.middleware import RequestIDMiddleware, MetricsMiddleware
from open_planner.api.v1 import categories, dashboard, expenses, income, insights, loans, recurring_items, users
from open_planner.domain.exceptions import ConflictError, NotFoundError, ValidationError
from open_planner.infrastructure.observability.logging import setup_logging
from open_planner.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Map domain errors to HTTP responses"""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return _error(400, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError):
        return _error(409, str(exc))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        request_id = getattr(request.state, "request_id", "unknown")
        logging.error(f"Database error: {exc}", extra={"request_id": request_id})
        return _error(500, "Internal server error")


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Open Planner API",
        description="Personal finance tracking: expenses, income, loans, recurring items and insights",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(users.router, prefix="/v1", tags=["users"])
    app.include_router(categories.router, prefix="/v1", tags=["categories"])
    app.include_router(expenses.router, prefix="/v1", tags=["expenses"])
    app.include_router(income.router, prefix="/v1", tags=["income"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(recurring_items.router, prefix="/v1", tags=["recurring-items"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])
    app.include_router(insights.router, prefix="/v1", tags=["insights"])

    return app


app = create_app()
