"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Header, HTTPException, Request


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """
    External user identifier set by the upstream identity provider.

    The gateway verifies the session token and forwards the subject as
    X-User-Id; this service only trusts it.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()
