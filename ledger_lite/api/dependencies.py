"""Dependency injection for FastAPI endpoints"""

from typing import Optional
from fastapi import Header, Request
from ledger_lite.domain.exceptions import UnauthenticatedError
from ledger_lite.infrastructure.clients.invalidation import InvalidationClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Caller identity as established by the upstream auth layer"""
    if not x_user_id or not x_user_id.strip():
        raise UnauthenticatedError("User not authenticated.")
    return x_user_id.strip()


def get_invalidation_client() -> InvalidationClient:
    """Provide cache invalidation client instance"""
    return InvalidationClient()
