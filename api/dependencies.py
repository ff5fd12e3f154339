"""
api/dependencies.py
-------------------
FastAPI dependencies: caller identity, access control and service wiring.
Tests swap the service providers through `app.dependency_overrides`.
"""

from functools import lru_cache
from typing import Optional

from fastapi import Header, HTTPException, Response

from security.auth import is_allowed
from security.rate_limiter import allow_request
from services.dashboard_service import DashboardService
from services.simulation_service import SimulationService
from services.undo_service import ApplyUndoService
from utils.logger import get_logger

logger = get_logger(__name__)


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> int:
    """
    Resolve the caller from the `X-User-Id` header set by the auth gateway,
    then apply the whitelist and the per-user rate limit.
    """
    if not x_user_id or not x_user_id.strip().isdigit():
        raise HTTPException(status_code=401, detail="Missing or invalid X-User-Id header")
    user_id = int(x_user_id.strip())

    if not is_allowed(user_id):
        logger.warning(f"🚫 Unauthorized API access attempt: user_id={user_id}")
        raise HTTPException(status_code=403, detail="Access denied")
    if not allow_request(user_id):
        raise HTTPException(status_code=429, detail="Too many requests")
    return user_id


def echo_request_seq(response: Response, x_request_seq: Optional[str] = Header(default=None)) -> None:
    """
    Copy the client's `X-Request-Seq` onto the response.

    Simulations are stateless, so a client that fires several in a row
    compares this value with its latest sequence number and drops
    responses to superseded requests.
    """
    if x_request_seq is not None:
        response.headers["X-Request-Seq"] = x_request_seq


@lru_cache(maxsize=None)
def get_simulation_service() -> SimulationService:
    return SimulationService()


@lru_cache(maxsize=None)
def get_apply_undo_service() -> ApplyUndoService:
    return ApplyUndoService()


@lru_cache(maxsize=None)
def get_dashboard_service() -> DashboardService:
    return DashboardService()
