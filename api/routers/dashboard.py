"""
api/routers/dashboard.py
------------------------
Spending overview.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_current_user_id, get_dashboard_service
from api.schemas import CancelRecommendationResponse, DashboardSummaryResponse
from services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/summary", response_model=DashboardSummaryResponse)
def get_summary(
    user_id: int = Depends(get_current_user_id),
    service: DashboardService = Depends(get_dashboard_service),
):
    return service.get_summary(user_id).to_dict()


@router.get("/recommendations", response_model=list[CancelRecommendationResponse])
def get_recommendations(
    user_id: int = Depends(get_current_user_id),
    service: DashboardService = Depends(get_dashboard_service),
):
    """Active subscriptions worth cancelling, least satisfying first."""
    return [r.to_dict() for r in service.get_recommendations(user_id)]
