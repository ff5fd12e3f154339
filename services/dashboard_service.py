"""
services/dashboard_service.py
-----------------------------
Spending overview and cancellation suggestions.
"""

import math

import psycopg2

from models.dashboard import CancelRecommendation, DashboardSummary
from models.subscription import PAUSED, Subscription
from repositories.subscription_repo import SubscriptionRepository
from services.simulation_service import CategoryTotals
from utils.errors import StoreError
from utils.logger import get_logger

logger = get_logger(__name__)

LOW_SATISFACTION = "Low satisfaction"
HIGH_COST_LOW_SATISFACTION = "High cost for its satisfaction"


class DashboardService:
    """Aggregates a user's active subscriptions for the dashboard."""

    def __init__(self, repo=None):
        self.repo = repo or SubscriptionRepository()

    def get_summary(self, user_id: int) -> DashboardSummary:
        """Monthly/annual totals, status counts and category breakdown."""
        try:
            active = self.repo.get_active(user_id)
            counts = self.repo.count_by_status(user_id)
        except psycopg2.Error as e:
            logger.error(f"Dashboard read failed for user {user_id}: {e}")
            raise StoreError("Could not load dashboard data") from e

        monthly_total = 0
        totals = CategoryTotals()
        for sub in active:
            monthly = sub.monthly_amount
            monthly_total += monthly
            totals.add(sub.category, monthly)

        return DashboardSummary(
            monthly_total=monthly_total,
            annual_total=monthly_total * 12,
            active_count=len(active),
            paused_count=counts.get(PAUSED, 0),
            category_breakdown=totals.breakdown(monthly_total),
        )

    def get_recommendations(self, user_id: int) -> list[CancelRecommendation]:
        """
        Suggest subscriptions to cancel.

        Criteria:
            1. Satisfaction 1-2, whatever the price.
            2. Among the most expensive 20% (by monthly amount) and
               satisfaction 3 or lower.
        Unrated subscriptions are never suggested.

        Returns:
            Recommendations, least satisfying first, then most expensive.
        """
        try:
            active = self.repo.get_active(user_id)
        except psycopg2.Error as e:
            logger.error(f"Recommendation read failed for user {user_id}: {e}")
            raise StoreError("Could not load recommendation data") from e

        if not active:
            return []

        ranked = sorted(active, key=lambda s: s.monthly_amount, reverse=True)
        top_index = math.ceil(len(ranked) * 0.2)
        cost_threshold = ranked[top_index - 1].monthly_amount

        recommendations = []
        for sub in ranked:
            reason = self._reason(sub, cost_threshold)
            if reason is None:
                continue
            monthly = sub.monthly_amount
            recommendations.append(CancelRecommendation(
                subscription_id=sub.id,
                service_name=sub.service_name,
                monthly_amount=monthly,
                annual_saving=monthly * 12,
                satisfaction_score=sub.satisfaction_score,
                reason=reason,
            ))

        recommendations.sort(key=lambda r: (r.satisfaction_score, -r.monthly_amount))
        return recommendations

    @staticmethod
    def _reason(sub: Subscription, cost_threshold: int) -> str | None:
        score = sub.satisfaction_score
        if score is None:
            return None
        if score <= 2:
            return LOW_SATISFACTION
        if score <= 3 and sub.monthly_amount >= cost_threshold:
            return HIGH_COST_LOW_SATISFACTION
        return None
