"""
models/dashboard.py
-------------------
Read models for the spending dashboard.
"""

from dataclasses import dataclass, field
from typing import Optional

from models.simulation import CategoryBreakdown


@dataclass
class DashboardSummary:
    """Aggregate monthly/annual spend over the user's active subscriptions."""
    monthly_total: int
    annual_total: int
    active_count: int
    paused_count: int
    category_breakdown: list[CategoryBreakdown] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "monthlyTotal": self.monthly_total,
            "annualTotal": self.annual_total,
            "activeCount": self.active_count,
            "pausedCount": self.paused_count,
            "categoryBreakdown": [b.to_dict() for b in self.category_breakdown],
        }


@dataclass
class CancelRecommendation:
    """A subscription worth cancelling, and why."""
    subscription_id: str
    service_name: str
    monthly_amount: int
    annual_saving: int
    satisfaction_score: Optional[int]
    reason: str

    def to_dict(self) -> dict:
        return {
            "subscriptionId": self.subscription_id,
            "serviceName": self.service_name,
            "monthlyAmount": self.monthly_amount,
            "annualSaving": self.annual_saving,
            "satisfactionScore": self.satisfaction_score,
            "reason": self.reason,
        }
