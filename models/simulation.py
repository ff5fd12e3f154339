"""
models/simulation.py
--------------------
Ephemeral records produced and consumed by the simulation engine.
None of these are persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from services.billing_cycle import monthly_equivalent


@dataclass
class VirtualSubscriptionItem:
    """
    A hypothetical subscription used only inside a simulation request.

    Attributes:
        service_name: Name of the service being considered.
        amount: Price per billing cycle.
        billing_cycle: 'weekly' | 'monthly' | 'yearly'.
        category_id: Optional category to group it under.
    """
    service_name: str
    amount: int
    billing_cycle: str
    category_id: Optional[str] = None

    @property
    def monthly_amount(self) -> int:
        return monthly_equivalent(self.amount, self.billing_cycle)


@dataclass
class CategoryBreakdown:
    """Monthly spend aggregated for one category."""
    category_id: str
    category_name: str
    category_color: str
    amount: int
    percentage: float
    count: int

    def to_dict(self) -> dict:
        return {
            "categoryId": self.category_id,
            "categoryName": self.category_name,
            "categoryColor": self.category_color,
            "amount": self.amount,
            "percentage": self.percentage,
            "count": self.count,
        }


@dataclass
class SimulationResult:
    """
    Before/after projection of monthly spend.

    `monthly_difference` is simulated minus current: negative means the
    scenario saves money.
    """
    current_monthly_total: int
    simulated_monthly_total: int
    category_breakdown: list[CategoryBreakdown] = field(default_factory=list)

    @property
    def monthly_difference(self) -> int:
        return self.simulated_monthly_total - self.current_monthly_total

    @property
    def annual_difference(self) -> int:
        return self.monthly_difference * 12

    def to_dict(self) -> dict:
        """Serialize to the camelCase JSON shape returned by the API."""
        return {
            "currentMonthlyTotal": self.current_monthly_total,
            "simulatedMonthlyTotal": self.simulated_monthly_total,
            "monthlyDifference": self.monthly_difference,
            "annualDifference": self.annual_difference,
            "categoryBreakdown": [b.to_dict() for b in self.category_breakdown],
        }


@dataclass(frozen=True)
class PendingUndo:
    """
    The most recent applied cancellation for one user.

    Attributes:
        user_id: Owner of the batch.
        subscription_ids: IDs that were actually moved to 'cancelled'.
        applied_at: When the apply happened.
        expires_at: After this instant the batch can no longer be reverted.
    """
    user_id: int
    subscription_ids: tuple[str, ...]
    applied_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at
