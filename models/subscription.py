"""
models/subscription.py
----------------------
Domain model for recurring subscriptions.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from models.category import Category
from services.billing_cycle import annual_equivalent, monthly_equivalent

ACTIVE = "active"
PAUSED = "paused"
CANCELLED = "cancelled"

STATUSES: tuple[str, ...] = (ACTIVE, PAUSED, CANCELLED)


@dataclass
class Subscription:
    """
    Represents a recurring payment obligation (Netflix, cloud storage, gym...).

    Attributes:
        id: Database primary key, UUID text (None for new records).
        user_id: Owner's user ID.
        service_name: Name of the service (max 50 chars).
        amount: Price per billing cycle, in whole currency units.
        billing_cycle: 'weekly' | 'monthly' | 'yearly'.
        next_billing_date: Next date the user will be charged.
        start_date: Date the subscription started.
        currency: ISO currency code (default: KRW).
        auto_renew: Whether it renews automatically.
        status: 'active' | 'paused' | 'cancelled'.
        satisfaction_score: 1-5, or None if not rated.
        category_id: Optional category reference.
        category: The joined Category row, when loaded.
        note: Free text (max 500 chars).
        service_url: Link to the service's account page.
        created_at: Timestamp when the record was created.
    """
    user_id: int
    service_name: str
    amount: int
    billing_cycle: str  # 'weekly' | 'monthly' | 'yearly'
    next_billing_date: date
    start_date: date = field(default_factory=date.today)
    currency: str = "KRW"
    auto_renew: bool = True
    status: str = ACTIVE
    satisfaction_score: Optional[int] = None
    category_id: Optional[str] = None
    category: Optional[Category] = None
    note: Optional[str] = None
    service_url: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def monthly_amount(self) -> int:
        """Monthly-equivalent amount, computed on read."""
        return monthly_equivalent(self.amount, self.billing_cycle)

    @property
    def annual_amount(self) -> int:
        """Annual-equivalent amount, computed on read."""
        return annual_equivalent(self.amount, self.billing_cycle)

    def is_active(self) -> bool:
        return self.status == ACTIVE

    def __str__(self) -> str:
        return (
            f"{self.service_name}: {self.amount:,} {self.currency} ({self.billing_cycle})"
            f" ≈ {self.monthly_amount:,}/month - Next: {self.next_billing_date}"
        )
