"""
api/schemas.py
--------------
Request and response bodies of the HTTP API.
Field names are camelCase to match the JSON contract the front end uses.
Only shapes and types are checked here; value rules (positive amounts,
known billing cycles, allowed actions) live in utils/validators so the
bot and the API reject the same inputs.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.simulation import VirtualSubscriptionItem


# ── Requests ─────────────────────────────────────────

class CancelSimulationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    subscriptionIds: list[str] = Field(default_factory=list)


class VirtualItemRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    serviceName: str
    amount: int
    billingCycle: str
    categoryId: Optional[str] = None

    def to_item(self) -> VirtualSubscriptionItem:
        return VirtualSubscriptionItem(
            service_name=self.serviceName,
            amount=self.amount,
            billing_cycle=self.billingCycle,
            category_id=self.categoryId or None,
        )


class CombinedSimulationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    cancelSubscriptionIds: list[str] = Field(default_factory=list)
    addItems: list[VirtualItemRequest] = Field(default_factory=list)


class ApplySimulationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: str
    subscriptionIds: list[str] = Field(default_factory=list)


# ── Responses ────────────────────────────────────────

class CategoryBreakdownResponse(BaseModel):
    categoryId: str
    categoryName: str
    categoryColor: str
    amount: int
    percentage: float
    count: int


class SimulationResultResponse(BaseModel):
    currentMonthlyTotal: int
    simulatedMonthlyTotal: int
    monthlyDifference: int
    annualDifference: int
    categoryBreakdown: list[CategoryBreakdownResponse]


class DashboardSummaryResponse(BaseModel):
    monthlyTotal: int
    annualTotal: int
    activeCount: int
    pausedCount: int
    categoryBreakdown: list[CategoryBreakdownResponse]


class CancelRecommendationResponse(BaseModel):
    subscriptionId: str
    serviceName: str
    monthlyAmount: int
    annualSaving: int
    satisfactionScore: Optional[int] = None
    reason: str
