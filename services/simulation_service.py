"""
services/simulation_service.py
------------------------------
"What if" projections of monthly spend.

The engine answers: what would my monthly total be if I cancelled these
subscriptions and/or added those? It only ever reads from the store.

Callers (the bot, the HTTP API) fire simulations as independent requests;
the engine keeps no per-call state, so a client that sends several in a
row is responsible for ignoring responses to superseded requests.
"""

from typing import Iterable, Optional

import psycopg2

from models.category import DEFAULT_COLOR, UNCATEGORIZED_ID, UNCATEGORIZED_NAME, Category
from models.simulation import CategoryBreakdown, SimulationResult, VirtualSubscriptionItem
from models.subscription import Subscription
from repositories.category_repo import CategoryRepository
from repositories.subscription_repo import SubscriptionRepository
from services.billing_cycle import percentage
from utils.errors import StoreError
from utils.logger import get_logger
from utils.validators import validate_subscription_ids, validate_virtual_item, validate_virtual_items

logger = get_logger(__name__)


class CategoryTotals:
    """Accumulates monthly amounts per category bucket."""

    def __init__(self):
        self._buckets: dict[str, dict] = {}

    def add(self, category: Optional[Category], monthly: int) -> None:
        if category is None:
            key, name, color = UNCATEGORIZED_ID, UNCATEGORIZED_NAME, DEFAULT_COLOR
        else:
            key, name, color = category.id, category.name, category.display_color

        bucket = self._buckets.setdefault(
            key, {"name": name, "color": color, "amount": 0, "count": 0}
        )
        bucket["amount"] += monthly
        bucket["count"] += 1

    def breakdown(self, total: int) -> list[CategoryBreakdown]:
        """
        Build the breakdown against `total`, largest amount first.
        Ties are ordered by category name, then ID, so output is stable.
        """
        rows = [
            CategoryBreakdown(
                category_id=key,
                category_name=b["name"],
                category_color=b["color"],
                amount=b["amount"],
                percentage=percentage(b["amount"], total),
                count=b["count"],
            )
            for key, b in self._buckets.items()
        ]
        rows.sort(key=lambda r: (-r.amount, r.category_name, r.category_id))
        return rows


def simulate(
    active: Iterable[Subscription],
    cancel_ids: Iterable[str] = (),
    add_items: Iterable[VirtualSubscriptionItem] = (),
    categories: Iterable[Category] = (),
) -> SimulationResult:
    """
    Project monthly spend after cancelling and adding subscriptions.

    Args:
        active: The user's currently active subscriptions.
        cancel_ids: IDs to drop. IDs not among `active` are ignored.
        add_items: Virtual subscriptions to add.
        categories: Categories the virtual items may refer to. An item whose
            category is unknown lands in the uncategorized bucket.

    Returns:
        SimulationResult with the breakdown over the resulting set.
    """
    cancel_set = set(cancel_ids)
    categories_by_id = {c.id: c for c in categories}

    current_total = 0
    simulated_total = 0
    totals = CategoryTotals()

    for sub in active:
        monthly = sub.monthly_amount
        current_total += monthly
        if sub.id in cancel_set:
            continue
        simulated_total += monthly
        totals.add(sub.category, monthly)

    for item in add_items:
        monthly = item.monthly_amount
        simulated_total += monthly
        totals.add(categories_by_id.get(item.category_id), monthly)

    return SimulationResult(
        current_monthly_total=current_total,
        simulated_monthly_total=simulated_total,
        category_breakdown=totals.breakdown(simulated_total),
    )


class SimulationService:
    """
    Runs cancel / add / combined simulations for a user.

    All three entry points are read-only and safe to call concurrently.
    """

    def __init__(self, repo=None, category_repo=None):
        self.repo = repo or SubscriptionRepository()
        self.category_repo = category_repo or CategoryRepository()

    def simulate_cancel(self, user_id: int, subscription_ids: list[str]) -> SimulationResult:
        """Project spend if the given subscriptions were cancelled."""
        cancel_ids = validate_subscription_ids(subscription_ids)
        return self._run(user_id, cancel_ids, [])

    def simulate_add(self, user_id: int, item: VirtualSubscriptionItem) -> SimulationResult:
        """Project spend if one more subscription were added."""
        validate_virtual_item(item)
        return self._run(user_id, [], [item])

    def simulate_combined(
        self,
        user_id: int,
        cancel_ids: list[str],
        add_items: list[VirtualSubscriptionItem],
    ) -> SimulationResult:
        """Apply cancellations and additions together in one pass."""
        cancel_ids = validate_subscription_ids(cancel_ids, field="cancelSubscriptionIds")
        add_items = validate_virtual_items(add_items)
        return self._run(user_id, cancel_ids, add_items)

    def _run(
        self,
        user_id: int,
        cancel_ids: list[str],
        add_items: list[VirtualSubscriptionItem],
    ) -> SimulationResult:
        try:
            active = self.repo.get_active(user_id)
            categories = (
                self.category_repo.get_visible(user_id)
                if any(item.category_id for item in add_items)
                else []
            )
        except psycopg2.Error as e:
            logger.error(f"Simulation read failed for user {user_id}: {e}")
            raise StoreError("Could not load subscriptions for simulation") from e

        result = simulate(active, cancel_ids, add_items, categories)
        logger.debug(
            f"Simulated for user {user_id}: cancel={len(cancel_ids)} add={len(add_items)} "
            f"{result.current_monthly_total} -> {result.simulated_monthly_total}"
        )
        return result
