"""
services/subscription_service.py
--------------------------------
Bookkeeping for the bot: list, add, rate, pause, resume and delete
subscriptions. The REST API treats subscription CRUD as an external
concern and only uses the simulation, undo and dashboard services.
"""

from dataclasses import replace
from datetime import date
from typing import Optional

import psycopg2
from dateutil.relativedelta import relativedelta

from models.category import Category
from models.subscription import ACTIVE, PAUSED, Subscription
from repositories.category_repo import CategoryRepository
from repositories.subscription_repo import SubscriptionRepository
from services.billing_cycle import MONTHLY, WEEKLY, YEARLY
from utils.errors import StoreError, ValidationError
from utils.logger import get_logger
from utils.validators import validate_subscription

logger = get_logger(__name__)

_CYCLE_STEP = {
    WEEKLY: relativedelta(weeks=1),
    MONTHLY: relativedelta(months=1),
    YEARLY: relativedelta(years=1),
}

CYCLE_LABELS = {WEEKLY: "weekly", MONTHLY: "monthly", YEARLY: "yearly"}


def next_billing_date(start: date, cycle: str, today: Optional[date] = None) -> date:
    """
    First billing date strictly after `today`, counting whole cycles from `start`.

    Steps are taken from `start` each time (start + n cycles) so a
    subscription started on the 31st keeps billing at month end.
    """
    today = today or date.today()
    if start > today:
        return start
    step = _CYCLE_STEP.get(cycle, _CYCLE_STEP[MONTHLY])
    n = 1
    candidate = start + step
    while candidate <= today:
        n += 1
        candidate = start + step * n
    return candidate


class SubscriptionService:
    """
    Handles subscription bookkeeping for the Telegram bot.

    Responsibilities:
        - Format the active and paused lists with monthly equivalents.
        - Validate and persist new subscriptions, optionally categorized.
        - Rate, pause, resume and delete subscriptions by list position.

    Store failures surface as StoreError so handlers can ask for a retry.
    """

    def __init__(self, repo=None, category_repo=None):
        self.repo = repo or SubscriptionRepository()
        self.category_repo = category_repo or CategoryRepository()

    def get_active(self, user_id: int) -> list[Subscription]:
        """Active subscriptions in the same order as the numbered list."""
        return self._load(user_id, ACTIVE)

    def _load(self, user_id: int, status: str) -> list[Subscription]:
        try:
            return self.repo.get_all(user_id, status=status)
        except psycopg2.Error as e:
            logger.error(f"Failed to load {status} subscriptions for user {user_id}: {e}")
            raise StoreError("Could not load subscriptions") from e

    def list_active(self, user_id: int) -> str:
        """
        Get a formatted, numbered list of active subscriptions, followed
        by the paused ones (numbered separately, for /resume).

        Returns:
            Formatted string or "no subscriptions" message.
        """
        subs = self._load(user_id, ACTIVE)
        paused = self._load(user_id, PAUSED)
        if not subs and not paused:
            return "📭 No active subscriptions yet. Add one with /add_subscription."

        lines = ["🔁 Active subscriptions:\n"]
        total = 0
        for position, s in enumerate(subs, start=1):
            lines.append(f"  {position}. {self._describe(s)}")
            total += s.monthly_amount
        lines.append(f"\n💳 Monthly total: {total:,} | Yearly: {total * 12:,}")

        if paused:
            lines.append("\n⏸️ Paused (/resume <n>):")
            for position, s in enumerate(paused, start=1):
                lines.append(f"  {position}. {self._describe(s)}")
        return "\n".join(lines)

    @staticmethod
    def _describe(s: Subscription) -> str:
        category = f" [{s.category.name}]" if s.category else ""
        rating = f" ⭐{s.satisfaction_score}" if s.satisfaction_score else ""
        return (
            f"{s.service_name}{category}: {s.amount:,} {s.currency} "
            f"({CYCLE_LABELS.get(s.billing_cycle, s.billing_cycle)}) "
            f"≈ {s.monthly_amount:,}/month - next: {s.next_billing_date}{rating}"
        )

    def _resolve_category(self, user_id: int, name: str) -> Category:
        """Find a visible category by name, case-insensitively."""
        try:
            categories = self.category_repo.get_visible(user_id)
        except psycopg2.Error as e:
            logger.error(f"Failed to load categories for user {user_id}: {e}")
            raise StoreError("Could not load categories") from e

        wanted = name.strip().casefold()
        for category in categories:
            if category.name.casefold() == wanted:
                return category
        names = ", ".join(c.name for c in categories)
        raise ValidationError("category", f"unknown, choose one of: {names}")

    def add_manual(
        self,
        user_id: int,
        name: str,
        amount: int,
        billing_cycle: str,
        start_date: Optional[date] = None,
        currency: str = "KRW",
        category_name: Optional[str] = None,
    ) -> dict:
        """
        Validate and save a subscription entered with the structured command.

        Returns:
            Dict with 'success' and 'message', or 'success' False and 'error'.
        """
        start = start_date or date.today()
        sub = Subscription(
            user_id=user_id,
            service_name=name.strip(),
            amount=amount,
            billing_cycle=billing_cycle,
            start_date=start,
            next_billing_date=next_billing_date(start, billing_cycle),
            currency=currency,
        )
        try:
            if category_name:
                sub.category = self._resolve_category(user_id, category_name)
                sub.category_id = sub.category.id
            validate_subscription(sub)
        except ValidationError as e:
            logger.info(f"Rejected subscription from user {user_id}: {e}")
            return {"success": False, "error": f"{e.field} {e.message}"}

        try:
            saved = self.repo.add(sub)
        except psycopg2.Error as e:
            raise StoreError("Could not save subscription") from e
        category = f"\n  📂 Category: {saved.category.name}" if saved.category else ""
        msg = (
            f"✅ Subscription added:\n"
            f"  📌 Service: {saved.service_name}\n"
            f"  💶 Amount: {saved.amount:,} {saved.currency} ({CYCLE_LABELS[saved.billing_cycle]})\n"
            f"  📊 Monthly equivalent: {saved.monthly_amount:,}\n"
            f"  📅 Next billing: {saved.next_billing_date}"
            f"{category}"
        )
        return {"success": True, "message": msg}

    def rate_at(self, user_id: int, position: int, score: int) -> str:
        """Set the satisfaction score (1-5) of the active subscription at `position`."""
        subs = self._load(user_id, ACTIVE)
        if not 1 <= position <= len(subs):
            return f"⚠️ There is no subscription #{position}. See /subscriptions."
        sub = subs[position - 1]
        try:
            validate_subscription(replace(sub, satisfaction_score=score))
        except ValidationError as e:
            return f"⚠️ {e.field} {e.message}"

        try:
            updated = self.repo.set_satisfaction(sub.id, user_id, score)
        except psycopg2.Error as e:
            raise StoreError("Could not save rating") from e
        if not updated:
            return f"⚠️ {sub.service_name} no longer exists."
        logger.info(f"User {user_id} rated {sub.id} with {score}")
        return f"⭐ Rated {sub.service_name} {score}/5."

    def pause_at(self, user_id: int, positions: list[int]) -> str:
        """Pause active subscriptions by their /subscriptions number."""
        return self._transition_at(user_id, positions, ACTIVE, PAUSED)

    def resume_at(self, user_id: int, positions: list[int]) -> str:
        """Resume paused subscriptions by their number in the paused list."""
        return self._transition_at(user_id, positions, PAUSED, ACTIVE)

    def _transition_at(self, user_id: int, positions: list[int], from_status: str, to_status: str) -> str:
        subs = self._load(user_id, from_status)
        invalid = [p for p in positions if not 1 <= p <= len(subs)]
        if invalid:
            return f"⚠️ No {from_status} subscription #{', #'.join(map(str, invalid))}. See /subscriptions."

        chosen = [subs[p - 1] for p in positions]
        try:
            changed = self.repo.transition_status(user_id, [s.id for s in chosen], from_status, to_status)
        except psycopg2.Error as e:
            raise StoreError(f"Could not set subscriptions {to_status}") from e

        names = [s.service_name for s in chosen if s.id in changed]
        logger.info(f"User {user_id}: {len(names)} subscription(s) {from_status} -> {to_status}")
        if not names:
            return "ℹ️ Nothing changed."
        icon = "⏸️ Paused" if to_status == PAUSED else "▶️ Resumed"
        return f"{icon}: {', '.join(names)}."

    def delete_at(self, user_id: int, position: int) -> str:
        """Delete the subscription at a 1-based position of the active list."""
        subs = self._load(user_id, ACTIVE)
        if not 1 <= position <= len(subs):
            return f"⚠️ There is no subscription #{position}. See /subscriptions."
        sub = subs[position - 1]
        try:
            deleted = self.repo.delete(sub.id, user_id)
        except psycopg2.Error as e:
            raise StoreError("Could not delete subscription") from e
        if deleted:
            return f"🗑️ Deleted {sub.service_name}."
        return f"⚠️ {sub.service_name} no longer exists."
