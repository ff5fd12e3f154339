"""
repositories/subscription_repo.py
---------------------------------
Data access layer for subscriptions (the Subscription Store).
All SQL queries related to the `subscriptions` table live here.
"""

from typing import Optional

from db.connection import get_connection, release_connection, transaction
from models.category import Category
from models.subscription import ACTIVE, Subscription
from utils.logger import get_logger

logger = get_logger(__name__)

_SELECT_SQL = """
    SELECT s.id::text, s.user_id, s.service_name, s.amount, s.billing_cycle,
           s.currency, s.next_billing_date, s.auto_renew, s.status,
           s.satisfaction_score, s.category_id::text, s.note, s.service_url,
           s.start_date, s.created_at,
           c.name, c.color, c.user_id, c.is_system, c.sort_order
    FROM subscriptions s
    LEFT JOIN categories c ON c.id = s.category_id
"""


class SubscriptionRepository:
    """Repository for CRUD operations on the subscriptions table."""

    # ── CREATE ────────────────────────────────────────────

    def add(self, sub: Subscription) -> Subscription:
        """
        Insert a new subscription.

        Args:
            sub: The Subscription to persist.

        Returns:
            The same object with its `id` and `created_at` populated.
        """
        sql = """
            INSERT INTO subscriptions
                (user_id, service_name, amount, billing_cycle, currency,
                 next_billing_date, auto_renew, status, satisfaction_score,
                 category_id, note, service_url, start_date)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s::uuid, %s, %s, %s)
            RETURNING id::text, created_at;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (
                    sub.user_id, sub.service_name, sub.amount, sub.billing_cycle,
                    sub.currency, sub.next_billing_date, sub.auto_renew, sub.status,
                    sub.satisfaction_score, sub.category_id, sub.note,
                    sub.service_url, sub.start_date,
                ))
                row = cur.fetchone()
                sub.id = row[0]
                sub.created_at = row[1]
            conn.commit()
            logger.info(f"Added subscription '{sub.service_name}' {sub.id} for user {sub.user_id}")
            return sub
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to add subscription: {e}")
            raise
        finally:
            release_connection(conn)

    # ── READ ──────────────────────────────────────────────

    def get_all(self, user_id: int, status: Optional[str] = None) -> list[Subscription]:
        """
        Get a user's subscriptions with their category joined.

        Args:
            user_id: Owner's user ID.
            status: If given, only return subscriptions in that status.

        Returns:
            List of Subscription objects, oldest first.
        """
        sql = _SELECT_SQL + " WHERE s.user_id = %s"
        params: list = [user_id]
        if status:
            sql += " AND s.status = %s"
            params.append(status)
        sql += " ORDER BY s.created_at ASC, s.id ASC;"

        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, params)
                return [self._row_to_subscription(r) for r in cur.fetchall()]
        finally:
            release_connection(conn)

    def get_active(self, user_id: int) -> list[Subscription]:
        """All active subscriptions for a user, category joined."""
        return self.get_all(user_id, status=ACTIVE)

    def count_by_status(self, user_id: int) -> dict[str, int]:
        """Number of subscriptions per status, e.g. {'active': 4, 'paused': 1}."""
        sql = "SELECT status, COUNT(*) FROM subscriptions WHERE user_id = %s GROUP BY status;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return {r[0]: int(r[1]) for r in cur.fetchall()}
        finally:
            release_connection(conn)

    # ── UPDATE ────────────────────────────────────────────

    def transition_status(
        self,
        user_id: int,
        subscription_ids: list[str],
        from_status: str,
        to_status: str,
    ) -> list[str]:
        """
        Atomically move the user's subscriptions from one status to another.

        Only rows that belong to `user_id` and are currently in `from_status`
        are touched; every other ID is silently skipped.

        Returns:
            The IDs that were actually transitioned.
        """
        if not subscription_ids:
            return []
        sql = """
            UPDATE subscriptions
            SET status = %s, updated_at = NOW()
            WHERE user_id = %s
              AND status = %s
              AND id::text = ANY(%s)
            RETURNING id::text;
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (to_status, user_id, from_status, list(subscription_ids)))
                changed = {r[0] for r in cur.fetchall()}
        except Exception as e:
            logger.error(f"Failed to set status '{to_status}' for user {user_id}: {e}")
            raise
        # Keep the caller's order
        return [sub_id for sub_id in subscription_ids if sub_id in changed]

    def set_satisfaction(self, subscription_id: str, user_id: int, score: int) -> bool:
        """Store a 1-5 satisfaction score, scoped to user."""
        sql = """
            UPDATE subscriptions
            SET satisfaction_score = %s, updated_at = NOW()
            WHERE id::text = %s AND user_id = %s;
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(sql, (score, subscription_id, user_id))
                updated = cur.rowcount > 0
        except Exception as e:
            logger.error(f"Failed to rate subscription {subscription_id}: {e}")
            raise
        return updated

    # ── DELETE ────────────────────────────────────────────

    def delete(self, subscription_id: str, user_id: int) -> bool:
        """Hard-delete a subscription by ID, scoped to user."""
        sql = "DELETE FROM subscriptions WHERE id::text = %s AND user_id = %s;"
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (subscription_id, user_id))
                deleted = cur.rowcount > 0
            conn.commit()
            if deleted:
                logger.info(f"Deleted subscription {subscription_id}")
            return deleted
        except Exception as e:
            conn.rollback()
            logger.error(f"Failed to delete subscription {subscription_id}: {e}")
            raise
        finally:
            release_connection(conn)

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_subscription(row: tuple) -> Subscription:
        """Convert a joined database row tuple to a Subscription domain object."""
        category = None
        if row[10] is not None:
            category = Category(
                id=row[10],
                name=row[15],
                color=row[16],
                user_id=row[17],
                is_system=row[18],
                sort_order=row[19],
            )
        return Subscription(
            id=row[0],
            user_id=row[1],
            service_name=row[2],
            amount=int(row[3]),
            billing_cycle=row[4],
            currency=row[5],
            next_billing_date=row[6],
            auto_renew=row[7],
            status=row[8],
            satisfaction_score=row[9],
            category_id=row[10],
            note=row[11],
            service_url=row[12],
            start_date=row[13],
            created_at=row[14],
            category=category,
        )
