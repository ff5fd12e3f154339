"""
services/undo_service.py
------------------------
Turns a simulated cancellation into a real one, with a short undo window.

State per targeted subscription:
    active --(apply cancel)--> cancelled --(undo, within window)--> active

Each user has at most one PendingUndo: the batch from their latest apply.
A new apply replaces it, and an undo consumes it. Expiry is checked when
an undo is attempted. Each apply also prunes every entry that expired more
than one window ago; an undo against a pruned entry reports "missing".

Apply and undo for the same user are serialized on a per-user lock so the
check-expiry / write-store / update-slot sequence cannot interleave with
another device's request.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import psycopg2

from config import UNDO_WINDOW_SECONDS
from models.simulation import PendingUndo
from models.subscription import ACTIVE, CANCELLED
from repositories.subscription_repo import SubscriptionRepository
from utils.errors import StoreError, UndoUnavailable
from utils.logger import get_logger
from utils.validators import validate_action, validate_subscription_ids

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PendingUndoStore:
    """
    In-memory map of user_id -> PendingUndo.

    Users are serialized on a fixed set of striped locks, so the lock table
    does not grow with the number of users; two users may share a stripe.
    Expired entries stay until their owner's next undo attempt or until
    `prune` drops them, which keeps the map bounded by recent activity.
    """

    def __init__(self, stripes: int = 64):
        self._entries: dict[int, PendingUndo] = {}
        self._locks = [threading.Lock() for _ in range(stripes)]
        self._guard = threading.Lock()

    def lock_for(self, user_id: int) -> threading.Lock:
        return self._locks[hash(user_id) % len(self._locks)]

    def get(self, user_id: int) -> Optional[PendingUndo]:
        return self._entries.get(user_id)

    def put(self, entry: PendingUndo) -> None:
        with self._guard:
            self._entries[entry.user_id] = entry

    def clear(self, user_id: int) -> None:
        with self._guard:
            self._entries.pop(user_id, None)

    def prune(self, cutoff: datetime) -> int:
        """Drop entries that expired at or before `cutoff`; returns how many."""
        with self._guard:
            stale = [uid for uid, entry in self._entries.items() if entry.expires_at <= cutoff]
            for uid in stale:
                del self._entries[uid]
        return len(stale)

    def __len__(self) -> int:
        return len(self._entries)


# Shared by every surface in this process (bot handlers and HTTP routes)
pending_undos = PendingUndoStore()


class ApplyUndoService:
    """
    Applies cancellations and reverts the latest batch on request.

    Args:
        repo: Subscription store; needs `transition_status`.
        undo_store: Where pending undos live. Defaults to the process-wide one.
        clock: Returns the current time (timezone-aware).
        window_seconds: How long an applied batch stays undoable.
    """

    def __init__(
        self,
        repo=None,
        undo_store: Optional[PendingUndoStore] = None,
        clock: Callable[[], datetime] = utc_now,
        window_seconds: int = UNDO_WINDOW_SECONDS,
    ):
        self.repo = repo or SubscriptionRepository()
        self.undo_store = undo_store or pending_undos
        self.clock = clock
        self.window = timedelta(seconds=window_seconds)

    def apply(self, user_id: int, action: str, subscription_ids: list[str]) -> list[str]:
        """
        Cancel the given subscriptions for real.

        IDs that don't exist, belong to someone else or aren't active are
        skipped. The batch of IDs actually cancelled becomes the user's only
        undoable batch; if nothing was cancelled, nothing is undoable.

        Returns:
            The IDs that were cancelled.

        Raises:
            ValidationError: Unknown action or empty ID list.
            StoreError: The store write failed (no state changed).
        """
        validate_action(action)
        ids = validate_subscription_ids(subscription_ids, allow_empty=False)

        with self.undo_store.lock_for(user_id):
            try:
                cancelled = self.repo.transition_status(user_id, ids, ACTIVE, CANCELLED)
            except psycopg2.Error as e:
                logger.error(f"Apply failed for user {user_id}: {e}")
                raise StoreError("Could not cancel subscriptions") from e

            if cancelled:
                applied_at = self.clock()
                self.undo_store.put(PendingUndo(
                    user_id=user_id,
                    subscription_ids=tuple(cancelled),
                    applied_at=applied_at,
                    expires_at=applied_at + self.window,
                ))
            else:
                self.undo_store.clear(user_id)

        pruned = self.undo_store.prune(self.clock() - self.window)
        if pruned:
            logger.debug(f"Pruned {pruned} stale undo entries")

        skipped = len(ids) - len(cancelled)
        logger.info(
            f"Applied cancel for user {user_id}: {len(cancelled)} cancelled"
            + (f", {skipped} skipped" if skipped else "")
        )
        return cancelled

    def undo(self, user_id: int) -> list[str]:
        """
        Revert the user's latest applied batch back to active.

        Returns:
            The IDs that were restored.

        Raises:
            UndoUnavailable: Nothing pending, already undone, or expired.
            StoreError: The store write failed; the batch stays undoable.
        """
        with self.undo_store.lock_for(user_id):
            entry = self.undo_store.get(user_id)
            if entry is None:
                raise UndoUnavailable(UndoUnavailable.MISSING)
            if entry.is_expired(self.clock()):
                self.undo_store.clear(user_id)
                logger.info(f"Undo window expired for user {user_id}")
                raise UndoUnavailable(UndoUnavailable.EXPIRED)

            try:
                restored = self.repo.transition_status(
                    user_id, list(entry.subscription_ids), CANCELLED, ACTIVE
                )
            except psycopg2.Error as e:
                logger.error(f"Undo failed for user {user_id}: {e}")
                raise StoreError("Could not restore subscriptions") from e

            self.undo_store.clear(user_id)

        logger.info(f"Undid cancel for user {user_id}: {len(restored)} restored")
        return restored
