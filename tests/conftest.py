"""Shared fixtures: in-memory stand-ins for the Subscription Store and a fake clock."""

import itertools
import threading
from datetime import date, datetime, timedelta, timezone

import psycopg2
import pytest

from models.category import Category
from models.subscription import ACTIVE, Subscription
from security import rate_limiter
from services.undo_service import PendingUndoStore

_ids = itertools.count(1)


def make_sub(
    sub_id=None,
    amount=10000,
    cycle="monthly",
    user_id=1,
    category=None,
    status=ACTIVE,
    satisfaction=None,
    name=None,
):
    sub_id = sub_id or f"sub-{next(_ids)}"
    return Subscription(
        id=sub_id,
        user_id=user_id,
        service_name=name or sub_id,
        amount=amount,
        billing_cycle=cycle,
        next_billing_date=date(2026, 11, 1),
        start_date=date(2026, 1, 1),
        status=status,
        satisfaction_score=satisfaction,
        category_id=category.id if category else None,
        category=category,
    )


class FakeSubscriptionStore:
    """Mimics SubscriptionRepository on a dict; set `fail = True` to simulate an outage."""

    def __init__(self, subs=()):
        self.subs: dict[str, Subscription] = {}
        self.fail = False
        self._lock = threading.Lock()
        for sub in subs:
            self.subs[sub.id] = sub

    def _check(self):
        if self.fail:
            raise psycopg2.OperationalError("connection refused")

    def add(self, sub):
        self._check()
        sub.id = sub.id or f"sub-{next(_ids)}"
        self.subs[sub.id] = sub
        return sub

    def get_all(self, user_id, status=None):
        self._check()
        return [
            s for s in self.subs.values()
            if s.user_id == user_id and (status is None or s.status == status)
        ]

    def get_active(self, user_id):
        return self.get_all(user_id, status=ACTIVE)

    def count_by_status(self, user_id):
        self._check()
        counts = {}
        for s in self.get_all(user_id):
            counts[s.status] = counts.get(s.status, 0) + 1
        return counts

    def transition_status(self, user_id, subscription_ids, from_status, to_status):
        self._check()
        changed = []
        with self._lock:
            for sub_id in subscription_ids:
                sub = self.subs.get(sub_id)
                if sub and sub.user_id == user_id and sub.status == from_status:
                    sub.status = to_status
                    changed.append(sub_id)
        return changed

    def set_satisfaction(self, subscription_id, user_id, score):
        self._check()
        sub = self.subs.get(subscription_id)
        if sub and sub.user_id == user_id:
            sub.satisfaction_score = score
            return True
        return False

    def delete(self, subscription_id, user_id):
        self._check()
        sub = self.subs.get(subscription_id)
        if sub and sub.user_id == user_id:
            del self.subs[subscription_id]
            return True
        return False

    def statuses(self):
        return {sub_id: s.status for sub_id, s in self.subs.items()}


class FakeCategoryStore:
    def __init__(self, categories=()):
        self.categories = list(categories)
        self.calls = 0

    def get_visible(self, user_id):
        self.calls += 1
        return [c for c in self.categories if c.is_system or c.user_id == user_id]


class FakeClock:
    def __init__(self, start=None):
        self.now = start or datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


VIDEO = Category(id="cat-video", name="Video", color="#E50914", is_system=True)
MUSIC = Category(id="cat-music", name="Music", color="#1DB954", is_system=True)
CLOUD = Category(id="cat-cloud", name="Cloud", color=None, user_id=1)


@pytest.fixture
def store():
    return FakeSubscriptionStore()


@pytest.fixture
def categories():
    return FakeCategoryStore([VIDEO, MUSIC, CLOUD])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def undo_store():
    return PendingUndoStore()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture(autouse=True)
def open_whitelist(monkeypatch):
    monkeypatch.setattr("security.auth.ALLOWED_USER_IDS", [])
