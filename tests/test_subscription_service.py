from datetime import date

import pytest

from models.subscription import ACTIVE, PAUSED
from services.dashboard_service import LOW_SATISFACTION, DashboardService
from services.subscription_service import SubscriptionService, next_billing_date
from utils.errors import StoreError

from tests.conftest import VIDEO, FakeSubscriptionStore, make_sub


@pytest.fixture
def store():
    return FakeSubscriptionStore()


@pytest.fixture
def service(store, categories):
    return SubscriptionService(store, categories)


@pytest.mark.parametrize(
    "start, cycle, today, expected",
    [
        (date(2026, 1, 31), "monthly", date(2026, 2, 15), date(2026, 2, 28)),
        (date(2026, 1, 31), "monthly", date(2026, 3, 1), date(2026, 3, 31)),
        (date(2026, 10, 1), "weekly", date(2026, 10, 19), date(2026, 10, 22)),
        (date(2024, 2, 29), "yearly", date(2026, 10, 19), date(2027, 2, 28)),
        (date(2026, 10, 19), "monthly", date(2026, 10, 19), date(2026, 11, 19)),
        (date(2026, 12, 1), "monthly", date(2026, 10, 19), date(2026, 12, 1)),
    ],
)
def test_next_billing_date(start, cycle, today, expected):
    assert next_billing_date(start, cycle, today) == expected


# ── Add ──────────────────────────────────────────────

def test_add_manual_saves_subscription(service, store):
    result = service.add_manual(1, "  iCloud ", 35000, "yearly", start_date=date(2026, 1, 15))

    assert result["success"] is True
    assert "2,917" in result["message"]
    saved = next(iter(store.subs.values()))
    assert saved.service_name == "iCloud"
    assert saved.start_date == date(2026, 1, 15)
    assert saved.next_billing_date > date.today()
    assert saved.category_id is None


def test_add_manual_with_category(service, store):
    result = service.add_manual(1, "Wavve", 7900, "monthly", category_name="video")

    assert result["success"] is True
    assert "Category: Video" in result["message"]
    saved = next(iter(store.subs.values()))
    assert saved.category_id == VIDEO.id
    assert saved.category.name == "Video"


def test_add_manual_with_unknown_category(service, store):
    result = service.add_manual(1, "Wavve", 7900, "monthly", category_name="Cars")

    assert result["success"] is False
    assert result["error"].startswith("category unknown")
    assert "Video" in result["error"]
    assert store.subs == {}


def test_other_users_categories_are_not_visible(store, categories):
    # Cloud belongs to user 1
    result = SubscriptionService(store, categories).add_manual(2, "Drive", 2400, "monthly", category_name="Cloud")
    assert result["success"] is False


def test_added_categories_reach_the_dashboard(service, store):
    service.add_manual(1, "Netflix", 17000, "monthly", category_name="Video")
    service.add_manual(1, "Gym", 50000, "monthly")

    breakdown = DashboardService(store).get_summary(1).category_breakdown

    assert [(b.category_name, b.amount) for b in breakdown] == [("Uncategorized", 50000), ("Video", 17000)]


def test_add_manual_rejects_long_name(service, store):
    result = service.add_manual(1, "x" * 51, 1000, "monthly")

    assert result["success"] is False
    assert result["error"].startswith("serviceName")
    assert store.subs == {}


def test_add_manual_wraps_store_failure(service, store):
    store.fail = True
    with pytest.raises(StoreError):
        service.add_manual(1, "Netflix", 17000, "monthly")


# ── Rate ─────────────────────────────────────────────

def test_rated_subscriptions_feed_recommendations(service, store):
    service.add_manual(1, "Costly", 90000, "monthly")
    service.add_manual(1, "Cheap", 1000, "monthly")

    assert "Rated Costly 2/5" in service.rate_at(1, 1, 2)
    service.rate_at(1, 2, 5)

    recs = DashboardService(store).get_recommendations(1)
    assert [(r.service_name, r.reason) for r in recs] == [("Costly", LOW_SATISFACTION)]


@pytest.mark.parametrize("score", [0, 6])
def test_rate_rejects_out_of_range_score(categories, score):
    store = FakeSubscriptionStore([make_sub("a")])

    msg = SubscriptionService(store, categories).rate_at(1, 1, score)

    assert "satisfactionScore" in msg
    assert store.subs["a"].satisfaction_score is None


def test_rate_unknown_position(categories):
    store = FakeSubscriptionStore([make_sub("a")])
    assert "no subscription #3" in SubscriptionService(store, categories).rate_at(1, 3, 4)


# ── Pause / resume ───────────────────────────────────

def test_pause_and_resume_change_dashboard_counts(categories):
    store = FakeSubscriptionStore([
        make_sub("a", 15000, name="Netflix"),
        make_sub("b", 1000, name="Gym"),
    ])
    service = SubscriptionService(store, categories)
    dashboard = DashboardService(store)

    assert "Paused: Netflix" in service.pause_at(1, [1])
    summary = dashboard.get_summary(1)
    assert (summary.active_count, summary.paused_count, summary.monthly_total) == (1, 1, 1000)

    assert "Resumed: Netflix" in service.resume_at(1, [1])
    summary = dashboard.get_summary(1)
    assert (summary.active_count, summary.paused_count, summary.monthly_total) == (2, 0, 16000)
    assert store.subs["a"].status == ACTIVE


def test_pause_rejects_positions_out_of_range(categories):
    store = FakeSubscriptionStore([make_sub("a")])

    msg = SubscriptionService(store, categories).pause_at(1, [1, 4])

    assert "#4" in msg
    assert store.subs["a"].status == ACTIVE


def test_resume_numbers_refer_to_paused_list(categories):
    store = FakeSubscriptionStore([
        make_sub("a", name="Netflix"),
        make_sub("p", name="Gym", status=PAUSED),
    ])

    assert "Resumed: Gym" in SubscriptionService(store, categories).resume_at(1, [1])
    assert store.subs["a"].status == ACTIVE


# ── List / delete ────────────────────────────────────

def test_list_shows_active_then_paused(categories):
    store = FakeSubscriptionStore([
        make_sub("a", 17000, category=VIDEO, name="Netflix", satisfaction=4),
        make_sub("p", 5000, status=PAUSED, name="Paused one"),
        make_sub("b", 1000, "weekly", name="Gym"),
    ])

    text = SubscriptionService(store, categories).list_active(1)

    assert "1. Netflix [Video]" in text
    assert "⭐4" in text
    assert "2. Gym" in text
    assert "Monthly total: 21,333" in text
    assert text.index("Paused (/resume <n>)") < text.index("1. Paused one")


def test_list_active_empty(service):
    assert "No active subscriptions" in service.list_active(1)


def test_delete_at_position(categories):
    store = FakeSubscriptionStore([make_sub("a", name="Netflix"), make_sub("b", name="Gym")])
    service = SubscriptionService(store, categories)

    assert "Deleted Gym" in service.delete_at(1, 2)
    assert list(store.subs) == ["a"]
    assert "no subscription #5" in service.delete_at(1, 5)


@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.get_active(1),
        lambda s: s.list_active(1),
        lambda s: s.delete_at(1, 1),
        lambda s: s.rate_at(1, 1, 3),
        lambda s: s.pause_at(1, [1]),
        lambda s: s.resume_at(1, [1]),
    ],
)
def test_store_failures_become_store_error(categories, call):
    store = FakeSubscriptionStore([make_sub("a")])
    store.fail = True

    with pytest.raises(StoreError):
        call(SubscriptionService(store, categories))
