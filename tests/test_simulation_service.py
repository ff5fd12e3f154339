import pytest

from models.simulation import VirtualSubscriptionItem
from models.subscription import CANCELLED, PAUSED
from services.simulation_service import SimulationService, simulate
from utils.errors import StoreError, ValidationError

from tests.conftest import CLOUD, MUSIC, VIDEO, FakeSubscriptionStore, make_sub


@pytest.fixture
def two_subs():
    """A: 15,000 monthly (Video). B: 12,000 yearly (Music)."""
    return [
        make_sub("a", 15000, "monthly", category=VIDEO, name="Netflix"),
        make_sub("b", 12000, "yearly", category=MUSIC, name="Melon"),
    ]


@pytest.fixture
def service(two_subs, categories):
    return SimulationService(repo=FakeSubscriptionStore(two_subs), category_repo=categories)


# ── Cancel ───────────────────────────────────────────

def test_cancel_one(service):
    result = service.simulate_cancel(1, ["a"])

    assert result.current_monthly_total == 16000
    assert result.simulated_monthly_total == 1000
    assert result.monthly_difference == -15000
    assert result.annual_difference == -180000
    assert [b.category_id for b in result.category_breakdown] == [MUSIC.id]
    assert result.category_breakdown[0].percentage == 100.0


def test_cancel_nothing_keeps_totals(service):
    result = service.simulate_cancel(1, [])

    assert result.simulated_monthly_total == result.current_monthly_total == 16000
    assert result.monthly_difference == 0


def test_cancel_everything_leaves_empty_breakdown(service):
    result = service.simulate_cancel(1, ["a", "b"])

    assert result.simulated_monthly_total == 0
    assert result.category_breakdown == []


def test_unknown_and_foreign_ids_are_ignored(two_subs, categories):
    other = make_sub("z", 9900, user_id=2)
    service = SimulationService(FakeSubscriptionStore(two_subs + [other]), categories)

    result = service.simulate_cancel(1, ["nope", "z"])

    assert result.current_monthly_total == 16000
    assert result.simulated_monthly_total == 16000


def test_inactive_subscriptions_do_not_count(two_subs, categories):
    subs = two_subs + [
        make_sub("p", 5000, status=PAUSED),
        make_sub("c", 7000, status=CANCELLED),
    ]
    service = SimulationService(FakeSubscriptionStore(subs), categories)

    result = service.simulate_cancel(1, ["p", "c"])

    assert result.current_monthly_total == 16000
    assert result.simulated_monthly_total == 16000


def test_simulation_does_not_change_the_store(two_subs, categories):
    store = FakeSubscriptionStore(two_subs)
    service = SimulationService(store, categories)
    before = store.statuses()

    first = service.simulate_cancel(1, ["a"])
    second = service.simulate_cancel(1, ["a"])

    assert store.statuses() == before
    assert first.to_dict() == second.to_dict()


def test_duplicate_ids_count_once(service):
    assert service.simulate_cancel(1, ["a", "a"]).simulated_monthly_total == 1000


def test_cancel_rejects_blank_ids(service):
    with pytest.raises(ValidationError) as exc:
        service.simulate_cancel(1, ["a", ""])
    assert exc.value.field == "subscriptionIds"


# ── Add ──────────────────────────────────────────────

def test_add_weekly_item(service):
    item = VirtualSubscriptionItem("Gym", 1000, "weekly")

    result = service.simulate_add(1, item)

    assert result.current_monthly_total == 16000
    assert result.simulated_monthly_total == 20333
    assert result.monthly_difference == 4333
    assert result.annual_difference == 51996


def test_add_item_with_known_category_joins_that_bucket(service):
    result = service.simulate_add(1, VirtualSubscriptionItem("Wavve", 5000, "monthly", VIDEO.id))

    video = next(b for b in result.category_breakdown if b.category_id == VIDEO.id)
    assert video.amount == 20000
    assert video.count == 2
    assert video.category_color == VIDEO.color


def test_add_item_with_unknown_category_is_uncategorized(service):
    result = service.simulate_add(1, VirtualSubscriptionItem("X", 3000, "monthly", "ghost"))

    bucket = next(b for b in result.category_breakdown if b.category_id == "uncategorized")
    assert bucket.category_name == "Uncategorized"
    assert bucket.category_color == "#9E9E9E"
    assert bucket.amount == 3000


def test_add_without_category_skips_category_lookup(service, categories):
    service.simulate_add(1, VirtualSubscriptionItem("X", 3000, "monthly"))
    assert categories.calls == 0


@pytest.mark.parametrize(
    "item, field",
    [
        (VirtualSubscriptionItem("X", 0, "monthly"), "amount"),
        (VirtualSubscriptionItem("X", -1, "monthly"), "amount"),
        (VirtualSubscriptionItem("X", 1000, "daily"), "billingCycle"),
        (VirtualSubscriptionItem("  ", 1000, "monthly"), "serviceName"),
    ],
)
def test_add_rejects_invalid_items(service, item, field):
    with pytest.raises(ValidationError) as exc:
        service.simulate_add(1, item)
    assert exc.value.field == field


# ── Combined ─────────────────────────────────────────

def test_combined_obeys_the_sum_rule(service):
    items = [
        VirtualSubscriptionItem("Gym", 1000, "weekly"),
        VirtualSubscriptionItem("Drive", 24000, "yearly", CLOUD.id),
    ]

    result = service.simulate_combined(1, ["a"], items)

    assert result.simulated_monthly_total == 16000 - 15000 + 4333 + 2000
    assert sum(b.amount for b in result.category_breakdown) == result.simulated_monthly_total
    assert sum(b.count for b in result.category_breakdown) == 3


def test_combined_reports_index_of_bad_item(service):
    items = [
        VirtualSubscriptionItem("Gym", 1000, "weekly"),
        VirtualSubscriptionItem("Bad", 0, "weekly"),
    ]
    with pytest.raises(ValidationError) as exc:
        service.simulate_combined(1, [], items)
    assert exc.value.field == "addItems[1].amount"


def test_combined_with_no_subscriptions_at_all(categories):
    service = SimulationService(FakeSubscriptionStore(), categories)

    result = service.simulate_combined(1, ["a"], [])

    assert result.current_monthly_total == 0
    assert result.simulated_monthly_total == 0
    assert result.category_breakdown == []


# ── Breakdown ordering ───────────────────────────────

def test_breakdown_sorted_by_amount_then_name():
    subs = [
        make_sub(amount=5000, category=MUSIC),
        make_sub(amount=5000, category=CLOUD),
        make_sub(amount=9000, category=VIDEO),
        make_sub(amount=1000),
    ]

    rows = simulate(subs).category_breakdown

    assert [r.category_name for r in rows] == ["Video", "Cloud", "Music", "Uncategorized"]
    assert [r.percentage for r in rows] == [45.0, 25.0, 25.0, 5.0]


def test_category_without_color_uses_default():
    rows = simulate([make_sub(amount=100, category=CLOUD)]).category_breakdown
    assert rows[0].category_color == "#9E9E9E"


def test_to_dict_uses_camel_case(service):
    data = service.simulate_cancel(1, ["a"]).to_dict()

    assert data == {
        "currentMonthlyTotal": 16000,
        "simulatedMonthlyTotal": 1000,
        "monthlyDifference": -15000,
        "annualDifference": -180000,
        "categoryBreakdown": [{
            "categoryId": MUSIC.id,
            "categoryName": "Music",
            "categoryColor": MUSIC.color,
            "amount": 1000,
            "percentage": 100.0,
            "count": 1,
        }],
    }


# ── Store failures ───────────────────────────────────

def test_store_failure_becomes_store_error(two_subs, categories):
    store = FakeSubscriptionStore(two_subs)
    store.fail = True
    service = SimulationService(store, categories)

    with pytest.raises(StoreError):
        service.simulate_cancel(1, ["a"])
