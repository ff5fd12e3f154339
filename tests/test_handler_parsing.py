from datetime import date

import pytest

from handlers.simulation_handler import format_simulation
from handlers.subscription_handler import (
    parse_amount,
    parse_positions,
    parse_rating,
    parse_subscription_args,
)
from models.simulation import CategoryBreakdown, SimulationResult


@pytest.mark.parametrize(
    "raw, expected",
    [("17000", 17000), ("17,000", 17000), ("₩17,000", 17000), ("17000원", 17000), ("", None), ("1.5", None), ("-3", None)],
)
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


def test_parse_subscription_args():
    assert parse_subscription_args("Netflix | 17,000 | monthly") == {
        "name": "Netflix",
        "amount": 17000,
        "billing_cycle": "monthly",
        "start_date": None,
        "category_name": None,
    }
    parsed = parse_subscription_args("iCloud | 35000 | 연간 | 2026-01-15")
    assert parsed["billing_cycle"] == "yearly"
    assert parsed["start_date"] == date(2026, 1, 15)


@pytest.mark.parametrize(
    "text",
    ["Netflix | 17000", " | 17000 | monthly", "Netflix | abc | monthly", "Netflix | 100 | daily", "X | 1 | m | 2026-13-01", "X | 1 | m | Video | Music", "X | 1 | m | 2026-01-01 | 2026-02-01"],
)
def test_parse_subscription_args_rejects(text):
    assert parse_subscription_args(text) is None


def test_parse_positions():
    assert parse_positions(["1", "3"]) == [1, 3]
    assert parse_positions(["1,3,1"]) == [1, 3]
    assert parse_positions(["#2"]) == [2]
    assert parse_positions([]) is None
    assert parse_positions(["0"]) is None
    assert parse_positions(["1", "two"]) is None


def test_format_simulation_signs_the_difference():
    result = SimulationResult(
        current_monthly_total=16000,
        simulated_monthly_total=1000,
        category_breakdown=[CategoryBreakdown("m", "Music", "#1DB954", 1000, 100.0, 1)],
    )

    text = format_simulation(result, "Cancel")

    assert "Change: -15,000/month (-180,000/year)" in text
    assert "Music: 1,000 (100.0%, 1)" in text


def test_parse_subscription_args_with_category():
    parsed = parse_subscription_args("Spotify | 10900 | monthly | Music")
    assert parsed["category_name"] == "Music"
    assert parsed["start_date"] is None

    parsed = parse_subscription_args("iCloud | 35000 | yearly | Cloud | 2026-01-15")
    assert parsed["category_name"] == "Cloud"
    assert parsed["start_date"] == date(2026, 1, 15)


def test_parse_rating():
    assert parse_rating(["2", "4"]) == (2, 4)
    assert parse_rating(["#1", "9"]) == (1, 9)
    assert parse_rating(["2"]) is None
    assert parse_rating(["x", "4"]) is None
    assert parse_rating(["2", "four"]) is None
