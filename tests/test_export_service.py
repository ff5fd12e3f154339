import pandas as pd

from models.subscription import CANCELLED
from services.export_service import COLUMNS, ExportService

from tests.conftest import MUSIC, VIDEO, FakeSubscriptionStore, make_sub


def _store():
    return FakeSubscriptionStore([
        make_sub("a", 17000, category=VIDEO, name="Netflix", satisfaction=4),
        make_sub("b", 12000, "yearly", category=MUSIC, name="Melon"),
        make_sub("c", 5000, category=VIDEO, name="Old", status=CANCELLED),
        make_sub("x", 9999, user_id=2, name="Someone else"),
    ])


def test_csv_contains_normalized_amounts():
    buffer = ExportService(_store()).export_csv(1)

    df = pd.read_csv(buffer, encoding="utf-8-sig")

    assert list(df.columns) == COLUMNS
    assert list(df["Service"]) == ["Netflix", "Melon", "Old"]
    melon = df[df["Service"] == "Melon"].iloc[0]
    assert melon["Monthly equivalent"] == 1000
    assert melon["Annual equivalent"] == 12000


def test_excel_summary_counts_only_active():
    buffer = ExportService(_store()).export_excel(1)

    sheets = pd.read_excel(buffer, sheet_name=None, engine="openpyxl")

    assert set(sheets) == {"Subscriptions", "Summary"}
    summary = sheets["Summary"].set_index("Category")["Monthly total"].to_dict()
    assert summary == {"Video": 17000, "Music": 1000}


def test_excel_without_active_subscriptions_has_no_summary():
    store = FakeSubscriptionStore([make_sub("c", 5000, status=CANCELLED)])

    sheets = pd.read_excel(ExportService(store).export_excel(1), sheet_name=None, engine="openpyxl")

    assert list(sheets) == ["Subscriptions"]
