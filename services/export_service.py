"""
services/export_service.py
---------------------------
Generates CSV and Excel exports of the user's subscriptions,
with their normalized monthly and annual amounts.
"""

import io

import pandas as pd
import psycopg2

from models.category import UNCATEGORIZED_NAME
from models.subscription import Subscription
from repositories.subscription_repo import SubscriptionRepository
from utils.errors import StoreError
from utils.logger import get_logger

logger = get_logger(__name__)

COLUMNS = [
    "Service", "Category", "Status", "Amount", "Currency", "Billing cycle",
    "Monthly equivalent", "Annual equivalent", "Next billing date", "Satisfaction",
]


class ExportService:
    """Generates downloadable subscription reports in CSV and Excel formats."""

    def __init__(self, repo=None):
        self.repo = repo or SubscriptionRepository()

    def _frame(self, user_id: int) -> pd.DataFrame:
        try:
            subs = self.repo.get_all(user_id)
        except psycopg2.Error as e:
            logger.error(f"Export read failed for user {user_id}: {e}")
            raise StoreError("Could not load subscriptions for export") from e
        data = [self._row(s) for s in subs]
        return pd.DataFrame(data, columns=COLUMNS)

    @staticmethod
    def _row(s: Subscription) -> dict:
        return {
            "Service": s.service_name,
            "Category": s.category.name if s.category else UNCATEGORIZED_NAME,
            "Status": s.status,
            "Amount": s.amount,
            "Currency": s.currency,
            "Billing cycle": s.billing_cycle,
            "Monthly equivalent": s.monthly_amount,
            "Annual equivalent": s.annual_amount,
            "Next billing date": s.next_billing_date.isoformat(),
            "Satisfaction": s.satisfaction_score if s.satisfaction_score is not None else "",
        }

    def export_csv(self, user_id: int) -> io.BytesIO:
        """
        Export all subscriptions as a CSV file.

        Args:
            user_id: Owner's user ID.

        Returns:
            A BytesIO buffer containing the CSV data.
        """
        df = self._frame(user_id)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} subscriptions as CSV for user {user_id}")
        return buffer

    def export_excel(self, user_id: int) -> io.BytesIO:
        """
        Export all subscriptions as an Excel (.xlsx) file, with a second
        sheet summing active monthly spend per category.

        Args:
            user_id: Owner's user ID.

        Returns:
            A BytesIO buffer containing the Excel data.
        """
        df = self._frame(user_id)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Subscriptions", index=False)

            active = df[df["Status"] == "active"]
            if not active.empty:
                summary = active.groupby("Category")["Monthly equivalent"].sum().reset_index()
                summary.columns = ["Category", "Monthly total"]
                summary = summary.sort_values("Monthly total", ascending=False)
                summary.to_excel(writer, sheet_name="Summary", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} subscriptions as Excel for user {user_id}")
        return buffer
