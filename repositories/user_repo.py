"""
repositories/user_repo.py
--------------------------
Registers bot users and reads their preferences.
"""

from typing import Optional

from config import DEFAULT_CURRENCY
from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

_UPSERT_SQL = """
    INSERT INTO users (telegram_id, first_name, currency)
    VALUES (%s, %s, %s)
    ON CONFLICT (telegram_id)
    DO UPDATE SET first_name = COALESCE(EXCLUDED.first_name, users.first_name)
    RETURNING currency;
"""


class UserRepository:

    def ensure_user(self, telegram_id: int, first_name: Optional[str] = None) -> str:
        """
        Register the user on first contact; later calls only refresh the name.

        Categories and subscriptions reference users(telegram_id), so this
        runs before a user's first write.

        Returns:
            The user's preferred currency code.
        """
        try:
            with transaction() as conn, conn.cursor() as cur:
                cur.execute(_UPSERT_SQL, (telegram_id, first_name, DEFAULT_CURRENCY))
                (currency,) = cur.fetchone()
        except Exception as e:
            logger.error(f"Failed to register user {telegram_id}: {e}")
            raise
        return currency or DEFAULT_CURRENCY
