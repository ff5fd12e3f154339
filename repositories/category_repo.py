"""
repositories/category_repo.py
-----------------------------
Data access layer for subscription categories.
"""

from db.connection import get_connection, release_connection
from models.category import Category


class CategoryRepository:
    """Read access to the categories table."""

    def get_visible(self, user_id: int) -> list[Category]:
        """
        Get every category a user can assign: their own plus the system ones.

        Returns:
            List of Category objects ordered for display.
        """
        sql = """
            SELECT id::text, name, color, user_id, is_system, sort_order
            FROM categories
            WHERE user_id = %s OR is_system = TRUE
            ORDER BY is_system DESC, sort_order ASC, name ASC;
        """
        conn = get_connection()
        try:
            with conn.cursor() as cur:
                cur.execute(sql, (user_id,))
                return [
                    Category(
                        id=r[0],
                        name=r[1],
                        color=r[2],
                        user_id=r[3],
                        is_system=r[4],
                        sort_order=r[5],
                    )
                    for r in cur.fetchall()
                ]
        finally:
            release_connection(conn)
