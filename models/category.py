"""
models/category.py
------------------
Domain model for subscription categories.
"""

from dataclasses import dataclass
from typing import Optional

# Bucket used for subscriptions (real or virtual) without a known category
UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_NAME = "Uncategorized"
DEFAULT_COLOR = "#9E9E9E"


@dataclass
class Category:
    """
    A grouping label for subscriptions.

    Attributes:
        id: Database primary key (UUID text).
        name: Display name (max 50 chars).
        color: Hex color used by charts, e.g. '#E50914'.
        user_id: Owner's user ID, or None for system categories.
        is_system: System categories are shared by everyone and immutable.
        sort_order: Display order.
    """
    id: str
    name: str
    color: Optional[str] = None
    user_id: Optional[int] = None
    is_system: bool = False
    sort_order: int = 0

    @property
    def display_color(self) -> str:
        return self.color or DEFAULT_COLOR
