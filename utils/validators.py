"""
utils/validators.py
-------------------
Input checks shared by the bot handlers and the HTTP API.
Each function raises utils.errors.ValidationError on the first problem
found; field names match the JSON request bodies.
"""

from typing import Iterable, Optional

from models.simulation import VirtualSubscriptionItem
from models.subscription import Subscription
from services.billing_cycle import BILLING_CYCLES
from utils.errors import ValidationError

MAX_SERVICE_NAME_LENGTH = 50
MAX_NOTE_LENGTH = 500
MAX_URL_LENGTH = 255
MAX_AMOUNT = 9_999_999
APPLY_ACTIONS: tuple[str, ...] = ("cancel",)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_amount(amount, field: str = "amount", allow_zero: bool = True) -> None:
    if not _is_int(amount):
        raise ValidationError(field, "must be an integer")
    if amount < 0:
        raise ValidationError(field, "must not be negative")
    if amount == 0 and not allow_zero:
        raise ValidationError(field, "must be greater than 0")
    if amount > MAX_AMOUNT:
        raise ValidationError(field, f"must not exceed {MAX_AMOUNT:,}")


def validate_billing_cycle(cycle, field: str = "billingCycle") -> None:
    if cycle not in BILLING_CYCLES:
        raise ValidationError(field, f"must be one of: {', '.join(BILLING_CYCLES)}")


def validate_service_name(name, field: str = "serviceName") -> None:
    if not isinstance(name, str) or not name.strip():
        raise ValidationError(field, "is required")
    if len(name.strip()) > MAX_SERVICE_NAME_LENGTH:
        raise ValidationError(field, f"must be at most {MAX_SERVICE_NAME_LENGTH} characters")


def validate_subscription_ids(ids, field: str = "subscriptionIds", allow_empty: bool = True) -> list[str]:
    """
    Check a list of subscription IDs and return it de-duplicated, order kept.
    Existence and ownership are not checked here: unknown IDs are skipped
    by the services.
    """
    if ids is None:
        ids = []
    if isinstance(ids, str) or not isinstance(ids, Iterable):
        raise ValidationError(field, "must be a list of IDs")
    cleaned: list[str] = []
    for sub_id in ids:
        if not isinstance(sub_id, str) or not sub_id.strip():
            raise ValidationError(field, "IDs must be non-empty strings")
        if sub_id not in cleaned:
            cleaned.append(sub_id)
    if not cleaned and not allow_empty:
        raise ValidationError(field, "at least one ID is required")
    return cleaned


def validate_virtual_item(item: VirtualSubscriptionItem, prefix: str = "") -> None:
    """A virtual item must have a name, a positive amount and a known cycle."""
    validate_service_name(item.service_name, f"{prefix}serviceName")
    validate_amount(item.amount, f"{prefix}amount", allow_zero=False)
    validate_billing_cycle(item.billing_cycle, f"{prefix}billingCycle")


def validate_virtual_items(items: Optional[list[VirtualSubscriptionItem]]) -> list[VirtualSubscriptionItem]:
    items = items or []
    for index, item in enumerate(items):
        validate_virtual_item(item, prefix=f"addItems[{index}].")
    return items


def validate_action(action) -> None:
    if action not in APPLY_ACTIONS:
        raise ValidationError("action", f"must be one of: {', '.join(APPLY_ACTIONS)}")


def validate_subscription(sub: Subscription) -> None:
    """Checks a new or edited subscription before it is written."""
    validate_service_name(sub.service_name)
    validate_amount(sub.amount)
    validate_billing_cycle(sub.billing_cycle)
    if sub.satisfaction_score is not None:
        if not _is_int(sub.satisfaction_score) or not 1 <= sub.satisfaction_score <= 5:
            raise ValidationError("satisfactionScore", "must be between 1 and 5")
    if sub.note is not None and len(sub.note) > MAX_NOTE_LENGTH:
        raise ValidationError("note", f"must be at most {MAX_NOTE_LENGTH} characters")
    if sub.service_url is not None:
        if len(sub.service_url) > MAX_URL_LENGTH or not sub.service_url.startswith(("http://", "https://")):
            raise ValidationError("serviceUrl", "must be an http(s) URL")
    if not isinstance(sub.currency, str) or len(sub.currency) != 3:
        raise ValidationError("currency", "must be a 3-letter code")
