"""
handlers/subscription_handler.py
--------------------------------
Handles subscription bookkeeping commands.
Delegates all logic to SubscriptionService.
"""

import re
from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from repositories.user_repo import UserRepository
from services.subscription_service import SubscriptionService
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.errors import StoreError
from utils.logger import get_logger

logger = get_logger(__name__)
subscription_service = SubscriptionService()
user_repo = UserRepository()

# Cycle aliases accepted from users (English and Korean)
_CYCLE_MAP = {
    "weekly": "weekly", "week": "weekly", "w": "weekly", "주간": "weekly", "매주": "weekly",
    "monthly": "monthly", "month": "monthly", "m": "monthly", "월간": "monthly", "매월": "monthly",
    "yearly": "yearly", "year": "yearly", "annual": "yearly", "y": "yearly",
    "연간": "yearly", "매년": "yearly",
}


def parse_amount(raw: str) -> int | None:
    """Parse a whole-unit amount such as '17000', '17,000' or '₩17,000'."""
    cleaned = re.sub(r"[\s,₩원]", "", raw)
    if not re.fullmatch(r"\d+", cleaned):
        return None
    return int(cleaned)


def parse_subscription_args(text: str) -> dict | None:
    """
    Parse the structured format:
      name | amount | cycle [| yyyy-mm-dd] [| category]
    Example:
      Netflix | 17000 | monthly
      iCloud | 35,000 | yearly | 2026-01-15
      Spotify | 10900 | monthly | Music
    The optional date is the start date; the two optional fields may
    come in either order.
    """
    parts = [p.strip() for p in text.split("|")]
    if len(parts) < 3 or len(parts) > 5 or not parts[0]:
        return None

    amount = parse_amount(parts[1])
    if amount is None:
        return None

    cycle = _CYCLE_MAP.get(parts[2].lower())
    if not cycle:
        return None

    start = None
    category = None
    for extra in parts[3:]:
        if not extra:
            continue
        if re.fullmatch(r"\d{4}-\d{2}-\d{2}", extra):
            if start is not None:
                return None
            try:
                start = date.fromisoformat(extra)
            except ValueError:
                return None
        elif category is None:
            category = extra
        else:
            return None

    return {
        "name": parts[0],
        "amount": amount,
        "billing_cycle": cycle,
        "start_date": start,
        "category_name": category,
    }


def parse_positions(args: list[str]) -> list[int] | None:
    """Parse list positions like ['1', '3'] or ['1,3']; None if any is not a number."""
    tokens = [t for arg in args for t in arg.split(",") if t.strip()]
    if not tokens:
        return None
    positions = []
    for token in tokens:
        token = token.strip().lstrip("#")
        if not re.fullmatch(r"\d+", token) or int(token) < 1:
            return None
        if int(token) not in positions:
            positions.append(int(token))
    return positions


def parse_rating(args: list[str]) -> tuple[int, int] | None:
    """Parse '<n> <score>' for /rate; the score range is checked by the service."""
    if len(args) != 2:
        return None
    positions = parse_positions(args[:1])
    if not positions or not re.fullmatch(r"\d+", args[1]):
        return None
    return positions[0], int(args[1])


_RETRY_TEXT = "❌ Something went wrong reading your subscriptions. Try again."


@authorized_only
@rate_limited
async def subscriptions_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /subscriptions - numbered lists of active and paused subscriptions."""
    user = update.effective_user
    try:
        msg = subscription_service.list_active(user.id)
    except StoreError:
        msg = _RETRY_TEXT
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def add_subscription_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /add_subscription - register a new subscription.

    Format:
        /add_subscription name | amount | cycle
        /add_subscription name | amount | cycle | start-date | category

    Examples:
        /add_subscription Netflix | 17000 | monthly
        /add_subscription iCloud | 35000 | yearly | 2026-01-15 | Cloud
    """
    user = update.effective_user

    if not context.args:
        await update.message.reply_text(
            "📝 *Add a subscription*\n\n"
            "`/add_subscription name | amount | cycle [| start-date] [| category]`\n\n"
            "*Examples:*\n"
            "• `/add_subscription Netflix | 17000 | monthly | Video`\n"
            "• `/add_subscription iCloud | 35000 | yearly | 2026-01-15`\n\n"
            "*Cycle:* weekly, monthly, yearly",
            parse_mode="Markdown",
        )
        return

    parsed = parse_subscription_args(" ".join(context.args))
    if not parsed:
        await update.message.reply_text(
            "🤔 I couldn't read that. Use: name | amount | cycle [| yyyy-mm-dd] [| category]"
        )
        return

    currency = user_repo.ensure_user(user.id, user.first_name)
    try:
        result = subscription_service.add_manual(user_id=user.id, currency=currency, **parsed)
    except StoreError:
        await update.message.reply_text("❌ Saving failed. Nothing was added, try again.")
        return

    if result.get("success"):
        await update.message.reply_text(result["message"])
    else:
        await update.message.reply_text(f"⚠️ {result['error']}")


@authorized_only
@rate_limited
async def rate_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /rate <n> <1-5> - score how much a subscription is worth to you."""
    user = update.effective_user
    parsed = parse_rating(context.args or [])
    if not parsed:
        await update.message.reply_text(
            "⚠️ Usage: /rate <number from /subscriptions> <1-5>\nExample: /rate 2 4"
        )
        return

    try:
        msg = subscription_service.rate_at(user.id, *parsed)
    except StoreError:
        msg = _RETRY_TEXT
    await update.message.reply_text(msg)


async def _change_status(update: Update, context: ContextTypes.DEFAULT_TYPE, command: str, action) -> None:
    positions = parse_positions(context.args or [])
    if not positions:
        await update.message.reply_text(
            f"⚠️ Usage: /{command} <numbers from /subscriptions>\nExample: /{command} 1 3"
        )
        return
    try:
        msg = action(update.effective_user.id, positions)
    except StoreError:
        msg = _RETRY_TEXT
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def pause_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /pause <n> [<n> ...] - pause active subscriptions."""
    await _change_status(update, context, "pause", subscription_service.pause_at)


@authorized_only
@rate_limited
async def resume_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /resume <n> [<n> ...] - resume subscriptions from the paused list."""
    await _change_status(update, context, "resume", subscription_service.resume_at)


@authorized_only
@rate_limited
async def delete_subscription_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /delete_subscription <n> - permanently delete a subscription.
    This is not a cancellation; use /apply_cancel to cancel.
    """
    user = update.effective_user

    positions = parse_positions(context.args or [])
    if not positions or len(positions) != 1:
        await update.message.reply_text(
            "⚠️ Usage: /delete_subscription <number from /subscriptions>\n"
            "Example: /delete_subscription 3"
        )
        return

    try:
        msg = subscription_service.delete_at(user.id, positions[0])
    except StoreError:
        msg = _RETRY_TEXT
    await update.message.reply_text(msg)
