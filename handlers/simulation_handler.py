"""
handlers/simulation_handler.py
------------------------------
Handles "what if" simulations, applying cancellations, undo, and the
dashboard. Subscriptions are referred to by their number in /subscriptions.
"""

from telegram import Update
from telegram.ext import ContextTypes

from models.dashboard import DashboardSummary
from models.simulation import SimulationResult, VirtualSubscriptionItem
from services.dashboard_service import DashboardService
from services.simulation_service import SimulationService
from services.subscription_service import SubscriptionService
from services.undo_service import ApplyUndoService
from handlers.subscription_handler import parse_positions, parse_subscription_args
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.errors import StoreError, UndoUnavailable, ValidationError
from utils.logger import get_logger

logger = get_logger(__name__)
simulation_service = SimulationService()
apply_undo_service = ApplyUndoService()
dashboard_service = DashboardService()
subscription_service = SubscriptionService()

_RETRY_TEXT = "❌ Something went wrong reading your subscriptions. Try again."


def _signed(value: int) -> str:
    return f"+{value:,}" if value > 0 else f"{value:,}"


def format_breakdown(rows) -> list[str]:
    lines = []
    for row in rows:
        lines.append(f"  • {row.category_name}: {row.amount:,} ({row.percentage:.1f}%, {row.count})")
    return lines


def format_simulation(result: SimulationResult, title: str) -> str:
    """Render a SimulationResult as a chat message."""
    lines = [
        f"🧮 {title}\n",
        f"Now: {result.current_monthly_total:,}/month",
        f"After: {result.simulated_monthly_total:,}/month",
        f"Change: {_signed(result.monthly_difference)}/month ({_signed(result.annual_difference)}/year)",
    ]
    if result.category_breakdown:
        lines.append("\n📂 By category:")
        lines.extend(format_breakdown(result.category_breakdown))
    return "\n".join(lines)


def format_dashboard(summary: DashboardSummary) -> str:
    lines = [
        "📊 Dashboard\n",
        f"💳 Monthly: {summary.monthly_total:,}",
        f"📅 Yearly: {summary.annual_total:,}",
        f"✅ Active: {summary.active_count} | ⏸️ Paused: {summary.paused_count}",
    ]
    if summary.category_breakdown:
        lines.append("\n📂 By category:")
        lines.extend(format_breakdown(summary.category_breakdown))
    return "\n".join(lines)


async def _resolve_positions(update: Update, args: list[str], usage: str) -> list[str] | None:
    """Map list numbers to subscription IDs, replying with an error if any is invalid."""
    positions = parse_positions(args)
    if not positions:
        await update.message.reply_text(usage)
        return None

    active = subscription_service.get_active(update.effective_user.id)
    invalid = [p for p in positions if p > len(active)]
    if invalid:
        await update.message.reply_text(
            f"⚠️ No subscription #{', #'.join(map(str, invalid))}. See /subscriptions."
        )
        return None
    return [active[p - 1].id for p in positions]


@authorized_only
@rate_limited
async def simulate_cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /simulate_cancel <n> [<n> ...] - preview the savings of cancelling.
    Nothing is changed.
    """
    user = update.effective_user
    try:
        ids = await _resolve_positions(
            update, context.args or [],
            "⚠️ Usage: /simulate_cancel <numbers from /subscriptions>\nExample: /simulate_cancel 1 3",
        )
        if ids is None:
            return
        result = simulation_service.simulate_cancel(user.id, ids)
    except StoreError:
        await update.message.reply_text(_RETRY_TEXT)
        return

    msg = format_simulation(result, "If you cancel")
    msg += f"\n\n👉 /apply_cancel {' '.join(context.args)} to do it."
    await update.message.reply_text(msg)


@authorized_only
@rate_limited
async def simulate_add_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /simulate_add name | amount | cycle - preview the cost of a new subscription.
    """
    user = update.effective_user
    parsed = parse_subscription_args(" ".join(context.args or []))
    if not parsed:
        await update.message.reply_text(
            "⚠️ Usage: /simulate_add name | amount | cycle\n"
            "Example: /simulate_add YouTube Premium | 14900 | monthly"
        )
        return

    item = VirtualSubscriptionItem(
        service_name=parsed["name"],
        amount=parsed["amount"],
        billing_cycle=parsed["billing_cycle"],
    )
    try:
        result = simulation_service.simulate_add(user.id, item)
    except ValidationError as e:
        await update.message.reply_text(f"⚠️ {e.field} {e.message}")
        return
    except StoreError:
        await update.message.reply_text(_RETRY_TEXT)
        return

    await update.message.reply_text(format_simulation(result, f"If you add {item.service_name}"))


@authorized_only
@rate_limited
async def apply_cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /apply_cancel <n> [<n> ...] - cancel for real.
    The batch can be reverted with /undo for a short while.
    """
    user = update.effective_user
    try:
        ids = await _resolve_positions(
            update, context.args or [],
            "⚠️ Usage: /apply_cancel <numbers from /subscriptions>\nExample: /apply_cancel 1 3",
        )
        if ids is None:
            return
        cancelled = apply_undo_service.apply(user.id, "cancel", ids)
    except StoreError:
        await update.message.reply_text("❌ Cancelling failed. Nothing was changed, try again.")
        return

    if not cancelled:
        await update.message.reply_text("ℹ️ Nothing to cancel.")
        return

    seconds = int(apply_undo_service.window.total_seconds())
    await update.message.reply_text(
        f"🚫 Cancelled {len(cancelled)} subscription(s).\n"
        f"↩️ Changed your mind? /undo within {seconds} seconds."
    )


@authorized_only
@rate_limited
async def undo_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /undo - revert the latest /apply_cancel within the undo window."""
    user = update.effective_user
    try:
        restored = apply_undo_service.undo(user.id)
    except UndoUnavailable as e:
        if e.reason == UndoUnavailable.EXPIRED:
            await update.message.reply_text("⌛ Too late, the undo window has expired.")
        else:
            await update.message.reply_text("ℹ️ There is nothing to undo.")
        return
    except StoreError:
        await update.message.reply_text("❌ Undo failed. Try again right away.")
        return

    await update.message.reply_text(f"↩️ Restored {len(restored)} subscription(s).")


@authorized_only
@rate_limited
async def dashboard_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /dashboard - monthly and yearly spend by category."""
    user = update.effective_user
    try:
        summary = dashboard_service.get_summary(user.id)
    except StoreError:
        await update.message.reply_text(_RETRY_TEXT)
        return
    await update.message.reply_text(format_dashboard(summary))


@authorized_only
@rate_limited
async def recommend_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /recommend - subscriptions worth cancelling."""
    user = update.effective_user
    try:
        recommendations = dashboard_service.get_recommendations(user.id)
    except StoreError:
        await update.message.reply_text(_RETRY_TEXT)
        return

    if not recommendations:
        await update.message.reply_text("👍 Nothing to suggest. Rate your subscriptions to get tips.")
        return

    lines = ["💡 Worth cancelling:\n"]
    for r in recommendations:
        lines.append(
            f"  • {r.service_name}: {r.monthly_amount:,}/month "
            f"(save {r.annual_saving:,}/year) - {r.reason}, ⭐{r.satisfaction_score}"
        )
    await update.message.reply_text("\n".join(lines))
