"""
handlers/start_handler.py
--------------------------
Handles /start and /help commands.
Registers the user and shows available commands.
"""

from telegram import Update
from telegram.ext import ContextTypes

from config import UNDO_WINDOW_SECONDS
from repositories.user_repo import UserRepository
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.logger import get_logger

logger = get_logger(__name__)
user_repo = UserRepository()

HELP_TEXT = """
🤖 *SubKeep*
Keep your subscriptions in check 💳

*📋 Subscriptions:*
/subscriptions - numbered list with monthly equivalents
/add\\_subscription - add one (name | amount | cycle | optional category)
/rate - how much it is worth to you (e.g. /rate 2 4)
/pause - pause for a while (e.g. /pause 2)
/resume - resume a paused one (e.g. /resume 1)
/delete\\_subscription - delete one for good (e.g. /delete\\_subscription 2)

*🧮 What if:*
/simulate\\_cancel - savings if you cancel (e.g. /simulate\\_cancel 1 3)
/simulate\\_add - cost of a new one (name | amount | cycle)
/apply\\_cancel - cancel for real (e.g. /apply\\_cancel 1 3)
/undo - revert the last cancellation (within {undo_window} seconds)

*📊 Overview:*
/dashboard - monthly and yearly spend by category
/recommend - subscriptions worth cancelling
/export\\_csv - export as CSV
/export\\_excel - export as Excel
/myid - your Telegram ID
""".format(undo_window=UNDO_WINDOW_SECONDS)


@authorized_only
@rate_limited
async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command - register user and show welcome message."""
    user = update.effective_user
    user_repo.ensure_user(user.id, user.first_name)
    logger.info(f"User {user.id} ({user.first_name}) started the bot.")

    await update.message.reply_text(
        f"Hi {user.first_name}! 👋\n"
        f"I track your subscriptions and show what you'd save by cancelling.\n\n"
        f"Type /help to see every command."
    )


@authorized_only
@rate_limited
async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command - show all available commands."""
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")


@authorized_only
async def myid_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /myid command - show user's Telegram ID for whitelisting."""
    user = update.effective_user
    await update.message.reply_text(
        f"🆔 Your ID: `{user.id}`\n"
        f"Add it to `ALLOWED_USER_IDS` in `.env` to lock the bot down.",
        parse_mode="Markdown",
    )
