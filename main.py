"""
main.py
-------
Entry point for the SubKeep Telegram bot.

Responsibilities:
    - Initialize the database connection pool and schema.
    - Configure and start the Telegram bot with all handlers.

The HTTP API is a separate process: see api/app.py.
"""

from telegram import BotCommand
from telegram.ext import Application, CommandHandler

from config import TELEGRAM_BOT_TOKEN
from db.connection import init_pool, close_pool
from db.init_db import create_tables
from handlers.start_handler import start_command, help_command, myid_command
from handlers.subscription_handler import (
    subscriptions_command,
    add_subscription_command,
    delete_subscription_command,
    rate_command,
    pause_command,
    resume_command,
)
from handlers.simulation_handler import (
    simulate_cancel_command,
    simulate_add_command,
    apply_cancel_command,
    undo_command,
    dashboard_command,
    recommend_command,
)
from handlers.export_handler import export_csv_command, export_excel_command
from utils.logger import get_logger

logger = get_logger(__name__)

COMMANDS = {
    "start": ("🚀 Start", start_command),
    "help": ("📖 Help", help_command),
    "subscriptions": ("📋 Active subscriptions", subscriptions_command),
    "add_subscription": ("➕ Add a subscription", add_subscription_command),
    "delete_subscription": ("🗑️ Delete a subscription", delete_subscription_command),
    "rate": ("⭐ Rate a subscription 1-5", rate_command),
    "pause": ("⏸️ Pause subscriptions", pause_command),
    "resume": ("▶️ Resume paused subscriptions", resume_command),
    "simulate_cancel": ("🧮 What if I cancel", simulate_cancel_command),
    "simulate_add": ("🧮 What if I add", simulate_add_command),
    "apply_cancel": ("🚫 Cancel subscriptions", apply_cancel_command),
    "undo": ("↩️ Undo last cancellation", undo_command),
    "dashboard": ("📊 Spending overview", dashboard_command),
    "recommend": ("💡 What to cancel", recommend_command),
    "export_csv": ("📄 Export CSV", export_csv_command),
    "export_excel": ("📊 Export Excel", export_excel_command),
    "myid": ("🆔 Your ID", myid_command),
}


async def set_bot_commands(application: Application) -> None:
    """Register bot commands menu in Telegram on startup."""
    commands = [BotCommand(name, description) for name, (description, _) in COMMANDS.items()]
    await application.bot.set_my_commands(commands)
    logger.info("Bot commands menu registered successfully.")


def main() -> None:
    """Initialize and run the bot."""

    # ── 1. Database setup ─────────────────────────────────
    logger.info("Initializing database...")
    init_pool()
    create_tables()

    # ── 2. Build the Telegram application ─────────────────
    logger.info("Starting Telegram bot...")
    app = Application.builder().token(TELEGRAM_BOT_TOKEN).post_init(set_bot_commands).build()

    # ── 3. Register command handlers ──────────────────────
    for name, (_, handler) in COMMANDS.items():
        app.add_handler(CommandHandler(name, handler))

    # ── 4. Start polling ──────────────────────────────────
    logger.info("🚀 SubKeep bot is running! Press Ctrl+C to stop.")
    app.run_polling(drop_pending_updates=True, allowed_updates=["message"])

    # ── 5. Cleanup on shutdown ────────────────────────────
    close_pool()
    logger.info("SubKeep bot stopped.")


if __name__ == "__main__":
    main()
