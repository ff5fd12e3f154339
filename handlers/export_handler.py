"""
handlers/export_handler.py
---------------------------
/export_csv and /export_excel: send the subscription list as a file.
"""

from datetime import date

from telegram import Update
from telegram.ext import ContextTypes

from services.export_service import ExportService
from security.auth import authorized_only
from security.rate_limiter import rate_limited
from utils.errors import StoreError
from utils.logger import get_logger

logger = get_logger(__name__)
export_service = ExportService()

# format -> (label, file extension, service method)
_FORMATS = {
    "csv": ("CSV", "csv", export_service.export_csv),
    "excel": ("Excel", "xlsx", export_service.export_excel),
}


async def _send_export(update: Update, fmt: str) -> None:
    label, extension, export = _FORMATS[fmt]
    user = update.effective_user
    await update.message.reply_text(f"📄 Preparing your {label} file...")

    try:
        buffer = export(user.id)
    except StoreError as e:
        logger.error(f"{label} export failed for user {user.id}: {e}")
        await update.message.reply_text("❌ Export failed. Try again.")
        return

    await update.message.reply_document(
        document=buffer,
        filename=f"subscriptions_{date.today():%Y%m%d}.{extension}",
        caption=f"📊 Your subscriptions - {label}",
    )


@authorized_only
@rate_limited
async def export_csv_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send_export(update, "csv")


@authorized_only
@rate_limited
async def export_excel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _send_export(update, "excel")
