"""
security/rate_limiter.py
-------------------------
Rate limiting to prevent abuse of the bot and the API.
Limits the number of requests a user can make within a time window;
both surfaces draw from the same per-user budget.
"""

import threading
import time
from collections import defaultdict
from functools import wraps
from typing import Callable

from telegram import Update
from telegram.ext import ContextTypes

from config import RATE_LIMIT_MESSAGES, RATE_LIMIT_WINDOW_SECONDS
from utils.logger import get_logger

logger = get_logger(__name__)

# In-memory storage for rate tracking: {user_id: [timestamp1, timestamp2, ...]}
_user_timestamps: dict[int, list[float]] = defaultdict(list)
# API requests arrive on worker threads
_lock = threading.Lock()


def _cleanup(user_id: int, now: float) -> None:
    """Remove expired timestamps for a user."""
    cutoff = now - RATE_LIMIT_WINDOW_SECONDS
    _user_timestamps[user_id] = [
        t for t in _user_timestamps[user_id] if t > cutoff
    ]


def allow_request(user_id: int) -> bool:
    """
    Record a request for `user_id` if it is within budget.

    Configuration (via .env):
        RATE_LIMIT_MESSAGES: Max requests per window (default: 30).
        RATE_LIMIT_WINDOW_SECONDS: Window duration in seconds (default: 60).

    Returns:
        False if the user has exhausted the current window.
    """
    now = time.time()
    with _lock:
        _cleanup(user_id, now)
        if len(_user_timestamps[user_id]) >= RATE_LIMIT_MESSAGES:
            logger.warning(f"⚠️ Rate limit hit for user {user_id}")
            return False
        _user_timestamps[user_id].append(now)
        return True


def reset() -> None:
    """Forget all recorded requests."""
    with _lock:
        _user_timestamps.clear()


def rate_limited(func: Callable):
    """
    Decorator that enforces rate limiting per user on bot handlers.
    If exceeded, replies with a warning and blocks the handler.
    """
    @wraps(func)
    async def wrapper(update: Update, context: ContextTypes.DEFAULT_TYPE, *args, **kwargs):
        user = update.effective_user
        if not user:
            return

        if not allow_request(user.id):
            await update.message.reply_text(
                "⚠️ You're sending messages too fast. Wait a bit and try again."
            )
            return

        return await func(update, context, *args, **kwargs)

    return wrapper
