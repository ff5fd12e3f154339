"""
db/init_db.py
-------------
Creates the database schema (tables) if they do not already exist,
and seeds the shared system categories.
Run this module directly to initialize a fresh database:
    python -m db.init_db
"""

from db.connection import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SCHEMA_SQL = """
-- gen_random_uuid() is built in from PostgreSQL 13
CREATE EXTENSION IF NOT EXISTS pgcrypto;

-- Users table: one row per bot/API user
CREATE TABLE IF NOT EXISTS users (
    id              SERIAL PRIMARY KEY,
    telegram_id     BIGINT UNIQUE NOT NULL,
    first_name      VARCHAR(100),
    currency        VARCHAR(3) DEFAULT 'KRW',
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Categories: user-defined, or system-wide when user_id IS NULL
CREATE TABLE IF NOT EXISTS categories (
    id              UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id         BIGINT REFERENCES users(telegram_id) ON DELETE CASCADE,
    name            VARCHAR(50) NOT NULL,
    color           VARCHAR(7),
    sort_order      INT NOT NULL DEFAULT 0,
    is_system       BOOLEAN NOT NULL DEFAULT FALSE,
    created_at      TIMESTAMPTZ DEFAULT NOW()
);

-- Subscriptions: recurring payment obligations
CREATE TABLE IF NOT EXISTS subscriptions (
    id                  UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id             BIGINT NOT NULL REFERENCES users(telegram_id) ON DELETE CASCADE,
    service_name        VARCHAR(50) NOT NULL,
    amount              INT NOT NULL CHECK (amount >= 0),
    billing_cycle       VARCHAR(10) NOT NULL CHECK (billing_cycle IN ('weekly', 'monthly', 'yearly')),
    currency            VARCHAR(3) NOT NULL DEFAULT 'KRW',
    next_billing_date   DATE NOT NULL,
    auto_renew          BOOLEAN NOT NULL DEFAULT TRUE,
    status              VARCHAR(10) NOT NULL DEFAULT 'active'
                        CHECK (status IN ('active', 'paused', 'cancelled')),
    satisfaction_score  INT CHECK (satisfaction_score BETWEEN 1 AND 5),
    category_id         UUID REFERENCES categories(id) ON DELETE SET NULL,
    note                VARCHAR(500),
    service_url         VARCHAR(255),
    start_date          DATE NOT NULL DEFAULT CURRENT_DATE,
    created_at          TIMESTAMPTZ DEFAULT NOW(),
    updated_at          TIMESTAMPTZ DEFAULT NOW()
);

-- Indexes for faster queries
CREATE INDEX IF NOT EXISTS idx_subscriptions_user_status ON subscriptions(user_id, status);
CREATE INDEX IF NOT EXISTS idx_categories_user ON categories(user_id);
CREATE UNIQUE INDEX IF NOT EXISTS uq_system_category_name ON categories(name) WHERE is_system;
"""

# (name, color) pairs shared by all users
SYSTEM_CATEGORIES: list[tuple[str, str]] = [
    ("Video", "#E50914"),
    ("Music", "#1DB954"),
    ("Productivity", "#4285F4"),
    ("Cloud", "#FF9900"),
    ("Gaming", "#9146FF"),
    ("News", "#FFC107"),
    ("Shopping", "#FF5722"),
    ("Other", "#9E9E9E"),
]

SEED_SQL = """
    INSERT INTO categories (name, color, sort_order, is_system)
    VALUES (%s, %s, %s, TRUE)
    ON CONFLICT DO NOTHING;
"""


def create_tables() -> None:
    """
    Create all tables and seed the system categories.
    Safe to call on every startup (IF NOT EXISTS / ON CONFLICT).
    """
    try:
        with transaction() as conn, conn.cursor() as cur:
            cur.execute(SCHEMA_SQL)
            cur.executemany(
                SEED_SQL,
                [(name, color, order) for order, (name, color) in enumerate(SYSTEM_CATEGORIES)],
            )
    except Exception as e:
        logger.error(f"Failed to initialize schema: {e}")
        raise
    logger.info("Database schema initialized successfully.")


if __name__ == "__main__":
    from db.connection import close_pool, init_pool
    init_pool()
    create_tables()
    close_pool()
    print("✅ Database schema created successfully.")
