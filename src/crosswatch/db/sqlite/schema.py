"""SQLite database schema definitions."""

# Schema SQL for creating all tables
# This schema is idempotent - can be run multiple times safely
SCHEMA_SQL = """
-- subscribers: Subjects with a Telegram endpoint
CREATE TABLE IF NOT EXISTS subscribers (
    subject_id INTEGER PRIMARY KEY,
    bot_token TEXT NOT NULL,
    chat_id TEXT NOT NULL,
    enabled INTEGER NOT NULL DEFAULT 1,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- watchlist: Symbols each subject watches
CREATE TABLE IF NOT EXISTS watchlist (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    subject_id INTEGER NOT NULL,
    symbol TEXT NOT NULL,
    added_at TEXT DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(subject_id, symbol)
);

-- position_state: Last known price/average position per (subject, symbol)
CREATE TABLE IF NOT EXISTS position_state (
    subject_id INTEGER NOT NULL,
    symbol TEXT NOT NULL,
    last_position TEXT NOT NULL,
    last_checked_at TEXT NOT NULL,
    PRIMARY KEY (subject_id, symbol)
);

-- alert_history: Append-only log of attempted notifications
CREATE TABLE IF NOT EXISTS alert_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    subject_id INTEGER NOT NULL,
    symbol TEXT NOT NULL,
    kind TEXT NOT NULL,
    price REAL NOT NULL,
    sma_value REAL NOT NULL,
    sent_at TEXT NOT NULL,
    delivery_succeeded INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_alert_history_subject_symbol_sent
    ON alert_history(subject_id, symbol, sent_at);
"""

# Version for future migrations
SCHEMA_VERSION = 1
