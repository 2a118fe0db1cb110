"""Database schema and migrations for AdBoard.

This module contains the database schema definition and migration scripts
for SQLite storage.
"""

# Timestamps are stored as 'YYYY-MM-DD HH:MM:SS' text so that range
# comparisons work lexicographically.
DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Base schema - creates core tables and indexes
SCHEMA = """
CREATE TABLE IF NOT EXISTS sync_data (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    date TEXT NOT NULL,
    team TEXT NOT NULL,
    adser TEXT,
    spend REAL DEFAULT 0,
    deposit REAL DEFAULT 0,
    message REAL DEFAULT 0,
    turnover_adser REAL DEFAULT 0,
    external_id TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_sync_data_date ON sync_data(date);
CREATE INDEX IF NOT EXISTS idx_sync_data_team ON sync_data(team);

CREATE TABLE IF NOT EXISTS exchange_rates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    rate REAL NOT NULL,
    timestamp TEXT NOT NULL
);
"""

# Migrations for databases created by earlier versions
MIGRATIONS = [
    "ALTER TABLE sync_data ADD COLUMN turnover_adser REAL DEFAULT 0",
    "ALTER TABLE sync_data ADD COLUMN external_id TEXT",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_sync_data_external_id ON sync_data(external_id)",
    "CREATE INDEX IF NOT EXISTS idx_sync_data_adser ON sync_data(adser)",
    "CREATE INDEX IF NOT EXISTS idx_sync_data_team_date ON sync_data(team, date)",
    "CREATE INDEX IF NOT EXISTS idx_exchange_rates_timestamp ON exchange_rates(timestamp)",
]
