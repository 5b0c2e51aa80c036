"""
SQLite database shared by the claim, directory and notification stores.

No external database setup required - the file is created on first use.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

from ..utils.config import settings


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS policies (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        policy_name TEXT NOT NULL,
        coverage_amount REAL NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS employees (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        employee_id TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        email TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS hrs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT,
        active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS claims (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        amount REAL NOT NULL,
        status TEXT NOT NULL DEFAULT 'Pending',
        description TEXT,
        remarks TEXT,

        claim_date TEXT,
        created_at TEXT,
        updated_at TEXT,

        fraud_flag INTEGER NOT NULL DEFAULT 0,
        fraud_reason TEXT,

        policy_id INTEGER NOT NULL REFERENCES policies(id),
        employee_id INTEGER NOT NULL REFERENCES employees(id),
        assigned_hr_id INTEGER REFERENCES hrs(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS claim_documents (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        claim_id INTEGER NOT NULL REFERENCES claims(id),
        position INTEGER NOT NULL,
        file_name TEXT NOT NULL,
        file_url TEXT NOT NULL,
        uploaded_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS notifications (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        title TEXT NOT NULL,
        body TEXT NOT NULL,
        recipient_id INTEGER NOT NULL,
        recipient_role TEXT NOT NULL,
        category TEXT NOT NULL,
        is_read INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
    """,
    # Indexes for common queries
    "CREATE INDEX IF NOT EXISTS idx_claims_employee ON claims(employee_id)",
    "CREATE INDEX IF NOT EXISTS idx_claims_status ON claims(status)",
    "CREATE INDEX IF NOT EXISTS idx_claims_hr_status ON claims(assigned_hr_id, status)",
    "CREATE INDEX IF NOT EXISTS idx_documents_claim ON claim_documents(claim_id)",
    "CREATE INDEX IF NOT EXISTS idx_notifications_recipient ON notifications(recipient_id, recipient_role)",
]


def to_iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def from_iso(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class Database:
    """
    Owns the SQLite file and hands out connections.

    Usage:
        db = Database(Path("data/claims.db"))
        with db.connection() as conn:
            conn.execute("SELECT COUNT(*) FROM claims").fetchone()
    """

    def __init__(self, db_path: Optional[Path] = None):
        """Initialize the database, creating tables if needed."""
        self.db_path = Path(db_path or settings.database_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Create tables if they don't exist."""
        with self.connection() as conn:
            for statement in SCHEMA:
                conn.execute(statement)
            conn.commit()

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Get a database connection. Callers commit their own writes."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()


@lru_cache
def get_database() -> Database:
    """Get the default database (singleton)."""
    return Database()
