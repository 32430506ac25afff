# cafeteria/infra/migrations.py
"""
Schema migrations driven by PRAGMA user_version.

V1: base tables (inventory, students, menu schedule)
V2: approval columns and the optimistic-concurrency `version` counter
    on food_inventory (older inventory tables predate the approval flow)
"""

from __future__ import annotations

from typing import List
from .db import connect


SCHEMA_V1: List[str] = [
    # Food inventory registered by cafeteria staff
    """
    CREATE TABLE IF NOT EXISTS food_inventory (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        category TEXT,
        unit TEXT,
        current_stock REAL DEFAULT 0,
        min_stock_level REAL DEFAULT 0,
        consumption_per_student REAL DEFAULT 0,
        supplier TEXT,
        storage_condition TEXT,
        registered_by TEXT,
        status TEXT NOT NULL DEFAULT 'active', -- 'active' | 'rejected'
        created_at TEXT,
        updated_at TEXT
    );
    """,
    # Student roster (only its active head-count is used)
    """
    CREATE TABLE IF NOT EXISTS students (
        student_id TEXT PRIMARY KEY,
        name TEXT,
        is_active INTEGER DEFAULT 1
    );
    """,
    # Weekly menu schedule, one row per (day, meal)
    """
    CREATE TABLE IF NOT EXISTS menu_schedule (
        day_of_week INTEGER NOT NULL, -- 0 = Sunday ... 6 = Saturday
        meal_type TEXT NOT NULL,      -- 'breakfast' | 'lunch' | 'dinner'
        menu_description TEXT,
        start_time TEXT,
        end_time TEXT,
        is_active INTEGER DEFAULT 1,
        PRIMARY KEY (day_of_week, meal_type)
    );
    """,
]


def _ensure_column(conn, table: str, column: str, ddl: str) -> None:
    """Add the column if it does not exist yet."""
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = [r[1] for r in cur.fetchall()]  # r[1] is the column name
    if column not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {ddl};")


def _apply_v1(conn) -> None:
    for sql in SCHEMA_V1:
        conn.executescript(sql)


def _apply_v2(conn) -> None:
    _ensure_column(conn, "food_inventory", "approved_by_committee",
                   "approved_by_committee INTEGER NOT NULL DEFAULT 0")
    _ensure_column(conn, "food_inventory", "approved_by_president",
                   "approved_by_president INTEGER NOT NULL DEFAULT 0")
    _ensure_column(conn, "food_inventory", "committee_approved_at", "committee_approved_at TEXT")
    _ensure_column(conn, "food_inventory", "president_approved_at", "president_approved_at TEXT")
    _ensure_column(conn, "food_inventory", "version", "version INTEGER NOT NULL DEFAULT 0")


def apply_migrations(db_path: str) -> None:
    """Apply incremental migrations according to PRAGMA user_version."""
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply_v1(conn)
            conn.execute("PRAGMA user_version = 1;")
            ver = 1

        if ver < 2:
            _apply_v2(conn)
            conn.execute("PRAGMA user_version = 2;")
            ver = 2
