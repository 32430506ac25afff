# cafeteria/infra/db.py
"""
SQLite connection utilities.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator

from cafeteria.domain.errors import BackingStoreFailure, CafeteriaError, SchemaMismatch


_SCHEMA_MARKERS = ("no such column", "no such table", "has no column named")


def translate_error(exc: sqlite3.Error) -> CafeteriaError:
    """Map a sqlite error to SchemaMismatch or BackingStoreFailure."""
    msg = str(exc)
    if any(marker in msg.lower() for marker in _SCHEMA_MARKERS):
        return SchemaMismatch(f"Database schema is incomplete ({msg}). Run `migrate`.")
    return BackingStoreFailure(f"Database error: {msg}")


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Context manager that opens a SQLite connection with:
    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit on exit (rollback on exception)
    - sqlite errors translated to the domain errors
    """
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        raise BackingStoreFailure(f"Cannot open database {db_path}: {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except sqlite3.Error as e:
        conn.rollback()
        raise translate_error(e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
