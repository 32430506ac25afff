"""
UC: Student roster (import and active head-count).

The head-count is the only thing the forecast needs from the roster, and
it is re-read on every stock analysis.
"""
from __future__ import annotations

from typing import Any, Dict

from cafeteria.config import DB_PATH
from cafeteria.adapters.sheet_loader import load_students_from_sheet
from cafeteria.infra.repositories import StudentRepo
from cafeteria.infra.logger import (
    log_transaction, log_database_operation, log_system_event, log_file_operation
)


def count_active_students(db_path: str = DB_PATH) -> int:
    """Number of active students right now."""
    n = StudentRepo(db_path).count_active()
    log_database_operation("students", "COUNT", n)
    return n


def run_import_students(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Upsert the roster from an XLSX/CSV sheet."""
    log_file_operation("import", path)
    try:
        rows = load_students_from_sheet(path)
        StudentRepo(db_path).upsert(rows)
        log_database_operation("students", "UPSERT", len(rows), file_path=path)
        result = {"file": path, "upserted": len(rows), "active": count_active_students(db_path)}
        log_transaction("import_students", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("import_students", {"file": path}, error=str(e))
        log_system_event("import_students_error", {"file_path": path, "error": str(e)}, level="error")
        raise
