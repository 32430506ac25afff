"""
UC: Register food inventory items (single and batch).

Every new item enters the workflow waiting for the cafeteria committee:
approval flags and status given in the input are ignored.
"""
from __future__ import annotations

from datetime import datetime, timezone
from math import isfinite
from typing import Any, Dict, List, Optional, Set
from uuid import uuid4

from cafeteria.config import DB_PATH
from cafeteria.adapters.parsers import parse_number
from cafeteria.adapters.sheet_loader import load_inventory_from_sheet
from cafeteria.infra.repositories import InventoryRepo
from cafeteria.infra.logger import (
    log_transaction, log_database_operation, log_system_event,
    log_file_operation, print_system
)


def _normalize_str(x: Any) -> Optional[str]:
    if x is None:
        return None
    s = str(x).strip()
    return s or None


def _quantity(rec: Dict[str, Any], key: str) -> float:
    raw = rec.get(key)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0.0
    val = parse_number(raw)
    if val is None or not isfinite(val):
        raise ValueError(f"{key} must be a number (got {raw!r})")
    if val < 0:
        raise ValueError(f"{key} must not be negative (got {val})")
    return val


def build_item_row(rec: Dict[str, Any], now: Optional[str] = None) -> Dict[str, Any]:
    """Validate an input record and turn it into a new `food_inventory` row."""
    name = _normalize_str(rec.get("name"))
    if not name:
        raise ValueError("name is required")
    now = now or datetime.now(timezone.utc).isoformat()
    return {
        "id": _normalize_str(rec.get("id")) or uuid4().hex,
        "name": name,
        "category": _normalize_str(rec.get("category")),
        "unit": _normalize_str(rec.get("unit")),
        "current_stock": _quantity(rec, "current_stock"),
        "min_stock_level": _quantity(rec, "min_stock_level"),
        "consumption_per_student": _quantity(rec, "consumption_per_student"),
        "supplier": _normalize_str(rec.get("supplier")),
        "storage_condition": _normalize_str(rec.get("storage_condition")),
        "registered_by": _normalize_str(rec.get("registered_by")),
        "approved_by_committee": 0,
        "approved_by_president": 0,
        "status": "active",
        "created_at": now,
        "committee_approved_at": None,
        "president_approved_at": None,
        "updated_at": now,
        "version": 0,
    }


def run_register_item(rec: Dict[str, Any], db_path: str = DB_PATH, now: Optional[str] = None) -> Dict[str, Any]:
    """Insert one item; it lands in the committee queue."""
    log_system_event("register_item_start", {"name": rec.get("name")})
    try:
        row = build_item_row(rec, now)
        InventoryRepo(db_path).insert(row)
        log_database_operation("food_inventory", "INSERT", 1, id=row["id"], name=row["name"])
        print_system(f">> Item registered: {row['name']} ({row['id']})")
        log_transaction("register_item", rec, result=row["id"])
        return row
    except Exception as e:
        log_transaction("register_item", {"name": rec.get("name")}, error=str(e))
        log_system_event("register_item_error", {"error": str(e)}, level="error")
        raise


def run_import_items(path: str, db_path: str = DB_PATH, now: Optional[str] = None) -> Dict[str, Any]:
    """Read an XLSX/CSV sheet of items and insert every row."""
    log_system_event("import_items_start", {"file_path": path})
    log_file_operation("import", path)
    try:
        records = load_inventory_from_sheet(path)
        repo = InventoryRepo(db_path)
        rows: List[Dict[str, Any]] = []
        errors: List[Dict[str, Any]] = []
        seen: Set[str] = set()
        # header is line 1 of the sheet
        for line, rec in enumerate(records, start=2):
            try:
                row = build_item_row(rec, now)
            except ValueError as e:
                errors.append({"line": line, "message": str(e)})
                continue
            if row["id"] in seen or repo.get(row["id"]) is not None:
                errors.append({"line": line, "message": f"duplicate id {row['id']}"})
                continue
            seen.add(row["id"])
            rows.append(row)

        repo.insert_many(rows)
        log_database_operation("food_inventory", "INSERT_MANY", len(rows), file_path=path)
        log_file_operation("import", path, rows_processed=len(records))

        result = {"file": path, "total": len(records), "inserted": len(rows), "errors": errors}
        log_transaction("import_items", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("import_items", {"file": path}, error=str(e))
        log_system_event("import_items_error", {"file_path": path, "error": str(e)}, level="error")
        raise
