# cafeteria/adapters/sheet_loader.py
"""
Loaders for the sheets kept by cafeteria staff (XLSX or CSV):
food inventory, weekly menu schedule and student roster.

These functions:
- read the sheet with pandas;
- normalize headers (case, accents, punctuation, synonyms);
- return lists of dicts with the keys expected by the infra layer.

Notes:
- Inventory quantities stay as text; validation happens when the item is
  registered.
- Days become 0..6 (Sunday = 0), times become 'HH:MM'.
- Boolean fields are mapped to 0/1.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from cafeteria.adapters.parsers import (
    format_time_of_day,
    parse_bool01,
    parse_day_of_week,
)


# ---------------------------
# normalization helpers
# ---------------------------

def _slug(s: str) -> str:
    """Normalize headers: lowercase, no accents, no non-alphanumerics."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    accents = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(accents.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key):
    """Get a value from a pandas row, mapping NA to None."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


_ALIASES = {
    # inventory
    "id": "id",
    "item id": "id",
    "name": "name",
    "item": "name",
    "food item": "name",
    "food": "name",
    "category": "category",
    "unit": "unit",
    "uom": "unit",
    "current stock": "current_stock",
    "stock": "current_stock",
    "quantity": "current_stock",
    "min stock": "min_stock_level",
    "min stock level": "min_stock_level",
    "minimum stock": "min_stock_level",
    "reorder level": "min_stock_level",
    "consumption per student": "consumption_per_student",
    "consumption": "consumption_per_student",
    "per student": "consumption_per_student",
    "supplier": "supplier",
    "vendor": "supplier",
    "storage": "storage_condition",
    "storage condition": "storage_condition",
    "registered by": "registered_by",

    # menu schedule
    "day": "day_of_week",
    "day of week": "day_of_week",
    "weekday": "day_of_week",
    "meal": "meal_type",
    "meal type": "meal_type",
    "menu": "menu_description",
    "menu description": "menu_description",
    "description": "menu_description",
    "start": "start_time",
    "start time": "start_time",
    "opens": "start_time",
    "end": "end_time",
    "end time": "end_time",
    "closes": "end_time",
    "active": "is_active",
    "is active": "is_active",

    # students
    "student id": "student_id",
    "student": "student_id",
    "student name": "name",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename columns according to the alias table."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = _ALIASES.get(key, key.replace(" ", "_"))
    return df.rename(columns=new_cols)


def read_sheet(path: str) -> pd.DataFrame:
    """Read XLSX/XLS or CSV as strings, with normalized headers."""
    suffix = Path(path).suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path, dtype="string")
    else:
        df = pd.read_excel(path, dtype="string")
    return _normalize_columns(df)


# ---------------------------
# public loaders
# ---------------------------

def load_inventory_from_sheet(path: str) -> List[Dict[str, Any]]:
    """Read an inventory sheet.

    Output keys: id, name, category, unit, current_stock, min_stock_level,
    consumption_per_student, supplier, storage_condition, registered_by
    (all str | None).
    """
    df = read_sheet(path)
    keys = [
        "id", "name", "category", "unit", "current_stock", "min_stock_level",
        "consumption_per_student", "supplier", "storage_condition", "registered_by",
    ]
    return [{k: _safe_get(row, k) for k in keys} for _, row in df.iterrows()]


def load_menu_from_sheet(path: str) -> List[Dict[str, Any]]:
    """Read a weekly menu sheet (one row per day and meal).

    Rows with an unknown day or meal type are skipped.
    """
    df = read_sheet(path)
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        day = parse_day_of_week(_safe_get(row, "day_of_week"))
        meal = (_safe_get(row, "meal_type") or "").lower()
        if day is None or meal not in {"breakfast", "lunch", "dinner"}:
            continue
        active = parse_bool01(_safe_get(row, "is_active"))
        out.append(
            {
                "day_of_week": day,
                "meal_type": meal,
                "menu_description": _safe_get(row, "menu_description"),
                "start_time": format_time_of_day(_safe_get(row, "start_time")),
                "end_time": format_time_of_day(_safe_get(row, "end_time")),
                "is_active": 1 if active is None else active,
            }
        )
    return out


def load_students_from_sheet(path: str) -> List[Dict[str, Any]]:
    """Read the student roster; rows without an id are skipped."""
    df = read_sheet(path)
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        student_id: Optional[str] = _safe_get(row, "student_id")
        if not student_id:
            continue
        active = parse_bool01(_safe_get(row, "is_active"))
        out.append(
            {
                "student_id": student_id,
                "name": _safe_get(row, "name"),
                "is_active": 1 if active is None else active,
            }
        )
    return out
