"""
Repositories (DAO) for reading and writing the SQLite tables.

Classes:
- InventoryRepo
- StudentRepo
- MenuRepo
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable, List, Optional

from .db import connect
from cafeteria.domain.models import InventoryFilter
from cafeteria.domain.workflow import filter_predicate


# -------------------------
# Helpers
# -------------------------

def _as_dict(row: Any) -> Dict[str, Any]:
    if isinstance(row, dict):
        return row
    if is_dataclass(row):
        return asdict(row)
    raise TypeError("row must be dict or dataclass")


def _rows(cur) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


# -------------------------
# Food inventory
# -------------------------

INVENTORY_COLUMNS = [
    "id", "name", "category", "unit",
    "current_stock", "min_stock_level", "consumption_per_student",
    "supplier", "storage_condition", "registered_by",
    "approved_by_committee", "approved_by_president", "status",
    "created_at", "committee_approved_at", "president_approved_at", "updated_at",
    "version",
]

# Columns the workflow may change in a transition
_MUTABLE_COLUMNS = {
    "approved_by_committee", "approved_by_president", "status",
    "committee_approved_at", "president_approved_at", "updated_at",
}

# Values used when a row leaves a column out
_INSERT_DEFAULTS = {
    "approved_by_committee": 0,
    "approved_by_president": 0,
    "status": "active",
    "version": 0,
}

_ORDER_BY = {
    InventoryFilter.COMMITTEE_ONLY: "created_at DESC",
    InventoryFilter.PRESIDENT_ONLY: "created_at DESC",
    InventoryFilter.FULLY_APPROVED: "name ASC",
}


class InventoryRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, row: Dict[str, Any]) -> None:
        self.insert_many([row])

    def insert_many(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = [_as_dict(r) for r in rows]
        if not rows:
            return
        payload = [
            {k: (r.get(k) if r.get(k) is not None else _INSERT_DEFAULTS.get(k)) for k in INVENTORY_COLUMNS}
            for r in rows
        ]
        cols = ", ".join(INVENTORY_COLUMNS)
        vals = ", ".join(f":{k}" for k in INVENTORY_COLUMNS)
        with connect(self.db_path) as c:
            c.executemany(f"INSERT INTO food_inventory ({cols}) VALUES ({vals})", payload)

    def get(self, item_id: str) -> Optional[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute(
                f"SELECT {', '.join(INVENTORY_COLUMNS)} FROM food_inventory WHERE id = ?",
                (item_id,),
            )
            rows = _rows(cur)
            return rows[0] if rows else None

    def list_by_filter(self, flt: InventoryFilter) -> List[Dict[str, Any]]:
        """Rows of one dashboard queue.

        Pending queues come newest first; the approved (stock) view is
        ordered by item name.
        """
        flt = InventoryFilter(flt)
        where = filter_predicate(flt)
        clause = " AND ".join(f"{k} = :{k}" for k in where)
        with connect(self.db_path) as c:
            cur = c.execute(
                f"""
                SELECT {', '.join(INVENTORY_COLUMNS)}
                FROM food_inventory
                WHERE {clause}
                ORDER BY {_ORDER_BY[flt]}
                """,
                where,
            )
            return _rows(cur)

    def update_if_version(self, item_id: str, expected_version: int, changes: Dict[str, Any]) -> int:
        """Apply ``changes`` only if the row still has ``expected_version``.

        Bumps ``version`` on success. Returns the number of updated rows
        (0 when the row is gone or was changed by someone else).
        """
        unknown = set(changes) - _MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"columns not updatable: {sorted(unknown)}")
        sets = ", ".join(f"{k} = :{k}" for k in changes)
        params = dict(changes, _id=item_id, _version=expected_version)
        with connect(self.db_path) as c:
            cur = c.execute(
                f"""
                UPDATE food_inventory
                SET {sets}, version = version + 1
                WHERE id = :_id AND version = :_version
                """,
                params,
            )
            return cur.rowcount


# -------------------------
# Students
# -------------------------

class StudentRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            for r in rows:
                c.execute(
                    """
                    INSERT INTO students (student_id, name, is_active)
                    VALUES (:student_id, :name, :is_active)
                    ON CONFLICT(student_id) DO UPDATE SET
                        name=excluded.name,
                        is_active=excluded.is_active
                    """,
                    {
                        "student_id": r.get("student_id"),
                        "name": r.get("name"),
                        "is_active": 1 if r.get("is_active") is None else int(r.get("is_active")),
                    },
                )

    def count_active(self) -> int:
        with connect(self.db_path) as c:
            row = c.execute(
                "SELECT COUNT(*) FROM students WHERE COALESCE(is_active, 1) = 1"
            ).fetchone()
            return int(row[0]) if row else 0


# -------------------------
# Menu schedule
# -------------------------

class MenuRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def upsert(self, rows: Iterable[Dict[str, Any]]) -> None:
        rows = [_as_dict(r) for r in rows]
        with connect(self.db_path) as c:
            for r in rows:
                c.execute(
                    """
                    INSERT INTO menu_schedule
                        (day_of_week, meal_type, menu_description, start_time, end_time, is_active)
                    VALUES
                        (:day_of_week, :meal_type, :menu_description, :start_time, :end_time, :is_active)
                    ON CONFLICT(day_of_week, meal_type) DO UPDATE SET
                        menu_description=excluded.menu_description,
                        start_time=excluded.start_time,
                        end_time=excluded.end_time,
                        is_active=excluded.is_active
                    """,
                    {
                        "day_of_week": r.get("day_of_week"),
                        "meal_type": r.get("meal_type"),
                        "menu_description": r.get("menu_description"),
                        "start_time": r.get("start_time"),
                        "end_time": r.get("end_time"),
                        "is_active": 1 if r.get("is_active") is None else int(r.get("is_active")),
                    },
                )

    def list_active(self) -> List[Dict[str, Any]]:
        with connect(self.db_path) as c:
            cur = c.execute(
                """
                SELECT day_of_week, meal_type, menu_description, start_time, end_time, is_active
                FROM menu_schedule
                WHERE COALESCE(is_active, 1) = 1
                ORDER BY day_of_week ASC, meal_type ASC
                """
            )
            return _rows(cur)
