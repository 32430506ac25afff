# cafeteria/domain/models.py
"""
Domain models (dataclasses and enums).

Note:
- Repositories accept and return dictionaries; `InventoryItem.from_row`
  converts a storage row into the typed model used by the workflow and
  the forecast.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import isfinite
from typing import Any, Dict, Mapping, Optional


class MealType(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class MealStatus(str, Enum):
    ACTIVE = "active"
    UPCOMING = "upcoming"
    CLOSED = "closed"
    NOT_TODAY = "not-today"
    NOT_SCHEDULED = "not-scheduled"


class StockStatus(str, Enum):
    CRITICAL = "critical"
    LOW = "low"
    WARNING = "warning"
    GOOD = "good"


class LifecycleStatus(str, Enum):
    ACTIVE = "active"
    REJECTED = "rejected"


class ApprovalState(str, Enum):
    PENDING_COMMITTEE = "pending_committee"
    PENDING_PRESIDENT = "pending_president"
    FULLY_APPROVED = "fully_approved"
    REJECTED = "rejected"


class Transition(str, Enum):
    COMMITTEE_APPROVE = "committee_approve"
    COMMITTEE_REJECT = "committee_reject"
    PRESIDENT_APPROVE = "president_approve"
    PRESIDENT_REJECT = "president_reject"


class InventoryFilter(str, Enum):
    """Dashboard queues: committee, president/vice-president and stock view."""
    COMMITTEE_ONLY = "committee"
    PRESIDENT_ONLY = "president"
    FULLY_APPROVED = "approved"


def _flag(val: Any) -> bool:
    if val is None:
        return False
    if isinstance(val, str):
        return val.strip().lower() in {"1", "true", "t", "yes"}
    return bool(val)


def _num(val: Any) -> float:
    """Stored quantity as a finite float; NaN, inf and junk read as 0."""
    if val is None:
        return 0.0
    try:
        f = float(val)
    except (TypeError, ValueError):
        return 0.0
    return f if isfinite(f) else 0.0


@dataclass
class InventoryItem:
    """Food inventory record as stored in `food_inventory`."""
    id: str
    name: str
    category: Optional[str] = None
    unit: Optional[str] = None
    current_stock: float = 0.0
    min_stock_level: float = 0.0
    consumption_per_student: float = 0.0
    supplier: Optional[str] = None
    storage_condition: Optional[str] = None
    registered_by: Optional[str] = None
    approved_by_committee: bool = False
    approved_by_president: bool = False
    status: str = LifecycleStatus.ACTIVE.value
    created_at: Optional[str] = None
    committee_approved_at: Optional[str] = None
    president_approved_at: Optional[str] = None
    updated_at: Optional[str] = None
    version: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "InventoryItem":
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            category=row.get("category"),
            unit=row.get("unit"),
            current_stock=_num(row.get("current_stock")),
            min_stock_level=_num(row.get("min_stock_level")),
            consumption_per_student=_num(row.get("consumption_per_student")),
            supplier=row.get("supplier"),
            storage_condition=row.get("storage_condition"),
            registered_by=row.get("registered_by"),
            approved_by_committee=_flag(row.get("approved_by_committee")),
            approved_by_president=_flag(row.get("approved_by_president")),
            status=(row.get("status") or LifecycleStatus.ACTIVE.value),
            created_at=row.get("created_at"),
            committee_approved_at=row.get("committee_approved_at"),
            president_approved_at=row.get("president_approved_at"),
            updated_at=row.get("updated_at"),
            version=int(row.get("version") or 0),
        )


@dataclass
class StockProjection:
    """Derived stock forecast for one approved item (never persisted)."""
    item_id: str
    name: str
    category: Optional[str]
    unit: Optional[str]
    current_stock: float
    min_stock_level: float
    consumption_per_student: float
    predicted_days: int
    weekly_requirement: float
    stock_status: StockStatus

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.item_id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "current_stock": self.current_stock,
            "min_stock_level": self.min_stock_level,
            "consumption_per_student": self.consumption_per_student,
            "predicted_days": self.predicted_days,
            "weekly_requirement": self.weekly_requirement,
            "stock_status": self.stock_status.value,
        }


@dataclass
class MenuSlot:
    """One meal of the weekly schedule, keyed by (day_of_week, meal_type)."""
    day_of_week: int                      # 0 = Sunday ... 6 = Saturday
    meal_type: MealType
    menu_description: str = ""
    start_time: Optional[str] = None      # 'HH:MM' or 'HH:MM:SS'
    end_time: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MenuSlot":
        """Build a slot from a `menu_schedule` row.

        Raises ValueError for a day outside 0..6 or an unknown meal type.
        """
        day = int(row["day_of_week"])
        if not 0 <= day <= 6:
            raise ValueError(f"day_of_week must be 0..6 (got {day})")
        return cls(
            day_of_week=day,
            meal_type=MealType(str(row["meal_type"]).strip().lower()),
            menu_description=row.get("menu_description") or "",
            start_time=row.get("start_time"),
            end_time=row.get("end_time"),
            is_active=_flag(row.get("is_active", 1)),
        )
