"""
Use case: weekly menu and live meal service status.

- run_import_menu:   upsert the schedule from an XLSX/CSV sheet.
- run_weekly_menu:   active slots organized by day name and meal type, with
                     "Not scheduled" placeholders for empty slots.
- run_meal_status:   active/upcoming/closed status of today's meals.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from cafeteria.config import DB_PATH
from cafeteria.adapters.parsers import DAY_NAMES, format_time_of_day
from cafeteria.adapters.sheet_loader import load_menu_from_sheet
from cafeteria.domain.meal_window import day_index, evaluate_meal_window, evaluate_week
from cafeteria.domain.models import MealType, MenuSlot
from cafeteria.infra.repositories import MenuRepo
from cafeteria.infra.logger import (
    log_transaction, log_database_operation, log_system_event, log_file_operation
)

NOT_SCHEDULED = "Not scheduled"


def load_slots(db_path: str = DB_PATH) -> List[MenuSlot]:
    rows = MenuRepo(db_path).list_active()
    log_database_operation("menu_schedule", "SELECT_ACTIVE", len(rows))
    slots: List[MenuSlot] = []
    for r in rows:
        try:
            slots.append(MenuSlot.from_row(r))
        except ValueError:
            # day outside 0..6 or meal type outside the three services
            log_system_event("menu_slot_skipped", {"row": r}, level="warning")
    return slots


def _time_label(slot: MenuSlot) -> str:
    start = format_time_of_day(slot.start_time)
    end = format_time_of_day(slot.end_time)
    if not start or not end:
        return ""
    return f"{start} - {end}"


def run_weekly_menu(now: Optional[datetime] = None, db_path: str = DB_PATH) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """Menu of the whole week keyed by day name, then meal type.

    Each meal carries ``menu``, ``time`` ('HH:MM - HH:MM' or '') and the
    live ``status`` for ``now``.
    """
    now = now or datetime.now()
    slots = load_slots(db_path)
    statuses = evaluate_week(now, slots)

    week: Dict[str, Dict[str, Dict[str, Any]]] = {}
    for d, name in enumerate(DAY_NAMES):
        week[name] = {
            meal.value: {"menu": NOT_SCHEDULED, "time": "", "status": statuses[d][meal].value}
            for meal in MealType
        }
    for s in slots:
        week[DAY_NAMES[s.day_of_week]][s.meal_type.value].update(
            menu=s.menu_description or NOT_SCHEDULED,
            time=_time_label(s),
        )
    return week


def run_meal_status(now: Optional[datetime] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Status of breakfast, lunch and dinner for the current moment."""
    now = now or datetime.now()
    statuses = evaluate_meal_window(now, load_slots(db_path))
    return {
        "day": DAY_NAMES[day_index(now)],
        "time": now.strftime("%H:%M"),
        "meals": {meal.value: status.value for meal, status in statuses.items()},
    }


def run_import_menu(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Upsert the weekly schedule from a sheet."""
    log_file_operation("import", path)
    try:
        rows = load_menu_from_sheet(path)
        MenuRepo(db_path).upsert(rows)
        log_database_operation("menu_schedule", "UPSERT", len(rows), file_path=path)
        result = {"file": path, "upserted": len(rows)}
        log_transaction("import_menu", {"file": path}, result=result)
        return result
    except Exception as e:
        log_transaction("import_menu", {"file": path}, error=str(e))
        log_system_event("import_menu_error", {"file_path": path, "error": str(e)}, level="error")
        raise
