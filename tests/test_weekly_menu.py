import sqlite3
from datetime import datetime
from pathlib import Path

import pytest

from cafeteria.domain.models import MenuSlot
from cafeteria.infra.migrations import apply_migrations
from cafeteria.infra.repositories import MenuRepo
from cafeteria.usecases.weekly_menu import NOT_SCHEDULED, load_slots, run_meal_status, run_weekly_menu

MONDAY_8AM = datetime(2025, 1, 6, 8, 0)


def _db(tmp_path: Path) -> str:
    db = str(tmp_path / "council.db")
    apply_migrations(db)
    MenuRepo(db).upsert([
        {"day_of_week": 1, "meal_type": "breakfast", "menu_description": "Porridge",
         "start_time": "07:00", "end_time": "09:30"},
        {"day_of_week": 1, "meal_type": "lunch", "menu_description": "Rice and beans",
         "start_time": "12:00:00", "end_time": "14:00:00"},
        {"day_of_week": 1, "meal_type": "dinner", "menu_description": "Soup",
         "start_time": "18:00", "end_time": "20:00", "is_active": 0},
        {"day_of_week": 2, "meal_type": "lunch", "menu_description": "Pasta",
         "start_time": "12:00", "end_time": "14:00"},
    ])
    return db


def test_inactive_slots_are_not_loaded(tmp_path):
    db = _db(tmp_path)
    slots = load_slots(db)
    assert len(slots) == 3
    assert all(s.is_active for s in slots)


def test_unknown_meal_type_is_skipped(tmp_path):
    db = _db(tmp_path)
    MenuRepo(db).upsert([{"day_of_week": 3, "meal_type": "snack", "start_time": "16:00", "end_time": "17:00"}])
    assert len(load_slots(db)) == 3


def test_meal_status_now(tmp_path):
    db = _db(tmp_path)
    res = run_meal_status(now=MONDAY_8AM, db_path=db)
    assert res["day"] == "Monday"
    assert res["time"] == "08:00"
    assert res["meals"] == {"breakfast": "active", "lunch": "upcoming", "dinner": "not-scheduled"}


def test_meal_status_after_lunch(tmp_path):
    db = _db(tmp_path)
    res = run_meal_status(now=datetime(2025, 1, 6, 14, 1), db_path=db)
    assert res["meals"]["breakfast"] == "closed"
    assert res["meals"]["lunch"] == "closed"


def test_weekly_menu_shape(tmp_path):
    db = _db(tmp_path)
    week = run_weekly_menu(now=MONDAY_8AM, db_path=db)
    assert list(week) == ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

    monday = week["Monday"]
    assert monday["breakfast"] == {"menu": "Porridge", "time": "07:00 - 09:30", "status": "active"}
    assert monday["lunch"]["time"] == "12:00 - 14:00"
    assert monday["dinner"] == {"menu": NOT_SCHEDULED, "time": "", "status": "not-scheduled"}

    assert week["Tuesday"]["lunch"]["menu"] == "Pasta"
    assert week["Tuesday"]["lunch"]["status"] == "not-today"
    assert week["Sunday"]["breakfast"] == {"menu": NOT_SCHEDULED, "time": "", "status": "not-today"}


def test_out_of_range_days_are_skipped(tmp_path):
    db = _db(tmp_path)
    with sqlite3.connect(db) as conn:
        conn.executemany(
            "INSERT INTO menu_schedule VALUES (?, ?, ?, ?, ?, ?)",
            [(7, "lunch", "Ghost lunch", "12:00", "13:00", 1),
             (-1, "dinner", "Ghost dinner", "18:00", "20:00", 1)],
        )
    assert len(load_slots(db)) == 3

    week = run_weekly_menu(now=MONDAY_8AM, db_path=db)
    assert len(week) == 7
    assert week["Saturday"]["dinner"]["menu"] == NOT_SCHEDULED
    assert all(m["menu"] != "Ghost lunch" for day in week.values() for m in day.values())


def test_menu_slot_rejects_bad_day():
    with pytest.raises(ValueError):
        MenuSlot.from_row({"day_of_week": 7, "meal_type": "lunch"})
