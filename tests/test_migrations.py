import sqlite3
from pathlib import Path

import pytest

from cafeteria.domain.errors import BackingStoreFailure, SchemaMismatch
from cafeteria.domain.models import InventoryFilter
from cafeteria.infra.db import translate_error
from cafeteria.infra.migrations import apply_migrations
from cafeteria.infra.views import VIEW_NAMES, create_views
from cafeteria.usecases.approval import committee_approve, list_inventory, president_approve
from cafeteria.usecases.register_item import run_register_item


def _columns(db_path: str, table: str):
    with sqlite3.connect(db_path) as conn:
        return {r[1] for r in conn.execute(f"PRAGMA table_info({table})")}


def _legacy_db(tmp_path: Path) -> str:
    """Inventory table from before the approval flow existed."""
    db_path = str(tmp_path / "legacy.db")
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            """
            CREATE TABLE food_inventory (
                id TEXT PRIMARY KEY, name TEXT NOT NULL, category TEXT, unit TEXT,
                current_stock REAL, min_stock_level REAL, consumption_per_student REAL,
                supplier TEXT, storage_condition TEXT, registered_by TEXT,
                status TEXT NOT NULL DEFAULT 'active', created_at TEXT, updated_at TEXT
            )
            """
        )
        conn.execute("INSERT INTO food_inventory (id, name, created_at) VALUES ('old', 'Flour', '2024-12-01')")
    return db_path


def test_migrations_are_idempotent(tmp_path: Path):
    db_path = str(tmp_path / "c.db")
    apply_migrations(db_path)
    apply_migrations(db_path)
    with sqlite3.connect(db_path) as conn:
        assert conn.execute("PRAGMA user_version").fetchone()[0] == 2
    assert {"approved_by_committee", "approved_by_president", "version"} <= _columns(db_path, "food_inventory")


def test_views_created(tmp_path: Path):
    db_path = str(tmp_path / "c.db")
    apply_migrations(db_path)
    create_views(db_path)
    create_views(db_path)
    with sqlite3.connect(db_path) as conn:
        names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'view'")}
    assert set(VIEW_NAMES) <= names


def test_unmigrated_legacy_table_is_a_schema_mismatch(tmp_path: Path):
    db_path = _legacy_db(tmp_path)
    with pytest.raises(SchemaMismatch):
        list_inventory(InventoryFilter.COMMITTEE_ONLY, db_path)


def test_legacy_table_is_upgraded(tmp_path: Path):
    db_path = _legacy_db(tmp_path)
    apply_migrations(db_path)
    items = list_inventory(InventoryFilter.COMMITTEE_ONLY, db_path)
    assert [i.id for i in items] == ["old"]
    assert items[0].version == 0
    assert committee_approve("old", db_path=db_path).approved_by_committee


def test_unreachable_database(tmp_path: Path):
    with pytest.raises(BackingStoreFailure):
        apply_migrations(str(tmp_path / "missing" / "dir" / "c.db"))


def test_translate_error():
    assert isinstance(translate_error(sqlite3.OperationalError("no such table: students")), SchemaMismatch)
    assert isinstance(translate_error(sqlite3.OperationalError("database is locked")), BackingStoreFailure)


def test_views_mirror_the_queues(tmp_path: Path):
    db_path = str(tmp_path / "c.db")
    apply_migrations(db_path)
    create_views(db_path)
    run_register_item({"id": "a", "name": "Apples"}, db_path=db_path)
    run_register_item({"id": "b", "name": "Beans"}, db_path=db_path)
    run_register_item({"id": "c", "name": "Corn"}, db_path=db_path)
    committee_approve("b", db_path=db_path)
    committee_approve("c", db_path=db_path)
    president_approve("c", db_path=db_path)

    queues = {
        "vw_pending_committee": InventoryFilter.COMMITTEE_ONLY,
        "vw_pending_president": InventoryFilter.PRESIDENT_ONLY,
        "vw_stock_analysis": InventoryFilter.FULLY_APPROVED,
    }
    with sqlite3.connect(db_path) as conn:
        for view, flt in queues.items():
            in_view = {r[0] for r in conn.execute(f"SELECT id FROM {view}")}
            assert in_view == {i.id for i in list_inventory(flt, db_path)}
