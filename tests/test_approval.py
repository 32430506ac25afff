import sqlite3
from pathlib import Path

import pytest

from cafeteria.domain.errors import ConflictError, NotFound, PreconditionViolation
from cafeteria.domain.models import InventoryFilter
from cafeteria.infra.migrations import apply_migrations
from cafeteria.infra.repositories import InventoryRepo
from cafeteria.infra.views import create_views
from cafeteria.usecases import approval
from cafeteria.usecases.approval import (
    committee_approve,
    committee_reject,
    get_item,
    list_inventory,
    president_approve,
    president_reject,
)
from cafeteria.usecases.register_item import run_register_item


def _db(tmp_path: Path) -> str:
    db = str(tmp_path / "council.db")
    apply_migrations(db)
    create_views(db)
    return db


def _seed(db: str) -> None:
    run_register_item({"id": "rice", "name": "Rice", "unit": "kg"}, db_path=db, now="2025-01-01T08:00:00")
    run_register_item({"id": "milk", "name": "Milk", "unit": "l"}, db_path=db, now="2025-01-03T08:00:00")
    run_register_item({"id": "beans", "name": "Beans", "unit": "kg"}, db_path=db, now="2025-01-02T08:00:00")


def _ids(items):
    return [i.id for i in items]


def test_new_items_wait_for_committee_newest_first(tmp_path):
    db = _db(tmp_path)
    _seed(db)
    assert _ids(list_inventory(InventoryFilter.COMMITTEE_ONLY, db)) == ["milk", "beans", "rice"]
    assert list_inventory(InventoryFilter.PRESIDENT_ONLY, db) == []
    assert list_inventory(InventoryFilter.FULLY_APPROVED, db) == []


def test_full_approval_path(tmp_path):
    db = _db(tmp_path)
    _seed(db)

    item = committee_approve("rice", db_path=db, now="2025-01-05T10:00:00")
    assert item.approved_by_committee and not item.approved_by_president
    assert item.committee_approved_at == "2025-01-05T10:00:00"
    assert item.version == 1
    assert _ids(list_inventory(InventoryFilter.COMMITTEE_ONLY, db)) == ["milk", "beans"]
    assert _ids(list_inventory(InventoryFilter.PRESIDENT_ONLY, db)) == ["rice"]

    item = president_approve("rice", db_path=db, now="2025-01-06T10:00:00")
    assert item.approved_by_committee and item.approved_by_president
    assert item.president_approved_at == "2025-01-06T10:00:00"
    assert list_inventory(InventoryFilter.PRESIDENT_ONLY, db) == []
    assert _ids(list_inventory(InventoryFilter.FULLY_APPROVED, db)) == ["rice"]


def test_approved_queue_is_ordered_by_name(tmp_path):
    db = _db(tmp_path)
    _seed(db)
    for item_id in ("rice", "milk", "beans"):
        committee_approve(item_id, db_path=db)
        president_approve(item_id, db_path=db)
    assert _ids(list_inventory(InventoryFilter.FULLY_APPROVED, db)) == ["beans", "milk", "rice"]


def test_president_cannot_skip_the_committee(tmp_path):
    db = _db(tmp_path)
    _seed(db)
    with pytest.raises(PreconditionViolation):
        president_approve("rice", db_path=db)
    item = get_item("rice", db)
    assert not item.approved_by_committee and not item.approved_by_president
    assert item.version == 0


def test_rejected_item_is_final(tmp_path):
    db = _db(tmp_path)
    _seed(db)
    item = committee_reject("beans", db_path=db, now="2025-01-05T10:00:00")
    assert item.status == "rejected"
    assert not item.approved_by_committee

    with pytest.raises(PreconditionViolation):
        president_approve("beans", db_path=db)
    with pytest.raises(PreconditionViolation):
        committee_approve("beans", db_path=db)

    after = get_item("beans", db)
    assert after.status == "rejected"
    assert not after.approved_by_committee and not after.approved_by_president
    assert after.version == item.version
    assert "beans" not in _ids(list_inventory(InventoryFilter.COMMITTEE_ONLY, db))


def test_president_reject_keeps_committee_flag(tmp_path):
    db = _db(tmp_path)
    _seed(db)
    committee_approve("milk", db_path=db)
    item = president_reject("milk", db_path=db)
    assert item.status == "rejected"
    assert item.approved_by_committee and not item.approved_by_president
    assert list_inventory(InventoryFilter.PRESIDENT_ONLY, db) == []
    assert list_inventory(InventoryFilter.FULLY_APPROVED, db) == []


def test_missing_item(tmp_path):
    db = _db(tmp_path)
    with pytest.raises(NotFound) as exc:
        committee_approve("nope", db_path=db)
    assert exc.value.item_id == "nope"


def test_stale_version_updates_nothing(tmp_path):
    db = _db(tmp_path)
    _seed(db)
    repo = InventoryRepo(db)
    assert repo.update_if_version("rice", 0, {"status": "rejected"}) == 1
    assert repo.update_if_version("rice", 0, {"status": "active"}) == 0
    assert repo.get("rice")["status"] == "rejected"


def test_update_rejects_immutable_columns(tmp_path):
    db = _db(tmp_path)
    _seed(db)
    with pytest.raises(ValueError):
        InventoryRepo(db).update_if_version("rice", 0, {"name": "Pasta"})


def test_concurrent_change_raises_conflict(tmp_path, monkeypatch):
    db = _db(tmp_path)
    _seed(db)
    original = approval.get_item

    def read_then_race(item_id, db_path):
        item = original(item_id, db_path)
        # another reviewer acts between our read and our write
        with sqlite3.connect(db_path) as conn:
            conn.execute("UPDATE food_inventory SET version = version + 1 WHERE id = ?", (item_id,))
        return item

    monkeypatch.setattr(approval, "get_item", read_then_race)
    with pytest.raises(ConflictError):
        committee_approve("rice", db_path=db)

    monkeypatch.undo()
    assert not get_item("rice", db).approved_by_committee
