from pathlib import Path

from cafeteria.domain.models import StockStatus
from cafeteria.infra.migrations import apply_migrations
from cafeteria.infra.repositories import StudentRepo
from cafeteria.usecases.approval import committee_approve, president_approve
from cafeteria.usecases.register_item import run_register_item
from cafeteria.usecases.roster import count_active_students
from cafeteria.usecases.stock_analysis import run_stock_analysis


def _db(tmp_path: Path) -> str:
    db = str(tmp_path / "council.db")
    apply_migrations(db)
    return db


def _approved(db: str, **rec) -> None:
    run_register_item(rec, db_path=db)
    committee_approve(rec["id"], db_path=db)
    president_approve(rec["id"], db_path=db)


def _students(db: str, active: int, inactive: int = 0) -> None:
    rows = [{"student_id": f"s{i}", "name": f"Student {i}", "is_active": 1} for i in range(active)]
    rows += [{"student_id": f"x{i}", "name": f"Former {i}", "is_active": 0} for i in range(inactive)]
    StudentRepo(db).upsert(rows)


def test_counts_only_active_students(tmp_path):
    db = _db(tmp_path)
    _students(db, active=40, inactive=5)
    assert count_active_students(db) == 40


def test_analysis_uses_roster_and_only_approved_items(tmp_path):
    db = _db(tmp_path)
    _students(db, active=40)
    _approved(db, id="rice", name="Rice", current_stock=100, min_stock_level=50, consumption_per_student=0.5)
    _approved(db, id="apples", name="Apples", current_stock=1000, min_stock_level=10, consumption_per_student=0.1)
    run_register_item({"id": "pending", "name": "Beans", "current_stock": 1}, db_path=db)

    res = run_stock_analysis(db_path=db)
    assert res["student_count"] == 40
    assert [p.item_id for p in res["items"]] == ["apples", "rice"]

    apples, rice = res["items"]
    # 40 * 0.1 * 3 = 12 per day
    assert apples.predicted_days == 83
    assert apples.stock_status == StockStatus.GOOD
    assert rice.predicted_days == 1
    assert rice.weekly_requirement == 420
    assert rice.stock_status == StockStatus.WARNING
    assert res["summary"] == {"total": 2, "critical": 0, "low": 0, "warning": 1, "good": 1}


def test_explicit_head_count_overrides_roster(tmp_path):
    db = _db(tmp_path)
    _students(db, active=40)
    _approved(db, id="rice", name="Rice", current_stock=100, min_stock_level=50, consumption_per_student=0.5)
    res = run_stock_analysis(student_count=0, db_path=db)
    assert res["student_count"] == 0
    assert res["items"][0].predicted_days == 0


def test_roster_change_is_picked_up(tmp_path):
    db = _db(tmp_path)
    _approved(db, id="rice", name="Rice", current_stock=300, min_stock_level=10, consumption_per_student=1)
    _students(db, active=10)
    assert run_stock_analysis(db_path=db)["items"][0].predicted_days == 10
    _students(db, active=20)
    assert run_stock_analysis(db_path=db)["items"][0].predicted_days == 5


def test_empty_inventory(tmp_path):
    db = _db(tmp_path)
    res = run_stock_analysis(db_path=db)
    assert res["items"] == []
    assert res["summary"]["total"] == 0
