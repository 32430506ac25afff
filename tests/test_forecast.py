from math import isclose

import pytest

from cafeteria.domain.forecast import (
    classify_status,
    daily_consumption,
    predicted_days,
    project_stock,
    summarize,
    weekly_requirement,
)
from cafeteria.domain.models import InventoryItem, StockStatus


def _item(stock=100.0, minimum=50.0, per_student=0.5, **kw):
    return InventoryItem(
        id=kw.pop("id", "I1"),
        name=kw.pop("name", "Rice"),
        unit="kg",
        current_stock=stock,
        min_stock_level=minimum,
        consumption_per_student=per_student,
        **kw,
    )


def test_daily_consumption_three_meals():
    assert isclose(daily_consumption(_item(per_student=0.5), 40), 60.0)


def test_predicted_days_floors_partial_day():
    # daily consumption = (1/3) * 10 students * 3 meals = 10
    item = _item(stock=29, per_student=1 / 3)
    assert predicted_days(item, 10) == 2


def test_zero_guard_for_consumption_and_students():
    assert predicted_days(_item(per_student=0), 40) == 0
    assert weekly_requirement(_item(per_student=0), 40) == 0
    assert predicted_days(_item(), 0) == 0
    assert weekly_requirement(_item(), 0) == 0
    assert predicted_days(_item(per_student=None), 40) == 0


def test_negative_inputs_degrade_to_zero():
    assert predicted_days(_item(per_student=-1), 40) == 0
    assert predicted_days(_item(stock=-10), 40) == 0
    assert weekly_requirement(_item(), -3) == 0


def test_weekly_requirement_is_21_meals():
    assert isclose(weekly_requirement(_item(per_student=0.5), 40), 0.5 * 40 * 21)


def test_critical_wins_over_days():
    item = _item(stock=10, minimum=40)
    assert classify_status(item, 100) == StockStatus.CRITICAL


def test_status_thresholds():
    assert classify_status(_item(stock=12, minimum=40), 100) == StockStatus.CRITICAL  # 12 <= 12
    assert classify_status(_item(stock=40, minimum=40), 100) == StockStatus.LOW
    assert classify_status(_item(stock=41, minimum=40), 7) == StockStatus.WARNING
    assert classify_status(_item(stock=41, minimum=40), 8) == StockStatus.GOOD


def test_unset_minimum_counts_as_zero():
    assert classify_status(_item(stock=0, minimum=None), 30) == StockStatus.CRITICAL
    assert classify_status(_item(stock=5, minimum=None), 30) == StockStatus.GOOD


def test_end_to_end_projection_is_warning():
    p = project_stock(_item(stock=100, minimum=50, per_student=0.5), 40)
    assert p.predicted_days == 1
    assert isclose(p.weekly_requirement, 420.0)
    assert p.stock_status == StockStatus.WARNING
    assert p.as_dict()["stock_status"] == "warning"


def test_summarize_counts_each_status():
    projections = [
        project_stock(_item(id="a", stock=1, minimum=40), 10),
        project_stock(_item(id="b", stock=30, minimum=40), 10),
        project_stock(_item(id="c", stock=100, minimum=50), 40),
        project_stock(_item(id="d", stock=10_000, minimum=50), 40),
    ]
    assert summarize(projections) == {"total": 4, "critical": 1, "low": 1, "warning": 1, "good": 1}
    assert summarize([]) == {"total": 0, "critical": 0, "low": 0, "warning": 0, "good": 0}


@pytest.mark.parametrize("raw", ["nan", "inf", "-inf", float("nan")])
def test_non_finite_stock_gives_zero_forecast(raw):
    item = InventoryItem.from_row({"id": "I9", "name": "Oil", "current_stock": raw,
                                   "min_stock_level": 10, "consumption_per_student": 0.5})
    assert item.current_stock == 0.0
    assert predicted_days(item, 40) == 0
    assert project_stock(item, 40).stock_status == StockStatus.CRITICAL


def test_non_finite_values_on_a_built_item():
    item = _item(stock=float("inf"), per_student=float("nan"))
    assert predicted_days(item, 40) == 0
    assert weekly_requirement(item, 40) == 0
    assert predicted_days(_item(stock=float("nan")), 40) == 0
