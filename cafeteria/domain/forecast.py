"""
Stock depletion forecast for approved inventory items.

Given an inventory item and the live number of students, these functions
project how many days the current stock lasts, how much is needed for a
week and how severe the stock situation is.

All functions are pure. Incomplete data (missing or zero consumption,
no students) degrades to a zero forecast instead of raising.
"""

from __future__ import annotations

from math import floor, isfinite
from typing import Any, Dict, Iterable, Union

from cafeteria.config import DEFAULTS
from cafeteria.domain.models import InventoryItem, StockProjection, StockStatus

Number = Union[int, float]


def _as_float(x: Any) -> float:
    if x is None:
        return 0.0
    try:
        f = float(x)
    except (TypeError, ValueError):
        return 0.0
    return f if isfinite(f) else 0.0


def _has_forecast(item: InventoryItem, student_count: Number) -> bool:
    return _as_float(item.consumption_per_student) > 0.0 and _as_float(student_count) > 0.0


def daily_consumption(item: InventoryItem, student_count: Number) -> float:
    """Quantity of ``item`` consumed in one day.

    Every student draws ``consumption_per_student`` at each of the
    three daily meals:

        daily = consumption_per_student * student_count * meals_per_day
    """
    if not _has_forecast(item, student_count):
        return 0.0
    return (
        _as_float(item.consumption_per_student)
        * _as_float(student_count)
        * DEFAULTS.meals_per_day
    )


def predicted_days(item: InventoryItem, student_count: Number) -> int:
    """Return the whole days of supply left at the current consumption rate.

    Parameters
    ----------
    item: InventoryItem
        Item with ``current_stock`` and ``consumption_per_student``.
    student_count: int
        Active students at query time.

    Returns
    -------
    int
        ``floor(current_stock / daily_consumption)``; a partial day is
        never reported as a full one. ``0`` when there is no consumption
        rate or no students (no forecast available).
    """
    daily = daily_consumption(item, student_count)
    if daily <= 0.0:
        return 0
    ratio = _as_float(item.current_stock) / daily
    if not isfinite(ratio):
        return 0
    return max(0, int(floor(ratio)))


def weekly_requirement(item: InventoryItem, student_count: Number) -> float:
    """Quantity needed for seven days of service (21 meals)."""
    if not _has_forecast(item, student_count):
        return 0.0
    meals_per_week = DEFAULTS.meals_per_day * DEFAULTS.days_per_week
    return _as_float(item.consumption_per_student) * _as_float(student_count) * meals_per_week


def classify_status(item: InventoryItem, days: Number) -> StockStatus:
    """Classify the stock situation of an item.

    The absolute stock checks come first, so an item far below its
    minimum is ``critical`` whatever its projected days say.

    Rules:
        - ``current_stock <= min_stock_level * 0.3`` → ``critical``
        - ``current_stock <= min_stock_level``       → ``low``
        - ``days <= 7``                              → ``warning``
        - otherwise                                  → ``good``

    Args:
        item: Inventory item (an unset minimum counts as 0).
        days: Projected days of supply, as returned by ``predicted_days``.

    Returns:
        The matching ``StockStatus``.
    """
    stock = _as_float(item.current_stock)
    minimum = _as_float(item.min_stock_level)
    if stock <= minimum * DEFAULTS.critical_ratio:
        return StockStatus.CRITICAL
    if stock <= minimum:
        return StockStatus.LOW
    if _as_float(days) <= DEFAULTS.warning_days:
        return StockStatus.WARNING
    return StockStatus.GOOD


def project_stock(item: InventoryItem, student_count: Number) -> StockProjection:
    """Build the full projection shown on the stock analysis view."""
    days = predicted_days(item, student_count)
    return StockProjection(
        item_id=item.id,
        name=item.name,
        category=item.category,
        unit=item.unit,
        current_stock=_as_float(item.current_stock),
        min_stock_level=_as_float(item.min_stock_level),
        consumption_per_student=_as_float(item.consumption_per_student),
        predicted_days=days,
        weekly_requirement=weekly_requirement(item, student_count),
        stock_status=classify_status(item, days),
    )


def summarize(projections: Iterable[StockProjection]) -> Dict[str, int]:
    """Count projections per stock status (summary cards of the dashboard)."""
    out: Dict[str, int] = {"total": 0}
    for status in StockStatus:
        out[status.value] = 0
    for p in projections:
        out["total"] += 1
        out[p.stock_status.value] += 1
    return out
