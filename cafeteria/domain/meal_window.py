"""
Meal service window evaluation.

Classifies breakfast, lunch and dinner as active, upcoming or closed for
a given moment, based on the weekly `menu_schedule` table. Days are
numbered 0 (Sunday) to 6 (Saturday).
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional

from cafeteria.domain.models import MealStatus, MealType, MenuSlot

_TIME_RE = re.compile(r"^\s*(\d{1,2})[:hH](\d{2})(?::(\d{2}))?\s*$")


def parse_time_of_day(txt: Any) -> Optional[int]:
    """Convert 'HH:MM' or 'HH:MM:SS' into minutes since midnight.

    Seconds are dropped. Out-of-range or malformed values give ``None``.
    """
    if txt is None:
        return None
    m = _TIME_RE.match(str(txt))
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def day_index(now: datetime) -> int:
    """Weekday of ``now`` with Sunday = 0."""
    return now.isoweekday() % 7


def minutes_since_midnight(now: datetime) -> int:
    return now.hour * 60 + now.minute


def slot_status(now: datetime, slot: Optional[MenuSlot]) -> MealStatus:
    """Status of a slot assumed to belong to today."""
    if slot is None or not slot.is_active:
        return MealStatus.NOT_SCHEDULED
    start = parse_time_of_day(slot.start_time)
    end = parse_time_of_day(slot.end_time)
    if start is None or end is None:
        return MealStatus.NOT_SCHEDULED

    current = minutes_since_midnight(now)
    if start <= current <= end:
        return MealStatus.ACTIVE
    if current < start:
        return MealStatus.UPCOMING
    return MealStatus.CLOSED


def evaluate_meal_status(
    now: datetime,
    day_slots: Mapping[MealType, Optional[MenuSlot]],
    day_of_week: Optional[int] = None,
) -> Dict[MealType, MealStatus]:
    """Status of each meal type for one day of the schedule.

    ``day_of_week`` defaults to today. Any other day resolves every meal
    to ``not-today``.
    """
    if day_of_week is None:
        day_of_week = day_index(now)
    if day_of_week != day_index(now):
        return {meal: MealStatus.NOT_TODAY for meal in MealType}
    return {meal: slot_status(now, day_slots.get(meal)) for meal in MealType}


def _slots_by_day(slots: Iterable[MenuSlot]) -> Dict[int, Dict[MealType, MenuSlot]]:
    by_day: Dict[int, Dict[MealType, MenuSlot]] = {d: {} for d in range(7)}
    for s in slots:
        if s.day_of_week in by_day:
            by_day[s.day_of_week][s.meal_type] = s
    return by_day


def evaluate_meal_window(now: datetime, slots: Iterable[MenuSlot]) -> Dict[MealType, MealStatus]:
    """Status of today's meals, picked out of the whole weekly table."""
    today = day_index(now)
    return evaluate_meal_status(now, _slots_by_day(slots)[today], today)


def evaluate_week(now: datetime, slots: Iterable[MenuSlot]) -> Dict[int, Dict[MealType, MealStatus]]:
    """Statuses for all seven days (weekly menu screen)."""
    by_day = _slots_by_day(slots)
    return {d: evaluate_meal_status(now, by_day[d], d) for d in range(7)}
