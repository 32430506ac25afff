"""
Parsing helpers for values coming from sheets, prompts and the database.

Schedules and inventory sheets are typed by hand, so the helpers accept
the usual variations: decimal commas ("2,5"), grouped thousands
("1,000" / "1.000.000" / "1,000.5"), times with or without seconds
("07:00" / "07:00:00"), day names or numbers ("Monday", "mon", "1").
Anything that cannot be interpreted comes back as ``None``.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from cafeteria.domain.meal_window import parse_time_of_day

# number, then an optional unit ("kg", "un.")
_NUM_RE = re.compile(r"^([-+]?)(\d[\d.,]*)\s*(?:[a-zA-Z]+\.?)?$")
# 1-3 digits followed by groups of exactly three, one separator kind
_GROUPED_RE = re.compile(r"^\d{1,3}([.,])\d{3}(?:\1\d{3})*$")

_DAYS = {
    "sunday": 0, "sun": 0,
    "monday": 1, "mon": 1,
    "tuesday": 2, "tue": 2, "tues": 2,
    "wednesday": 3, "wed": 3,
    "thursday": 4, "thu": 4, "thur": 4, "thurs": 4,
    "friday": 5, "fri": 5,
    "saturday": 6, "sat": 6,
}

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def _plain_digits(body: str) -> Optional[str]:
    """Rewrite a digit string with separators as '1234.5', or None if ambiguous."""
    if "," in body and "." in body:
        # the last separator is the decimal mark, the other one groups thousands
        dec = "," if body.rfind(",") > body.rfind(".") else "."
        group = "." if dec == "," else ","
        int_part, _, frac = body.rpartition(dec)
        if dec in int_part or group in frac or not _GROUPED_RE.match(int_part):
            return None
        return f"{int_part.replace(group, '')}.{frac}"

    sep = "," if "," in body else "." if "." in body else None
    if sep is None:
        return body
    if _GROUPED_RE.match(body) and (sep == "," or body.count(sep) > 1):
        return body.replace(sep, "")
    if body.count(sep) > 1:
        return None
    return body.replace(",", ".")


def parse_number(txt: Any) -> Optional[float]:
    """Read a number typed in a sheet cell.

    Examples:
        "12.5"      → 12.5
        "2,5 kg"    → 2.5
        "1,000"     → 1000.0
        "1.000,5"   → 1000.5
        7           → 7.0
        "n/a"       → None
        "1,2,3"     → None
        "12 kg 3"   → None
    """
    if txt is None:
        return None
    if isinstance(txt, bool):
        return float(txt)
    if isinstance(txt, (int, float)):
        return float(txt)
    s = str(txt).strip()
    if not s:
        return None
    m = _NUM_RE.match(s)
    if not m:
        return None
    digits = _plain_digits(m.group(2))
    if digits is None:
        return None
    return float(m.group(1) + digits)


def parse_bool01(val: Any) -> Optional[int]:
    """Map yes/no style values to 0/1 (or None)."""
    if val is None:
        return None
    s = str(val).strip().lower()
    if s in {"1", "true", "t", "y", "yes", "active"}:
        return 1
    if s in {"0", "false", "f", "n", "no", "inactive"}:
        return 0
    try:
        i = int(float(s))
        if i in (0, 1):
            return i
    except ValueError:
        pass
    return None


def format_time_of_day(txt: Any) -> Optional[str]:
    """Normalize a time value to 'HH:MM'."""
    minutes = parse_time_of_day(txt)
    if minutes is None:
        return None
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_day_of_week(val: Any) -> Optional[int]:
    """Day name, abbreviation or number (0 = Sunday) → 0..6."""
    if val is None:
        return None
    s = str(val).strip().lower()
    if not s:
        return None
    if s in _DAYS:
        return _DAYS[s]
    try:
        i = int(float(s))
    except ValueError:
        return None
    return i if 0 <= i <= 6 else None
