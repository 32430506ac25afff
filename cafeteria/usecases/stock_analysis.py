"""
Use case: stock analysis of fully approved inventory items.

Flow:
1) Read the live number of active students (unless the caller passes one).
2) List active items approved by both the committee and the president,
   ordered by name.
3) Project days of supply, weekly requirement and stock status per item.
4) Summarize the number of items per status for the dashboard cards.

Nothing is cached: every call re-reads the roster and the inventory.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from cafeteria.config import DB_PATH
from cafeteria.domain.forecast import project_stock, summarize
from cafeteria.domain.models import InventoryFilter, StockProjection
from cafeteria.infra.logger import log_system_event
from cafeteria.usecases.approval import list_inventory
from cafeteria.usecases.roster import count_active_students


def project_inventory(student_count: int, db_path: str = DB_PATH) -> List[StockProjection]:
    items = list_inventory(InventoryFilter.FULLY_APPROVED, db_path)
    return [project_stock(item, student_count) for item in items]


def run_stock_analysis(student_count: Optional[int] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Return ``{"student_count", "items", "summary"}`` for the stock view."""
    log_system_event("stock_analysis_start", {"db_path": db_path})

    if student_count is None:
        student_count = count_active_students(db_path)

    projections = project_inventory(student_count, db_path)
    summary = summarize(projections)

    log_system_event("stock_analysis_done", {"student_count": student_count, **summary})
    return {
        "student_count": student_count,
        "items": projections,
        "summary": summary,
    }
