# cafeteria/infra/views.py
"""
Inspection views mirroring the council queues.

Views created:
- vw_pending_committee: items waiting for the cafeteria committee.
- vw_pending_president: committee-approved items waiting for the
                        president / vice-president.
- vw_stock_analysis:    fully approved, active items (stock view).

Note:
- The views are for ad-hoc inspection (sqlite3 shell, reporting tools).
  The application reads its queues from `food_inventory` with the same
  predicates (`domain.workflow.filter_predicate`), so it never depends
  on them.
- The views assume migrations V1→V2 were applied.
- A set of indexes for the queue filters is created too, if missing.
"""

from __future__ import annotations

from typing import List

from .db import connect


VIEW_NAMES: List[str] = ["vw_pending_committee", "vw_pending_president", "vw_stock_analysis"]


def create_views(db_path: str) -> None:
    with connect(db_path) as c:
        # -----------------------
        # Views (drop + create)
        # -----------------------
        c.executescript(
            """
            DROP VIEW IF EXISTS vw_pending_committee;
            CREATE VIEW vw_pending_committee AS
            SELECT *
            FROM food_inventory
            WHERE status = 'active'
              AND approved_by_committee = 0;

            DROP VIEW IF EXISTS vw_pending_president;
            CREATE VIEW vw_pending_president AS
            SELECT *
            FROM food_inventory
            WHERE status = 'active'
              AND approved_by_committee = 1
              AND approved_by_president = 0;

            DROP VIEW IF EXISTS vw_stock_analysis;
            CREATE VIEW vw_stock_analysis AS
            SELECT *
            FROM food_inventory
            WHERE status = 'active'
              AND approved_by_committee = 1
              AND approved_by_president = 1;
            """
        )

        # --------------------------------
        # Indexes (IF NOT EXISTS)
        # --------------------------------
        c.executescript(
            """
            CREATE INDEX IF NOT EXISTS idx_inventory_queue   ON food_inventory(status, approved_by_committee, approved_by_president);
            CREATE INDEX IF NOT EXISTS idx_inventory_created ON food_inventory(created_at);
            CREATE INDEX IF NOT EXISTS idx_inventory_name    ON food_inventory(name);
            CREATE INDEX IF NOT EXISTS idx_students_active   ON students(is_active);
            """
        )
