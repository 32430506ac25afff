"""
Use case: council approval of food inventory items.

Flow of a transition (committee or president gate):
1) Read the item (NotFound if missing).
2) Derive its workflow state and compute the column changes; an illegal
   move raises PreconditionViolation before anything is written.
3) Conditional update on the row `version`; if no row was updated the item
   either vanished (NotFound) or was changed concurrently (ConflictError).

Queues:
- committee  → active items not yet approved by the committee (newest first)
- president  → committee-approved items waiting for the president (newest first)
- approved   → fully approved items (by name), used by the stock analysis
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from cafeteria.config import DB_PATH
from cafeteria.domain.errors import CafeteriaError, ConflictError, NotFound
from cafeteria.domain.models import InventoryFilter, InventoryItem, Transition
from cafeteria.domain.workflow import approval_state, next_state, transition_changes
from cafeteria.infra.repositories import InventoryRepo
from cafeteria.infra.logger import (
    log_transaction, log_workflow, log_database_operation, log_system_event
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def list_inventory(flt: InventoryFilter, db_path: str = DB_PATH) -> List[InventoryItem]:
    """Items shown in one dashboard queue."""
    flt = InventoryFilter(flt)
    rows = InventoryRepo(db_path).list_by_filter(flt)
    log_database_operation("food_inventory", "SELECT_QUEUE", len(rows), queue=flt.value)
    return [InventoryItem.from_row(r) for r in rows]


def get_item(item_id: str, db_path: str = DB_PATH) -> InventoryItem:
    row = InventoryRepo(db_path).get(item_id)
    if row is None:
        raise NotFound(f"Inventory item {item_id} not found", item_id=item_id)
    return InventoryItem.from_row(row)


def run_transition(
    item_id: str,
    transition: Transition,
    db_path: str = DB_PATH,
    now: Optional[str] = None,
) -> InventoryItem:
    """Apply one approval/rejection to an item and return the updated item."""
    transition = Transition(transition)
    now = now or _now_iso()
    repo = InventoryRepo(db_path)

    try:
        item = get_item(item_id, db_path)
        before = approval_state(item)
        changes = transition_changes(item, transition, now)
        after = next_state(before, transition, item_id=item_id)

        updated = repo.update_if_version(item_id, item.version, changes)
        log_database_operation("food_inventory", "UPDATE", updated, id=item_id, **changes)
        if updated == 0:
            if repo.get(item_id) is None:
                raise NotFound(f"Inventory item {item_id} not found", item_id=item_id)
            raise ConflictError(
                f"Inventory item {item_id} was changed by someone else; reload and try again",
                item_id=item_id,
            )

        log_workflow(transition.value, item_id, before.value, after.value, at=now)
        log_transaction(transition.value, {"id": item_id}, result=after.value)
        return get_item(item_id, db_path)
    except CafeteriaError as e:
        log_transaction(transition.value, {"id": item_id}, error=e.message)
        log_system_event(f"{transition.value}_error", {"id": item_id, "error": e.message}, level="error")
        raise


def committee_approve(item_id: str, db_path: str = DB_PATH, now: Optional[str] = None) -> InventoryItem:
    """Committee approval: the item moves on to the president's queue."""
    return run_transition(item_id, Transition.COMMITTEE_APPROVE, db_path, now)


def committee_reject(item_id: str, db_path: str = DB_PATH, now: Optional[str] = None) -> InventoryItem:
    return run_transition(item_id, Transition.COMMITTEE_REJECT, db_path, now)


def president_approve(item_id: str, db_path: str = DB_PATH, now: Optional[str] = None) -> InventoryItem:
    """Final approval by the president or vice-president."""
    return run_transition(item_id, Transition.PRESIDENT_APPROVE, db_path, now)


def president_reject(item_id: str, db_path: str = DB_PATH, now: Optional[str] = None) -> InventoryItem:
    return run_transition(item_id, Transition.PRESIDENT_REJECT, db_path, now)
