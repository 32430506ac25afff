"""
Approval workflow for food inventory items.

Storage keeps two booleans (`approved_by_committee`,
`approved_by_president`) plus a lifecycle `status`. In memory the
workflow works on an explicit ``ApprovalState`` and only translates back
to column values at the persistence boundary (``transition_changes``):

    PendingCommittee --committee_approve--> PendingPresident
    PendingCommittee --committee_reject---> Rejected
    PendingPresident --president_approve--> FullyApproved
    PendingPresident --president_reject---> Rejected

FullyApproved and Rejected are terminal. A rejected item keeps its
booleans as they were; re-submission means registering a new item.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from cafeteria.domain.errors import PreconditionViolation
from cafeteria.domain.models import (
    ApprovalState,
    InventoryFilter,
    InventoryItem,
    LifecycleStatus,
    Transition,
)


_TRANSITIONS: Dict[Tuple[ApprovalState, Transition], ApprovalState] = {
    (ApprovalState.PENDING_COMMITTEE, Transition.COMMITTEE_APPROVE): ApprovalState.PENDING_PRESIDENT,
    (ApprovalState.PENDING_COMMITTEE, Transition.COMMITTEE_REJECT): ApprovalState.REJECTED,
    (ApprovalState.PENDING_PRESIDENT, Transition.PRESIDENT_APPROVE): ApprovalState.FULLY_APPROVED,
    (ApprovalState.PENDING_PRESIDENT, Transition.PRESIDENT_REJECT): ApprovalState.REJECTED,
}

# Storage-level equality filters for each dashboard queue
_FILTERS: Dict[InventoryFilter, Dict[str, Any]] = {
    InventoryFilter.COMMITTEE_ONLY: {
        "status": LifecycleStatus.ACTIVE.value,
        "approved_by_committee": 0,
    },
    InventoryFilter.PRESIDENT_ONLY: {
        "status": LifecycleStatus.ACTIVE.value,
        "approved_by_committee": 1,
        "approved_by_president": 0,
    },
    InventoryFilter.FULLY_APPROVED: {
        "status": LifecycleStatus.ACTIVE.value,
        "approved_by_committee": 1,
        "approved_by_president": 1,
    },
}


def approval_state(item: InventoryItem) -> ApprovalState:
    """Derive the workflow state from the stored flags.

    Raises:
        PreconditionViolation: if the row claims president approval
            without committee approval.
    """
    if item.status == LifecycleStatus.REJECTED.value:
        return ApprovalState.REJECTED
    if item.approved_by_president and not item.approved_by_committee:
        raise PreconditionViolation(
            f"Item {item.id} is president-approved without committee approval",
            item_id=item.id,
        )
    if item.approved_by_president:
        return ApprovalState.FULLY_APPROVED
    if item.approved_by_committee:
        return ApprovalState.PENDING_PRESIDENT
    return ApprovalState.PENDING_COMMITTEE


def next_state(state: ApprovalState, transition: Transition, item_id: str = None) -> ApprovalState:
    """Return the state reached by ``transition`` or raise PreconditionViolation."""
    try:
        return _TRANSITIONS[(state, transition)]
    except KeyError:
        raise PreconditionViolation(
            f"Cannot {transition.value.replace('_', ' ')} an item in state {state.value}",
            item_id=item_id,
        ) from None


def transition_changes(item: InventoryItem, transition: Transition, now: str) -> Dict[str, Any]:
    """Column updates for applying ``transition`` to ``item`` at ``now``.

    The state check happens here, before anything is written.
    """
    target = next_state(approval_state(item), transition, item_id=item.id)

    if target == ApprovalState.REJECTED:
        return {"status": LifecycleStatus.REJECTED.value, "updated_at": now}
    if target == ApprovalState.PENDING_PRESIDENT:
        return {"approved_by_committee": 1, "committee_approved_at": now, "updated_at": now}
    # FULLY_APPROVED
    return {"approved_by_president": 1, "president_approved_at": now, "updated_at": now}


def filter_predicate(flt: InventoryFilter) -> Dict[str, Any]:
    """Column equality filters selecting the queue ``flt``."""
    return dict(_FILTERS[InventoryFilter(flt)])


def matches_filter(item: InventoryItem, flt: InventoryFilter) -> bool:
    """In-memory version of ``filter_predicate``."""
    values = {
        "status": item.status,
        "approved_by_committee": int(item.approved_by_committee),
        "approved_by_president": int(item.approved_by_president),
    }
    return all(values[k] == v for k, v in filter_predicate(flt).items())
